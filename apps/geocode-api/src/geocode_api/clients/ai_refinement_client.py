from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from geocode_api.errors import UpstreamServiceError
from geocode_api.services.parameter_service import AI_API_KEY, AI_ENDPOINT, AI_MODEL

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "default-model"
MAX_TOKENS = 100


class ParameterLookup(Protocol):
    async def get_value(self, name: str) -> str | None: ...

    async def require_value(self, name: str) -> str: ...


class AiRefinementClient:
    """Completion-style AI endpoint that rewrites an address into a cleaner form."""

    def __init__(self, parameters: ParameterLookup, client: httpx.AsyncClient) -> None:
        self._parameters = parameters
        self._client = client

    async def refine(self, address: str) -> str:
        endpoint = await self._parameters.require_value(AI_ENDPOINT)
        api_key = await self._parameters.require_value(AI_API_KEY)
        model = await self._parameters.get_value(AI_MODEL) or DEFAULT_MODEL

        body = {"model": model, "prompt": f"Refine this address: {address}", "max_tokens": MAX_TOKENS}
        try:
            response = await self._client.post(
                endpoint,
                json=body,
                headers={"Authorization": f"Bearer {api_key}"},
            )
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise UpstreamServiceError("UPSTREAM_TIMEOUT", "AI refinement timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise UpstreamServiceError(
                "UPSTREAM_HTTP_ERROR",
                f"AI refinement returned HTTP {exc.response.status_code}",
                exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamServiceError("UPSTREAM_FAILURE", "AI refinement request failed") from exc

        refined = self._extract_text(response)
        logger.debug("address_refined", extra={"model": model, "changed": refined != address})
        return refined

    @staticmethod
    def _extract_text(response: httpx.Response) -> str:
        try:
            payload: Any = response.json()
            text = payload["choices"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise UpstreamServiceError("UPSTREAM_INVALID_RESPONSE", "AI refinement response has no choices") from exc
        if not isinstance(text, str):
            raise UpstreamServiceError("UPSTREAM_INVALID_RESPONSE", "AI refinement text is not a string")
        return text.strip()
