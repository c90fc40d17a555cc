from __future__ import annotations

import re
from collections.abc import Mapping
from urllib.parse import quote

import httpx

from geocoding_core.errors import ProviderError
from geocoding_core.models import GeocodeResponse, ProviderDescriptor

_PLACEHOLDER_PATTERN = re.compile(r"\{(\w+)\}")


def render_endpoint(
    template: str,
    *,
    address: str,
    api_key: str,
    parameters: Mapping[str, str] | None = None,
) -> str:
    """Fill ``{name}`` placeholders in a provider endpoint template.

    ``{address}`` is URL-escaped, ``{apiKey}`` and any extra named parameters are inserted
    as-is. Placeholders without a value are left untouched.
    """
    values = dict(parameters or {})
    values["apiKey"] = api_key
    values["address"] = quote(address, safe="")

    def _substitute(match: re.Match[str]) -> str:
        return values.get(match.group(1), match.group(0))

    return _PLACEHOLDER_PATTERN.sub(_substitute, template)


class ProviderHandle:
    def __init__(self, descriptor: ProviderDescriptor, client: httpx.AsyncClient) -> None:
        self._descriptor = descriptor
        self._client = client

    @property
    def name(self) -> str:
        return self._descriptor.name

    @property
    def priority(self) -> int:
        return self._descriptor.priority

    @property
    def endpoint_template(self) -> str:
        return self._descriptor.endpoint_template

    def __repr__(self) -> str:
        return f"ProviderHandle(name={self.name!r}, priority={self.priority})"

    async def geocode(self, address: str) -> GeocodeResponse:
        url = render_endpoint(
            self._descriptor.endpoint_template,
            address=address,
            api_key=self._descriptor.api_key,
            parameters=self._descriptor.parameters,
        )
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ProviderError(self.name, exc) from exc

        try:
            return GeocodeResponse.model_validate(response.json())
        except ValueError as exc:
            raise ProviderError(self.name, exc) from exc
