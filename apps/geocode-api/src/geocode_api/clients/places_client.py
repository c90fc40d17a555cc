from __future__ import annotations

from typing import Any, TypeVar

import httpx
from geocoding_core.models import PlaceDetailsResult, PlacesResult
from pydantic import BaseModel, ValidationError

from geocode_api.clients.ai_refinement_client import ParameterLookup
from geocode_api.errors import UpstreamServiceError
from geocode_api.services.parameter_service import PLACES_API_KEY, PLACES_DETAILS_ENDPOINT, PLACES_ENDPOINT

ModelT = TypeVar("ModelT", bound=BaseModel)


class PlacesClient:
    def __init__(self, parameters: ParameterLookup, client: httpx.AsyncClient) -> None:
        self._parameters = parameters
        self._client = client

    async def search_nearby(self, lat: float, lng: float, radius_meters: int) -> PlacesResult:
        endpoint = await self._parameters.require_value(PLACES_ENDPOINT)
        api_key = await self._parameters.require_value(PLACES_API_KEY)
        params = {"location": f"{lat},{lng}", "radius": str(radius_meters), "key": api_key}
        return await self._fetch(endpoint, params, PlacesResult)

    async def get_place_details(self, place_id: str) -> PlaceDetailsResult:
        endpoint = await self._parameters.require_value(PLACES_DETAILS_ENDPOINT)
        api_key = await self._parameters.require_value(PLACES_API_KEY)
        return await self._fetch(endpoint, {"place_id": place_id, "key": api_key}, PlaceDetailsResult)

    async def _fetch(self, endpoint: str, params: dict[str, Any], model: type[ModelT]) -> ModelT:
        try:
            response = await self._client.get(endpoint, params=params)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise UpstreamServiceError("UPSTREAM_TIMEOUT", "places request timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise UpstreamServiceError(
                "UPSTREAM_HTTP_ERROR",
                f"places returned HTTP {exc.response.status_code}",
                exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamServiceError("UPSTREAM_FAILURE", "places request failed") from exc

        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise UpstreamServiceError("UPSTREAM_INVALID_RESPONSE", "places response could not be parsed") from exc
