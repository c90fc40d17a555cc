from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from geocoding_core.errors import ConfigurationMissingError

from geocode_api.clients.places_client import PlacesClient
from geocode_api.dependencies import get_places_client
from geocode_api.errors import UpstreamServiceError, api_error_from_geocoding, api_error_from_upstream
from geocode_api.response import success_response

router = APIRouter(prefix="/v1/places", tags=["places"])


@router.get("/{place_id}")
async def place_details(
    place_id: str = Path(..., min_length=1, max_length=256),
    client: PlacesClient = Depends(get_places_client),
) -> dict:
    try:
        details = await client.get_place_details(place_id)
    except ConfigurationMissingError as exc:
        raise api_error_from_geocoding(exc) from exc
    except UpstreamServiceError as exc:
        raise api_error_from_upstream(exc) from exc
    return success_response(details.model_dump(), meta={})
