from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from fastapi import APIRouter, Depends, Query
from geocoding_core.errors import GeocodingError

from geocode_api.dependencies import get_geocode_service
from geocode_api.errors import ApiError, api_error_from_geocoding
from geocode_api.response import success_response
from geocode_api.schemas.geocode import GeocodeExecutionItem, GeocodeMode, parse_priorities
from geocode_api.services.geocode_service import GeocodeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/geocode", tags=["geocode"])

T = TypeVar("T")


async def _call_with_guards(action: Callable[[], Awaitable[T]]) -> T:
    try:
        return await action()
    except GeocodingError as exc:
        raise api_error_from_geocoding(exc) from exc
    except Exception as exc:
        logger.exception("geocode_request_failed")
        raise ApiError("UPSTREAM_FAILURE", "Geocoding failed", 502) from exc


@router.get("")
async def geocode(
    address: str = Query(..., max_length=512),
    mode: GeocodeMode = Query(default=GeocodeMode.FIRST),
    priorities: str | None = Query(default=None),
    service: GeocodeService = Depends(get_geocode_service),
) -> dict:
    if mode is GeocodeMode.FIRST:
        response = await _call_with_guards(lambda: service.race_best(address))
        return success_response(response.model_dump(), meta={"mode": mode.value})

    if mode is GeocodeMode.ALL:
        responses = await _call_with_guards(lambda: service.all(address))
        return success_response(
            [item.model_dump() for item in responses],
            meta={"mode": mode.value, "count": len(responses)},
        )

    wanted = parse_priorities(priorities)
    grouped = await _call_with_guards(lambda: service.grouped(address, wanted))
    return success_response(
        {name: [item.model_dump() for item in items] for name, items in grouped.items()},
        meta={"mode": mode.value, "priorities": sorted(set(wanted))},
    )


@router.get("/refined")
async def geocode_refined(
    address: str = Query(..., max_length=512),
    radius: int = Query(default=0, le=50000),
    service: GeocodeService = Depends(get_geocode_service),
) -> dict:
    result = await _call_with_guards(lambda: service.refine(address, radius))
    return success_response(result.to_dict(), meta={"radius": radius})


@router.get("/executions")
async def recent_executions(
    limit: int = Query(default=50, ge=1, le=500),
    service: GeocodeService = Depends(get_geocode_service),
) -> dict:
    records = await service.recent_executions(limit)
    return success_response(
        [GeocodeExecutionItem.from_record(record).model_dump() for record in records],
        meta={"limit": limit},
    )


@router.get("/providers/{name}")
async def geocode_with_provider(
    name: str,
    address: str = Query(..., max_length=512),
    service: GeocodeService = Depends(get_geocode_service),
) -> dict:
    response = await _call_with_guards(lambda: service.by_name(address, name))
    return success_response(response.model_dump(), meta={"provider": name})
