from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from geocode_api.dependencies import get_parameter_service
from geocode_api.errors import ApiError
from geocode_api.response import success_response
from geocode_api.schemas.parameter import ParameterCreateRequest, ParameterItem, ParameterUpdateRequest
from geocode_api.services.parameter_service import ParameterService

router = APIRouter(prefix="/v1/parameters", tags=["parameters"])


@router.post("", status_code=201)
async def create_parameter(
    body: ParameterCreateRequest,
    service: ParameterService = Depends(get_parameter_service),
) -> dict:
    try:
        record = await service.create(
            name=body.name.strip(),
            value=body.value,
            description=body.description,
            category=body.category,
        )
    except ValueError as exc:
        raise ApiError("PARAMETER_ALREADY_EXISTS", str(exc), 409) from exc
    return success_response(ParameterItem.from_record(record).model_dump(), meta={})


@router.get("")
async def list_parameters(service: ParameterService = Depends(get_parameter_service)) -> dict:
    records = await service.list_parameters()
    return success_response(
        [ParameterItem.from_record(record).model_dump() for record in records],
        meta={"count": len(records)},
    )


@router.get("/by-name/{name}")
async def get_parameter_by_name(name: str, service: ParameterService = Depends(get_parameter_service)) -> dict:
    try:
        record = await service.get_by_name(name)
    except LookupError as exc:
        raise ApiError("NOT_FOUND", str(exc), 404) from exc
    return success_response(ParameterItem.from_record(record).model_dump(), meta={})


@router.get("/{parameter_id}")
async def get_parameter(
    parameter_id: int = Path(..., gt=0),
    service: ParameterService = Depends(get_parameter_service),
) -> dict:
    try:
        record = await service.get(parameter_id)
    except LookupError as exc:
        raise ApiError("NOT_FOUND", str(exc), 404) from exc
    return success_response(ParameterItem.from_record(record).model_dump(), meta={})


@router.put("/{parameter_id}")
async def update_parameter(
    body: ParameterUpdateRequest,
    parameter_id: int = Path(..., gt=0),
    service: ParameterService = Depends(get_parameter_service),
) -> dict:
    try:
        record = await service.update(
            parameter_id,
            value=body.value,
            description=body.description,
            category=body.category,
        )
    except LookupError as exc:
        raise ApiError("NOT_FOUND", str(exc), 404) from exc
    return success_response(ParameterItem.from_record(record).model_dump(), meta={})
