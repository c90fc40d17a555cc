from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from geocoding_core.errors import ProviderNotFoundError

from geocode_api.dependencies import get_provider_config_service
from geocode_api.errors import ApiError, DuplicateProviderError
from geocode_api.response import success_response
from geocode_api.schemas.provider_config import ProviderConfigItem, ProviderConfigRequest
from geocode_api.services.provider_config_service import ProviderConfigService

router = APIRouter(prefix="/v1/provider-configs", tags=["provider-configs"])


def _item(record) -> dict:
    return ProviderConfigItem.from_record(record).model_dump()


@router.post("", status_code=201)
async def create_provider_config(
    body: ProviderConfigRequest,
    service: ProviderConfigService = Depends(get_provider_config_service),
) -> dict:
    try:
        record = await service.create(body.to_draft(), actor=body.actor)
    except DuplicateProviderError as exc:
        raise ApiError("PROVIDER_ALREADY_EXISTS", str(exc), 409) from exc
    return success_response(_item(record), meta={})


@router.get("")
async def list_provider_configs(
    service: ProviderConfigService = Depends(get_provider_config_service),
) -> dict:
    records = await service.list_configs()
    return success_response([_item(record) for record in records], meta={"count": len(records)})


@router.get("/by-name/{name}")
async def get_provider_config_by_name(
    name: str,
    service: ProviderConfigService = Depends(get_provider_config_service),
) -> dict:
    try:
        record = await service.get_by_name(name)
    except ProviderNotFoundError as exc:
        raise ApiError("PROVIDER_NOT_FOUND", str(exc), 404) from exc
    return success_response(_item(record), meta={})


@router.get("/{config_id}")
async def get_provider_config(
    config_id: int = Path(..., gt=0),
    service: ProviderConfigService = Depends(get_provider_config_service),
) -> dict:
    try:
        record = await service.get(config_id)
    except LookupError as exc:
        raise ApiError("NOT_FOUND", str(exc), 404) from exc
    return success_response(_item(record), meta={})


@router.put("/{config_id}")
async def update_provider_config(
    body: ProviderConfigRequest,
    config_id: int = Path(..., gt=0),
    service: ProviderConfigService = Depends(get_provider_config_service),
) -> dict:
    try:
        record = await service.update(config_id, body.to_draft(), actor=body.actor)
    except DuplicateProviderError as exc:
        raise ApiError("PROVIDER_ALREADY_EXISTS", str(exc), 409) from exc
    except LookupError as exc:
        raise ApiError("NOT_FOUND", str(exc), 404) from exc
    return success_response(_item(record), meta={})


@router.delete("/{config_id}")
async def delete_provider_config(
    config_id: int = Path(..., gt=0),
    service: ProviderConfigService = Depends(get_provider_config_service),
) -> dict:
    try:
        await service.delete(config_id)
    except LookupError as exc:
        raise ApiError("NOT_FOUND", str(exc), 404) from exc
    return success_response({"id": config_id, "deleted": True}, meta={})
