from __future__ import annotations

import logging

from geocoding_core.errors import ProviderNotFoundError
from geocoding_core.models import ProviderDescriptor

from geocode_api.errors import DuplicateProviderError
from geocode_api.repositories.provider_config_repository import (
    ProviderConfigDraft,
    ProviderConfigRecord,
    ProviderConfigRepository,
)

logger = logging.getLogger(__name__)


class ProviderConfigService:
    """CRUD over provider configurations, and the provider source the aggregator reads."""

    def __init__(self, repository: ProviderConfigRepository) -> None:
        self._repository = repository

    async def create(self, draft: ProviderConfigDraft, *, actor: str) -> ProviderConfigRecord:
        if await self._repository.find_by_name(draft.name) is not None:
            raise DuplicateProviderError(draft.name)
        record = await self._repository.create(draft, actor=actor)
        logger.info("provider_config_created", extra={"provider": record.name, "priority": record.priority})
        return record

    async def get(self, config_id: int) -> ProviderConfigRecord:
        record = await self._repository.get(config_id)
        if record is None:
            raise LookupError(f"provider configuration {config_id} not found")
        return record

    async def get_by_name(self, name: str) -> ProviderConfigRecord:
        record = await self._repository.find_by_name(name)
        if record is None:
            raise ProviderNotFoundError(name)
        return record

    async def list_configs(self) -> list[ProviderConfigRecord]:
        return await self._repository.list_all()

    async def update(self, config_id: int, draft: ProviderConfigDraft, *, actor: str) -> ProviderConfigRecord:
        existing = await self._repository.find_by_name(draft.name)
        if existing is not None and existing.id != config_id:
            raise DuplicateProviderError(draft.name)
        record = await self._repository.update(config_id, draft, actor=actor)
        if record is None:
            raise LookupError(f"provider configuration {config_id} not found")
        logger.info("provider_config_updated", extra={"provider": record.name, "config_id": config_id})
        return record

    async def delete(self, config_id: int) -> None:
        if not await self._repository.delete(config_id):
            raise LookupError(f"provider configuration {config_id} not found")
        logger.info("provider_config_deleted", extra={"config_id": config_id})

    async def list_provider_configs(self) -> list[ProviderDescriptor]:
        return [record.to_descriptor() for record in await self._repository.list_all()]

    async def get_provider_config(self, name: str) -> ProviderDescriptor:
        return (await self.get_by_name(name)).to_descriptor()
