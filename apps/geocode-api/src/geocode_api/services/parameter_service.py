from __future__ import annotations

import logging
from dataclasses import dataclass

from geocoding_core.errors import ConfigurationMissingError

from geocode_api.repositories.parameter_repository import ParameterRecord, ParameterRepository

logger = logging.getLogger(__name__)

AI_ENDPOINT = "ai.endpoint"
AI_API_KEY = "ai.api_key"
AI_MODEL = "ai.model"
PLACES_ENDPOINT = "places.endpoint"
PLACES_DETAILS_ENDPOINT = "places.details_endpoint"
PLACES_API_KEY = "places.api_key"
API_TRACE_ENABLED = "system.api_trace_enabled"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class DefaultParameter:
    name: str
    value: str
    description: str
    category: str


DEFAULT_PARAMETERS: tuple[DefaultParameter, ...] = (
    DefaultParameter("system.environment", "development", "Deployment environment label", "system"),
    DefaultParameter(API_TRACE_ENABLED, "true", "Record geocoding executions in the audit trail", "system"),
    DefaultParameter(
        PLACES_ENDPOINT,
        "https://maps.googleapis.com/maps/api/place/nearbysearch/json",
        "Nearby places search endpoint",
        "places",
    ),
    DefaultParameter(
        PLACES_DETAILS_ENDPOINT,
        "https://maps.googleapis.com/maps/api/place/details/json",
        "Place details endpoint",
        "places",
    ),
)


class ParameterService:
    def __init__(self, repository: ParameterRepository) -> None:
        self._repository = repository

    async def list_parameters(self) -> list[ParameterRecord]:
        return await self._repository.list_all()

    async def get(self, parameter_id: int) -> ParameterRecord:
        record = await self._repository.get(parameter_id)
        if record is None:
            raise LookupError(f"parameter {parameter_id} not found")
        return record

    async def get_by_name(self, name: str) -> ParameterRecord:
        record = await self._repository.find_by_name(name)
        if record is None:
            raise LookupError(f"parameter '{name}' not found")
        return record

    async def create(self, *, name: str, value: str, description: str | None, category: str) -> ParameterRecord:
        if await self._repository.find_by_name(name) is not None:
            raise ValueError(f"parameter '{name}' already exists")
        return await self._repository.create(name=name, value=value, description=description, category=category)

    async def update(
        self,
        parameter_id: int,
        *,
        value: str,
        description: str | None,
        category: str | None = None,
    ) -> ParameterRecord:
        if category is None:
            category = (await self.get(parameter_id)).category
        record = await self._repository.update(parameter_id, value=value, description=description, category=category)
        if record is None:
            raise LookupError(f"parameter {parameter_id} not found")
        return record

    async def get_value(self, name: str) -> str | None:
        record = await self._repository.find_by_name(name)
        if record is None or not record.value.strip():
            return None
        return record.value.strip()

    async def require_value(self, name: str) -> str:
        value = await self.get_value(name)
        if value is None:
            raise ConfigurationMissingError(name)
        return value

    async def is_enabled(self, name: str, default: bool = True) -> bool:
        value = await self.get_value(name)
        if value is None:
            return default
        return value.lower() in _TRUTHY

    async def seed_defaults(self) -> int:
        created = 0
        for default in DEFAULT_PARAMETERS:
            if await self._repository.find_by_name(default.name) is None:
                await self._repository.create(
                    name=default.name,
                    value=default.value,
                    description=default.description,
                    category=default.category,
                )
                created += 1
        if created:
            logger.info("default_parameters_seeded", extra={"created_count": created})
        return created
