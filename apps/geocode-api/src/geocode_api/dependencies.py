from __future__ import annotations

from dataclasses import dataclass

import httpx
from devkit.db import AsyncDatabaseManager
from fastapi import Request
from geocoding_core.aggregator import ProviderAggregator
from geocoding_core.factory import ProviderFactory
from geocoding_core.orchestrator import RefinementOrchestrator

from geocode_api.clients.ai_refinement_client import AiRefinementClient
from geocode_api.clients.places_client import PlacesClient
from geocode_api.observability import PrometheusApiMetricsCollector
from geocode_api.repositories.execution_repository import (
    ExecutionAuditRepository,
    InMemoryExecutionAuditRepository,
    SqlExecutionAuditRepository,
)
from geocode_api.repositories.parameter_repository import InMemoryParameterRepository, SqlParameterRepository
from geocode_api.repositories.provider_config_repository import (
    InMemoryProviderConfigRepository,
    SqlProviderConfigRepository,
)
from geocode_api.services.geocode_service import GeocodeService
from geocode_api.services.parameter_service import API_TRACE_ENABLED, ParameterService
from geocode_api.services.provider_config_service import ProviderConfigService
from geocode_api.settings import GeocodeApiSettings


@dataclass
class ServiceRegistry:
    http_client: httpx.AsyncClient
    database: AsyncDatabaseManager | None
    provider_configs: ProviderConfigService
    parameters: ParameterService
    places: PlacesClient
    geocode: GeocodeService

    async def close(self) -> None:
        await self.http_client.aclose()
        if self.database is not None:
            await self.database.disconnect()


def build_registry(
    settings: GeocodeApiSettings,
    metrics: PrometheusApiMetricsCollector,
    http_client: httpx.AsyncClient | None = None,
) -> ServiceRegistry:
    client = http_client or httpx.AsyncClient(timeout=settings.PROVIDER_HTTP_TIMEOUT_SECONDS)
    database = AsyncDatabaseManager(settings.DATABASE_URL) if settings.DATABASE_URL else None

    audit: ExecutionAuditRepository | None
    if database is not None:
        provider_configs = ProviderConfigService(SqlProviderConfigRepository(database))
        parameters = ParameterService(SqlParameterRepository(database))
        audit = SqlExecutionAuditRepository(database)
    else:
        provider_configs = ProviderConfigService(InMemoryProviderConfigRepository())
        parameters = ParameterService(InMemoryParameterRepository())
        audit = InMemoryExecutionAuditRepository()
    if not settings.EXECUTION_AUDIT_ENABLED:
        audit = None

    aggregator = ProviderAggregator(provider_configs, ProviderFactory(client), observer=metrics)
    places = PlacesClient(parameters, client)
    orchestrator = RefinementOrchestrator(aggregator, AiRefinementClient(parameters, client), places)
    geocode = GeocodeService(
        aggregator,
        orchestrator,
        audit=audit,
        audit_gate=lambda: parameters.is_enabled(API_TRACE_ENABLED),
        timeout_seconds=settings.GEOCODE_REQUEST_TIMEOUT_SECONDS,
    )
    return ServiceRegistry(
        http_client=client,
        database=database,
        provider_configs=provider_configs,
        parameters=parameters,
        places=places,
        geocode=geocode,
    )


def _registry(request: Request) -> ServiceRegistry:
    return request.app.state.services


def get_geocode_service(request: Request) -> GeocodeService:
    return _registry(request).geocode


def get_provider_config_service(request: Request) -> ProviderConfigService:
    return _registry(request).provider_configs


def get_parameter_service(request: Request) -> ParameterService:
    return _registry(request).parameters


def get_places_client(request: Request) -> PlacesClient:
    return _registry(request).places
