from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from devkit.observability import configure_logging, configure_otel, configure_probe_access_log_filter
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from geocode_api.dependencies import build_registry
from geocode_api.errors import ApiError
from geocode_api.middleware import ObservabilityMiddleware
from geocode_api.observability import (
    CompositeApiMetricsCollector,
    InMemoryApiMetricsCollector,
    PrometheusApiMetricsCollector,
)
from geocode_api.response import error_response, success_response
from geocode_api.routers.geocode import router as geocode_router
from geocode_api.routers.parameters import router as parameters_router
from geocode_api.routers.places import router as places_router
from geocode_api.routers.provider_configs import router as provider_configs_router
from geocode_api.settings import GeocodeApiSettings, load_settings

logger = logging.getLogger(__name__)


def create_app(settings: GeocodeApiSettings | None = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.SEED_DEFAULT_PARAMETERS:
            await app.state.services.parameters.seed_defaults()
        yield
        await app.state.services.close()

    app = FastAPI(title="Geocode API", version="0.1.0", lifespan=lifespan)
    configure_otel(service_name=settings.SERVICE_NAME)
    configure_probe_access_log_filter()
    app.state.settings = settings
    app.state.api_metrics = InMemoryApiMetricsCollector()
    app.state.prom_metrics = PrometheusApiMetricsCollector()
    app.state.composite_metrics = CompositeApiMetricsCollector(
        [app.state.api_metrics, app.state.prom_metrics]
    )
    app.state.services = build_registry(settings, app.state.prom_metrics)
    app.add_middleware(ObservabilityMiddleware, collector=app.state.composite_metrics)
    app.include_router(geocode_router)
    app.include_router(places_router)
    app.include_router(provider_configs_router)
    app.include_router(parameters_router)

    @app.get("/healthz")
    async def healthz() -> dict:
        return success_response({"status": "ok"}, meta={})

    @app.get("/readyz", response_model=None)
    async def readyz() -> dict | JSONResponse:
        database = app.state.services.database
        if database is None:
            return success_response({"status": "ready", "store": "memory"}, meta={})
        try:
            await database.ping()
        except Exception:
            logger.exception("readiness_check_failed")
            return JSONResponse(status_code=503, content=error_response("NOT_READY", "database is unavailable"))
        return success_response({"status": "ready", "store": "postgres"}, meta={})

    @app.get("/metrics")
    async def metrics() -> Response:
        payload = app.state.prom_metrics.render()
        return Response(content=payload, media_type="text/plain; version=0.0.4")

    @app.exception_handler(ApiError)
    async def handle_api_error(_: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=error_response(exc.code, exc.message))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        message = "; ".join(err["msg"] for err in exc.errors())
        return JSONResponse(
            status_code=422,
            content=error_response("VALIDATION_ERROR", message),
        )

    return app


app = create_app()
