from __future__ import annotations

from devkit.config import ServiceSettings


class GeocodeApiSettings(ServiceSettings):
    SERVICE_NAME: str = "geocode-api"
    GEOCODE_REQUEST_TIMEOUT_SECONDS: float | None = 30.0
    PROVIDER_HTTP_TIMEOUT_SECONDS: float = 10.0
    EXECUTION_AUDIT_ENABLED: bool = True
    SEED_DEFAULT_PARAMETERS: bool = True


def load_settings() -> GeocodeApiSettings:
    return GeocodeApiSettings()
