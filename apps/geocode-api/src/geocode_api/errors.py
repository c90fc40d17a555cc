from __future__ import annotations

from dataclasses import dataclass

from geocoding_core.errors import (
    AddressValidationError,
    ConfigurationMissingError,
    GeocodingError,
    NoProvidersSucceededError,
    NoResultsFromProviderError,
    ProviderError,
    ProviderNotFoundError,
    RequestCancelledError,
)


@dataclass
class ApiError(Exception):
    code: str
    message: str
    status_code: int


class UpstreamServiceError(RuntimeError):
    def __init__(self, code: str, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


class DuplicateProviderError(ValueError):
    def __init__(self, name: str) -> None:
        super().__init__(f"provider '{name}' already exists")
        self.name = name


def api_error_from_geocoding(exc: GeocodingError) -> ApiError:
    if isinstance(exc, AddressValidationError):
        return ApiError("VALIDATION_ERROR", str(exc), 422)
    if isinstance(exc, ProviderNotFoundError):
        return ApiError("PROVIDER_NOT_FOUND", str(exc), 404)
    if isinstance(exc, NoResultsFromProviderError):
        return ApiError("NO_RESULTS", str(exc), 404)
    if isinstance(exc, ProviderError):
        return ApiError("PROVIDER_ERROR", str(exc), 502)
    if isinstance(exc, NoProvidersSucceededError):
        return ApiError("NO_PROVIDER_SUCCEEDED", str(exc), 502)
    if isinstance(exc, RequestCancelledError):
        return ApiError("UPSTREAM_TIMEOUT", str(exc), 504)
    if isinstance(exc, ConfigurationMissingError):
        return ApiError("CONFIGURATION_MISSING", str(exc), 503)
    return ApiError("GEOCODING_FAILED", str(exc), 500)


def api_error_from_upstream(exc: UpstreamServiceError) -> ApiError:
    status_code = 504 if exc.code == "UPSTREAM_TIMEOUT" else 502
    return ApiError(exc.code, exc.message, status_code)
