from __future__ import annotations


class GeocodingError(Exception):
    """Base geocoding exception."""


class AddressValidationError(GeocodingError):
    """Raised when an address is empty or otherwise unusable."""


class ProviderNotFoundError(GeocodingError):
    def __init__(self, provider_name: str) -> None:
        super().__init__(f"provider '{provider_name}' is not configured")
        self.provider_name = provider_name


class ProviderError(GeocodingError):
    """Raised when a provider call failed at the HTTP or parsing level."""

    def __init__(self, provider_name: str, cause: BaseException) -> None:
        super().__init__(f"provider '{provider_name}' failed: {cause}")
        self.provider_name = provider_name
        self.cause = cause


class NoProvidersSucceededError(GeocodingError):
    def __init__(self, address: str, message: str | None = None) -> None:
        super().__init__(message or f"no provider returned a result for '{address}'")
        self.address = address


class NoProvidersConfiguredError(NoProvidersSucceededError):
    def __init__(self, address: str) -> None:
        super().__init__(address, "no geocoding providers are configured")


class NoResultsFromProviderError(GeocodingError):
    def __init__(self, provider_name: str) -> None:
        super().__init__(f"provider '{provider_name}' returned no results")
        self.provider_name = provider_name


class ConfigurationMissingError(GeocodingError):
    def __init__(self, parameter_name: str) -> None:
        super().__init__(f"parameter '{parameter_name}' is not configured")
        self.parameter_name = parameter_name


class RequestCancelledError(GeocodingError):
    """Raised when a caller deadline expired before the operation finished."""
