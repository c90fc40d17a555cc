"""Provider aggregation and address refinement engine."""

from geocoding_core.aggregator import ProviderAggregator
from geocoding_core.deadline import run_with_deadline
from geocoding_core.errors import (
    AddressValidationError,
    ConfigurationMissingError,
    GeocodingError,
    NoProvidersConfiguredError,
    NoProvidersSucceededError,
    NoResultsFromProviderError,
    ProviderError,
    ProviderNotFoundError,
    RequestCancelledError,
)
from geocoding_core.factory import ProviderFactory
from geocoding_core.handle import ProviderHandle, render_endpoint
from geocoding_core.models import (
    Coordinates,
    GeocodeResponse,
    GeocodeResult,
    PlaceDetailsResult,
    PlacesResult,
    ProviderDescriptor,
    RefinementContext,
    RefinementResult,
)
from geocoding_core.orchestrator import RefinementOrchestrator, RefinementStage

__all__ = [
    "AddressValidationError",
    "ConfigurationMissingError",
    "Coordinates",
    "GeocodeResponse",
    "GeocodeResult",
    "GeocodingError",
    "NoProvidersConfiguredError",
    "NoProvidersSucceededError",
    "NoResultsFromProviderError",
    "PlaceDetailsResult",
    "PlacesResult",
    "ProviderAggregator",
    "ProviderDescriptor",
    "ProviderError",
    "ProviderFactory",
    "ProviderHandle",
    "ProviderNotFoundError",
    "RefinementContext",
    "RefinementOrchestrator",
    "RefinementResult",
    "RefinementStage",
    "RequestCancelledError",
    "render_endpoint",
    "run_with_deadline",
]
