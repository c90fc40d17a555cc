from __future__ import annotations

from typing import Protocol

from geocoding_core.models import PlacesResult, ProviderDescriptor


class ProviderConfigSource(Protocol):
    async def list_provider_configs(self) -> list[ProviderDescriptor]: ...

    async def get_provider_config(self, name: str) -> ProviderDescriptor: ...


class AddressRefiner(Protocol):
    async def refine(self, address: str) -> str: ...


class NearbyPlacesSearch(Protocol):
    async def search_nearby(self, lat: float, lng: float, radius_meters: int) -> PlacesResult: ...


class ProviderCallObserver(Protocol):
    def observe_provider_call(self, provider_name: str, outcome: str, duration_ms: float) -> None: ...
