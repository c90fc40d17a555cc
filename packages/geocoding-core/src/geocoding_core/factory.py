from __future__ import annotations

from collections.abc import Iterable

import httpx

from geocoding_core.errors import ProviderNotFoundError
from geocoding_core.handle import ProviderHandle
from geocoding_core.models import ProviderDescriptor


def canonical_provider_name(name: str) -> str:
    return name.strip().lower()


class ProviderFactory:
    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    def create(self, descriptor: ProviderDescriptor) -> ProviderHandle:
        return ProviderHandle(descriptor, self._client)

    def build_all(self, configs: Iterable[ProviderDescriptor]) -> list[ProviderHandle]:
        return [self.create(descriptor) for descriptor in configs]

    def build(self, configs: Iterable[ProviderDescriptor], name: str) -> ProviderHandle:
        index = {canonical_provider_name(descriptor.name): descriptor for descriptor in configs}
        descriptor = index.get(canonical_provider_name(name))
        if descriptor is None:
            raise ProviderNotFoundError(name)
        return self.create(descriptor)
