from __future__ import annotations

import httpx
import pytest

from geocoding_core.errors import ProviderNotFoundError
from geocoding_core.factory import ProviderFactory
from geocoding_core.models import ProviderDescriptor


def _descriptor(name: str, priority: int = 1) -> ProviderDescriptor:
    return ProviderDescriptor(
        name=name,
        endpoint_template=f"https://{name.lower()}.example.com/?q={{address}}",
        api_key="key",
        priority=priority,
    )


def _factory() -> ProviderFactory:
    return ProviderFactory(httpx.AsyncClient(transport=httpx.MockTransport(lambda _: httpx.Response(200))))


def test_build_all_returns_one_handle_per_descriptor() -> None:
    handles = _factory().build_all([_descriptor("Google"), _descriptor("Here", 2)])

    assert sorted(handle.name for handle in handles) == ["Google", "Here"]
    assert {handle.name: handle.priority for handle in handles} == {"Google": 1, "Here": 2}


def test_build_all_accepts_empty_input() -> None:
    assert _factory().build_all([]) == []


def test_build_finds_provider_case_insensitively() -> None:
    handle = _factory().build([_descriptor("Google"), _descriptor("Here")], "  gOOgle ")

    assert handle.name == "Google"
    assert handle.endpoint_template == "https://google.example.com/?q={address}"


def test_build_raises_for_unknown_provider() -> None:
    with pytest.raises(ProviderNotFoundError) as exc_info:
        _factory().build([_descriptor("Google")], "Bing")

    assert exc_info.value.provider_name == "Bing"
