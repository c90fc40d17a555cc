from __future__ import annotations

import httpx
import pytest

from geocoding_core.errors import ProviderError
from geocoding_core.factory import ProviderFactory
from geocoding_core.handle import render_endpoint
from geocoding_core.models import ProviderDescriptor

OK_PAYLOAD = {
    "status": "OK",
    "results": [
        {
            "formatted_address": "123 Main St, Springfield",
            "geometry": {"location": {"lat": 39.78, "lng": -89.65}, "location_type": "ROOFTOP"},
            "place_id": "place-1",
            "types": ["street_address"],
            "partial_match": True,
            "address_components": [{"long_name": "123", "short_name": "123", "types": ["street_number"]}],
        }
    ],
}


def build_handle(handler, template: str = "https://geo.example.com/json?address={address}&key={apiKey}"):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    descriptor = ProviderDescriptor(name="Google", endpoint_template=template, api_key="k-123", priority=1)
    return ProviderFactory(client).create(descriptor)


def test_render_endpoint_escapes_address_and_keeps_key_raw() -> None:
    url = render_endpoint(
        "https://geo.example.com/json?address={address}&key={apiKey}",
        address="123 Main St/4 & co",
        api_key="a+b/c",
    )
    assert url == "https://geo.example.com/json?address=123%20Main%20St%2F4%20%26%20co&key=a+b/c"


def test_render_endpoint_fills_extra_parameters_and_keeps_unknown_placeholders() -> None:
    url = render_endpoint(
        "https://geo.example.com/{version}/search?q={address}&region={region}&key={apiKey}",
        address="Paris",
        api_key="k",
        parameters={"version": "v2", "address": "ignored"},
    )
    assert url == "https://geo.example.com/v2/search?q=Paris&region={region}&key=k"


@pytest.mark.asyncio
async def test_provider_handle_parses_geocode_response() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.host == "geo.example.com"
        assert request.url.params["address"] == "123 Main St"
        assert request.url.params["key"] == "k-123"
        return httpx.Response(status_code=200, json=OK_PAYLOAD)

    handle = build_handle(handler)
    response = await handle.geocode("123 Main St")

    assert response.status == "OK"
    assert response.results[0].formatted_address == "123 Main St, Springfield"
    assert response.results[0].partial_match is True
    assert response.results[0].coordinates.lat == 39.78
    assert handle.name == "Google"
    assert handle.priority == 1


@pytest.mark.asyncio
async def test_provider_handle_maps_http_error() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=503, json={"message": "down"})

    handle = build_handle(handler)
    with pytest.raises(ProviderError) as exc_info:
        await handle.geocode("123 Main St")

    assert exc_info.value.provider_name == "Google"
    assert isinstance(exc_info.value.cause, httpx.HTTPStatusError)


@pytest.mark.asyncio
async def test_provider_handle_maps_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    handle = build_handle(handler)
    with pytest.raises(ProviderError) as exc_info:
        await handle.geocode("123 Main St")

    assert isinstance(exc_info.value.cause, httpx.ConnectError)


@pytest.mark.asyncio
async def test_provider_handle_maps_unparseable_body() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, content=b"<html>not json</html>")

    handle = build_handle(handler)
    with pytest.raises(ProviderError):
        await handle.geocode("123 Main St")


@pytest.mark.asyncio
async def test_provider_handle_rejects_wrong_shape() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, json={"status": "OK", "results": "nope"})

    handle = build_handle(handler)
    with pytest.raises(ProviderError):
        await handle.geocode("123 Main St")
