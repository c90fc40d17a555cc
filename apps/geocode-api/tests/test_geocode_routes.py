from __future__ import annotations

import asyncio

import httpx
from fastapi.testclient import TestClient
from geocoding_core.errors import (
    NoProvidersSucceededError,
    NoResultsFromProviderError,
    ProviderNotFoundError,
    RequestCancelledError,
)
from geocoding_core.models import GeocodeResponse, RefinementContext

from geocode_api.app import create_app
from geocode_api.dependencies import build_registry, get_geocode_service
from geocode_api.settings import GeocodeApiSettings


def ok_payload(label: str, lat: float = 1.0, lng: float = 2.0) -> dict:
    return {
        "status": "OK",
        "results": [{"formatted_address": label, "geometry": {"location": {"lat": lat, "lng": lng}}}],
    }


class StubGeocodeService:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple] = []

    def _maybe_fail(self) -> None:
        if self.error is not None:
            raise self.error

    async def race_best(self, address: str) -> GeocodeResponse:
        self.calls.append(("first", address))
        self._maybe_fail()
        return GeocodeResponse.model_validate(ok_payload("best"))

    async def all(self, address: str) -> list[GeocodeResponse]:
        self.calls.append(("all", address))
        self._maybe_fail()
        return [GeocodeResponse.model_validate(ok_payload("a")), GeocodeResponse.model_validate(ok_payload("b"))]

    async def grouped(self, address: str, priorities) -> dict[str, list[GeocodeResponse]]:
        self.calls.append(("group", address, sorted(priorities)))
        self._maybe_fail()
        return {"P1": [GeocodeResponse.model_validate(ok_payload("p1"))]}

    async def by_name(self, address: str, name: str) -> GeocodeResponse:
        self.calls.append(("by_name", address, name))
        self._maybe_fail()
        return GeocodeResponse.model_validate(ok_payload(name))

    async def refine(self, address: str, radius: int):
        self.calls.append(("refined", address, radius))
        self._maybe_fail()
        context = RefinementContext(original_address=address, refined_address=address)
        context.log("IA skipped: parameter 'ai.endpoint' is not configured")
        context.log("Geocode completed")
        return context.freeze()

    async def recent_executions(self, limit: int):
        return []


def build_client(service: StubGeocodeService) -> TestClient:
    app = create_app(GeocodeApiSettings(DATABASE_URL=None))
    app.dependency_overrides[get_geocode_service] = lambda: service
    return TestClient(app)


def test_geocode_defaults_to_first_mode() -> None:
    service = StubGeocodeService()
    body = build_client(service).get("/v1/geocode", params={"address": "123 Main St"}).json()

    assert body["success"] is True
    assert body["meta"]["mode"] == "first"
    assert body["data"]["results"][0]["formatted_address"] == "best"
    assert service.calls == [("first", "123 Main St")]


def test_geocode_all_mode_returns_list() -> None:
    body = build_client(StubGeocodeService()).get("/v1/geocode?address=x&mode=all").json()

    assert [item["results"][0]["formatted_address"] for item in body["data"]] == ["a", "b"]
    assert body["meta"]["count"] == 2


def test_geocode_group_mode_ignores_invalid_priorities() -> None:
    service = StubGeocodeService()
    body = build_client(service).get("/v1/geocode?address=x&mode=group&priorities=2,abc,1").json()

    assert list(body["data"]) == ["P1"]
    assert service.calls == [("group", "x", [1, 2])]


def test_geocode_group_mode_defaults_priority_one() -> None:
    service = StubGeocodeService()
    build_client(service).get("/v1/geocode?address=x&mode=group&priorities=,,")

    assert service.calls == [("group", "x", [1])]


def test_geocode_unknown_mode_is_validation_error() -> None:
    response = build_client(StubGeocodeService()).get("/v1/geocode?address=x&mode=best")

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_geocode_with_provider_route() -> None:
    service = StubGeocodeService()
    body = build_client(service).get("/v1/geocode/providers/Google?address=x").json()

    assert body["data"]["results"][0]["formatted_address"] == "Google"
    assert service.calls == [("by_name", "x", "Google")]


def test_geocode_refined_returns_process_logs() -> None:
    client = build_client(StubGeocodeService())
    body = client.get("/v1/geocode/refined", params={"address": "123 Main St", "radius": 0}).json()

    assert body["data"]["original_address"] == "123 Main St"
    assert body["data"]["latitude"] is None
    assert body["data"]["process_logs"][-1] == "Geocode completed"


def test_geocode_errors_map_to_structured_responses() -> None:
    cases = [
        (ProviderNotFoundError("Bing"), 404, "PROVIDER_NOT_FOUND"),
        (NoResultsFromProviderError("Google"), 404, "NO_RESULTS"),
        (NoProvidersSucceededError("x"), 502, "NO_PROVIDER_SUCCEEDED"),
        (RequestCancelledError("deadline"), 504, "UPSTREAM_TIMEOUT"),
        (RuntimeError("unexpected"), 502, "UPSTREAM_FAILURE"),
    ]
    for error, status_code, code in cases:
        response = build_client(StubGeocodeService(error)).get("/v1/geocode?address=x")
        assert response.status_code == status_code
        assert response.json()["success"] is False
        assert response.json()["error"]["code"] == code


def test_end_to_end_geocoding_through_configured_providers() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        host = request.url.host
        if host == "primary.example.com":
            return httpx.Response(200, json=ok_payload("primary", 10.0, 20.0))
        if host == "backup.example.com":
            await asyncio.sleep(0.01)
            return httpx.Response(200, json=ok_payload("backup"))
        if host == "places.example.com":
            assert request.url.params["location"] == "10.0,20.0"
            assert request.url.params["radius"] == "300"
            return httpx.Response(200, json={"status": "OK", "results": [{"name": "Cafe"}]})
        return httpx.Response(503)

    settings = GeocodeApiSettings(DATABASE_URL=None)
    app = create_app(settings)
    app.state.services = build_registry(
        settings,
        app.state.prom_metrics,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    with TestClient(app) as client:
        for name, priority in (("Primary", 1), ("Backup", 2)):
            created = client.post(
                "/v1/provider-configs",
                json={
                    "name": name,
                    "endpoint": f"https://{name.lower()}.example.com/json?address={{address}}&key={{apiKey}}",
                    "api_key": "secret",
                    "priority": priority,
                },
            )
            assert created.status_code == 201
        places_endpoint = client.get("/v1/parameters/by-name/PLACES.ENDPOINT").json()["data"]
        client.put(
            f"/v1/parameters/{places_endpoint['id']}",
            json={"value": "https://places.example.com/nearby", "category": "places"},
        )
        client.post("/v1/parameters", json={"name": "places.api_key", "value": "places-key", "category": "places"})

        first = client.get("/v1/geocode", params={"address": "123 Main St"}).json()
        union = client.get("/v1/geocode", params={"address": "123 Main St", "mode": "all"}).json()
        refined = client.get("/v1/geocode/refined", params={"address": "123 Main St", "radius": 300}).json()
        executions = client.get("/v1/geocode/executions?limit=10").json()
        metrics = client.get("/metrics").text

    assert first["data"]["results"][0]["formatted_address"] == "primary"
    assert [item["results"][0]["formatted_address"] for item in union["data"]] == ["primary", "backup"]
    assert refined["data"]["latitude"] == 10.0
    assert refined["data"]["nearby_places"]["results"][0]["name"] == "Cafe"
    assert refined["data"]["process_logs"] == [
        "IA skipped: parameter 'ai.endpoint' is not configured",
        "Geocode completed",
        "Places completed",
    ]
    assert [item["operation"] for item in executions["data"]] == ["refined", "all", "first"]
    assert 'geocode_provider_calls_total{provider="Primary",outcome="success"}' in metrics


def test_geocode_refined_accepts_negative_radius() -> None:
    service = StubGeocodeService()
    response = build_client(service).get("/v1/geocode/refined", params={"address": "123 Main St", "radius": -1})

    assert response.status_code == 200
    assert response.json()["meta"]["radius"] == -1
    assert service.calls == [("refined", "123 Main St", -1)]


def test_geocode_refined_negative_radius_reports_places_skip() -> None:
    app = create_app(GeocodeApiSettings(DATABASE_URL=None))
    body = TestClient(app).get("/v1/geocode/refined", params={"address": "123 Main St", "radius": -1}).json()

    assert body["success"] is True
    assert body["data"]["used_radius"] is None
    assert body["data"]["process_logs"][-1] == (
        "Places skipped: no coordinates available; radius must be greater than 0"
    )
