from fastapi.testclient import TestClient

from geocode_api.app import create_app
from geocode_api.settings import GeocodeApiSettings


def _client() -> TestClient:
    return TestClient(create_app(GeocodeApiSettings(DATABASE_URL=None, SEED_DEFAULT_PARAMETERS=False)))


def _payload(name: str = "Google", priority: int = 1) -> dict:
    return {
        "name": name,
        "endpoint": "https://maps.example.com/geocode/json?address={address}&key={apiKey}",
        "api_key": "secret",
        "priority": priority,
        "endpoint_parameters": {"region": "us"},
        "actor": "ops@example.com",
    }


def test_create_and_get_provider_config() -> None:
    client = _client()

    created = client.post("/v1/provider-configs", json=_payload())
    config_id = created.json()["data"]["id"]
    fetched = client.get(f"/v1/provider-configs/{config_id}").json()

    assert created.status_code == 201
    assert fetched["data"]["name"] == "Google"
    assert fetched["data"]["endpoint_parameters"] == {"region": "us"}
    assert fetched["data"]["created_by"] == "ops@example.com"
    assert fetched["data"]["updated_at"] is None


def test_create_rejects_case_insensitive_duplicate() -> None:
    client = _client()
    client.post("/v1/provider-configs", json=_payload("Google"))

    response = client.post("/v1/provider-configs", json=_payload("GOOGLE"))

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "PROVIDER_ALREADY_EXISTS"


def test_create_rejects_non_http_endpoint() -> None:
    payload = _payload()
    payload["endpoint"] = "ftp://maps.example.com/{address}"

    response = _client().post("/v1/provider-configs", json=payload)

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_list_orders_by_priority() -> None:
    client = _client()
    client.post("/v1/provider-configs", json=_payload("Here", 2))
    client.post("/v1/provider-configs", json=_payload("Google", 1))

    body = client.get("/v1/provider-configs").json()

    assert [item["name"] for item in body["data"]] == ["Google", "Here"]
    assert body["meta"]["count"] == 2


def test_get_by_name_is_case_insensitive() -> None:
    client = _client()
    client.post("/v1/provider-configs", json=_payload("Google"))

    assert client.get("/v1/provider-configs/by-name/google").json()["data"]["name"] == "Google"
    missing = client.get("/v1/provider-configs/by-name/bing")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "PROVIDER_NOT_FOUND"


def test_update_provider_config() -> None:
    client = _client()
    config_id = client.post("/v1/provider-configs", json=_payload()).json()["data"]["id"]
    payload = _payload("Google", 5)
    payload["actor"] = "admin"

    body = client.put(f"/v1/provider-configs/{config_id}", json=payload).json()

    assert body["data"]["priority"] == 5
    assert body["data"]["updated_by"] == "admin"
    assert body["data"]["updated_at"] is not None


def test_update_rejects_rename_onto_existing_provider() -> None:
    client = _client()
    client.post("/v1/provider-configs", json=_payload("Google"))
    here_id = client.post("/v1/provider-configs", json=_payload("Here")).json()["data"]["id"]

    response = client.put(f"/v1/provider-configs/{here_id}", json=_payload("google"))

    assert response.status_code == 409


def test_delete_provider_config() -> None:
    client = _client()
    config_id = client.post("/v1/provider-configs", json=_payload()).json()["data"]["id"]

    deleted = client.delete(f"/v1/provider-configs/{config_id}")
    missing = client.get(f"/v1/provider-configs/{config_id}")

    assert deleted.json()["data"]["deleted"] is True
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "NOT_FOUND"


def test_non_positive_id_is_rejected() -> None:
    client = _client()

    for method in (client.get, client.delete):
        response = method("/v1/provider-configs/0")
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_negative_priority_is_accepted_and_sorts_first() -> None:
    client = _client()
    client.post("/v1/provider-configs", json=_payload("Google", 0))

    created = client.post("/v1/provider-configs", json=_payload("Fallback", -1))
    body = client.get("/v1/provider-configs").json()

    assert created.status_code == 201
    assert created.json()["data"]["priority"] == -1
    assert [item["name"] for item in body["data"]] == ["Fallback", "Google"]
