"""
Tests for the redemption proxy API.
"""

import pytest
from fastapi.testclient import TestClient

from conftest import FakeRecordStore
from redemption_proxy.api.app import create_app
from redemption_proxy.config import Settings
from redemption_proxy.repositories import InMemoryCacheRepository

ORDER = {
    "line_items": [
        {"product_personalizations": [{"attributes": [{"key": "Redemption Code", "value": "ABC123"}]}]}
    ]
}


@pytest.fixture
def client(store):
    """Create a test client backed by the fake store and an in-memory cache."""
    app = create_app(record_store=store, cache=InMemoryCacheRepository(ttl=60))
    with TestClient(app) as test_client:
        yield test_client


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Redemption Proxy API"


def test_health(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["cache_entries"] == 0

    client.get("/redemption-code-status/ABC123")
    assert client.get("/health").json()["cache_entries"] == 1


def test_redemption_status(client, store):
    response = client.get("/redemption-code-status/ABC123")
    assert response.status_code == 200
    assert response.json() == {
        "redemptionCode": "ABC123",
        "establishmentName": "The Grill Room",
        "establishmentType": "Restaurant",
        "awardLevel": "Five-Star",
        "redemptionStatus": "Not Redeemed",
    }

    again = client.get("/redemption-code-status/ABC123")
    assert again.content == response.content
    assert store.find_calls == ["ABC123"]


def test_redemption_status_not_found(client):
    response = client.get("/redemption-code-status/NOPE")
    assert response.status_code == 404
    assert response.json() == {"error": "Sorry, this redemption code is not valid"}


def test_redemption_status_upstream_error_hides_details(client, store):
    store.unavailable = True
    response = client.get("/redemption-code-status/ABC123")
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to retrieve redemption code status"}


def test_query_upstream_error(client, store):
    store.unavailable = True
    response = client.get("/query", params={"field": "Award Level", "q": "five"})
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to query records"}


def test_order_data(client, store):
    response = client.post("/order-data", json=ORDER)
    assert response.status_code == 200
    assert response.json() == {
        "message": 'Redemption statuses updated to "Already Redeemed"',
        "updatedCount": 1,
    }
    assert store.mark_calls == ["ABC123"]

    status = client.get("/redemption-code-status/ABC123").json()
    assert status["redemptionStatus"] == "Already Redeemed"


@pytest.mark.parametrize("body, message", [
    ({"line_items": []}, "No redemption codes found in order items"),
    ({"order": 1}, "Invalid order data"),
])
def test_order_data_validation(client, store, body, message):
    response = client.post("/order-data", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": message}
    assert store.mark_calls == []


def test_order_data_invalid_json(client):
    response = client.post("/order-data", content=b"{not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400


def test_order_data_unknown_code_is_upstream_error(client):
    body = {
        "line_items": [
            {"product_personalizations": [{"attributes": [{"key": "Redemption Code", "value": "NOPE"}]}]}
        ]
    }
    response = client.post("/order-data", json=body)
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to update redemption statuses"}


def test_query(client, store):
    response = client.get("/query", params={"field": "Establishment Type", "q": "Restaurant"})
    assert response.status_code == 200
    data = response.json()
    assert "cached" not in data
    assert {r["fields"]["Redemption Code"] for r in data["records"]} == {"ABC123", "GHI789"}
    assert set(data["records"][0]) == {"id", "createdTime", "fields"}

    again = client.get("/query", params={"field": "Establishment Type", "q": "restaurant"})
    assert again.json()["cached"] is True
    assert again.json()["records"] == data["records"]
    assert len(store.substring_calls) == 1


def test_query_disallowed_field(client, store):
    response = client.get("/query", params={"field": "Social Security Number", "q": "1"})
    assert response.status_code == 400
    assert response.json() == {"error": "Field not allowed"}
    assert store.substring_calls == []


def test_query_missing_params(client):
    response = client.get("/query", params={"field": "Award Level"})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required query parameters: field, q"}


def test_query_invalid_base_override(client, store):
    response = client.get("/query", params={"field": "Award Level", "q": "five", "base": "app/../x"})
    assert response.status_code == 400
    assert store.substring_calls == []


def test_query_invalid_base_after_cached_default(client, store):
    params = {"field": "Establishment Type", "q": "Restaurant"}
    assert client.get("/query", params=params).status_code == 200

    response = client.get("/query", params={**params, "base": "defaultBase"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid base identifier"}
    assert len(store.substring_calls) == 1


def test_query_legacy_override_names(client, store):
    response = client.get(
        "/query",
        params={"field": "Award Level", "q": "five", "AIRTABLE_TABLE": "Redemption Codes", "maxRecords": "5"},
    )
    assert response.status_code == 200
    assert store.substring_calls[0][2:] == (5, "Redemption Codes", None)


def test_api_prefix(store):
    app = create_app(
        app_settings=Settings(api_prefix="/api"),
        record_store=store,
        cache=InMemoryCacheRepository(ttl=60),
    )
    with TestClient(app) as client:
        assert client.get("/api/redemption-code-status/ABC123").status_code == 200
        assert client.get("/redemption-code-status/ABC123").status_code == 404


def test_cors_allows_storefront_origin(client):
    response = client.get(
        "/redemption-code-status/ABC123",
        headers={"Origin": "https://redeem.forbestravelguide.com"},
    )
    assert response.headers["access-control-allow-origin"] == "https://redeem.forbestravelguide.com"

    other = client.get("/redemption-code-status/ABC123", headers={"Origin": "https://evil.example"})
    assert "access-control-allow-origin" not in other.headers


def test_unexpected_error_returns_generic_message(records):
    class BrokenStore(FakeRecordStore):
        async def find_by_code(self, code):
            raise RuntimeError("secret internal detail")

    app = create_app(record_store=BrokenStore(records), cache=InMemoryCacheRepository(ttl=60))
    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/redemption-code-status/ABC123")
    assert response.status_code == 500
    assert "secret" not in response.text
    assert response.json() == {"error": "An internal server error occurred. Please try again later."}
