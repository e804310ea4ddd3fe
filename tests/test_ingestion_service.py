"""
Tests for order webhook ingestion.
"""

import asyncio

import pytest

from conftest import FakeRecordStore
from redemption_proxy.errors import UpstreamError, ValidationError
from redemption_proxy.services import OrderIngestionService, StatusLookupService, extract_codes


def order(*codes, key="Redemption Code"):
    return {
        "line_items": [
            {"product_personalizations": [{"attributes": [{"key": key, "value": code}]}]}
            for code in codes
        ]
    }


@pytest.fixture
def service(store, cache):
    return OrderIngestionService(record_store=store, cache=cache)


def test_extract_single_code():
    payload = {
        "line_items": [
            {"product_personalizations": [{"attributes": [{"key": "Redemption Code", "value": "ABC123"}]}]}
        ]
    }
    assert extract_codes(payload) == ["ABC123"]


def test_extract_tolerates_missing_levels():
    payload = {
        "id": 991,
        "line_items": [
            {"sku": "no-personalizations"},
            {"product_personalizations": None},
            {"product_personalizations": [{"name": "no attributes"}, {"attributes": "bad"}]},
            {
                "product_personalizations": [
                    {
                        "attributes": [
                            {"key": "Engraving", "value": "Hi"},
                            {"key": "Redemption Code", "value": "DEF456"},
                            {"key": "Redemption Code", "value": "GHI789"},
                        ]
                    }
                ]
            },
        ],
    }
    assert extract_codes(payload) == ["DEF456", "GHI789"]


@pytest.mark.parametrize("payload", [None, [], {}, {"line_items": None}, {"line_items": "ABC123"}])
def test_extract_rejects_missing_line_items(payload):
    with pytest.raises(ValidationError, match="Invalid order data"):
        extract_codes(payload)


@pytest.mark.parametrize("payload", [
    {"line_items": []},
    order("ABC123", key="Gift Message"),
    order("", None),
])
def test_extract_rejects_orders_without_codes(payload):
    with pytest.raises(ValidationError, match="No redemption codes found"):
        extract_codes(payload)


async def test_ingest_marks_code_once(service, store):
    updated = await service.ingest(order("ABC123"))
    assert updated == 1
    assert store.mark_calls == ["ABC123"]


@pytest.mark.parametrize("payload", [{"line_items": []}, {}])
async def test_ingest_validation_makes_no_remote_calls(service, store, payload):
    with pytest.raises(ValidationError):
        await service.ingest(payload)
    assert store.mark_calls == []


async def test_ingest_overwrites_cache_with_redeemed_view(service, store, cache):
    lookup = StatusLookupService(record_store=store, cache=cache)
    before = await lookup.lookup("ABC123")
    assert before["redemptionStatus"] == "Not Redeemed"

    await service.ingest(order("ABC123"))

    after = await lookup.lookup("ABC123")
    assert after == {**before, "redemptionStatus": "Already Redeemed"}
    assert store.find_calls == ["ABC123"]


async def test_ingest_is_sequential_and_not_transactional(service, store, cache):
    """Codes before a failure stay updated; later codes are never attempted."""
    with pytest.raises(UpstreamError):
        await service.ingest(order("ABC123", "NOPE", "DEF456"))

    assert store.mark_calls == ["ABC123", "NOPE"]
    assert store.records["ABC123"].get("Redemption Status") == "Already Redeemed"
    assert cache.get("ABC123")["redemptionStatus"] == "Already Redeemed"
    assert store.records["DEF456"].get("Redemption Status") == "Not Redeemed"
    assert cache.get("DEF456") is None


async def test_ingest_upstream_failure(records, cache):
    store = FakeRecordStore(records, failing_codes={"DEF456"})
    service = OrderIngestionService(record_store=store, cache=cache)
    with pytest.raises(UpstreamError) as excinfo:
        await service.ingest(order("ABC123", "DEF456"))
    assert excinfo.value.details["updated_count"] == 1


async def test_concurrent_ingests_for_same_code_race(service, store, cache):
    """Overlapping orders are not serialized; both succeed and the last write wins."""
    results = await asyncio.gather(service.ingest(order("ABC123")), service.ingest(order("ABC123")))
    assert results == [1, 1]
    assert store.mark_calls == ["ABC123", "ABC123"]
    assert cache.get("ABC123")["redemptionStatus"] == "Already Redeemed"
