"""
Shared fixtures: an in-memory stand-in for the remote record store.
"""

import asyncio

import pytest

from redemption_proxy.entities import CANONICAL_REDEEMED_STATUS, QueryResult, StoreRecord
from redemption_proxy.errors import NotFoundError, UpstreamError
from redemption_proxy.formulas import clamp_max_records, validate_base_id, validate_field_name, validate_table
from redemption_proxy.repositories import InMemoryCacheRepository


class FakeRecordStore:
    """RecordStore stand-in with call counters."""

    def __init__(self, records=None, failing_codes=(), delay=0.0):
        self.records = {record.fields["Redemption Code"]: record for record in records or []}
        self.failing_codes = set(failing_codes)
        self.delay = delay
        self.find_calls = []
        self.mark_calls = []
        self.substring_calls = []
        self.unavailable = False

    async def find_by_code(self, code):
        self.find_calls.append(code)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.unavailable:
            raise UpstreamError()
        record = self.records.get(code)
        return [record] if record else []

    async def mark_redeemed(self, code):
        self.mark_calls.append(code)
        if code in self.failing_codes or self.unavailable:
            raise UpstreamError()
        record = self.records.get(code)
        if record is None:
            raise NotFoundError(f"No record found for Redemption Code {code}")
        updated = StoreRecord(
            id=record.id,
            created_time=record.created_time,
            fields={**record.fields, "Redemption Status": CANONICAL_REDEEMED_STATUS},
        )
        self.records[code] = updated
        return updated

    async def find_by_substring(self, field, query, max_records=None, table=None, base=None):
        validate_field_name(field)
        if base:
            validate_base_id(base)
        if table:
            validate_table(table)
        self.substring_calls.append((field, query, max_records, table, base))
        if self.unavailable:
            raise UpstreamError()
        needle = query.lower()
        matches = [
            record for record in self.records.values()
            if needle in (record.fields.get(field) or "").lower()
        ]
        return QueryResult(records=tuple(matches[: clamp_max_records(max_records)]))

    def health_check(self):
        return True


def make_record(code, record_id, name=None, kind="Restaurant", award="Five-Star", status="Not Redeemed", **extra):
    fields = {
        "Redemption Code": code,
        "Official Establishment Name": name,
        "Establishment Type": kind,
        "Award Level": award,
        "Redemption Status": status,
    }
    fields.update(extra)
    return StoreRecord(id=record_id, created_time="2024-01-01T00:00:00.000Z", fields=fields)


@pytest.fixture
def records():
    """Three records: two restaurants and a hotel."""
    return [
        make_record("ABC123", "rec00000000000001", name="The Grill Room"),
        make_record("DEF456", "rec00000000000002", name="Harbour Hotel", kind="Hotel", award="Four-Star"),
        make_record("GHI789", "rec00000000000003", name="Le Petit RESTAURANT", kind="Fine Restaurant"),
    ]


@pytest.fixture
def store(records):
    """Fake record store seeded with the sample records."""
    return FakeRecordStore(records)


@pytest.fixture
def clock():
    """Controllable monotonic clock."""

    class Clock:
        def __init__(self):
            self.now = 1000.0

        def __call__(self):
            return self.now

        def advance(self, seconds):
            self.now += seconds

    return Clock()


@pytest.fixture
def cache(clock):
    """In-memory cache with a 60 second TTL and a fake clock."""
    return InMemoryCacheRepository(ttl=60, clock=clock)
