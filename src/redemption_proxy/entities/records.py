"""Record domain entities."""

import json
from dataclasses import dataclass, field
from typing import Any

# Status vocabulary is owned by the remote table schema.
CANONICAL_REDEEMED_STATUS = "Already Redeemed"


def _field_text(value: Any) -> str | None:
    # Checkbox, number and linked-record cells come back as JSON text.
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value)


@dataclass(frozen=True)
class StoreRecord:
    """A raw row from the remote tabular store.

    Attributes:
        id: Identifier assigned by the remote store
        created_time: ISO timestamp the row was created
        fields: Field name to value mapping (values are strings or None)
    """

    id: str
    created_time: str | None = None
    fields: dict[str, str | None] = field(default_factory=dict)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "StoreRecord":
        """Build a record from the remote JSON representation."""
        raw_fields = payload.get("fields") or {}
        fields = {str(name): _field_text(value) for name, value in raw_fields.items()}
        return cls(id=payload["id"], created_time=payload.get("createdTime"), fields=fields)

    def get(self, name: str) -> str | None:
        return self.fields.get(name)

    def first_of(self, candidates: tuple[str, ...]) -> str | None:
        """Return the first candidate field holding a non-empty value."""
        for name in candidates:
            value = self.fields.get(name)
            if value is not None and value != "":
                return value
        return None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "createdTime": self.created_time, "fields": dict(self.fields)}


@dataclass(frozen=True)
class RedemptionRecord:
    """State of a single redemption code.

    Attributes:
        redemption_code: Business key, exact and case-sensitive
        record_id: Remote store identifier
        establishment_name: Display name of the establishment
        establishment_type: Establishment category
        award_level: Award tier
        redemption_status: Status value from the remote schema
    """

    redemption_code: str
    record_id: str | None = None
    establishment_name: str | None = None
    establishment_type: str | None = None
    award_level: str | None = None
    redemption_status: str | None = None

    def to_view(self) -> dict[str, str | None]:
        """Flat public shape; the record id is intentionally left out."""
        return {
            "redemptionCode": self.redemption_code,
            "establishmentName": self.establishment_name,
            "establishmentType": self.establishment_type,
            "awardLevel": self.award_level,
            "redemptionStatus": self.redemption_status,
        }


@dataclass(frozen=True)
class QueryResult:
    """Ordered records matched by a substring search."""

    records: tuple[StoreRecord, ...] = ()

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "QueryResult":
        """Rebuild a result from its cached ``to_dict`` form."""
        return cls(records=tuple(StoreRecord.from_api(item) for item in payload.get("records", [])))

    def to_dict(self) -> dict[str, Any]:
        return {"records": [record.to_dict() for record in self.records]}

    def __len__(self) -> int:
        return len(self.records)
