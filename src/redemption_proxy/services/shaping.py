"""Shaping of raw store rows into the public redemption view.

Each attribute is read from an ordered list of candidate fields; the first
non-empty value wins. This absorbs field renames in the remote table
(e.g. the legacy "Status" column) without a second response contract.
"""

from redemption_proxy.entities import RedemptionRecord, StoreRecord

CODE_FIELDS = ("Redemption Code",)
NAME_FIELDS = ("Official Establishment Name", "Establishment Name")
TYPE_FIELDS = ("Establishment Type",)
AWARD_FIELDS = ("Award Level",)
STATUS_FIELDS = ("Redemption Status", "Status")


def shape_record(record: StoreRecord, code: str) -> RedemptionRecord:
    """Build a RedemptionRecord from a raw store row.

    Args:
        record: Raw row from the record store
        code: The code that was looked up, used if the row lacks one

    Returns:
        The normalized RedemptionRecord
    """
    return RedemptionRecord(
        redemption_code=record.first_of(CODE_FIELDS) or code,
        record_id=record.id,
        establishment_name=record.first_of(NAME_FIELDS),
        establishment_type=record.first_of(TYPE_FIELDS),
        award_level=record.first_of(AWARD_FIELDS),
        redemption_status=record.first_of(STATUS_FIELDS),
    )
