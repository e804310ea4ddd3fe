"""Order webhook ingestion.

Extracts every redemption code embedded in an order and marks each one
redeemed in the remote store. Codes are processed one at a time and the
operation is not transactional: when a code fails, the codes before it stay
updated in both the store and the cache.
"""

from typing import Any

from redemption_proxy.cache_keys import redemption_cache_key
from redemption_proxy.errors import NotFoundError, UpstreamError, ValidationError
from redemption_proxy.logging_config import get_logger
from redemption_proxy.protocols import CacheStore, RecordStore
from redemption_proxy.services.shaping import shape_record

logger = get_logger(__name__)

REDEMPTION_CODE_ATTRIBUTE = "Redemption Code"


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def extract_codes(payload: Any) -> list[str]:
    """Collect redemption codes from an order payload.

    Missing or malformed personalization/attribute levels are treated as
    empty. Only a payload without a ``line_items`` list is malformed.

    Args:
        payload: Decoded JSON order body

    Returns:
        Codes in order of appearance (duplicates kept)

    Raises:
        ValidationError: If ``line_items`` is missing or no codes are found
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("line_items"), list):
        raise ValidationError("Invalid order data")

    codes: list[str] = []
    for item in payload["line_items"]:
        if not isinstance(item, dict):
            continue
        for personalization in _as_list(item.get("product_personalizations")):
            if not isinstance(personalization, dict):
                continue
            for attribute in _as_list(personalization.get("attributes")):
                if not isinstance(attribute, dict) or attribute.get("key") != REDEMPTION_CODE_ATTRIBUTE:
                    continue
                value = attribute.get("value")
                if isinstance(value, str) and value:
                    codes.append(value)
                else:
                    logger.warning("redemption_code_attribute_empty", value=repr(value))

    if not codes:
        raise ValidationError("No redemption codes found in order items")
    return codes


class OrderIngestionService:
    """Marks the redemption codes of an order as redeemed.

    Example:
        ```python
        service = OrderIngestionService(record_store=store, cache=cache)
        updated = await service.ingest(order_json)
        ```
    """

    def __init__(
        self,
        record_store: RecordStore,
        cache: CacheStore,
        ttl: int | None = None,
    ) -> None:
        """Initialize the ingestion service.

        Args:
            record_store: Remote record store (required).
            cache: Response cache (required).
            ttl: Per-entry TTL override; None uses the cache default.
        """
        self._store = record_store
        self._cache = cache
        self._ttl = ttl

    async def ingest(self, payload: Any) -> int:
        """Mark every code in the order as redeemed.

        Business logic:
        1. Extract codes (validation happens before any remote call)
        2. For each code in order: mark redeemed, then overwrite its cache
           entry with the post-redemption view
        3. Stop at the first failure without rolling back earlier codes

        Args:
            payload: Decoded JSON order body

        Returns:
            Number of codes updated

        Raises:
            ValidationError: If the payload is malformed or has no codes
            UpstreamError: If marking any code fails (including unknown codes)
        """
        codes = extract_codes(payload)
        logger.info("order_ingest_started", code_count=len(codes))

        updated = 0
        for code in codes:
            try:
                record = await self._store.mark_redeemed(code)
            except (NotFoundError, UpstreamError) as e:
                logger.error(
                    "order_ingest_failed",
                    operation="mark_redeemed",
                    redemption_code=code,
                    error_code=e.code,
                    updated_before_failure=updated,
                )
                raise UpstreamError(
                    "Failed to update redemption statuses",
                    details={"redemption_code": code, "updated_count": updated},
                ) from e

            view = shape_record(record, code).to_view()
            self._cache.set(redemption_cache_key(code), view, self._ttl)
            updated += 1

        logger.info("order_ingest_completed", updated_count=updated)
        return updated
