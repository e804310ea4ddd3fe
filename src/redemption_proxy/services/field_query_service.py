"""Generic substring search over allow-listed fields."""

from redemption_proxy.cache_keys import contains_cache_key
from redemption_proxy.config import settings
from redemption_proxy.entities import QueryResult
from redemption_proxy.errors import FieldNotAllowedError, UpstreamError, ValidationError
from redemption_proxy.formulas import clamp_max_records, validate_base_id, validate_table
from redemption_proxy.logging_config import get_logger
from redemption_proxy.protocols import CacheStore, RecordStore

logger = get_logger(__name__)

# Fields that may be searched; keeps the rest of the schema unexposed.
ALLOWED_FIELDS = frozenset(
    {
        "Redemption Code",
        "Official Establishment Name",
        "Establishment Type",
        "Award Level",
    }
)

# Deprecated or shorthand names mapped to their canonical field.
FIELD_ALIASES = {
    "Establishment Name": "Official Establishment Name",
    "Code": "Redemption Code",
    "Type": "Establishment Type",
    "Level": "Award Level",
}


def resolve_field(field: str) -> str:
    """Resolve aliases and enforce the allow-list.

    Raises:
        FieldNotAllowedError: If the resolved field is not allow-listed
    """
    canonical = FIELD_ALIASES.get(field, field)
    if canonical not in ALLOWED_FIELDS:
        raise FieldNotAllowedError(field)
    return canonical


class FieldQueryService:
    """Cache-fronted substring search.

    Results are cached as a whole under a key made of every parameter, so
    distinct parameter combinations expire independently.
    """

    def __init__(
        self,
        record_store: RecordStore,
        cache: CacheStore,
        ttl: int | None = None,
        default_base: str | None = None,
        default_table: str | None = None,
    ) -> None:
        self._store = record_store
        self._cache = cache
        self._ttl = ttl
        self._default_base = default_base or settings.airtable_base_id
        self._default_table = default_table or settings.airtable_table

    async def query(
        self,
        field: str | None,
        text: str | None,
        max_records: int | str | None = None,
        table: str | None = None,
        base: str | None = None,
    ) -> tuple[QueryResult, bool]:
        """Search one field for a case-insensitive substring.

        Args:
            field: Field name or alias
            text: Literal text to search for
            max_records: Result limit, clamped to [1, 100], default 25
            table: Optional table override
            base: Optional base override

        Returns:
            Tuple of (result, served_from_cache)

        Raises:
            ValidationError: If field or text is missing
            FieldNotAllowedError: If the field is not allow-listed
            InvalidIdentifierError: If a base or table override is malformed
            InvalidFieldError: From the record store
            UpstreamError: If the store call fails
        """
        if not field or not text:
            raise ValidationError("Missing required query parameters: field, q")

        canonical = resolve_field(field)
        limit = clamp_max_records(max_records)
        # Overrides are checked before the cache so a bad id never hits an entry.
        resolved_base = validate_base_id(base) if base else self._default_base
        resolved_table = validate_table(table) if table else self._default_table
        key = contains_cache_key(resolved_base, resolved_table, canonical, text, limit)

        cached = self._cache.get(key)
        if isinstance(cached, dict):
            logger.debug("field_query_cache_hit", field=canonical)
            return QueryResult.from_dict(cached), True

        try:
            result = await self._store.find_by_substring(
                canonical,
                text,
                max_records=limit,
                table=table,
                base=base,
            )
        except UpstreamError as e:
            raise UpstreamError(
                "Failed to query records",
                details={"operation": "field_query", "field": canonical},
            ) from e
        self._cache.set(key, result.to_dict(), self._ttl)
        logger.info("field_query_completed", field=canonical, record_count=len(result))
        return result, False
