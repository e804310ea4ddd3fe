"""Cache key construction.

Redemption lookups use the bare code; field queries are namespaced under
``contains::`` with every parameter that changes the result, so distinct
parameter combinations never share an entry.
"""

CONTAINS_PREFIX = "contains"


def redemption_cache_key(code: str) -> str:
    return code


def contains_cache_key(
    base: str,
    table: str,
    field: str,
    query: str,
    max_records: int,
) -> str:
    """Build the composite key for a substring query.

    Args:
        base: Resolved base id (the override, or the configured default)
        table: Resolved table id or name
        field: Canonical (alias-resolved) field name
        query: Raw query text; lower-cased here
        max_records: Clamped record limit

    Returns:
        The namespaced cache key
    """
    return "::".join(
        [
            CONTAINS_PREFIX,
            base,
            table,
            field,
            query.lower(),
            str(max_records),
        ]
    )
