"""Remote record store protocol.

Defines the interface to the external tabular store holding redemption
records. The implementation is a stateless transport; all caching happens
in the service layer.
"""

from typing import Protocol, runtime_checkable

from redemption_proxy.entities import QueryResult, StoreRecord


@runtime_checkable
class RecordStore(Protocol):
    """Protocol for the remote record store."""

    async def find_by_code(self, code: str) -> list[StoreRecord]:
        """Find the record for a redemption code.

        Args:
            code: Redemption code (exact, case-sensitive)

        Returns:
            A list with at most one record; empty when nothing matches

        Raises:
            UpstreamError: On transport or auth failure
        """
        ...

    async def mark_redeemed(self, code: str) -> StoreRecord:
        """Set the status of a code's record to the redeemed value.

        Returns:
            The updated record

        Raises:
            NotFoundError: If no record exists for the code
            UpstreamError: On transport or auth failure
        """
        ...

    async def find_by_substring(
        self,
        field: str,
        query: str,
        max_records: int | str | None = None,
        table: str | None = None,
        base: str | None = None,
    ) -> QueryResult:
        """Case-insensitive substring search on one field.

        Args:
            field: Field name, already allow-listed by the caller
            query: Literal text to search for
            max_records: Result limit, clamped to [1, 100]
            table: Optional table override
            base: Optional base override

        Raises:
            InvalidFieldError: If the field name has disallowed characters
            InvalidIdentifierError: If an override fails validation
            UpstreamError: On transport or auth failure
        """
        ...

    def health_check(self) -> bool:
        """Check if the store is configured for use."""
        ...
