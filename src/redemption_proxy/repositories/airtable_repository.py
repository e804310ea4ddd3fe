"""Airtable implementation of RecordStore.

Talks to the Airtable REST API over ``httpx``:

- GET   {api}/{base}/{table}?filterByFormula=...&maxRecords=N
- PATCH {api}/{base}/{table}/{record_id}  with {"fields": {...}}

Field names and base/table overrides are checked, and the query text is
escaped, before any network call (see ``redemption_proxy.formulas``).
"""

from typing import Any
from urllib.parse import quote

import httpx

from redemption_proxy.config import settings
from redemption_proxy.entities import CANONICAL_REDEEMED_STATUS, QueryResult, StoreRecord
from redemption_proxy.errors import NotFoundError, UpstreamError
from redemption_proxy.formulas import (
    clamp_max_records,
    contains_formula,
    exact_match_formula,
    validate_base_id,
    validate_field_name,
    validate_table,
)
from redemption_proxy.logging_config import get_logger

logger = get_logger(__name__)

REDEMPTION_CODE_FIELD = "Redemption Code"
REDEMPTION_STATUS_FIELD = "Redemption Status"


class AirtableRepository:
    """Airtable implementation of the RecordStore protocol.

    This class satisfies the RecordStore protocol through structural
    typing - no explicit inheritance needed. It holds no state besides
    the HTTP client.

    Example:
        ```python
        store = AirtableRepository.create()
        records = await store.find_by_code("ABC123")
        await store.close()
        ```
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_id: str | None = None,
        table: str | None = None,
        api_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Airtable repository.

        Args:
            api_key: Personal access token. Defaults to settings.
            base_id: Default base identifier. Defaults to settings.
            table: Default table identifier or name. Defaults to settings.
            api_url: REST API root. Defaults to settings.
            timeout: Request timeout in seconds. Defaults to settings.
            transport: Optional httpx transport (used by tests).
        """
        self._api_key = api_key if api_key is not None else settings.airtable_api_key
        self._base_id = base_id or settings.airtable_base_id
        self._table = table or settings.airtable_table
        self._api_url = (api_url or settings.airtable_api_url).rstrip("/")
        self._timeout = timeout or settings.airtable_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def create(
        cls,
        api_key: str | None = None,
        base_id: str | None = None,
        table: str | None = None,
    ) -> "AirtableRepository":
        """Factory method to create AirtableRepository with defaults.

        Args:
            api_key: Access token. If None, uses settings.
            base_id: Base id. If None, uses settings.
            table: Table id or name. If None, uses settings.

        Returns:
            Configured AirtableRepository
        """
        return cls(api_key=api_key, base_id=base_id, table=table)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            headers = {"Authorization": f"Bearer {self._api_key or ''}"}
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers=headers,
                transport=self._transport,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    def _table_url(self, base: str | None = None, table: str | None = None) -> str:
        base_id = base or self._base_id
        table_ref = quote(table or self._table, safe="")
        return f"{self._api_url}/{base_id}/{table_ref}"

    async def _request(self, method: str, url: str, operation: str, **kwargs: Any) -> dict[str, Any]:
        """Send one request and decode the JSON body.

        Any transport error, non-2xx status or undecodable body becomes an
        UpstreamError; there are no retries.
        """
        context = kwargs.pop("log_context", {})
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "airtable_request_failed",
                operation=operation,
                status_code=e.response.status_code,
                error=str(e),
                **context,
            )
            raise UpstreamError(details={"operation": operation}) from e
        except httpx.HTTPError as e:
            logger.error("airtable_transport_error", operation=operation, error=str(e), **context)
            raise UpstreamError(details={"operation": operation}) from e
        except ValueError as e:
            logger.error("airtable_invalid_response", operation=operation, error=str(e), **context)
            raise UpstreamError(details={"operation": operation}) from e

        if not isinstance(data, dict):
            logger.error("airtable_invalid_response", operation=operation, **context)
            raise UpstreamError(details={"operation": operation})
        return data

    async def _select(
        self,
        formula: str,
        max_records: int,
        operation: str,
        base: str | None = None,
        table: str | None = None,
        **log_context: Any,
    ) -> list[StoreRecord]:
        data = await self._request(
            "GET",
            self._table_url(base, table),
            operation,
            params={"filterByFormula": formula, "maxRecords": max_records},
            log_context=log_context,
        )
        try:
            return [StoreRecord.from_api(item) for item in data.get("records", [])]
        except (KeyError, TypeError, AttributeError) as e:
            logger.error("airtable_invalid_response", operation=operation, error=str(e), **log_context)
            raise UpstreamError(details={"operation": operation}) from e

    async def find_by_code(self, code: str) -> list[StoreRecord]:
        """Retrieve the record matching a redemption code.

        Args:
            code: Redemption code (exact, case-sensitive)

        Returns:
            A list with at most one record

        Raises:
            UpstreamError: If the Airtable call fails
        """
        return await self._select(
            exact_match_formula(REDEMPTION_CODE_FIELD, code),
            max_records=1,
            operation="find_by_code",
            redemption_code=code,
        )

    async def mark_redeemed(self, code: str) -> StoreRecord:
        """Set "Redemption Status" to "Already Redeemed" for a code.

        Args:
            code: Redemption code of the record to update

        Returns:
            The updated record as returned by Airtable

        Raises:
            NotFoundError: If no record exists for the code
            UpstreamError: If either Airtable call fails
        """
        records = await self.find_by_code(code)
        if not records:
            logger.warning("redemption_code_not_found", operation="mark_redeemed", redemption_code=code)
            raise NotFoundError(
                f"No record found for Redemption Code {code}",
                details={"redemption_code": code},
            )

        record_id = records[0].id
        data = await self._request(
            "PATCH",
            f"{self._table_url()}/{quote(record_id, safe='')}",
            "mark_redeemed",
            json={"fields": {REDEMPTION_STATUS_FIELD: CANONICAL_REDEEMED_STATUS}},
            log_context={"redemption_code": code, "record_id": record_id},
        )
        logger.info("redemption_status_updated", redemption_code=code, record_id=record_id)

        try:
            return StoreRecord.from_api(data)
        except (KeyError, TypeError, AttributeError):
            # Update succeeded; fall back to the fetched row with the new status.
            fields = {**records[0].fields, REDEMPTION_STATUS_FIELD: CANONICAL_REDEEMED_STATUS}
            return StoreRecord(id=record_id, created_time=records[0].created_time, fields=fields)

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
            field: Field name (already allow-listed by the caller)
            query: Literal text to look for
            max_records: Result limit, clamped to [1, 100], default 25
            table: Optional table override (id or conservative name)
            base: Optional base id override

        Returns:
            QueryResult with the matched records in remote order

        Raises:
            InvalidFieldError: If the field has characters outside [A-Za-z0-9 _-]
            InvalidIdentifierError: If an override fails its pattern
            UpstreamError: If the Airtable call fails
        """
        validate_field_name(field)
        if base:
            validate_base_id(base)
        if table:
            validate_table(table)

        records = await self._select(
            contains_formula(field, query),
            max_records=clamp_max_records(max_records),
            operation="find_by_substring",
            base=base or None,
            table=table or None,
            field=field,
        )
        return QueryResult(records=tuple(records))

    def health_check(self) -> bool:
        return bool(self._api_key)

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
