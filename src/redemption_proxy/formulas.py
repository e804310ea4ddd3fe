"""Filter formula construction and input checks.

Formulas are the one place request input reaches the remote store's
interpreted query language. Every value interpolated into a formula is
either matched against a strict character class or escaped as a string
literal first.
"""

import re

from redemption_proxy.errors import InvalidFieldError, InvalidIdentifierError

DEFAULT_MAX_RECORDS = 25
MAX_RECORDS_LIMIT = 100

FIELD_NAME_PATTERN = re.compile(r"^[A-Za-z0-9 _-]+$")
BASE_ID_PATTERN = re.compile(r"^app[A-Za-z0-9]{14}$")
TABLE_ID_PATTERN = re.compile(r"^tbl[A-Za-z0-9]{14}$")
TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9 _-]{1,64}$")


def escape_formula_string(value: str) -> str:
    """Escape a value for use inside a double-quoted formula string."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def clamp_max_records(value: int | str | None) -> int:
    """Clamp a requested record limit to [1, MAX_RECORDS_LIMIT].

    Missing or non-numeric values fall back to DEFAULT_MAX_RECORDS.
    """
    if value is None or value == "":
        return DEFAULT_MAX_RECORDS
    try:
        number = int(value)
    except (TypeError, ValueError):
        return DEFAULT_MAX_RECORDS
    return max(1, min(MAX_RECORDS_LIMIT, number))


def validate_field_name(field: str) -> str:
    if not field or not FIELD_NAME_PATTERN.match(field):
        raise InvalidFieldError(field)
    return field


def validate_base_id(base: str) -> str:
    if not BASE_ID_PATTERN.match(base):
        raise InvalidIdentifierError("base", base)
    return base


def validate_table(table: str) -> str:
    # Either a store-assigned table id or a conservative table name.
    if not (TABLE_ID_PATTERN.match(table) or TABLE_NAME_PATTERN.match(table)):
        raise InvalidIdentifierError("table", table)
    return table


def exact_match_formula(field: str, value: str) -> str:
    validate_field_name(field)
    return f'{{{field}}} = "{escape_formula_string(value)}"'


def contains_formula(field: str, query: str) -> str:
    """Case-insensitive substring formula; ``& ""`` coerces blanks to text."""
    validate_field_name(field)
    needle = escape_formula_string(query.lower())
    return f'FIND("{needle}", LOWER({{{field}}} & ""))'
