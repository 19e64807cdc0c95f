"""Type inference for CSV field values."""

import re
from datetime import datetime
from decimal import Decimal
from enum import IntEnum
from typing import Optional

INT_MIN = -2147483648
INT_MAX = 2147483647

SHORT_TEXT_LENGTH = 255

NUMERIC_PATTERN = re.compile(r"^[-+]?\d+(\.\d+)?$")
DATE_PREFIX_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}")

# (shape, strptime format) pairs; the regex pins field widths that
# strptime alone would accept loosely
DATETIME_FORMATS = [
    (re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$"), "%Y-%m-%d %H:%M:%S"),
    (re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3}$"), "%Y-%m-%d %H:%M:%S.%f"),
    (re.compile(r"^\d{2}-\d{2}-\d{4} \d{2}:\d{2}:\d{2}\.\d{3}$"), "%d-%m-%Y %H:%M:%S.%f"),
    (
        re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}(Z|[+-]\d{2}:?\d{2})$"),
        "%Y-%m-%d %H:%M:%S%z",
    ),
    (re.compile(r"^\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}\.\d{3}$"), "%Y/%m/%d %H:%M:%S.%f"),
    (re.compile(r"^\d{1,2}/\d{1,2}/\d{2} \d{1,2}:\d{2}$"), "%m/%d/%y %H:%M"),
]

# Short US form (M/D/YY H:mm) that gets rewritten on output
US_SHORT_DATETIME = DATETIME_FORMATS[-1]
CANONICAL_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColumnType(IntEnum):
    """
    Inferred column types, ordered from least to most specific.

    Reconciling two observations keeps the larger member, so a column only
    ever moves up this order.
    """

    NULL = 0
    INT = 1
    DECIMAL = 2
    DATE = 3
    DATETIME = 4
    SHORT_TEXT = 5
    LONG_TEXT = 6

    @property
    def sql_type(self) -> str:
        """SQL type used in CREATE TABLE."""
        return SQL_TYPES[self]

    @property
    def quoted(self) -> bool:
        """Whether values of this type are rendered as string literals."""
        return self in QUOTED_TYPES


SQL_TYPES = {
    ColumnType.NULL: "TEXT",
    ColumnType.INT: "INT",
    ColumnType.DECIMAL: "DECIMAL(20,6)",
    ColumnType.DATE: "DATE",
    ColumnType.DATETIME: "DATETIME",
    ColumnType.SHORT_TEXT: f"VARCHAR({SHORT_TEXT_LENGTH})",
    ColumnType.LONG_TEXT: "TEXT",
}

QUOTED_TYPES = frozenset(
    {ColumnType.DATE, ColumnType.DATETIME, ColumnType.SHORT_TEXT, ColumnType.LONG_TEXT}
)


def _parse_strict(value: str, shape: "re.Pattern[str]", fmt: str) -> Optional[datetime]:
    if not shape.match(value):
        return None
    try:
        return datetime.strptime(value, fmt)
    except ValueError:
        return None


def is_datetime(value: str) -> bool:
    """Check if value matches one of the accepted datetime formats."""
    return any(_parse_strict(value, shape, fmt) is not None for shape, fmt in DATETIME_FORMATS)


def normalize_datetime(value: str) -> str:
    """
    Rewrite an M/D/YY H:mm value as YYYY-MM-DD HH:mm:ss.

    Args:
        value: Raw field value

    Returns:
        Reformatted value, or the input unchanged if it is not in that form
    """
    shape, fmt = US_SHORT_DATETIME
    parsed = _parse_strict(value, shape, fmt)
    if parsed is None:
        return value
    return parsed.strftime(CANONICAL_DATETIME_FORMAT)


def _infer_numeric(value: str) -> ColumnType:
    # "0.0" is kept as a decimal sentinel rather than integer zero
    if value == "0.0":
        return ColumnType.DECIMAL

    number = Decimal(value)
    if number != number.to_integral_value():
        return ColumnType.DECIMAL

    integral = int(number)
    if integral < INT_MIN or integral > INT_MAX:
        return ColumnType.SHORT_TEXT
    return ColumnType.INT


def infer_type(value: Optional[str]) -> ColumnType:
    """
    Classify a single raw field value.

    Checks run in a fixed order and the first match wins: numeric,
    datetime, date, then text.

    Args:
        value: Raw field value (None for a missing field)

    Returns:
        ColumnType for the value
    """
    if not value:
        return ColumnType.NULL

    if NUMERIC_PATTERN.match(value):
        return _infer_numeric(value)

    if is_datetime(value):
        return ColumnType.DATETIME

    if DATE_PREFIX_PATTERN.match(value):
        return ColumnType.DATE

    return ColumnType.LONG_TEXT


def reconcile(current: ColumnType, observed: ColumnType) -> ColumnType:
    """Return the more specific of the current and observed types."""
    return max(current, observed)
