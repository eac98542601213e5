"""
Shared Numeric Helpers

Parsing and rounding helpers used by every calculation module.
Amounts arrive as string-encoded decimals from the store, so parsing
is lenient: anything that cannot be read as a number counts as absent.
"""

import logging
import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import List, Optional, Union

from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

Amount = Optional[Union[str, int, float, Decimal]]

CENTS = Decimal("0.01")
DOLLARS = Decimal("1")


def to_optional_amount(value: Amount) -> Optional[float]:
    """
    Parse a monetary value.

    Returns None for None, empty strings and anything unparseable.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
        return number if math.isfinite(number) else None

    text = str(value).strip().replace(",", "").replace("$", "")
    if not text:
        return None
    try:
        parsed = Decimal(text)
    except InvalidOperation:
        logger.debug("Ignoring unparseable amount %r", value)
        return None
    if not parsed.is_finite():
        return None
    # 1e400 parses as a Decimal but overflows float
    number = float(parsed)
    return number if math.isfinite(number) else None


def to_amount(value: Amount) -> float:
    """Parse a monetary value, treating missing or malformed input as zero."""
    parsed = to_optional_amount(value)
    return parsed if parsed is not None else 0.0


def round_currency(value: float) -> float:
    """Round half-up to cents."""
    return float(Decimal(repr(value)).quantize(CENTS, ROUND_HALF_UP))


def round_dollars(value: float) -> float:
    """Round half-up to whole dollars."""
    return float(Decimal(repr(value)).quantize(DOLLARS, ROUND_HALF_UP))


def safe_divide(numerator: float, denominator: float) -> Optional[float]:
    """Divide, returning None instead of raising when the denominator is zero."""
    if denominator == 0:
        return None
    return numerator / denominator


def parse_local_date(
    value: Optional[Union[str, date, datetime]], strict: bool = False
) -> Optional[date]:
    """
    Parse a calendar date without any timezone conversion.

    Only the YYYY-MM-DD part of a string is read, so a timestamp such as
    "2024-03-01T00:00:00Z" always lands in March regardless of server zone.

    Args:
        value: date, datetime, or ISO string
        strict: Raise ValueError instead of returning None on bad input

    Returns:
        The calendar date, or None if missing/unparseable and not strict
    """
    if value is None:
        if strict:
            raise ValueError("Date is required")
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()[:10]
    try:
        year, month, day = (int(part) for part in text.split("-"))
        return date(year, month, day)
    except ValueError:
        if strict:
            raise ValueError(f"Invalid date: {value!r}")
        logger.debug("Ignoring unparseable date %r", value)
        return None


def month_key(period_date: date) -> str:
    """Format a date as its YYYY-MM bucket."""
    return f"{period_date.year:04d}-{period_date.month:02d}"


def trailing_months(as_of: date, count: int) -> List[str]:
    """Generate YYYY-MM keys for the trailing `count` months ending at `as_of`."""
    first_of_month = as_of.replace(day=1)
    return [
        month_key(first_of_month - relativedelta(months=offset))
        for offset in range(count - 1, -1, -1)
    ]


def months_between(start: date, end: date) -> List[str]:
    """Generate YYYY-MM keys from the month of `start` through the month of `end`."""
    months = []
    current = start.replace(day=1)
    while current <= end:
        months.append(month_key(current))
        current = current + relativedelta(months=1)
    return months
