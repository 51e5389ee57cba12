"""Display formatting for rendered dashboard values.

Amounts are Canadian dollars. Formatting is presentation-only: the raw value
always travels alongside the formatted string in rendered output.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

EMPTY_CELL = "-"

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_currency(amount: float) -> str:
    """Format an amount as CAD with two decimals (e.g. `$1,234.50`, `-$20.00`)."""

    if not math.isfinite(amount):
        return str(amount)
    quantized = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if quantized < 0 else ""
    return f"{sign}${abs(quantized):,.2f}"


def format_number(value: float) -> str:
    """Format a number with thousands separators and at most three decimals."""

    if isinstance(value, int) or float(value).is_integer():
        return f"{int(value):,}"
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return text


def format_percent(value: float) -> str:
    """Format a percentage value that is already scaled to 0-100."""

    return f"{format_number(value)}%"


def format_value(value: float, value_format: str) -> str:
    """Format a numeric value using a catalog format name."""

    if value_format == "currency":
        return format_currency(value)
    if value_format == "percent":
        return format_percent(value)
    return format_number(value)


def format_compact_currency(value: float) -> str:
    """Format an axis tick in thousands (e.g. `$125k`)."""

    return f"${value / 1000:.0f}k"


def format_date(value: object) -> str | None:
    """Format an ISO date string or date object as `Jan 5, 2026`.

    Returns:
        The formatted date, or None when the value cannot be read as a date.
    """

    parsed: date | None
    if isinstance(value, datetime):
        parsed = value.date()
    elif isinstance(value, date):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value)).date()
        except ValueError:
            parsed = None
    if parsed is None:
        return None
    return f"{_MONTHS[parsed.month - 1]} {parsed.day}, {parsed.year}"


def format_cell(value: object, column_format: str) -> str:
    """Format a data-table cell according to its column format.

    Args:
        value: Raw cell value from the row record.
        column_format: One of text, currency, date, badge.

    Returns:
        Display string; missing values render as `-`.
    """

    if value is None:
        return EMPTY_CELL
    if column_format == "currency":
        try:
            return format_currency(float(value))  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return str(value)
    if column_format == "date":
        return format_date(value) or str(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
