"""
Locale-aware display formatting for dashboard tiles and tables
"""
from datetime import datetime, timezone
from typing import Any, Optional

from babel.dates import format_date
from babel.numbers import format_currency, format_decimal

from bazarx.config import settings


def as_number(value: Any) -> float:
    """Coerce a payload value to a number; missing or junk becomes 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def number(value: Any, locale: Optional[str] = None) -> str:
    return format_decimal(as_number(value), locale=locale or settings.LOCALE)


def currency(value: Any, locale: Optional[str] = None, code: Optional[str] = None) -> str:
    return format_currency(
        as_number(value),
        code or settings.CURRENCY,
        locale=locale or settings.LOCALE,
    )


def percent(value: float, locale: Optional[str] = None) -> str:
    """One decimal place followed by a percent sign, e.g. ``12.5%``."""
    return format_decimal(round(value, 1), format="0.0", locale=locale or settings.LOCALE) + "%"


def rate(part: Any, total: Any) -> float:
    """part / total * 100 with 1 standing in for a zero total."""
    denominator = as_number(total) or 1
    return as_number(part) / denominator * 100


def short_date(value: Any, locale: Optional[str] = None) -> str:
    """Render an ISO timestamp or epoch milliseconds as a short date."""
    if value in (None, ""):
        return ""
    try:
        if isinstance(value, (int, float)):
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        else:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except (ValueError, OverflowError, OSError):
        return str(value)
    return format_date(parsed.date(), format="short", locale=locale or settings.LOCALE)
