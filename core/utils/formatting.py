"""Formatting utilities for values returned by the API."""

from typing import Optional
from datetime import datetime, timezone
from decimal import Decimal


def format_decimal(value: Optional[Decimal]) -> Optional[str]:
    """
    Render a decimal without exponent or trailing zeros.

    Args:
        value: Decimal to render

    Returns:
        Plain string such as "100.2", or None for None
    """
    if value is None:
        return None
    value = Decimal(value)
    if value == 0:
        return "0"
    return f"{value.normalize():f}"


def as_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_datetime(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return as_utc(dt).isoformat()


def format_day(dt: datetime) -> str:
    """UTC calendar day as YYYY-MM-DD."""
    return as_utc(dt).strftime("%Y-%m-%d")
