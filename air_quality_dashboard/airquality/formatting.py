"""
Helpers for formatting dashboard values for display.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from .fields import coerce_number, parse_instant

PLACEHOLDER = "--"
API_PREFIX = "/api"


def format_number(value: Any, decimals: Optional[int] = None) -> str:
    """
    Formats a number with thousands separators.

    Without ``decimals`` integral values print without a fraction and other
    values with up to three fraction digits.
    """
    number = coerce_number(value)
    if number is None:
        return PLACEHOLDER
    if decimals is not None:
        return f"{number:,.{decimals}f}"
    if number.is_integer():
        return f"{int(number):,}"
    return f"{number:,.3f}".rstrip("0").rstrip(".")


def format_percent(value: Any, decimals: int = 1) -> str:
    number = coerce_number(value)
    if number is None:
        return PLACEHOLDER
    return f"{number:.{decimals}f}%"


def format_aqi(value: Any) -> str:
    # a zero reading means "no data" in the cities table
    number = coerce_number(value)
    if not number:
        return PLACEHOLDER
    return format_number(number)


def format_pollutant(value: Any) -> str:
    """PM concentration with one decimal; missing or zero readings show "--"."""
    number = coerce_number(value)
    if not number:
        return PLACEHOLDER
    return f"{number:.1f}"


def format_endpoint(endpoint: Optional[str]) -> str:
    """Strips the leading "/api" from an endpoint path."""
    if not endpoint:
        return ""
    if endpoint.startswith(API_PREFIX):
        return endpoint[len(API_PREFIX):]
    return endpoint


def format_response_time(value: Any) -> str:
    number = coerce_number(value)
    if number is None:
        return PLACEHOLDER
    return f"{format_number(number)}ms"


def format_timestamp(value: Any) -> str:
    """Formats an ISO timestamp in the local timezone; unparseable values pass through."""
    seconds = parse_instant(value)
    if seconds is None:
        return str(value) if value else PLACEHOLDER
    return datetime.fromtimestamp(seconds).strftime("%Y-%m-%d %H:%M:%S")


def format_last_updated(moment: Optional[datetime] = None) -> str:
    """
    Formats a moment as e.g. "October 19, 2026, 2:05 PM UTC".

    Args:
        moment: Time to format; defaults to now. Naive values are read as UTC.

    Returns:
        The display string
    """
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{moment:%B} {moment.day}, {moment.year}, {hour}:{moment:%M} {meridiem} UTC"
