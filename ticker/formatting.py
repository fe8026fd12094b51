import math
from datetime import datetime, timezone, tzinfo
from typing import Any, Optional

PLACEHOLDER = "—"
PRICE_PLACES = 5
TIMESTAMP_LAYOUT = "%b %d, %Y, %H:%M:%S"  # e.g. "Nov 14, 2023, 22:13:20"


def format_price(value: Any) -> str:
    """
    Return the price with exactly PRICE_PLACES decimals, or PLACEHOLDER
    when the value is absent or not a number.
    """
    if value is None or isinstance(value, bool):
        return PLACEHOLDER
    try:
        number = float(value)
    except (TypeError, ValueError):
        return PLACEHOLDER
    if math.isnan(number):
        return PLACEHOLDER
    return f"{number:.{PRICE_PLACES}f}"


def _parse_timestamp(value: Any) -> datetime:
    # Numbers are epoch milliseconds
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    text = str(value).strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if len(text) == 10:
        # Date-only strings are midnight UTC
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: Any, tz: Optional[tzinfo] = None) -> str:
    """
    Render an upstream timestamp in the viewer's time zone.

    Accepts epoch milliseconds or an ISO-8601 string. Naive date-times are
    taken as local time. Returns PLACEHOLDER for anything that does not give
    a valid calendar date.
    """
    if value is None or isinstance(value, bool):
        return PLACEHOLDER
    try:
        parsed = _parse_timestamp(value)
        return parsed.astimezone(tz).strftime(TIMESTAMP_LAYOUT)
    except (TypeError, ValueError, OverflowError, OSError):
        return PLACEHOLDER
