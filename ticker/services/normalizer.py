"""
Inbound frame normalization.
Resolves the heterogeneous upstream message shapes into a single PriceUpdate.
"""

import json
import logging
import math
from typing import Any, Callable, List, Optional, Tuple, Union

from ticker.errors import MessageParseError
from ticker.schemas.feed import PriceUpdate, Timestamp

logger = logging.getLogger(__name__)

PRICE_KEYS = ("price", "Price")
TIMESTAMP_KEYS = ("dt", "DT", "date")

# Sentinel returned by a shape matcher that does not recognize the payload
NO_MATCH = object()

ShapeMatcher = Callable[[Any], Any]


def match_list(payload: Any) -> Any:
    """``[record, ...]`` -> first element."""
    if not isinstance(payload, list):
        return NO_MATCH
    return payload[0] if payload else None


def match_envelope(payload: Any) -> Any:
    """``{"data": [record, ...]}`` -> first element of ``data``."""
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        return NO_MATCH
    data = payload["data"]
    return data[0] if data else None


def match_object(payload: Any) -> Any:
    """Bare ``record`` object."""
    if not isinstance(payload, dict):
        return NO_MATCH
    return payload


SHAPE_MATCHERS: List[ShapeMatcher] = [match_list, match_envelope, match_object]


def resolve_candidate(payload: Any) -> Optional[dict]:
    """Run the shape matchers in order; the first match wins."""
    for matcher in SHAPE_MATCHERS:
        candidate = matcher(payload)
        if candidate is NO_MATCH:
            continue
        if candidate is not None and not isinstance(candidate, dict):
            raise MessageParseError("Resolved record is not an object", {"matcher": matcher.__name__})
        return candidate
    raise MessageParseError("Unrecognized payload shape", {"type": type(payload).__name__})


def first_present(record: dict, keys: Tuple[str, ...]) -> Any:
    """Value of the first key in ``keys`` that is present and non-null."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def coerce_price(value: Any) -> Optional[float]:
    """Coerce a raw price to float, or None when it cannot be used."""
    if value is None:
        return None
    try:
        price = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(price):
        return None
    return price


def coerce_timestamp(value: Any) -> Optional[Timestamp]:
    """Keep numeric or string timestamps verbatim; drop anything else."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, str)):
        return value
    return None


def extract_update(record: Optional[dict]) -> Optional[PriceUpdate]:
    """Build a PriceUpdate from a resolved record, or None if it carries nothing."""
    if not record:
        return None
    update = PriceUpdate(
        price=coerce_price(first_present(record, PRICE_KEYS)),
        timestamp=coerce_timestamp(first_present(record, TIMESTAMP_KEYS)),
    )
    return None if update.is_empty else update


def reject_constant(token: str) -> Any:
    """``NaN``/``Infinity``/``-Infinity`` are not JSON; refuse the frame."""
    raise MessageParseError("Non-standard JSON constant", {"token": token})


def normalize_message(raw: Union[str, bytes]) -> Optional[PriceUpdate]:
    """
    Normalize one inbound frame.

    Returns None for anything that should leave the feed state untouched:
    non-JSON text, unknown shapes, and records without a usable price or
    timestamp. Never raises.
    """
    try:
        payload = json.loads(raw, parse_constant=reject_constant)
        return extract_update(resolve_candidate(payload))
    except MessageParseError as e:
        logger.debug(f"[normalizer] Ignoring frame: {e.message} {e.details}")
        return None
    except Exception as e:
        logger.debug(f"[normalizer] Ignoring undecodable frame: {e}")
        return None
