# helper_functions.py
import logging
import math
import re
from datetime import datetime, timezone

from shared.contracts import (
    OPEN_KEY, HIGH_KEY, LOW_KEY, CLOSE_KEY, VOLUME_KEY, SERIES_LABELS,
)

# Use logger
logger = logging.getLogger(__name__)

# Numeric text in the forms a JavaScript Number() accepts.
_DECIMAL_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_INFINITY_RE = re.compile(r"([+-]?)Infinity")
_RADIX_RE = re.compile(r"0([xXoObB])([0-9a-fA-F]+)")
_RADIX_BASES = {"x": 16, "o": 8, "b": 2}


def _text_to_number(text: str) -> float:
    if _DECIMAL_RE.fullmatch(text):
        return float(text)
    infinity = _INFINITY_RE.fullmatch(text)
    if infinity:
        return -math.inf if infinity.group(1) == "-" else math.inf
    radix = _RADIX_RE.fullmatch(text)
    if radix:
        try:
            return float(int(radix.group(2), _RADIX_BASES[radix.group(1).lower()]))
        except ValueError:
            return math.nan
    return math.nan


def to_number(value) -> float:
    """
    Coerces a provider field to a float without ever raising.

    Explicit nulls and blank strings become 0.0, booleans become 1.0/0.0 and
    anything that does not parse as a number becomes NaN. Spellings such as
    "1_000", "inf" or "nan" are not numbers here; only "Infinity" is.
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        return _text_to_number(text)
    return math.nan


def _field(fields: dict, key: str) -> float:
    # A key the provider left out is NaN; a key present with null is 0.0.
    if key not in fields:
        return math.nan
    return to_number(fields[key])


def _timestamp_sort_key(timestamp: str):
    # Parseable timestamps first (by value), unparseable ones after.
    try:
        parsed = datetime.fromisoformat(timestamp)
    except (TypeError, ValueError):
        return (1, datetime.min)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return (0, parsed)


def parse_time_series(series: dict | None) -> list:
    """
    Reshapes a date-keyed Alpha Vantage series into a list of OHLCV records
    sorted ascending by timestamp.

    Args:
        series (dict): e.g. {"2024-01-02": {"1. open": "10", "2. high": "12", ...}}

    Returns:
        list: [{"timestamp", "open", "high", "low", "close", "volume"}, ...].
        Equal timestamps keep the order they were encountered in.
    """
    if not series:
        return []

    records = []
    for timestamp, fields in list(series.items()):
        fields = fields if isinstance(fields, dict) else {}
        records.append({
            "timestamp": timestamp,
            "open": _field(fields, OPEN_KEY),
            "high": _field(fields, HIGH_KEY),
            "low": _field(fields, LOW_KEY),
            "close": _field(fields, CLOSE_KEY),
            "volume": _field(fields, VOLUME_KEY),
        })

    # sorted() is stable, which gives the tie-break for equal timestamps
    return sorted(records, key=lambda record: _timestamp_sort_key(record["timestamp"]))


def select_time_series(body: dict, series_type: str) -> dict | None:
    """
    Picks the series object out of a full upstream payload.
    "daily" selects the daily series; any other type selects the 1-minute series.
    """
    label = SERIES_LABELS["daily"] if series_type.lower() == "daily" else SERIES_LABELS["1min"]
    series = body.get(label)
    if series is None:
        # Throttled or otherwise empty responses carry a Note/Information message instead.
        notice = body.get("Note") or body.get("Information")
        logger.warning(f"Upstream payload has no '{label}' object. Notice: {notice}")
        return None
    return series


def sanitize_for_json(obj):
    """Replaces non-finite floats with None so the payload is valid JSON."""
    if isinstance(obj, float) and not math.isfinite(obj):
        return None
    if isinstance(obj, dict):
        return {key: sanitize_for_json(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [sanitize_for_json(item) for item in obj]
    return obj
