"""
Utility functions for Revenue Pulse.
Timestamp parsing, zero-safe maths, lookup builders and atomic file writes.

Usage:
    from scripts.lib.utils import parse_ts, safe_div, build_map, atomic_write_json
"""
import json
import os
import re
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, TypeVar

from scripts.lib.logger import setup_logger

logger = setup_logger(__name__)

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_ts(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp into a naive UTC datetime.

    Accepts ISO-8601 strings (with or without trailing Z / offset),
    ``YYYY-MM-DD`` dates, ``YYYY-MM`` month keys (first instant of the
    month), and ``date`` / ``datetime`` objects. Blank values return None.

    Raises:
        ValueError: if a non-blank string isn't a recognisable timestamp.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if not text:
            return None
        m = _MONTH_RE.match(text)
        if m:
            return datetime(int(m.group(1)), int(m.group(2)), 1)
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from ``start`` to ``end``, truncated toward zero."""
    return int((end - start).total_seconds() / 86400)


def safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Zero-safe division."""
    if not denominator:
        return default
    return numerator / denominator


def round_half_up(value: float, precision: int = 0) -> float:
    """
    Round ties toward positive infinity, as JavaScript's ``Math.round`` does.

    ``round_half_up(2.5) == 3`` and ``round_half_up(-2.5) == -2``. The
    builtin ``round()`` uses banker's rounding instead.
    """
    quantum = Decimal(1).scaleb(-precision)
    mode = ROUND_HALF_UP if value >= 0 else ROUND_HALF_DOWN
    rounded = Decimal(str(value)).quantize(quantum, rounding=mode)
    if precision == 0:
        return int(rounded)
    return float(rounded)


def build_map(items: Iterable[T], key_fn: Callable[[T], K]) -> Dict[K, T]:
    """Build an id -> item lookup. Later items win on duplicate keys."""
    return {key_fn(item): item for item in items}


def group_by(items: Iterable[T], key_fn: Callable[[T], Optional[K]]) -> Dict[K, List[T]]:
    """Group items into insertion-ordered buckets. Items keyed None are skipped."""
    groups: Dict[K, List[T]] = {}
    for item in items:
        key = key_fn(item)
        if key is None:
            continue
        groups.setdefault(key, []).append(item)
    return groups


def atomic_write_json(data: Dict, file_path: str | Path, indent: int = 2) -> bool:
    """
    Write JSON data to file atomically using temp file + rename.
    Prevents data corruption if the program crashes during write.

    Args:
        data: Dictionary to serialize as JSON.
        file_path: Target file path.
        indent: JSON indentation level.

    Returns:
        True if successful, False otherwise.
    """
    file_path = Path(file_path)
    temp_path = file_path.with_suffix(file_path.suffix + ".tmp")

    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=indent, default=str)

        os.replace(temp_path, file_path)
        logger.debug("Atomically wrote JSON to %s", file_path)
        return True

    except OSError as e:
        logger.error("Failed to write JSON to %s: %s", file_path, e)
        if temp_path.exists():
            temp_path.unlink(missing_ok=True)
        return False
