"""
timestamps.py — Normalise record timestamps to a single instant type.

Score records arrive from the document store with ``created_at`` in one of
several shapes:
- a native ``datetime``
- a number (epoch milliseconds, as written by the web client)
- an ISO-8601 string
- a wrapped timestamp exposing ``to_datetime()``, or its JSON form
  ``{"seconds": ..., "nanos": ...}``

Everything is converted to a timezone-aware UTC ``datetime``. Missing or
unparseable values become ``EPOCH`` so they sort first.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

import numpy as np
import pandas as pd


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


# ── Helpers ─────────────────────────────────────────────────────────

def _from_mapping(val: Mapping) -> Optional[float]:
    """Epoch milliseconds from a ``{seconds, nanos}`` style mapping."""
    seconds = val.get("seconds", val.get("_seconds"))
    nanos = val.get("nanos", val.get("_nanoseconds", 0)) or 0
    try:
        return float(seconds) * 1000 + float(nanos) / 1_000_000
    except (TypeError, ValueError):
        return None


def _coerce(ts: Any) -> datetime:
    if ts is None or pd.isna(ts):
        return EPOCH
    return ts.to_pydatetime()


# ── Public API ──────────────────────────────────────────────────────

def to_instant(value: Any) -> datetime:
    """Convert any supported timestamp shape to an aware UTC datetime."""
    if value is None or isinstance(value, bool):
        return EPOCH

    to_dt = getattr(value, "to_datetime", None)
    if callable(to_dt) and not isinstance(value, (datetime, pd.Timestamp)):
        try:
            value = to_dt()
        except (TypeError, ValueError):
            return EPOCH

    if isinstance(value, Mapping):
        value = _from_mapping(value)
        if value is None:
            return EPOCH

    try:
        if isinstance(value, (int, float, np.integer, np.floating)):
            if np.isnan(value) or np.isinf(value):
                return EPOCH
            return _coerce(pd.to_datetime(value, unit="ms", utc=True, errors="coerce"))
        if isinstance(value, (str, datetime, pd.Timestamp)):
            return _coerce(pd.to_datetime(value, utc=True, errors="coerce"))
    except (TypeError, ValueError, OverflowError, pd.errors.OutOfBoundsDatetime):
        return EPOCH

    return EPOCH


def sort_chronologically(
    records: Iterable[Dict[str, Any]], field: str = "created_at"
) -> List[Dict[str, Any]]:
    """Return records ordered oldest first. Ties keep their input order."""
    return sorted(records, key=lambda r: to_instant(r.get(field)))
