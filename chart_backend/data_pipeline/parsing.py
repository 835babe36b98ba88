"""Parsing and range selection for raw chart series.

Raw series arrive as loosely typed records, e.g. ``{"value": "1.25",
"timestamp": "2024-01-05T00:00:00Z"}``. :func:`parse_series` turns them into
a two-column DataFrame (``t``, ``v``) sorted by time, which is the shape
every other transform in the package consumes. Timestamps are normalised to
UTC so that windows computed from mixed offsets stay comparable.

Malformed records are never fatal: they are dropped and counted in a debug
log line.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from typing import Any, Optional, Tuple

import numpy as np
import pandas as pd

from ..config import RANGE_PRESETS

logger = logging.getLogger(__name__)

# Leading number of a string, read the way a lenient float parser reads it.
_LEADING_FLOAT = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")

# Words pandas resolves against the wall clock.
_RELATIVE_DATES = {"now", "today", "yesterday", "tomorrow"}


def empty_series() -> pd.DataFrame:
    """Return an empty series with the canonical column dtypes."""
    return pd.DataFrame({
        "t": pd.Series(dtype="datetime64[ns, UTC]"),
        "v": pd.Series(dtype=float),
    })


def to_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """Parse ``value`` into a UTC ``pandas.Timestamp``.

    Naive values are read as UTC, aware values are converted to it. Returns
    None when the value is missing or cannot be parsed. Relative words such
    as ``"now"`` or ``"today"`` are rejected so parsing never depends on the
    clock.
    """
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in _RELATIVE_DATES:
        return None
    try:
        ts = pd.Timestamp(value)
        if pd.isna(ts):
            return None
        ts = ts.as_unit("ns")
    except (TypeError, ValueError, OverflowError):
        return None
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def _to_float(value: Any) -> float:
    # Strings keep their leading number: "12abc" -> 12.0, "1.5%" -> 1.5.
    if isinstance(value, str):
        match = _LEADING_FLOAT.match(value)
        if match is None:
            return np.nan
        value = match.group(0)
    try:
        result = float(value)
    except (TypeError, ValueError):
        return np.nan
    return result if math.isfinite(result) else np.nan


def parse_series(raw: Any) -> pd.DataFrame:
    """Convert raw records into a time-sorted series.

    Each record contributes its ``timestamp`` field (or ``date`` when the
    timestamp is missing or empty) and its ``value`` field. String values
    are read up to the end of their leading number. Records whose value is
    not a finite number or whose date does not parse are dropped.

    Parameters
    ----------
    raw:
        A list of mappings. Anything else (including None) yields an empty
        series.

    Returns
    -------
    pandas.DataFrame
        Columns ``t`` (UTC timestamps) and ``v`` (floats), sorted ascending
        by ``t`` with a fresh integer index.
    """
    if not isinstance(raw, (list, tuple)):
        return empty_series()

    times = []
    values = []
    for record in raw:
        if not isinstance(record, Mapping):
            times.append(None)
            values.append(np.nan)
            continue
        times.append(to_timestamp(record.get("timestamp") or record.get("date")))
        values.append(_to_float(record.get("value")))

    df = pd.DataFrame({
        "t": pd.Series(times, dtype="datetime64[ns, UTC]"),
        "v": pd.Series(values, dtype=float),
    })
    valid = df["t"].notna() & df["v"].notna()
    dropped = int((~valid).sum())
    if dropped:
        logger.debug("Dropped %d of %d raw records with unparsable value or date", dropped, len(df))
    return df.loc[valid].sort_values("t").reset_index(drop=True)


def filter_by_range(series: Optional[pd.DataFrame], start: Any = None, end: Any = None) -> pd.DataFrame:
    """Keep points with ``start <= t <= end``.

    Either bound may be None for an open side. Bounds that fail to parse are
    treated as absent.
    """
    if series is None or series.empty:
        return empty_series()
    mask = pd.Series(True, index=series.index)
    start_ts = to_timestamp(start)
    end_ts = to_timestamp(end)
    if start_ts is not None:
        mask &= series["t"] >= start_ts
    if end_ts is not None:
        mask &= series["t"] <= end_ts
    return series.loc[mask].reset_index(drop=True)


def get_preset_range(
    preset: Optional[str], series: Optional[pd.DataFrame]
) -> Tuple[Optional[pd.Timestamp], Optional[pd.Timestamp]]:
    """Resolve a range preset label into ``(start, end)`` bounds.

    ``end`` is the last point's time and ``start`` lies the preset's day
    count before it. ``MAX``, unknown labels and empty series give
    ``(None, None)``.
    """
    if preset == "MAX" or series is None or series.empty:
        return None, None
    days = RANGE_PRESETS.get(preset)
    if not days:
        return None, None
    end = series["t"].iloc[-1]
    return end - pd.Timedelta(days=days), end
