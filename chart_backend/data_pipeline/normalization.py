"""Normalization utilities for chart series.

This module implements the display transforms applied to a series before it
is plotted: rebasing to an index of 100, percent change from the first
point, min/max scaling and the two 6-month band modes that place values on
a 100..900 scale.

The functions here are intentionally stateless so they can be reused by the
API layer and the band engine alike. None of them mutate their inputs and
none of them raise on degenerate data: zero divisors, empty series and short
windows fall back to fixed constants (0, 50, 100) instead.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..config import (
    BAND6M_MIN_POINTS,
    BAND6M_MONTHS,
    BAND_PADDING,
    DEFAULT_BAND_BOUNDS,
    DISPLAY_SCALE_MIN,
    DISPLAY_SCALE_SPAN,
)
from .parsing import empty_series, filter_by_range, to_timestamp

BAND_MODES = {"band6m_price", "band6m_pct"}


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp ``value`` into ``[lo, hi]``."""
    return max(lo, min(hi, value))


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """Linear-interpolation percentile of an ascending sequence.

    The position ``(p / 100) * (n - 1)`` is split into its floor and ceiling
    neighbours and the result is their weighted mean. ``p`` is clamped into
    ``[0, 100]``; an empty sequence gives 0.
    """
    values = np.asarray(sorted_values, dtype=float)
    n = len(values)
    if n == 0:
        return 0.0
    idx = (clamp(p, 0.0, 100.0) / 100.0) * (n - 1)
    lower = math.floor(idx)
    upper = math.ceil(idx)
    weight = idx - lower
    if upper >= n:
        return float(values[lower])
    return float(values[lower] * (1 - weight) + values[upper] * weight)


def compute_band_bounds(series: Optional[pd.DataFrame], anchor: Any = None) -> Dict[str, Any]:
    """Compute padded min/max bounds over the trailing 6 months.

    The window ends at ``anchor`` (or the last point) and starts six calendar
    months earlier. Month arithmetic clamps to the end of the target month,
    so an Aug 31 anchor starts the window on Feb 28 or 29 rather than
    rolling over into March. When the window holds at least ten points its
    min and max are used and the source is ``"6m"``; otherwise the whole
    series is used and the source is ``"full"``. Both bounds are then pushed
    outwards by half the range.

    Returns
    -------
    dict
        Keys ``L``, ``U`` (padded bounds), ``min6``, ``max6`` (unpadded),
        ``r`` (range) and ``source``. An empty series gives the fixed
        default ``L=0, U=100, r=100``.
    """
    if series is None or series.empty:
        return dict(DEFAULT_BAND_BOUNDS)

    end = to_timestamp(anchor)
    if end is None:
        end = series["t"].iloc[-1]
    window = filter_by_range(series, end - pd.DateOffset(months=BAND6M_MONTHS), end)

    if len(window) >= BAND6M_MIN_POINTS:
        values = window["v"]
        source = "6m"
    else:
        values = series["v"]
        source = "full"

    min6 = float(values.min())
    max6 = float(values.max())
    r = max6 - min6
    return {
        "L": min6 - BAND_PADDING * r,
        "U": max6 + BAND_PADDING * r,
        "min6": min6,
        "max6": max6,
        "r": r,
        "source": source,
    }


def _rescale(values: pd.Series, mode: str) -> pd.Series:
    first = float(values.iloc[0])
    if mode == "index100":
        if first == 0:
            return pd.Series(100.0, index=values.index)
        return values / first * 100
    if mode == "pct":
        if first == 0:
            return pd.Series(0.0, index=values.index)
        return (values / first - 1) * 100
    if mode == "minmax":
        lo = values.min()
        rng = values.max() - lo
        if rng == 0:
            return pd.Series(50.0, index=values.index)
        return (values - lo) / rng * 100
    # Unknown modes leave values as they are.
    return values.copy()


def normalize(
    series: Optional[pd.DataFrame],
    mode: str,
    full_series: Optional[pd.DataFrame] = None,
    anchor: Any = None,
) -> Tuple[pd.DataFrame, Optional[Dict[str, Any]]]:
    """Transform a visible series for display.

    Parameters
    ----------
    series:
        The visible (already range-filtered) series.
    mode:
        One of ``raw``, ``index100``, ``pct``, ``minmax``, ``band6m_price``
        or ``band6m_pct``.
    full_series:
        The unfiltered series, used by the band modes so the 6-month window
        can reach back past the visible range. Defaults to ``series``.
    anchor:
        End of the band window, normally the end of the visible range.

    Returns
    -------
    tuple
        ``(transformed, band_info)``. ``band_info`` is None except for the
        band modes, where it holds the bounds from
        :func:`compute_band_bounds` plus ``mode`` (and ``P0`` for
        ``band6m_pct``). Band-mode frames keep the untransformed value in a
        ``raw`` column.
    """
    if series is None or series.empty:
        return empty_series(), None
    if mode == "raw":
        return series.copy(), None

    times = series["t"].reset_index(drop=True)
    values = series["v"].reset_index(drop=True)

    if mode not in BAND_MODES:
        return pd.DataFrame({"t": times, "v": _rescale(values, mode)}), None

    band = compute_band_bounds(full_series if full_series is not None else series, anchor)
    if band["r"] > 0:
        z = ((values - band["L"]) / (band["U"] - band["L"])).clip(0.0, 1.0)
    else:
        z = pd.Series(0.5, index=values.index)
    price = DISPLAY_SCALE_MIN + DISPLAY_SCALE_SPAN * z

    if mode == "band6m_price":
        transformed = pd.DataFrame({"t": times, "v": price, "raw": values})
        return transformed, {**band, "mode": "price"}

    p0 = float(price.iloc[0])
    if p0 != 0:
        moves = (price / p0 - 1) * 100
    else:
        moves = pd.Series(0.0, index=price.index)
    transformed = pd.DataFrame({"t": times, "v": moves, "raw": values})
    return transformed, {**band, "mode": "pct", "P0": p0}
