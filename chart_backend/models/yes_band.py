"""Percentile band engine for the YES% display.

The :class:`YesBandEngine` derives a padded 5th–95th percentile envelope over
a trailing window of a series and maps raw values into that envelope as a
probability-style percentage clamped to ``[2, 98]``. When the requested
window holds too few points it degrades to a shorter window (or to the whole
series) following an ordered rule table, so the policy can be read and
tested on its own.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from ..config import (
    BAND_PADDING,
    YES_CLAMP,
    YES_DEFAULT_MIN_POINTS,
    YES_FALLBACK_PERCENT,
    YES_LOWER_PERCENTILE,
    YES_MIN_BAND_POINTS,
    YES_UPPER_PERCENTILE,
    YES_WINDOW_MIN_POINTS,
)
from ..data_pipeline.normalization import clamp, percentile
from ..data_pipeline.parsing import filter_by_range, to_timestamp

logger = logging.getLogger(__name__)


class YesBandEngine:
    """Compute percentile bands and YES% values.

    Parameters
    ----------
    lower_percentile, upper_percentile:
        Percentiles defining the raw envelope. Default 5 and 95.
    padding:
        Fraction of the envelope's range added on each side. Default 0.5.
    min_points:
        Minimum points per window kind before degradation kicks in. Kinds
        missing from the mapping use ``default_min_points``.
    degradation_rules:
        Ordered ``(requested_kind, min_series_points, fallback_kind)``
        triples. The first rule matching the requested kind whose point
        threshold the whole series meets picks the fallback; when none
        matches the entire series is used and labelled ``"all"``.
    """

    WINDOW_OFFSETS = {
        "6M": pd.DateOffset(months=6),
        "1Y": pd.DateOffset(years=1),
        "2Y": pd.DateOffset(years=2),
    }
    DEFAULT_RULES: List[Tuple[str, int, str]] = [
        ("2Y", YES_WINDOW_MIN_POINTS["1Y"], "1Y"),
        ("2Y", YES_WINDOW_MIN_POINTS["6M"], "6M"),
        ("1Y", YES_WINDOW_MIN_POINTS["6M"], "6M"),
    ]

    def __init__(
        self,
        lower_percentile: float = YES_LOWER_PERCENTILE,
        upper_percentile: float = YES_UPPER_PERCENTILE,
        padding: float = BAND_PADDING,
        min_points: Dict[str, int] | None = None,
        default_min_points: int = YES_DEFAULT_MIN_POINTS,
        min_band_points: int = YES_MIN_BAND_POINTS,
        degradation_rules: List[Tuple[str, int, str]] | None = None,
    ) -> None:
        self.lower_percentile = lower_percentile
        self.upper_percentile = upper_percentile
        self.padding = padding
        self.min_points = min_points or dict(YES_WINDOW_MIN_POINTS)
        self.default_min_points = default_min_points
        self.min_band_points = min_band_points
        self.degradation_rules = degradation_rules or list(self.DEFAULT_RULES)

    def window_start(self, series: pd.DataFrame, kind: str, end: pd.Timestamp) -> pd.Timestamp:
        """Start of a ``kind`` window ending at ``end``.

        ``MAX`` and ``all`` start at the first point; unrecognised kinds are
        treated as six months. Calendar offsets clamp to the end of the
        target month (Aug 31 minus six months is Feb 28 or 29), they do not
        roll over into the following month.
        """
        if kind in ("MAX", "all"):
            return series["t"].iloc[0]
        return end - self.WINDOW_OFFSETS.get(kind, self.WINDOW_OFFSETS["6M"])

    def resolve_window(self, requested: str, window_points: int, series_points: int) -> str:
        """Pick the window kind actually used for a requested kind."""
        if window_points >= self.min_points.get(requested, self.default_min_points):
            return requested
        for kind, min_series_points, fallback in self.degradation_rules:
            if kind == requested and series_points >= min_series_points:
                return fallback
        return "all"

    def compute_band(
        self, series: Optional[pd.DataFrame], window: str = "6M", anchor: Any = None
    ) -> Optional[Dict[str, Any]]:
        """Compute the padded percentile band over a trailing window.

        Parameters
        ----------
        series:
            Time-sorted series with ``t`` and ``v`` columns.
        window:
            Requested window kind: ``6M``, ``1Y``, ``2Y`` or ``MAX``.
        anchor:
            End of the window. Defaults to the last point's time.

        Returns
        -------
        dict or None
            None when the series is empty or the final window has fewer than
            ``min_band_points`` points. Otherwise a dict with the requested
            and actual window labels, the raw percentile values, the padded
            bounds, the window's date range and its point count.
        """
        if series is None or series.empty:
            return None

        end = to_timestamp(anchor)
        if end is None:
            end = series["t"].iloc[-1]
        start = self.window_start(series, window, end)
        candidate = filter_by_range(series, start, end)

        actual = self.resolve_window(window, len(candidate), len(series))
        if actual != window:
            logger.debug(
                "Window %s has %d points, degrading to %s", window, len(candidate), actual
            )
            start = self.window_start(series, actual, end)
            candidate = filter_by_range(series, start, end)

        if len(candidate) < self.min_band_points:
            logger.debug("Only %d points in %s window, no band", len(candidate), actual)
            return None

        values = candidate["v"].sort_values().to_numpy()
        low = percentile(values, self.lower_percentile)
        high = percentile(values, self.upper_percentile)
        r = high - low
        return {
            "requested_window": window,
            "actual_window": actual,
            "lower_percentile_value": low,
            "upper_percentile_value": high,
            "lower_bound": low - self.padding * r,
            "upper_bound": high + self.padding * r,
            "window_start": start,
            "window_end": end,
            "window_point_count": len(candidate),
        }

    def to_yes_percent(self, value: float, band: Optional[Mapping]) -> float:
        """Map a raw value into ``[2, 98]`` through the band's bounds.

        A missing band, a degenerate band (equal bounds) or a NaN value gives
        50, the point of maximum uncertainty.
        """
        if band is None:
            return YES_FALLBACK_PERCENT
        lower = band["lower_bound"]
        upper = band["upper_bound"]
        if upper == lower or value is None or math.isnan(value):
            return YES_FALLBACK_PERCENT
        s = clamp((value - lower) / (upper - lower), 0.0, 1.0)
        return 100 * clamp(s, *YES_CLAMP)


_default_engine = YesBandEngine()


def compute_yes_band(series: Optional[pd.DataFrame], window: str = "6M", anchor: Any = None) -> Optional[Dict[str, Any]]:
    """Compute a percentile band with the default engine settings."""
    return _default_engine.compute_band(series, window, anchor)


def value_to_yes_percent(value: float, band: Optional[Mapping]) -> float:
    """Map ``value`` to YES% with the default engine settings."""
    return _default_engine.to_yes_percent(value, band)
