"""
Pydantic schemas for the chart series backend.

"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field


class RawPointIn(BaseModel):
    """A single raw record as delivered by the data source.

    Both fields are loosely typed because upstream feeds mix numbers and
    strings. Records that do not parse are dropped by the pipeline rather
    than rejected here.
    """

    value: Optional[Union[float, str]] = Field(None, description="Numeric value or numeric string")
    timestamp: Optional[str] = Field(None, description="ISO timestamp, preferred over date")
    date: Optional[str] = Field(None, description="Date used when timestamp is absent")


class NormalizeRequest(BaseModel):
    """Request body for normalizing a series for display.

    The visible range is taken from ``preset`` when given, otherwise from the
    explicit ``start``/``end`` bounds. Band modes always look at the full
    series.
    """

    records: List[RawPointIn]
    mode: str = Field(
        "raw",
        description="Normalization mode",
        pattern="^(raw|index100|pct|minmax|band6m_price|band6m_pct)$",
    )
    preset: Optional[str] = Field(None, pattern="^(7D|30D|90D|6M|1Y|MAX)$")
    start: Optional[str] = None
    end: Optional[str] = None


class PointOut(BaseModel):
    """A transformed point. ``raw`` is set only by the band modes."""

    t: datetime
    v: float
    raw: Optional[float] = None


class BandInfoOut(BaseModel):
    """Padded 6-month bounds used by the band display modes."""

    L: float
    U: float
    min6: float
    max6: float
    r: float
    source: str
    mode: str
    P0: Optional[float] = None


class NormalizeOut(BaseModel):
    mode: str
    points: List[PointOut]
    band_info: Optional[BandInfoOut]


class YesBandRequest(BaseModel):
    """Request body for computing a percentile band and the latest YES%."""

    records: List[RawPointIn]
    window: str = Field("6M", pattern="^(6M|1Y|2Y|MAX)$")
    anchor: Optional[str] = Field(None, description="End of the band window; defaults to the last point")


class YesBandOut(BaseModel):
    """Percentile band over a (possibly degraded) trailing window.

    ``actual_window`` differs from ``requested_window`` when the requested
    window held too few points; ``all`` means the entire series was used.
    """

    requested_window: str
    actual_window: str
    lower_percentile_value: float
    upper_percentile_value: float
    lower_bound: float
    upper_bound: float
    window_start: datetime
    window_end: datetime
    window_point_count: int


class YesPercentOut(BaseModel):
    band: Optional[YesBandOut]
    latest_value: float
    yes_percent: float


class PresetsOut(BaseModel):
    presets: Dict[str, Optional[int]]
