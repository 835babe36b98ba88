"""
Configuration constants for the chart series backend.

Every threshold used by the transforms lives here so the numeric policy
(window sizes, padding, display scale) can be read in one place. Only the
log level is taken from the environment.
"""

import os


LOG_LEVEL = os.getenv("CHART_BACKEND_LOG_LEVEL", "INFO")

# Range presets shown above the chart, in days. ``None`` means unbounded.
RANGE_PRESETS = {
    "7D": 7,
    "30D": 30,
    "90D": 90,
    "6M": 180,
    "1Y": 365,
    "MAX": None,
}

# Band padding as a fraction of the envelope's own range, applied on each side.
BAND_PADDING = 0.5

# Fixed 6-month band used by the band6m display modes.
BAND6M_MONTHS = 6
BAND6M_MIN_POINTS = 10
DEFAULT_BAND_BOUNDS = {"L": 0, "U": 100, "min6": 0, "max6": 100, "r": 100, "source": "full"}

# band6m values are drawn on a 100..900 scale.
DISPLAY_SCALE_MIN = 100.0
DISPLAY_SCALE_SPAN = 800.0

# Percentile band (YES%).
YES_WINDOW_MIN_POINTS = {"6M": 30, "1Y": 60, "2Y": 100, "MAX": 10}
YES_DEFAULT_MIN_POINTS = 10
YES_MIN_BAND_POINTS = 5
YES_LOWER_PERCENTILE = 5.0
YES_UPPER_PERCENTILE = 95.0
YES_CLAMP = (0.02, 0.98)
YES_FALLBACK_PERCENT = 50.0
