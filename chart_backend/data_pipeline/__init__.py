"""Data pipeline utilities for the chart series backend.

This package contains the parsing, range selection and normalization
functions that every chart view runs through. By isolating them from the
band engine in ``models`` and from the API layer, each transform can be
tested on plain DataFrames.
"""

from .normalization import clamp, compute_band_bounds, normalize, percentile  # noqa: F401
from .parsing import empty_series, filter_by_range, get_preset_range, parse_series, to_timestamp  # noqa: F401
