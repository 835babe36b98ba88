"""Band models for the chart series backend."""

from .yes_band import YesBandEngine, compute_yes_band, value_to_yes_percent  # noqa: F401
