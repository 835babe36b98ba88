"""Unit tests for the YesBandEngine.

These tests cover the window degradation table on its own, the band
produced over real series and the clamped YES% mapping.
"""

import unittest

import numpy as np
import pandas as pd

from chart_backend.models.yes_band import YesBandEngine, compute_yes_band, value_to_yes_percent


def make_series(values, times) -> pd.DataFrame:
    return pd.DataFrame({"t": times, "v": np.asarray(values, dtype=float)})


def daily(n: int, start: str = "2024-01-01") -> pd.DataFrame:
    return make_series(range(n), pd.date_range(start, periods=n, freq="D", tz="UTC"))


class TestWindowResolution(unittest.TestCase):
    """The degradation table picks fallbacks by overall series size."""

    def setUp(self) -> None:
        self.engine = YesBandEngine()

    def test_populated_window_is_kept(self) -> None:
        self.assertEqual(self.engine.resolve_window("2Y", 150, 150), "2Y")
        self.assertEqual(self.engine.resolve_window("6M", 30, 30), "6M")
        self.assertEqual(self.engine.resolve_window("MAX", 10, 10), "MAX")

    def test_two_year_degradation(self) -> None:
        self.assertEqual(self.engine.resolve_window("2Y", 50, 80), "1Y")
        self.assertEqual(self.engine.resolve_window("2Y", 40, 40), "6M")
        self.assertEqual(self.engine.resolve_window("2Y", 10, 10), "all")

    def test_one_year_degradation(self) -> None:
        self.assertEqual(self.engine.resolve_window("1Y", 10, 65), "6M")
        self.assertEqual(self.engine.resolve_window("1Y", 10, 29), "all")

    def test_six_month_and_max_go_to_all(self) -> None:
        self.assertEqual(self.engine.resolve_window("6M", 10, 500), "all")
        self.assertEqual(self.engine.resolve_window("MAX", 9, 9), "all")

    def test_unknown_kind_uses_default_minimum(self) -> None:
        self.assertEqual(self.engine.resolve_window("3M", 10, 10), "3M")
        self.assertEqual(self.engine.resolve_window("3M", 9, 100), "all")

    def test_month_offsets_clamp_to_month_end(self) -> None:
        series = daily(300)
        end = pd.Timestamp("2024-08-31", tz="UTC")
        self.assertEqual(self.engine.window_start(series, "6M", end), pd.Timestamp("2024-02-29", tz="UTC"))
        self.assertEqual(self.engine.window_start(series, "1Y", end), pd.Timestamp("2023-08-31", tz="UTC"))

    def test_custom_rules(self) -> None:
        engine = YesBandEngine(degradation_rules=[("6M", 5, "MAX")])
        self.assertEqual(engine.resolve_window("6M", 10, 20), "MAX")


class TestComputeYesBand(unittest.TestCase):

    def test_forty_points_over_a_year_degrade_to_six_months(self) -> None:
        times = pd.date_range("2024-01-01", "2024-12-31", periods=40, tz="UTC")
        series = make_series(range(40), times)
        band = compute_yes_band(series, "2Y")
        self.assertEqual(band["requested_window"], "2Y")
        self.assertEqual(band["actual_window"], "6M")
        end = times[-1]
        expected = int((times >= end - pd.DateOffset(months=6)).sum())
        self.assertEqual(band["window_point_count"], expected)
        self.assertEqual(band["window_start"], end - pd.DateOffset(months=6))
        self.assertEqual(band["window_end"], end)

    def test_seventy_points_degrade_to_one_year(self) -> None:
        times = pd.date_range("2024-01-01", "2024-12-31", periods=70, tz="UTC")
        band = compute_yes_band(make_series(range(70), times), "2Y")
        self.assertEqual(band["actual_window"], "1Y")
        self.assertEqual(band["window_point_count"], 70)

    def test_small_series_uses_everything(self) -> None:
        series = daily(20)
        band = compute_yes_band(series, "1Y")
        self.assertEqual(band["actual_window"], "all")
        self.assertEqual(band["window_point_count"], 20)
        self.assertEqual(band["window_start"], series["t"].iloc[0])

    def test_full_window_not_degraded(self) -> None:
        band = compute_yes_band(daily(200), "6M")
        self.assertEqual(band["actual_window"], "6M")
        self.assertEqual(band["requested_window"], "6M")
        self.assertGreaterEqual(band["window_point_count"], 30)

    def test_percentiles_and_padding(self) -> None:
        band = compute_yes_band(daily(21), "MAX")
        self.assertEqual(band["actual_window"], "MAX")
        self.assertAlmostEqual(band["lower_percentile_value"], 1.0)
        self.assertAlmostEqual(band["upper_percentile_value"], 19.0)
        self.assertAlmostEqual(band["lower_bound"], -8.0)
        self.assertAlmostEqual(band["upper_bound"], 28.0)

    def test_unsorted_values_are_sorted_first(self) -> None:
        values = list(range(21))[::-1]
        series = make_series(values, pd.date_range("2024-01-01", periods=21, freq="D", tz="UTC"))
        band = compute_yes_band(series, "MAX")
        self.assertAlmostEqual(band["lower_percentile_value"], 1.0)
        self.assertAlmostEqual(band["upper_percentile_value"], 19.0)

    def test_anchor_limits_window(self) -> None:
        band = compute_yes_band(daily(21), "MAX", anchor="2024-01-10")
        self.assertEqual(band["window_point_count"], 10)
        self.assertEqual(band["window_end"], pd.Timestamp("2024-01-10", tz="UTC"))

    def test_insufficient_data_gives_none(self) -> None:
        self.assertIsNone(compute_yes_band(daily(4), "6M"))
        self.assertIsNone(compute_yes_band(daily(0), "6M"))
        self.assertIsNone(compute_yes_band(None, "6M"))


class TestYesPercent(unittest.TestCase):

    def setUp(self) -> None:
        self.band = {"lower_bound": 0.0, "upper_bound": 10.0}

    def test_fallbacks(self) -> None:
        self.assertEqual(value_to_yes_percent(3.0, None), 50.0)
        self.assertEqual(value_to_yes_percent(3.0, {"lower_bound": 1.0, "upper_bound": 1.0}), 50.0)
        self.assertEqual(value_to_yes_percent(float("nan"), self.band), 50.0)

    def test_mapping(self) -> None:
        self.assertAlmostEqual(value_to_yes_percent(5.0, self.band), 50.0)
        self.assertAlmostEqual(value_to_yes_percent(2.5, self.band), 25.0)
        self.assertAlmostEqual(value_to_yes_percent(-100.0, self.band), 2.0)
        self.assertAlmostEqual(value_to_yes_percent(100.0, self.band), 98.0)

    def test_output_always_within_clamp(self) -> None:
        rng = np.random.default_rng(11)
        band = compute_yes_band(daily(60), "MAX")
        for value in rng.normal(30, 100, size=500):
            pct = value_to_yes_percent(float(value), band)
            self.assertGreaterEqual(pct, 2.0)
            self.assertLessEqual(pct, 98.0)


if __name__ == '__main__':
    unittest.main()
