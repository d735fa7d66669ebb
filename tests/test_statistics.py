from __future__ import annotations

import math
from datetime import date, datetime

import numpy as np
import pytest

from agp_analyzer.exceptions import DegenerateInput
from agp_analyzer.metrics import make_breakpoints
from agp_analyzer.utils.statistics import (
    calculate_cv,
    calculate_gmi,
    calculate_glucose_statistics,
    calculate_median,
    calculate_percentiles,
    calculate_sensor_active_percentage,
    calculate_time_in_range,
    calculate_time_in_ranges,
    count_days_with_data,
    time_in_range_duration,
)


class TestTimeInRange:
    def test_inclusive_bounds(self) -> None:
        assert calculate_time_in_range([70, 100, 180, 181], 70, 180) == 75.0

    def test_empty_is_nan(self) -> None:
        assert math.isnan(calculate_time_in_range([], 70, 180))

    def test_breakpoint_values_land_in_one_band(self) -> None:
        bp = make_breakpoints("mg/dL")
        tir = calculate_time_in_ranges([54, 70, 180, 250], bp)
        assert tir == {
            'very_low': 0.0,
            'low': 25.0,       # 54
            'target': 50.0,    # 70 and 180
            'high': 25.0,      # 250
            'very_high': 0.0,
        }

    def test_bands_sum_to_100(self) -> None:
        rng = np.random.default_rng(7)
        values = rng.uniform(20, 400, size=500)
        for unit, scale in (("mg/dL", 1.0), ("mmol/L", 1 / 18)):
            tir = calculate_time_in_ranges(values * scale, make_breakpoints(unit))
            assert sum(tir.values()) == pytest.approx(100.0)

    def test_mmol_breakpoint_boundaries(self) -> None:
        bp = make_breakpoints("mmol/L")
        tir = calculate_time_in_ranges([70 / 18, 180 / 18], bp)
        assert tir['target'] == 100.0

    def test_empty_bands_are_nan(self) -> None:
        tir = calculate_time_in_ranges([], make_breakpoints("mg/dL"))
        assert all(math.isnan(v) for v in tir.values())

    def test_duration(self) -> None:
        assert time_in_range_duration(70.0) == "16h 48m"
        assert time_in_range_duration(100.0) == "24h 0m"
        assert time_in_range_duration(float('nan')) == "0h 0m"


class TestPercentiles:
    def test_linear_interpolation(self) -> None:
        assert calculate_percentiles([1, 2, 3, 4], [25, 50, 75]) == pytest.approx([1.75, 2.5, 3.25])

    def test_median_interpolates_between_middle_values(self) -> None:
        assert calculate_median([100, 200]) == 150.0

    def test_empty_falls_back_to_zero(self) -> None:
        assert calculate_percentiles([], [5, 50, 95]) == [0.0, 0.0, 0.0]


class TestVariability:
    def test_gmi_formula(self) -> None:
        assert calculate_gmi(120) == pytest.approx(3.31 + 0.02392 * 120)
        assert calculate_gmi(120) == pytest.approx(6.18, abs=0.005)

    def test_cv_uses_sample_standard_deviation(self) -> None:
        values = [100, 120, 140]
        expected = np.std(values, ddof=1) / 120 * 100
        assert calculate_cv(values) == pytest.approx(expected)
        assert calculate_cv(values) == pytest.approx(16.666, abs=0.01)

    def test_cv_constant_is_zero(self) -> None:
        assert calculate_cv([120] * 10) == 0.0

    def test_cv_zero_mean_is_sentinel(self) -> None:
        with pytest.warns(DegenerateInput):
            assert calculate_cv([-1.0, 1.0]) == 0.0

    def test_cv_single_reading_is_sentinel(self) -> None:
        with pytest.warns(DegenerateInput):
            assert calculate_cv([120.0]) == 0.0

    def test_statistics_display_unit(self) -> None:
        stats = calculate_glucose_statistics([90, 150], ["mg/dL", "mg/dL"], "mmol/L")
        assert stats['mean'] == pytest.approx(120 / 18)

    def test_gmi_is_unit_invariant(self) -> None:
        values = [5.0, 7.5, 160.0, 95.0]
        units = ["mmol/L", "mmol/L", "mg/dL", "mg/dL"]
        mg = calculate_glucose_statistics(values, units, "mg/dL")
        mmol = calculate_glucose_statistics(values, units, "mmol/L")
        assert mg['gmi'] == pytest.approx(mmol['gmi'])
        assert mg['cv'] == pytest.approx(mmol['cv'])

    def test_statistics_empty(self) -> None:
        with pytest.warns(DegenerateInput):
            stats = calculate_glucose_statistics([], [], "mg/dL")
        assert stats == {'mean': 0.0, 'gmi': 0.0, 'cv': 0.0}


class TestCoverage:
    def test_every_hour_covered(self) -> None:
        times = [datetime(2024, 1, d, h, 30) for d in (1, 2) for h in range(24)]
        assert calculate_sensor_active_percentage(times, date(2024, 1, 1), date(2024, 1, 2)) == 100.0

    def test_no_readings(self) -> None:
        assert calculate_sensor_active_percentage([], date(2024, 1, 1), date(2024, 1, 2)) == 0.0

    def test_counts_slots_not_readings(self) -> None:
        times = [
            datetime(2024, 1, 1, 0, 30),
            datetime(2024, 1, 1, 1, 10),
            datetime(2024, 1, 1, 1, 50),
        ]
        pct = calculate_sensor_active_percentage(times, date(2024, 1, 1), date(2024, 1, 1))
        assert pct == pytest.approx(2 / 24 * 100)

    def test_out_of_period_readings_ignored(self) -> None:
        times = [
            datetime(2023, 12, 31, 23, 59),
            datetime(2024, 1, 2, 0, 0),
            datetime(2024, 1, 1, 12, 0),
        ]
        pct = calculate_sensor_active_percentage(times, date(2024, 1, 1), date(2024, 1, 1))
        assert pct == pytest.approx(1 / 24 * 100)

    def test_accepts_datetime64_array(self) -> None:
        times = np.array(['2024-01-01T05:00'], dtype='datetime64[ms]')
        pct = calculate_sensor_active_percentage(times, date(2024, 1, 1), date(2024, 1, 1))
        assert pct == pytest.approx(1 / 24 * 100)


def test_count_days_with_data_ignores_gaps() -> None:
    days = [date(2024, 1, 1), date(2024, 1, 1), date(2024, 1, 5), date(2024, 1, 9)]
    assert count_days_with_data(days) == 3
