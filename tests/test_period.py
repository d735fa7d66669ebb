from __future__ import annotations

import warnings
from datetime import date, datetime

import pytest

from agp_analyzer.analyzers import PeriodAggregator
from agp_analyzer.exceptions import DegenerateInput, InvalidConfiguration
from agp_analyzer.metrics import AnalysisPeriod, Breakpoints, Reading, make_breakpoints

MARCH = AnalysisPeriod(date(2024, 3, 1), date(2024, 3, 3))


class TestThreeDaysAt120:
    def test_metrics(self, three_days_at_120: list[Reading]) -> None:
        metrics = PeriodAggregator(make_breakpoints("mg/dL")).aggregate(three_days_at_120, MARCH)

        assert metrics.time_in_ranges.target == 100.0
        assert metrics.time_in_ranges.total == pytest.approx(100.0)
        assert metrics.median == 120.0
        assert metrics.glucose_statistics.mean == 120.0
        assert metrics.glucose_statistics.cv == 0.0
        assert metrics.glucose_statistics.gmi == pytest.approx(6.18, abs=0.005)
        assert metrics.total_days == 3
        assert metrics.reading_count == 30
        assert not metrics.degenerate

    def test_sensor_active_counts_hours_with_readings(self, three_days_at_120: list[Reading]) -> None:
        # 10 readings a day, 144 minutes apart, each in its own hour
        metrics = PeriodAggregator().aggregate(three_days_at_120, MARCH)
        assert metrics.sensor_active_percentage == pytest.approx(30 / 72 * 100)

    def test_mmol_display(self, three_days_at_120: list[Reading]) -> None:
        mg = PeriodAggregator(make_breakpoints("mg/dL")).aggregate(three_days_at_120, MARCH)
        mmol = PeriodAggregator(make_breakpoints("mmol/L")).aggregate(three_days_at_120, MARCH)

        assert mmol.unit == "mmol/L"
        assert mmol.glucose_statistics.mean == pytest.approx(120 / 18)
        assert mmol.median == pytest.approx(120 / 18)
        assert mmol.time_in_ranges.target == 100.0
        assert mmol.glucose_statistics.gmi == pytest.approx(mg.glucose_statistics.gmi)


def test_gmi_unit_invariant_with_mixed_source_units() -> None:
    readings = [
        Reading(datetime(2024, 3, 1, 8), 5.5, "mmol/L"),
        Reading(datetime(2024, 3, 1, 9), 210.0, "mg/dL"),
        Reading(datetime(2024, 3, 2, 9), 8.1, "mmol/L"),
    ]
    mg = PeriodAggregator(make_breakpoints("mg/dL")).aggregate(readings, MARCH)
    mmol = PeriodAggregator(make_breakpoints("mmol/L")).aggregate(readings, MARCH)
    assert mg.glucose_statistics.gmi == pytest.approx(mmol.glucose_statistics.gmi)
    assert mg.glucose_statistics.mean == pytest.approx(mmol.glucose_statistics.mean * 18)


def test_total_days_counts_distinct_dates_not_span() -> None:
    readings = [
        Reading(datetime(2024, 3, 1, 8), 100.0, "mg/dL"),
        Reading(datetime(2024, 3, 1, 20), 100.0, "mg/dL"),
        Reading(datetime(2024, 3, 10, 8), 100.0, "mg/dL"),
    ]
    metrics = PeriodAggregator().aggregate(readings, AnalysisPeriod(date(2024, 3, 1), date(2024, 3, 10)))
    assert metrics.total_days == 2


def test_bands_partition_readings() -> None:
    values = [40, 54, 60, 70, 120, 180, 200, 250, 300, 20]
    readings = [Reading(datetime(2024, 3, 1, i), float(v), "mg/dL") for i, v in enumerate(values)]
    tir = PeriodAggregator().aggregate(readings, MARCH).time_in_ranges
    assert tir.to_dict() == pytest.approx({
        'very_low': 20.0,
        'low': 20.0,
        'target': 30.0,
        'high': 20.0,
        'very_high': 10.0,
    })


def test_median_uses_linear_interpolation() -> None:
    readings = [
        Reading(datetime(2024, 3, 1, 8), 100.0, "mg/dL"),
        Reading(datetime(2024, 3, 1, 9), 200.0, "mg/dL"),
    ]
    assert PeriodAggregator().aggregate(readings, MARCH).median == 150.0


def test_empty_period_absorbed_with_sentinels() -> None:
    with pytest.warns(DegenerateInput):
        metrics = PeriodAggregator().aggregate([], MARCH)

    assert metrics.degenerate
    assert metrics.reading_count == 0
    assert metrics.median == 0.0
    assert metrics.time_in_ranges.to_dict() == dict.fromkeys(
        ['very_low', 'low', 'target', 'high', 'very_high'], 0.0
    )
    assert metrics.glucose_statistics.to_dict() == {'mean': 0.0, 'gmi': 0.0, 'cv': 0.0}
    assert metrics.total_days == 0
    assert metrics.sensor_active_percentage == 0.0
    assert metrics.to_dict()['degenerate'] is True


def test_empty_period_warns_once() -> None:
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter('always')
        PeriodAggregator().aggregate([], MARCH)
    assert len([w for w in caught if issubclass(w.category, DegenerateInput)]) == 1


def test_non_monotonic_breakpoints_rejected() -> None:
    with pytest.raises(InvalidConfiguration):
        PeriodAggregator(Breakpoints("mg/dL", very_low=70, low=54, high=180, very_high=250))


def test_to_dict_rounds() -> None:
    readings = [Reading(datetime(2024, 3, 1, 8), 100.123, "mg/dL")]
    with pytest.warns(DegenerateInput):
        data = PeriodAggregator().aggregate(readings, MARCH).to_dict()
    assert data['median'] == 100.12
    assert data['start_date'] == "2024-03-01"
    assert data['readings_count'] == 1


class TestAnalysisPeriod:
    def test_days_is_inclusive(self) -> None:
        assert MARCH.days == 3
        assert AnalysisPeriod(date(2024, 3, 1), date(2024, 3, 1)).days == 1

    def test_start_after_end_rejected(self) -> None:
        with pytest.raises(InvalidConfiguration):
            AnalysisPeriod(date(2024, 3, 2), date(2024, 3, 1))

    def test_union_spans_gap(self) -> None:
        later = AnalysisPeriod(date(2024, 3, 10), date(2024, 3, 12))
        assert MARCH.union(later) == AnalysisPeriod(date(2024, 3, 1), date(2024, 3, 12))
        assert MARCH.union(later).days == 12
