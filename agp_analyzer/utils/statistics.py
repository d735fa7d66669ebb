"""
Statistical utilities for AGP analysis.

Provides the range classification, coverage estimation and summary
statistics shared by the analyzers. All percentiles use linear interpolation
between order statistics (numpy's default method).
"""

import logging
import math
import warnings
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Sequence, Union

import numpy as np
import pandas as pd

from agp_analyzer.exceptions import DegenerateInput
from agp_analyzer.utils.units import MG_DL, convert_values

logger = logging.getLogger(__name__)

GMI_INTERCEPT = 3.31
GMI_SLOPE = 0.02392

MS_PER_HOUR = 3_600_000

ArrayLike = Union[np.ndarray, pd.Series, Sequence[float]]


# =============================================================================
# RANGE CLASSIFICATION
# =============================================================================

def calculate_time_in_range(values: ArrayLike, lower: float, upper: float) -> float:
    """Calculate percentage of readings within a range.

    Args:
        values: Glucose values, already in the unit of the bounds.
        lower: Lower bound (inclusive).
        upper: Upper bound (inclusive).

    Returns:
        Percentage (0-100) of readings within range. NaN when there are
        no readings; callers decide the fallback.
    """
    values = np.asarray(values, dtype=float)
    if len(values) == 0:
        return float('nan')

    in_range = np.sum((values >= lower) & (values <= upper))
    return float(in_range / len(values) * 100)


def calculate_time_in_ranges(values: ArrayLike, breakpoints) -> Dict[str, float]:
    """Classify every reading into exactly one of the five consensus bands.

    Bands meet at the breakpoints as half-open intervals, with the target
    band closed on both ends:

    - very_low:  v < very_low
    - low:       very_low <= v < low
    - target:    low <= v <= high
    - high:      high < v <= very_high
    - very_high: v > very_high

    Args:
        values: Glucose values in breakpoints.unit.
        breakpoints: Breakpoints with very_low, low, high, very_high.

    Returns:
        Dictionary of band name to percentage. All NaN when empty.
    """
    values = np.asarray(values, dtype=float)
    n = len(values)
    bands = ('very_low', 'low', 'target', 'high', 'very_high')
    if n == 0:
        return {band: float('nan') for band in bands}

    b = breakpoints
    counts = (
        np.sum(values < b.very_low),
        np.sum((values >= b.very_low) & (values < b.low)),
        np.sum((values >= b.low) & (values <= b.high)),
        np.sum((values > b.high) & (values <= b.very_high)),
        np.sum(values > b.very_high),
    )
    return {band: float(count / n * 100) for band, count in zip(bands, counts)}


def time_in_range_duration(percentage: float) -> str:
    """Express a time-in-range percentage as hours and minutes of a day.

    Args:
        percentage: Percentage of readings (0-100).

    Returns:
        String like '16h 48m'.
    """
    if percentage is None or math.isnan(percentage):
        return "0h 0m"
    duration_minutes = percentage / 100 * 24 * 60
    hours = int(duration_minutes // 60)
    minutes = int(round(duration_minutes % 60))
    if minutes == 60:
        hours, minutes = hours + 1, 0
    return f"{hours}h {minutes}m"


# =============================================================================
# CENTRAL TENDENCY AND VARIABILITY
# =============================================================================

def calculate_percentiles(values: ArrayLike, percentiles: Sequence[float]) -> List[float]:
    """Calculate percentiles with linear interpolation.

    Args:
        values: Array of values.
        percentiles: Percentiles to calculate (0-100).

    Returns:
        List of percentile values, aligned with percentiles. All 0 when
        values is empty.
    """
    values = np.asarray(values, dtype=float)
    if len(values) == 0:
        return [0.0 for _ in percentiles]
    return [float(v) for v in np.percentile(values, list(percentiles))]


def calculate_median(values: ArrayLike) -> float:
    """Median using the same interpolation as the time-of-day bands."""
    return calculate_percentiles(values, [50])[0]


def calculate_gmi(mean_glucose_mg_dl: float) -> float:
    """Calculate Glucose Management Indicator (GMI).

    Bergenstal et al., 2018. The formula is defined on mg/dL, so the mean
    must be in mg/dL whatever unit the report is displayed in.

    Args:
        mean_glucose_mg_dl: Mean glucose in mg/dL.

    Returns:
        Estimated HbA1c percentage.
    """
    return GMI_INTERCEPT + GMI_SLOPE * mean_glucose_mg_dl


def calculate_cv(values: ArrayLike) -> float:
    """Calculate coefficient of variation (CV).

    CV = (sample standard deviation / mean) x 100

    Target: <36% per International Consensus (Battelino 2019).

    Args:
        values: Array of values.

    Returns:
        CV as a percentage. 0 with a DegenerateInput warning when there are
        fewer than two values or the mean is zero.
    """
    values = np.asarray(values, dtype=float)

    if len(values) < 2:
        warnings.warn(
            f"CV needs at least two readings, got {len(values)}; using 0",
            DegenerateInput,
            stacklevel=2,
        )
        return 0.0

    mean = np.mean(values)
    if mean == 0:
        warnings.warn("CV undefined for a zero mean; using 0", DegenerateInput, stacklevel=2)
        return 0.0

    return float(np.std(values, ddof=1) / mean * 100)


def calculate_glucose_statistics(
    values: ArrayLike,
    units: Union[ArrayLike, str],
    to_unit: str
) -> Dict[str, float]:
    """Calculate mean, GMI and CV for a set of readings.

    Args:
        values: Raw glucose values.
        units: Unit of each value (or one unit for all).
        to_unit: Display unit for mean and CV.

    Returns:
        Dictionary with 'mean', 'gmi' and 'cv'. All 0 when empty.
    """
    display = convert_values(values, units, to_unit)
    if len(display) == 0:
        warnings.warn("No readings; statistics set to 0", DegenerateInput, stacklevel=2)
        return {'mean': 0.0, 'gmi': 0.0, 'cv': 0.0}

    mg_dl = convert_values(values, units, MG_DL)
    return {
        'mean': float(np.mean(display)),
        'gmi': calculate_gmi(float(np.mean(mg_dl))),
        'cv': calculate_cv(display),
    }


# =============================================================================
# DATA COVERAGE
# =============================================================================

def period_bounds(start: date, end: date) -> tuple:
    """Midnight opening start and midnight after end (inclusive days)."""
    return (
        datetime.combine(start, time.min),
        datetime.combine(end + timedelta(days=1), time.min),
    )


def calculate_sensor_active_percentage(
    timestamps: Iterable[datetime],
    start: date,
    end: date
) -> float:
    """Estimate sensor wear from the density of readings per hour.

    The period is split into whole-hour slots from midnight of start to
    midnight after end. A slot counts as active when it holds at least one
    reading; readings outside the period are ignored.

    Args:
        timestamps: Naive wall-clock reading times.
        start: First day of the period.
        end: Last day of the period (inclusive).

    Returns:
        Percentage (0-100) of hour slots with readings.
    """
    period_start, period_end = period_bounds(start, end)
    total_hours = math.ceil((period_end - period_start) / timedelta(hours=1))
    if total_hours <= 0:
        return 0.0

    if not isinstance(timestamps, np.ndarray):
        timestamps = list(timestamps)
    times = np.asarray(timestamps, dtype='datetime64[ms]')
    if len(times) == 0:
        return 0.0

    elapsed_ms = (times - np.datetime64(period_start, 'ms')).astype(np.int64)
    hour_index = np.floor_divide(elapsed_ms, MS_PER_HOUR)
    in_period = hour_index[(hour_index >= 0) & (hour_index < total_hours)]

    hourly_counts = np.bincount(in_period, minlength=total_hours)
    hours_with_readings = int(np.count_nonzero(hourly_counts))
    return hours_with_readings / total_hours * 100


def count_days_with_data(dates: Iterable[date]) -> int:
    """Count distinct calendar days that have at least one reading."""
    return len(set(dates))
