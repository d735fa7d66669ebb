"""Utility functions for AGP analysis."""

from agp_analyzer.utils.units import (
    MG_DL,
    MMOL_L,
    GLUCOSE_UNITS,
    convert_glucose_value,
    convert_values,
)
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
from agp_analyzer.utils.smoothing import savgol_smooth, smooth_percentile_frame

__all__ = [
    "MG_DL",
    "MMOL_L",
    "GLUCOSE_UNITS",
    "convert_glucose_value",
    "convert_values",
    "calculate_cv",
    "calculate_gmi",
    "calculate_glucose_statistics",
    "calculate_median",
    "calculate_percentiles",
    "calculate_sensor_active_percentage",
    "calculate_time_in_range",
    "calculate_time_in_ranges",
    "count_days_with_data",
    "time_in_range_duration",
    "savgol_smooth",
    "smooth_percentile_frame",
]
