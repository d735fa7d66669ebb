"""Data model: readings, periods, breakpoints and metric results."""

from agp_analyzer.metrics.reading import Device, Reading, readings_to_frame, sort_readings
from agp_analyzer.metrics.period import (
    ANCHOR_LATEST,
    ANCHOR_NOW,
    AnalysisPeriod,
    PeriodSpec,
    union_period,
)
from agp_analyzer.metrics.breakpoints import Breakpoints, make_breakpoints
from agp_analyzer.metrics.agp_metrics import AGPMetrics, GlucoseStatistics, TimeInRanges
from agp_analyzer.metrics.temporal_band import BandBucket, TemporalBand, band_to_records

__all__ = [
    "Device",
    "Reading",
    "readings_to_frame",
    "sort_readings",
    "ANCHOR_LATEST",
    "ANCHOR_NOW",
    "AnalysisPeriod",
    "PeriodSpec",
    "union_period",
    "Breakpoints",
    "make_breakpoints",
    "AGPMetrics",
    "GlucoseStatistics",
    "TimeInRanges",
    "BandBucket",
    "TemporalBand",
    "band_to_records",
]
