"""
AGP Analyzer - Ambulatory Glucose Profile analytics for CGM data.

This package provides modular components for:
- Normalizing glucose units and classifying readings into consensus bands
- Computing AGP metrics (median, time in range, mean, GMI, CV, sensor wear)
- Building time-of-day percentile bands for AGP charts
- Assembling cross-referenced summary records over several periods
"""

import logging

from agp_analyzer.config import AnalysisConfig, load_config
from agp_analyzer.exceptions import AGPError, DegenerateInput, InvalidConfiguration, InvalidUnit
from agp_analyzer.metrics import (
    AGPMetrics,
    AnalysisPeriod,
    BandBucket,
    Breakpoints,
    Device,
    PeriodSpec,
    Reading,
    make_breakpoints,
)
from agp_analyzer.analyzers import PeriodAggregator, TemporalBandBuilder
from agp_analyzer.reports import SummaryBundle, SummaryBundleBuilder

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "1.0.0"
__all__ = [
    "AnalysisConfig",
    "load_config",
    "AGPError",
    "DegenerateInput",
    "InvalidConfiguration",
    "InvalidUnit",
    "AGPMetrics",
    "AnalysisPeriod",
    "BandBucket",
    "Breakpoints",
    "Device",
    "PeriodSpec",
    "Reading",
    "make_breakpoints",
    "PeriodAggregator",
    "TemporalBandBuilder",
    "SummaryBundle",
    "SummaryBundleBuilder",
]
