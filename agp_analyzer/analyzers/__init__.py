"""AGP analyzers."""

from agp_analyzer.analyzers.period import PeriodAggregator
from agp_analyzer.analyzers.temporal import TemporalBandBuilder

__all__ = ["PeriodAggregator", "TemporalBandBuilder"]
