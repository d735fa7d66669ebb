"""
AGP metrics dataclasses.

Follows international consensus guidelines (Battelino 2019) for CGM metrics.
"""

from dataclasses import dataclass
from typing import Any, Dict

from agp_analyzer.metrics.period import AnalysisPeriod


@dataclass(frozen=True)
class TimeInRanges:
    """Percentage of readings in each consensus band."""
    very_low: float   # Level 2 hypoglycemia
    low: float        # Level 1 hypoglycemia
    target: float     # Standard TIR, inclusive at both ends
    high: float
    very_high: float

    @property
    def total(self) -> float:
        return self.very_low + self.low + self.target + self.high + self.very_high

    def to_dict(self) -> Dict[str, float]:
        return {
            'very_low': self.very_low,
            'low': self.low,
            'target': self.target,
            'high': self.high,
            'very_high': self.very_high,
        }


@dataclass(frozen=True)
class GlucoseStatistics:
    """Central tendency and variability."""
    mean: float  # Display unit
    gmi: float   # Estimated A1C (%), always from the mg/dL mean
    cv: float    # Coefficient of variation (%)

    def to_dict(self) -> Dict[str, float]:
        return {'mean': self.mean, 'gmi': self.gmi, 'cv': self.cv}


@dataclass(frozen=True)
class AGPMetrics:
    """Ambulatory Glucose Profile metrics for one analysis period.

    When the period has no readings every value is a 0 sentinel and
    degenerate is True; consumers should check it (or reading_count)
    before displaying values.
    """
    period: AnalysisPeriod
    unit: str
    median: float
    time_in_ranges: TimeInRanges
    glucose_statistics: GlucoseStatistics
    total_days: int
    sensor_active_percentage: float
    reading_count: int

    @property
    def degenerate(self) -> bool:
        return self.reading_count == 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'start_date': self.period.start.isoformat(),
            'end_date': self.period.end.isoformat(),
            'unit': self.unit,
            'median': round(self.median, 2),
            'time_in_ranges_pct': {
                k: round(v, 2) for k, v in self.time_in_ranges.to_dict().items()
            },
            'mean': round(self.glucose_statistics.mean, 2),
            'gmi_percent': round(self.glucose_statistics.gmi, 2),
            'cv_percent': round(self.glucose_statistics.cv, 2),
            'total_days': self.total_days,
            'sensor_active_pct': round(self.sensor_active_percentage, 2),
            'readings_count': self.reading_count,
            'degenerate': self.degenerate,
        }
