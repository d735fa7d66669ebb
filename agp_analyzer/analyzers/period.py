"""
Period Aggregator - AGP metrics for one analysis period.

All calculations follow international consensus guidelines where applicable
(Battelino 2019, Bergenstal 2018).
"""

import logging
import warnings
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from agp_analyzer.config import AnalysisConfig
from agp_analyzer.exceptions import DegenerateInput
from agp_analyzer.metrics.agp_metrics import AGPMetrics, GlucoseStatistics, TimeInRanges
from agp_analyzer.metrics.breakpoints import Breakpoints, make_breakpoints
from agp_analyzer.metrics.period import AnalysisPeriod
from agp_analyzer.metrics.reading import Reading, readings_to_frame
from agp_analyzer.utils.statistics import (
    calculate_glucose_statistics,
    calculate_median,
    calculate_sensor_active_percentage,
    calculate_time_in_ranges,
    count_days_with_data,
)
from agp_analyzer.utils.units import convert_values

logger = logging.getLogger(__name__)


class PeriodAggregator:
    """Computes AGPMetrics for a single analysis period.

    Readings must already be filtered to the period; the aggregator does not
    filter again. The display unit is the unit of the breakpoints.
    """

    def __init__(
        self,
        breakpoints: Optional[Breakpoints] = None,
        config: Optional[AnalysisConfig] = None
    ):
        """Initialize aggregator.

        Args:
            breakpoints: Band thresholds in the display unit. Derived from
                         the configured mg/dL thresholds if None.
            config: Optional configuration. Uses defaults if None.
        """
        self.config = config or AnalysisConfig()
        if breakpoints is None:
            breakpoints = make_breakpoints(self.config.report.target_unit, self.config.glucose)
        self.breakpoints = breakpoints.validate()

    @property
    def unit(self) -> str:
        return self.breakpoints.unit

    def display_values(self, frame: pd.DataFrame) -> np.ndarray:
        """Reading values converted to the display unit."""
        return convert_values(frame['value'], frame['unit'], self.unit)

    def calculate_time_in_ranges(self, values: np.ndarray) -> TimeInRanges:
        """Time in the five consensus bands, 0 for an empty period."""
        tir = calculate_time_in_ranges(values, self.breakpoints)
        return TimeInRanges(**{k: (0.0 if np.isnan(v) else v) for k, v in tir.items()})

    def aggregate(self, readings: Sequence[Reading], period: AnalysisPeriod) -> AGPMetrics:
        """Compute AGP metrics for readings already inside period."""
        return self.aggregate_frame(readings_to_frame(readings), period)

    def aggregate_frame(self, frame: pd.DataFrame, period: AnalysisPeriod) -> AGPMetrics:
        """Compute AGP metrics from a frame built by readings_to_frame.

        Args:
            frame: Readings in the period, ordered by timestamp.
            period: The analysis period the readings were filtered to.

        Returns:
            AGPMetrics for the period.
        """
        values = self.display_values(frame)
        n = len(values)

        if n == 0:
            logger.warning("No readings between %s and %s", period.start, period.end)
            warnings.warn(
                f"No readings between {period.start} and {period.end}",
                DegenerateInput,
                stacklevel=2,
            )

        with warnings.catch_warnings():
            # Empty periods were reported above
            if n == 0:
                warnings.simplefilter('ignore', DegenerateInput)
            stats = calculate_glucose_statistics(frame['value'], frame['unit'], self.unit)

        metrics = AGPMetrics(
            period=period,
            unit=self.unit,
            median=calculate_median(values),
            time_in_ranges=self.calculate_time_in_ranges(values),
            glucose_statistics=GlucoseStatistics(**stats),
            total_days=count_days_with_data(frame['date']),
            sensor_active_percentage=calculate_sensor_active_percentage(
                frame['wall_time'].to_numpy(dtype='datetime64[ms]'),
                period.start,
                period.end,
            ),
            reading_count=n,
        )
        logger.debug(
            "Period %s..%s: %d readings over %d days, median %.2f %s",
            period.start, period.end, n, metrics.total_days, metrics.median, self.unit,
        )
        return metrics
