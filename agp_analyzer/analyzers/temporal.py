"""
Temporal Band Builder - time-of-day percentile bands for the AGP chart.

Readings from every day of the period are folded onto a single 24-hour
cycle. Each bucket takes its percentiles from a window centered on the
bucket midpoint, which may be wider than the bucket itself to smooth out
sparse time-of-day sampling.
"""

import logging
import math
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd

from agp_analyzer.config import AnalysisConfig, BandSettings
from agp_analyzer.exceptions import InvalidConfiguration
from agp_analyzer.metrics.reading import Reading, readings_to_frame
from agp_analyzer.metrics.temporal_band import BandBucket, TemporalBand, percentile_label
from agp_analyzer.utils.smoothing import smooth_percentile_frame
from agp_analyzer.utils.statistics import calculate_percentiles
from agp_analyzer.utils.units import convert_values, validate_unit

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


class TemporalBandBuilder:
    """Builds time-of-day percentile bands.

    Percentiles use linear interpolation between order statistics, the same
    method as the period median.
    """

    def __init__(
        self,
        bucket_minutes: int = 5,
        window_minutes: int = 60,
        percentiles: Sequence[float] = (5, 25, 50, 75, 95),
        savgol_window: Optional[int] = None,
        savgol_polyorder: int = 2
    ):
        """Initialize band builder.

        Args:
            bucket_minutes: Width of each time-of-day bucket.
            window_minutes: Width of the window centered on each bucket.
            percentiles: Percentile levels (0-100). Stored sorted ascending
                         with duplicates removed; bucket values follow
                         that order.
            savgol_window: Optional Savitzky-Golay window, in buckets, applied
                           across buckets after the windowed pass.
            savgol_polyorder: Polynomial order for Savitzky-Golay.

        Raises:
            InvalidConfiguration: For non-positive widths or percentiles
                                  outside 0-100.
        """
        if bucket_minutes <= 0 or window_minutes <= 0:
            raise InvalidConfiguration(
                f"Bucket and window widths must be positive, got "
                f"{bucket_minutes} and {window_minutes} minutes"
            )
        if not percentiles or any(p < 0 or p > 100 for p in percentiles):
            raise InvalidConfiguration(f"Percentiles must be within 0-100, got {list(percentiles)}")
        if savgol_window is not None and savgol_window <= 0:
            raise InvalidConfiguration(f"savgol_window must be positive, got {savgol_window}")

        self.bucket_minutes = bucket_minutes
        self.window_minutes = window_minutes
        self.percentiles = tuple(sorted(set(percentiles)))
        self.savgol_window = savgol_window
        self.savgol_polyorder = savgol_polyorder

    @classmethod
    def from_config(cls, config: Optional[AnalysisConfig] = None) -> 'TemporalBandBuilder':
        settings: BandSettings = (config or AnalysisConfig()).bands
        return cls(
            bucket_minutes=settings.bucket_minutes,
            window_minutes=settings.window_minutes,
            percentiles=settings.percentiles,
            savgol_window=settings.savgol_window,
            savgol_polyorder=settings.savgol_polyorder,
        )

    @property
    def bucket_count(self) -> int:
        return math.ceil(MINUTES_PER_DAY / self.bucket_minutes)

    def window_bounds(self, bucket_index: int) -> tuple:
        """Window [lower, upper) in minutes since midnight, clamped to the day."""
        midpoint = bucket_index * self.bucket_minutes + self.bucket_minutes / 2
        lower = max(0.0, midpoint - self.window_minutes / 2)
        upper = min(float(MINUTES_PER_DAY), midpoint + self.window_minutes / 2)
        return lower, upper

    def build(
        self,
        readings: Union[Sequence[Reading], pd.DataFrame],
        unit: str
    ) -> TemporalBand:
        """Compute the percentile band.

        Args:
            readings: Readings, or a frame from readings_to_frame.
            unit: Display unit.

        Returns:
            Tuple of BandBucket ordered by bucket start minute.
        """
        validate_unit(unit)
        frame = readings if isinstance(readings, pd.DataFrame) else readings_to_frame(readings)

        minutes = frame['minute_of_day'].to_numpy()
        values = convert_values(frame['value'], frame['unit'], unit)

        rows = []
        counts = []
        for i in range(self.bucket_count):
            lower, upper = self.window_bounds(i)
            in_window = values[(minutes >= lower) & (minutes < upper)]
            counts.append(len(in_window))
            if len(in_window) == 0:
                rows.append([np.nan] * len(self.percentiles))
            else:
                rows.append(calculate_percentiles(in_window, self.percentiles))

        table = pd.DataFrame(rows, columns=[percentile_label(p) for p in self.percentiles])
        if self.savgol_window is not None:
            table = smooth_percentile_frame(table, self.savgol_window, self.savgol_polyorder)
        table = table.fillna(0.0)

        logger.debug(
            "Built %d buckets (%d min, window %d min) from %d readings",
            self.bucket_count, self.bucket_minutes, self.window_minutes, len(values),
        )

        return tuple(
            BandBucket(
                bucket_start_minute=i * self.bucket_minutes,
                percentiles=self.percentiles,
                values=tuple(float(v) for v in table.iloc[i]),
                sample_count=counts[i],
            )
            for i in range(self.bucket_count)
        )
