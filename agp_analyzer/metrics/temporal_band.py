"""
Time-of-day percentile band buckets, consumed by the charting layer.
"""

from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple


def percentile_label(percentile: float) -> str:
    """Column label for a percentile, e.g. 5 -> 'p5', 2.5 -> 'p2.5'."""
    return f"p{percentile:g}"


@dataclass(frozen=True)
class BandBucket:
    """Percentiles for one time-of-day bucket.

    A bucket with sample_count == 0 holds 0 for every percentile; the count,
    not the value, says whether there was data.
    """
    bucket_start_minute: int
    percentiles: Tuple[float, ...]       # Requested percentile levels
    values: Tuple[float, ...]            # Aligned with percentiles
    sample_count: int

    @property
    def has_data(self) -> bool:
        return self.sample_count > 0

    def value(self, percentile: float) -> float:
        """Value of one percentile level in this bucket."""
        return self.values[self.percentiles.index(percentile)]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'bucket_start_minute': self.bucket_start_minute}
        for p, v in zip(self.percentiles, self.values):
            data[percentile_label(p)] = v
        data['sample_count'] = self.sample_count
        return data


TemporalBand = Tuple[BandBucket, ...]


def band_to_records(band: Sequence[BandBucket]) -> list:
    """Flatten a band into a list of dicts, one per bucket."""
    return [bucket.to_dict() for bucket in band]
