"""
Glucose reading and device records.

Readings are produced by loaders (or any caller) and consumed read-only by
the analyzers.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

import pandas as pd

FRAME_COLUMNS = [
    'wall_time',
    'date',
    'minute_of_day',
    'value',
    'unit',
    'device_ref',
    'reading',
]


@dataclass(frozen=True)
class Reading:
    """A single sensor glucose reading."""
    timestamp: datetime
    value: float
    unit: str  # 'mg/dL' or 'mmol/L'
    device_ref: Optional[str] = None  # e.g. 'Device/<id>'
    id: Optional[str] = None  # Source record identifier, when known

    @property
    def wall_time(self) -> datetime:
        """Timestamp on the reading's own wall clock, without tzinfo."""
        return self.timestamp.replace(tzinfo=None)

    @property
    def minute_of_day(self) -> int:
        return self.timestamp.hour * 60 + self.timestamp.minute


@dataclass(frozen=True)
class Device:
    """A sensor device that produced readings."""
    id: str
    name: str = ""
    serial_number: str = ""

    @property
    def reference(self) -> str:
        return f"Device/{self.id}"

    def matches(self, reference: Optional[str]) -> bool:
        """Check whether a reading's device reference points at this device."""
        return reference in (self.reference, f"urn:uuid:{self.id}")


def sort_readings(readings: Iterable[Reading]) -> List[Reading]:
    """Stable sort by wall-clock time.

    Sources may mix timestamps with and without a UTC offset, which cannot
    be compared directly; dates and minute of day are wall-clock values too.
    """
    return sorted(readings, key=lambda r: r.wall_time)


def readings_to_frame(readings: Sequence[Reading]) -> pd.DataFrame:
    """Convert readings to a DataFrame ordered by wall-clock time.

    Adds the calendar date and minute of day of each reading, both taken
    from the reading's wall clock.

    Args:
        readings: Readings in any order.

    Returns:
        DataFrame with FRAME_COLUMNS, one row per reading.
    """
    rows = [
        {
            'wall_time': r.wall_time,
            'date': r.timestamp.date(),
            'minute_of_day': r.minute_of_day,
            'value': float(r.value),
            'unit': r.unit,
            'device_ref': r.device_ref,
            'reading': r,
        }
        for r in sort_readings(readings)
    ]
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    df['wall_time'] = pd.to_datetime(df['wall_time'])
    df['value'] = df['value'].astype(float)
    df['minute_of_day'] = df['minute_of_day'].astype(int)
    return df
