"""
Analysis periods.

A PeriodSpec is what a caller asks for (explicit dates or a trailing window);
an AnalysisPeriod is the resolved inclusive calendar-day range.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, Optional, Union

import pandas as pd

from agp_analyzer.exceptions import InvalidConfiguration

ANCHOR_NOW = "now"
ANCHOR_LATEST = "latest"
ANCHORS = (ANCHOR_NOW, ANCHOR_LATEST)

DateLike = Union[date, str]


def _to_date(value: Optional[DateLike]) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return pd.Timestamp(value).date()


@dataclass(frozen=True)
class AnalysisPeriod:
    """Inclusive range of calendar days."""
    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise InvalidConfiguration(
                f"Analysis period starts after it ends: {self.start} > {self.end}"
            )

    @property
    def days(self) -> int:
        """Calendar span in days, inclusive."""
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def union(self, other: 'AnalysisPeriod') -> 'AnalysisPeriod':
        return AnalysisPeriod(min(self.start, other.start), max(self.end, other.end))

    def to_dict(self) -> Dict[str, str]:
        return {'start': self.start.isoformat(), 'end': self.end.isoformat()}


@dataclass(frozen=True)
class PeriodSpec:
    """Requested analysis period.

    Explicit start and end take priority. Otherwise trailing_days is counted
    back from the anchor: today ('now') or the date of the latest reading
    ('latest').
    """
    start: Optional[date] = None
    end: Optional[date] = None
    trailing_days: Optional[int] = None
    anchor: str = ANCHOR_NOW

    @classmethod
    def explicit(cls, start: DateLike, end: DateLike) -> 'PeriodSpec':
        return cls(start=_to_date(start), end=_to_date(end))

    @classmethod
    def trailing(cls, days: int, anchor: str = ANCHOR_NOW) -> 'PeriodSpec':
        return cls(trailing_days=days, anchor=anchor)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PeriodSpec':
        """Create a spec from a dict with start/end or trailing_days/anchor."""
        return cls(
            start=_to_date(data.get('start')),
            end=_to_date(data.get('end')),
            trailing_days=data.get('trailing_days'),
            anchor=data.get('anchor', ANCHOR_NOW),
        )

    def resolve(self, today: date, latest: Optional[date] = None) -> AnalysisPeriod:
        """Resolve to concrete dates.

        Args:
            today: Anchor for 'now' windows.
            latest: Date of the latest reading, anchor for 'latest' windows.

        Returns:
            The resolved AnalysisPeriod.

        Raises:
            InvalidConfiguration: If the spec cannot be resolved.
        """
        if self.start is not None and self.end is not None:
            return AnalysisPeriod(self.start, self.end)

        if self.trailing_days is None:
            raise InvalidConfiguration(
                "Analysis period needs start and end dates or trailing_days"
            )
        if int(self.trailing_days) <= 0:
            raise InvalidConfiguration(
                f"trailing_days must be positive, got {self.trailing_days}"
            )

        if self.anchor == ANCHOR_NOW:
            end = today
        elif self.anchor == ANCHOR_LATEST:
            if latest is None:
                raise InvalidConfiguration(
                    "Cannot anchor a trailing period at the latest reading: no readings"
                )
            end = latest
        else:
            raise InvalidConfiguration(
                f"Unknown period anchor {self.anchor!r}; expected one of {ANCHORS}"
            )
        return AnalysisPeriod(end - timedelta(days=int(self.trailing_days)), end)


def union_period(periods: Iterable[AnalysisPeriod]) -> Optional[AnalysisPeriod]:
    """Smallest period covering all of periods, or None if there are none."""
    result = None
    for period in periods:
        result = period if result is None else result.union(period)
    return result
