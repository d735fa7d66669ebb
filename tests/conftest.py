from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from agp_analyzer.metrics import Device, Reading


def daily_readings(
    start: date,
    days: int,
    per_day: int,
    value: float = 120.0,
    unit: str = "mg/dL",
    device_ref: str | None = None,
) -> list[Reading]:
    """per_day readings spread evenly over each day."""
    step = timedelta(minutes=24 * 60 // per_day)
    readings = []
    for d in range(days):
        midnight = datetime.combine(start + timedelta(days=d), datetime.min.time())
        for i in range(per_day):
            readings.append(Reading(midnight + i * step, value, unit, device_ref))
    return readings


@pytest.fixture
def device() -> Device:
    return Device(id="libre-1", name="FreeStyle Libre 3", serial_number="ABC-123")


@pytest.fixture
def three_days_at_120() -> list[Reading]:
    return daily_readings(date(2024, 3, 1), days=3, per_day=10, value=120.0)


@pytest.fixture
def forty_day_history(device: Device) -> list[Reading]:
    """Hourly readings from 2024-01-01 to 2024-02-09, newest first."""
    readings = daily_readings(
        date(2024, 1, 1), days=40, per_day=24, value=150.0, device_ref=device.reference
    )
    return list(reversed(readings))


@pytest.fixture
def make_daily_readings():
    return daily_readings
