"""
LibreView CGM data loader.

Parses LibreView (FreeStyle Libre) CSV exports into Reading and Device records.
"""

import logging
import uuid
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from agp_analyzer.metrics.reading import Device, Reading
from agp_analyzer.utils.units import GLUCOSE_UNITS

logger = logging.getLogger(__name__)

DEVICE_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "http://example.com/devices")


class LibreViewLoader:
    """Loader for LibreView CSV exports.

    The first line of an export is a title row; the second holds the column
    headers, whose glucose columns name the unit (e.g. 'Historic Glucose mg/dL').
    Only historic glucose values (the sensor's automatic readings) become
    readings; scans and manual entries are skipped.
    """

    DEVICE_COLUMN = 'Device'
    SERIAL_COLUMN = 'Serial Number'
    TIMESTAMP_COLUMN = 'Device Timestamp'
    HISTORIC_PREFIX = 'Historic Glucose'

    def __init__(
        self,
        filepath: Union[str, Path],
        timestamp_format: Optional[str] = "%m-%d-%Y %H:%M"
    ):
        """Initialize loader with file path.

        Args:
            filepath: Path to LibreView CSV export.
            timestamp_format: strptime format of 'Device Timestamp'; inferred
                              if None.
        """
        self.filepath = Path(filepath)
        self.timestamp_format = timestamp_format
        self._readings: Optional[List[Reading]] = None
        self._devices: Optional[List[Device]] = None

    def load(self) -> Tuple[List[Reading], List[Device]]:
        """Load and parse the export.

        Returns:
            Tuple of (readings ordered by timestamp, devices).

        Raises:
            ValueError: If the required columns are missing.
        """
        df = pd.read_csv(self.filepath, skiprows=1, encoding='utf-8-sig', dtype=str)

        glucose_col, unit = self._find_glucose_column(df)
        missing = [
            c for c in (self.DEVICE_COLUMN, self.SERIAL_COLUMN, self.TIMESTAMP_COLUMN)
            if c not in df.columns
        ]
        if glucose_col is None or missing:
            raise ValueError(
                f"Could not find required columns in LibreView file. "
                f"Found columns: {list(df.columns)}"
            )

        df['timestamp'] = pd.to_datetime(
            df[self.TIMESTAMP_COLUMN], format=self.timestamp_format, errors='coerce'
        )
        df['glucose'] = pd.to_numeric(df[glucose_col], errors='coerce')
        df = df.dropna(subset=['timestamp', 'glucose'])
        df = df.sort_values('timestamp', kind='mergesort').reset_index(drop=True)

        devices: Dict[Tuple[str, str], Device] = {}
        readings = []
        names = df[self.DEVICE_COLUMN].fillna('')
        serials = df[self.SERIAL_COLUMN].fillna('')
        for name, serial, timestamp, glucose in zip(names, serials, df['timestamp'], df['glucose']):
            key = (name, serial)
            if key not in devices:
                devices[key] = Device(
                    id=str(uuid.uuid5(DEVICE_NAMESPACE, f"{name}|{serial}")),
                    name=name,
                    serial_number=serial,
                )
            readings.append(
                Reading(
                    timestamp=timestamp.to_pydatetime(),
                    value=float(glucose),
                    unit=unit,
                    device_ref=devices[key].reference,
                )
            )

        logger.info("Loaded %d readings from %d device(s) in %s",
                    len(readings), len(devices), self.filepath.name)
        self._readings = readings
        self._devices = list(devices.values())
        return self._readings, self._devices

    def _find_glucose_column(self, df: pd.DataFrame) -> Tuple[Optional[str], Optional[str]]:
        """Find the historic glucose column and the unit it names."""
        for column in df.columns:
            if not column.startswith(self.HISTORIC_PREFIX):
                continue
            for unit in GLUCOSE_UNITS:
                if column.endswith(unit):
                    return column, unit
        return None, None

    @property
    def readings(self) -> List[Reading]:
        """Get loaded readings (loads on first access)."""
        if self._readings is None:
            self.load()
        return self._readings

    @property
    def devices(self) -> List[Device]:
        """Get devices found in the export (loads on first access)."""
        if self._devices is None:
            self.load()
        return self._devices
