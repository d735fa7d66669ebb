"""
FHIR bundle loader.

Extracts interstitial glucose Observations (LOINC 99504-3) and Device
resources from a FHIR-style 'collection' Bundle.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import pandas as pd

from agp_analyzer.metrics.reading import Device, Reading, sort_readings
from agp_analyzer.reports.fhir import INTERSTITIAL_GLUCOSE_CODE

logger = logging.getLogger(__name__)


class FhirBundleLoader:
    """Loader for FHIR bundles of CGM Observations."""

    def __init__(self, source: Union[str, Path, Dict[str, Any]]):
        """Initialize loader.

        Args:
            source: Bundle dict, or path to a bundle JSON file.
        """
        self.source = source
        self._readings: Optional[List[Reading]] = None
        self._devices: Optional[List[Device]] = None

    def _bundle(self) -> Dict[str, Any]:
        if isinstance(self.source, dict):
            return self.source
        with open(self.source, 'r') as f:
            return json.load(f)

    def load(self) -> Tuple[List[Reading], List[Device]]:
        """Parse the bundle.

        Returns:
            Tuple of (readings ordered by timestamp, devices).

        Raises:
            ValueError: If the source is not a Bundle.
        """
        bundle = self._bundle()
        if bundle.get('resourceType') != 'Bundle':
            raise ValueError(
                f"Expected a FHIR Bundle, got resourceType {bundle.get('resourceType')!r}"
            )

        readings = []
        devices = []
        for entry in bundle.get('entry', []):
            resource = entry.get('resource', {})
            if resource.get('resourceType') == 'Device':
                devices.append(self._parse_device(resource))
            elif resource.get('resourceType') == 'Observation':
                reading = self._parse_observation(resource)
                if reading is not None:
                    readings.append(reading)

        readings = sort_readings(readings)
        logger.info("Loaded %d glucose observations and %d devices", len(readings), len(devices))
        self._readings = readings
        self._devices = devices
        return readings, devices

    @staticmethod
    def _parse_device(resource: Dict[str, Any]) -> Device:
        names = resource.get('deviceName') or [{}]
        identifiers = resource.get('identifier') or [{}]
        return Device(
            id=resource['id'],
            name=names[0].get('name', ''),
            serial_number=identifiers[0].get('value', ''),
        )

    @staticmethod
    def _parse_observation(resource: Dict[str, Any]) -> Optional[Reading]:
        """Reading from an interstitial glucose Observation, else None."""
        codings = resource.get('code', {}).get('coding', [])
        if not any(c.get('code') == INTERSTITIAL_GLUCOSE_CODE for c in codings):
            return None
        quantity = resource.get('valueQuantity')
        effective = resource.get('effectiveDateTime')
        if not quantity or not effective or quantity.get('value') is None:
            return None

        return Reading(
            timestamp=pd.Timestamp(effective).to_pydatetime(),
            value=float(quantity['value']),
            unit=quantity.get('code') or quantity.get('unit'),
            device_ref=(resource.get('device') or {}).get('reference'),
            id=resource.get('id'),
        )

    @property
    def readings(self) -> List[Reading]:
        """Get loaded readings (loads on first access)."""
        if self._readings is None:
            self.load()
        return self._readings

    @property
    def devices(self) -> List[Device]:
        """Get loaded devices (loads on first access)."""
        if self._devices is None:
            self.load()
        return self._devices
