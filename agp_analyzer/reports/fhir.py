"""
FHIR-style resource construction for summary bundles.

Builds plain dicts (JSON-ready) for Observations and Devices in a
'collection' Bundle.
"""

import math
from typing import Any, Dict, List, Optional

from agp_analyzer.metrics.reading import Device, Reading

UCUM_SYSTEM = "http://unitsofmeasure.org"
LOINC_SYSTEM = "http://loinc.org"
CATEGORY_SYSTEM = "http://terminology.hl7.org/CodeSystem/observation-category"
DATA_ABSENT_SYSTEM = "http://terminology.hl7.org/CodeSystem/data-absent-reason"
DEVICE_IDENTIFIER_SYSTEM = "http://example.com/devices"

INTERSTITIAL_GLUCOSE_CODE = "99504-3"
INTERSTITIAL_GLUCOSE_DISPLAY = "Glucose [Mass/volume] in Interstitial fluid"

LABORATORY_CATEGORY = [
    {
        'coding': [
            {'system': CATEGORY_SYSTEM, 'code': 'laboratory', 'display': 'Laboratory'},
        ],
    },
]


def full_url(resource_id: str) -> str:
    return f"urn:uuid:{resource_id}"


def round_value(value: float) -> float:
    """Round to two decimals for display."""
    return round(float(value), 2)


def value_quantity(value: float, unit: str, code: Optional[str] = None, rounded: bool = True) -> Dict[str, Any]:
    return {
        'value': round_value(value) if rounded else value,
        'unit': unit,
        'system': UCUM_SYSTEM,
        'code': code or unit,
    }


def value_or_absent(value: Optional[float], unit: str, code: Optional[str] = None) -> Dict[str, Any]:
    """valueQuantity, or dataAbsentReason when value is missing."""
    if value is None or math.isnan(value):
        return {
            'dataAbsentReason': {
                'coding': [{'system': DATA_ABSENT_SYSTEM, 'code': 'not-applicable'}],
            },
        }
    return {'valueQuantity': value_quantity(value, unit, code)}


def observation(
    resource_id: str,
    coding: List[Dict[str, str]],
    value: Optional[float],
    unit: str,
    unit_code: Optional[str] = None,
    effective_period: Optional[Dict[str, str]] = None,
    has_member: Optional[List[str]] = None
) -> Dict[str, Any]:
    """Build a summary Observation resource."""
    resource: Dict[str, Any] = {
        'resourceType': 'Observation',
        'id': resource_id,
        'status': 'final',
        'category': LABORATORY_CATEGORY,
        'code': {'coding': coding},
    }
    if effective_period is not None:
        resource['effectivePeriod'] = effective_period
    resource.update(value_or_absent(value, unit, unit_code))
    if has_member:
        resource['hasMember'] = [{'reference': full_url(m)} for m in has_member]
    return resource


def reading_observation(resource_id: str, reading: Reading) -> Dict[str, Any]:
    """Build the interstitial glucose Observation echoing a source reading."""
    resource: Dict[str, Any] = {
        'resourceType': 'Observation',
        'id': resource_id,
        'status': 'final',
        'category': LABORATORY_CATEGORY,
        'code': {
            'coding': [
                {
                    'system': LOINC_SYSTEM,
                    'code': INTERSTITIAL_GLUCOSE_CODE,
                    'display': INTERSTITIAL_GLUCOSE_DISPLAY,
                },
            ],
        },
        'effectiveDateTime': reading.timestamp.isoformat(),
        'valueQuantity': value_quantity(reading.value, reading.unit, rounded=False),
    }
    if reading.device_ref:
        resource['device'] = {'reference': reading.device_ref}
    return resource


def device_resource(device: Device) -> Dict[str, Any]:
    resource: Dict[str, Any] = {
        'resourceType': 'Device',
        'id': device.id,
        'identifier': [],
        'deviceName': [],
    }
    if device.serial_number:
        resource['identifier'].append(
            {'system': DEVICE_IDENTIFIER_SYSTEM, 'value': device.serial_number}
        )
    if device.name:
        resource['deviceName'].append({'name': device.name, 'type': 'user-friendly-name'})
    return resource


def bundle_entry(resource: Dict[str, Any]) -> Dict[str, Any]:
    return {'fullUrl': full_url(resource['id']), 'resource': resource}
