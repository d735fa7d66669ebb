"""
Glucose unit conversion.

mg/dL and mmol/L are related by a fixed factor of 18.
"""

import numpy as np
import pandas as pd
from typing import Literal, Union

from agp_analyzer.exceptions import InvalidUnit

MG_DL = "mg/dL"
MMOL_L = "mmol/L"
GLUCOSE_UNITS = (MG_DL, MMOL_L)

GlucoseUnit = Literal["mg/dL", "mmol/L"]

MG_DL_PER_MMOL_L = 18.0

Number = Union[float, np.ndarray]


def validate_unit(unit: str) -> str:
    """Return unit unchanged, or raise InvalidUnit if unsupported."""
    if unit not in GLUCOSE_UNITS:
        raise InvalidUnit(unit)
    return unit


def convert_glucose_value(value: Number, from_unit: str, to_unit: str) -> Number:
    """Convert a glucose value (or array of values) between units.

    Args:
        value: Glucose value(s) in from_unit.
        from_unit: 'mg/dL' or 'mmol/L'.
        to_unit: 'mg/dL' or 'mmol/L'.

    Returns:
        Value(s) in to_unit. Identity when the units match.

    Raises:
        InvalidUnit: If either unit is unsupported.
    """
    validate_unit(from_unit)
    validate_unit(to_unit)
    if from_unit == to_unit:
        return value
    if from_unit == MG_DL:
        return value / MG_DL_PER_MMOL_L
    return value * MG_DL_PER_MMOL_L


def convert_values(
    values: Union[np.ndarray, pd.Series, list],
    units: Union[np.ndarray, pd.Series, list, str],
    to_unit: str
) -> np.ndarray:
    """Convert an array of values with per-value units to a single unit.

    Args:
        values: Glucose values.
        units: Unit of each value, or a single unit for all of them.
        to_unit: Target unit.

    Returns:
        Float array in to_unit, same order as values.
    """
    validate_unit(to_unit)
    values = np.asarray(values, dtype=float)

    if isinstance(units, str):
        return np.asarray(convert_glucose_value(values, units, to_unit), dtype=float)

    units = np.asarray(units, dtype=object)
    result = values.copy()
    for unit in sorted(set(units.tolist()), key=str):
        mask = units == unit
        result[mask] = convert_glucose_value(values[mask], unit, to_unit)
    return result
