from __future__ import annotations

import numpy as np
import pytest

from agp_analyzer.exceptions import InvalidUnit
from agp_analyzer.utils.units import MG_DL, MMOL_L, convert_glucose_value, convert_values


def test_identity_when_units_match() -> None:
    assert convert_glucose_value(123.4, MG_DL, MG_DL) == 123.4
    assert convert_glucose_value(6.5, MMOL_L, MMOL_L) == 6.5


def test_mg_dl_to_mmol_l_divides_by_18() -> None:
    assert convert_glucose_value(180, MG_DL, MMOL_L) == pytest.approx(10.0)


def test_mmol_l_to_mg_dl_multiplies_by_18() -> None:
    assert convert_glucose_value(3.0, MMOL_L, MG_DL) == pytest.approx(54.0)


def test_converts_arrays() -> None:
    out = convert_glucose_value(np.array([54.0, 70.0, 180.0]), MG_DL, MMOL_L)
    assert out.tolist() == pytest.approx([3.0, 70 / 18, 10.0])


@pytest.mark.parametrize("from_unit,to_unit", [("mg/dl", MG_DL), (MG_DL, "mmol"), ("%", "%")])
def test_invalid_units_raise(from_unit: str, to_unit: str) -> None:
    with pytest.raises(InvalidUnit):
        convert_glucose_value(100, from_unit, to_unit)


def test_invalid_unit_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        convert_glucose_value(100, MG_DL, "g/L")


def test_convert_values_mixed_units_keeps_order() -> None:
    out = convert_values([90.0, 5.0, 180.0], [MG_DL, MMOL_L, MG_DL], MG_DL)
    assert isinstance(out, np.ndarray)
    assert out.tolist() == pytest.approx([90.0, 90.0, 180.0])


def test_convert_values_single_unit() -> None:
    out = convert_values(np.array([18.0, 36.0]), MG_DL, MMOL_L)
    assert out.tolist() == pytest.approx([1.0, 2.0])


def test_convert_values_empty() -> None:
    assert convert_values([], [], MMOL_L).size == 0


def test_convert_values_rejects_unknown_reading_unit() -> None:
    with pytest.raises(InvalidUnit):
        convert_values([1.0, 2.0], [MG_DL, "mmol"], MG_DL)


@pytest.mark.parametrize("value", [1e-6, 0.5, 54.0, 123.456, 1e6])
@pytest.mark.parametrize("a,b", [(MG_DL, MMOL_L), (MMOL_L, MG_DL)])
def test_conversion_round_trip(value: float, a: str, b: str) -> None:
    there = convert_glucose_value(value, a, b)
    assert convert_glucose_value(there, b, a) == pytest.approx(value, rel=1e-12)
