"""Tests for glucose unit conversion and reference ranges."""

from __future__ import annotations

import pytest

from glucotrend.errors import UnknownUnitError
from glucotrend.glucose import (
    MEAL_CONTEXT_OPTIONS,
    convert_glucose_value,
    convert_mg_dl_to_mmol_l,
    convert_mmol_l_to_mg_dl,
    format_glucose_value,
    get_glucose_ranges,
    get_glucose_status,
    get_validation_ranges,
)


def test_mg_dl_to_mmol_l_one_decimal() -> None:
    assert convert_mg_dl_to_mmol_l(180) == 10.0
    assert convert_mg_dl_to_mmol_l(100) == 5.6
    assert convert_mg_dl_to_mmol_l(70) == 3.9


def test_mmol_l_to_mg_dl_integer() -> None:
    assert convert_mmol_l_to_mg_dl(5.5) == 99
    assert convert_mmol_l_to_mg_dl(10.0) == 180
    assert convert_mmol_l_to_mg_dl(3.9) == 70


def test_halves_round_up() -> None:
    # 6.25 * 18 = 112.5
    assert convert_mmol_l_to_mg_dl(6.25) == 113


def test_round_trip_is_approximate() -> None:
    back = convert_mmol_l_to_mg_dl(convert_mg_dl_to_mmol_l(123))
    assert back == pytest.approx(123, abs=1)
    assert back != 123


def test_convert_glucose_value_dispatch() -> None:
    assert convert_glucose_value(180, "mg/dL", "mmol/L") == 10.0
    assert convert_glucose_value(5.5, "mmol/L", "mg/dL") == 99
    assert convert_glucose_value(123.4, "mg/dL", "mg/dL") == 123.4
    assert convert_glucose_value(6.66, "mmol/L", "mmol/L") == 6.66


def test_convert_glucose_value_unknown_unit() -> None:
    with pytest.raises(UnknownUnitError, match="mg/L"):
        convert_glucose_value(100, "mg/L", "mmol/L")


def test_format_glucose_value() -> None:
    assert format_glucose_value(5.55, "mmol/L") in ("5.5", "5.6")
    assert format_glucose_value(6, "mmol/L") == "6.0"
    assert format_glucose_value(123.5, "mg/dL") == "124"
    assert format_glucose_value(99.2, "mg/dL") == "99"


@pytest.mark.parametrize(
    ("value", "unit", "expected"),
    [
        (69, "mg/dL", "low"),
        (70, "mg/dL", "normal"),
        (180, "mg/dL", "normal"),
        (181, "mg/dL", "high"),
        (3.5, "mmol/L", "low"),
        (6.0, "mmol/L", "normal"),
        (11.0, "mmol/L", "high"),
    ],
)
def test_glucose_status(value: float, unit: str, expected: str) -> None:
    assert get_glucose_status(value, unit).status == expected


def test_glucose_status_labels() -> None:
    status = get_glucose_status(50, "mg/dL")
    assert status.label == "Low"
    assert status.color.startswith("#")


def test_glucose_ranges_per_unit() -> None:
    assert get_glucose_ranges("mg/dL").normal == "70 - 180"
    assert get_glucose_ranges("mmol/L").high == "> 10.0"


def test_validation_ranges_per_unit() -> None:
    mg = get_validation_ranges("mg/dL")
    mmol = get_validation_ranges("mmol/L")
    assert (mg.min, mg.max, mg.step) == (0, 1000, 1)
    assert (mmol.min, mmol.max, mmol.step) == (0, 55, 0.1)


def test_meal_context_options() -> None:
    values = [value for value, _ in MEAL_CONTEXT_OPTIONS]
    assert values[0] == "before_breakfast"
    assert "bedtime" in values
    assert len(values) == 8
