"""Conversion de unidades de glucosa (mg/dL <-> mmol/L) y rangos de referencia."""

from __future__ import annotations

import math

from glucotrend.errors import UnknownUnitError
from glucotrend.model import GlucoseRanges, GlucoseStatus, GlucoseUnit, ValidationRange

MG_DL: GlucoseUnit = "mg/dL"
MMOL_L: GlucoseUnit = "mmol/L"
UNITS: tuple[GlucoseUnit, ...] = (MG_DL, MMOL_L)

MG_DL_PER_MMOL_L = 18
LOW_MG_DL = 70
HIGH_MG_DL = 180

MEAL_CONTEXT_OPTIONS: tuple[tuple[str, str], ...] = (
    ("before_breakfast", "Before Breakfast"),
    ("after_breakfast", "After Breakfast"),
    ("before_lunch", "Before Lunch"),
    ("after_lunch", "After Lunch"),
    ("before_dinner", "Before Dinner"),
    ("after_dinner", "After Dinner"),
    ("bedtime", "Bedtime"),
    ("other", "Other"),
)

_STATUS_LOW = GlucoseStatus(status="low", color="#ef4444", label="Low")
_STATUS_HIGH = GlucoseStatus(status="high", color="#f59e0b", label="High")
_STATUS_NORMAL = GlucoseStatus(status="normal", color="#10b981", label="Normal")


def convert_mg_dl_to_mmol_l(mg_dl: float) -> float:
    """mg/dL to mmol/L, one decimal place.

    Rounding is lossy: converting back does not always give the input.
    """
    return _round_half_up((mg_dl / MG_DL_PER_MMOL_L) * 10) / 10


def convert_mmol_l_to_mg_dl(mmol_l: float) -> float:
    """mmol/L to mg/dL, nearest integer."""
    return float(_round_half_up(mmol_l * MG_DL_PER_MMOL_L))


def convert_glucose_value(
    value: float, from_unit: GlucoseUnit | str, to_unit: GlucoseUnit | str
) -> float:
    """Convert ``value`` between units; identity when both are equal.

    Raises:
        UnknownUnitError: If either unit is not mg/dL or mmol/L.
    """
    _check_unit(from_unit)
    _check_unit(to_unit)
    if from_unit == to_unit:
        return value
    if from_unit == MG_DL:
        return convert_mg_dl_to_mmol_l(value)
    return convert_mmol_l_to_mg_dl(value)


def format_glucose_value(value: float, unit: GlucoseUnit | str) -> str:
    """Text for a reading: one decimal in mmol/L, integer in mg/dL."""
    _check_unit(unit)
    if unit == MMOL_L:
        return f"{value:.1f}"
    return str(_round_half_up(value))


def get_glucose_status(value: float, unit: GlucoseUnit | str) -> GlucoseStatus:
    """Classify a reading as low (<70 mg/dL), high (>180 mg/dL) or normal."""
    mg_dl = convert_glucose_value(value, unit, MG_DL)
    if mg_dl < LOW_MG_DL:
        return _STATUS_LOW
    if mg_dl > HIGH_MG_DL:
        return _STATUS_HIGH
    return _STATUS_NORMAL


def get_glucose_ranges(unit: GlucoseUnit | str) -> GlucoseRanges:
    """Band labels for the legend."""
    _check_unit(unit)
    if unit == MG_DL:
        return GlucoseRanges(low="< 70", normal="70 - 180", high="> 180")
    return GlucoseRanges(low="< 3.9", normal="3.9 - 10.0", high="> 10.0")


def get_validation_ranges(unit: GlucoseUnit | str) -> ValidationRange:
    """Input limits for the reading field."""
    _check_unit(unit)
    if unit == MG_DL:
        return ValidationRange(min=0, max=1000, step=1)
    return ValidationRange(min=0, max=55, step=0.1)


def _check_unit(unit: str) -> None:
    if unit not in UNITS:
        raise UnknownUnitError(unit)


def _round_half_up(value: float) -> int:
    # Halves round toward +inf.
    return math.floor(value + 0.5)
