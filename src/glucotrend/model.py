"""Modelos tipados para lecturas de glucosa y resultados de analitica."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

GlucoseUnit = Literal["mg/dL", "mmol/L"]
TrendDirection = Literal["increasing", "decreasing", "stable"]
RangeMode = Literal["hour", "day", "week", "custom"]


@dataclass(frozen=True)
class GlucoseReading:
    """One glucose reading as served by the API export."""

    reading_time: datetime
    value: float
    unit: GlucoseUnit
    meal_context: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class TimeRange:
    """Inclusive analytics window, in epoch milliseconds and UTC ISO form."""

    start_ms: int
    end_ms: int
    start_iso: str
    end_iso: str


@dataclass(frozen=True)
class DateRangeSelection:
    """Wall-clock bounds as shown in the range picker."""

    start_date: str
    end_date: str


@dataclass(frozen=True)
class ConfidenceInterval:
    """Interval around the sample mean."""

    lower: float
    upper: float
    mean: float


@dataclass(frozen=True)
class Trend:
    """Direction of change between the two halves of a series."""

    direction: TrendDirection
    strength: float


@dataclass(frozen=True)
class GlucoseStatus:
    """Classification of a single reading against the standard band."""

    status: Literal["low", "normal", "high"]
    color: str
    label: str


@dataclass(frozen=True)
class GlucoseRanges:
    """Band labels for display, in the unit they were requested for."""

    low: str
    normal: str
    high: str


@dataclass(frozen=True)
class ValidationRange:
    """Accepted input limits for a reading field."""

    min: float
    max: float
    step: float
