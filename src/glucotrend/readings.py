"""Conversion de lecturas tipadas a DataFrame para analitica."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

import pandas as pd

from glucotrend.dates import to_milliseconds
from glucotrend.glucose import MG_DL, convert_glucose_value
from glucotrend.model import GlucoseReading, GlucoseUnit

FRAME_COLUMNS = ["time", "datetime", "value", "unit", "meal_context"]


def readings_to_frame(
    readings: Sequence[GlucoseReading], unit: GlucoseUnit = MG_DL
) -> pd.DataFrame:
    """One row per reading, values converted to ``unit``, sorted by time.

    Stored reading times carry the user's wall-clock digits stamped as UTC;
    ``time`` puts those digits back on the local clock so rows compare
    directly with :func:`glucotrend.dates.calculate_time_range` bounds.

    Columns: time (epoch ms), datetime (wall clock), value, unit,
    meal_context.
    """
    rows = []
    for r in readings:
        wall_clock = _wall_clock(r.reading_time)
        rows.append(
            {
                "time": to_milliseconds(wall_clock),
                "datetime": wall_clock,
                "value": convert_glucose_value(r.value, r.unit, unit),
                "unit": unit,
                "meal_context": r.meal_context,
            }
        )
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    if df.empty:
        return df
    return df.sort_values("time").reset_index(drop=True)


def _wall_clock(reading_time: datetime) -> datetime:
    if reading_time.tzinfo is None:
        return reading_time
    return reading_time.astimezone(timezone.utc).replace(tzinfo=None)
