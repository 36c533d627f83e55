"""Utilidades de fechas: strings de reloj local, instantes UTC y rangos.

Los campos de fecha/hora del formulario trabajan con strings de "reloj de
pared" (``YYYY-MM-DDTHH:MM``) sin zona horaria. Las lecturas se guardan
estampando esos mismos digitos como UTC: una hora cargada a las 20:36 se
guarda como ``20:36Z`` y se vuelve a mostrar como 20:36 para cualquier
usuario, sin importar su zona. No es una conversion de zona horaria real y
no hay que "corregirla": el resto de la aplicacion depende de este ida y
vuelta exacto.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone, tzinfo

import pandas as pd
from dateutil import parser, tz

from glucotrend.errors import InvalidDateError, InvalidTimeRangeError
from glucotrend.model import DateRangeSelection, RangeMode, TimeRange

_WALL_CLOCK_FORMAT = "%Y-%m-%dT%H:%M"
_TZ_SUFFIX = re.compile(r"(Z|[+-]\d{2}:?\d{2})$")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def local_zone() -> tzinfo:
    """Return the viewer's local timezone."""
    return tz.tzlocal()


def parse_local_datetime(text: str) -> datetime:
    """Parse a wall-clock string as local time.

    Date-only strings get a ``00:00`` time part; a bare trailing ``T`` is
    rejected. An empty string means "now".

    Args:
        text: ``YYYY-MM-DD`` or ``YYYY-MM-DDTHH:MM[:SS]``.

    Returns:
        Aware datetime in the local zone.

    Raises:
        InvalidDateError: If the string is not a valid date/time.
    """
    zone = local_zone()
    if not text:
        return datetime.now(tz=zone)

    date_part, sep, time_part = text.partition("T")
    if sep and not time_part:
        raise InvalidDateError(text)
    full = f"{date_part}T{time_part or '00:00'}"
    try:
        parsed = parser.isoparse(full)
    except (ValueError, OverflowError) as exc:
        raise InvalidDateError(text) from exc

    if parsed.tzinfo is not None:
        return parsed.astimezone(zone)
    return parsed.replace(tzinfo=zone)


def to_local_datetime_string(value: datetime) -> str:
    """Format a point in time with local wall-clock fields (``YYYY-MM-DDTHH:MM``).

    Naive datetimes are taken as already local.
    """
    if value.tzinfo is not None:
        value = value.astimezone(local_zone())
    return value.strftime(_WALL_CLOCK_FORMAT)


def local_datetime_to_utc_iso(text: str) -> str:
    """Stamp the wall-clock digits of ``text`` as UTC.

    ``"2025-08-17T20:36"`` becomes ``"2025-08-17T20:36:00.000Z"`` in every
    local zone. Precision is the minute, like the form field.

    Raises:
        InvalidDateError: If the string is not a valid date/time.
    """
    if not text:
        return ""
    local = parse_local_datetime(text)
    stamped = datetime(
        local.year,
        local.month,
        local.day,
        local.hour,
        local.minute,
        tzinfo=timezone.utc,
    )
    return _format_utc_iso(stamped)


def utc_timestamp_to_local_datetime_string(utc_timestamp: str) -> str:
    """Inverse of :func:`local_datetime_to_utc_iso`.

    The UTC clock fields are returned as a wall-clock string; a timestamp
    without zone marker is taken as UTC.

    Raises:
        InvalidDateError: If the timestamp cannot be parsed.
    """
    if not utc_timestamp:
        return ""
    try:
        parsed = parser.isoparse(utc_timestamp)
    except (ValueError, OverflowError) as exc:
        raise InvalidDateError(utc_timestamp) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).strftime(_WALL_CLOCK_FORMAT)


def ensure_utc_iso(timestamp: str) -> str:
    """Append ``Z`` unless the timestamp already carries a zone marker."""
    if not timestamp:
        return timestamp
    if _TZ_SUFFIX.search(timestamp):
        return timestamp
    return f"{timestamp}Z"


def to_milliseconds(value: str | int | float | datetime) -> int:
    """Convert a timestamp to epoch milliseconds.

    Numbers pass through; naive datetimes and zone-less strings are local.

    Raises:
        InvalidDateError: If a string cannot be parsed.
    """
    if isinstance(value, bool):
        raise TypeError("bool is not a timestamp")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            value = parser.isoparse(value)
        except (ValueError, OverflowError) as exc:
            raise InvalidDateError(value) from exc
    if value.tzinfo is None:
        value = value.replace(tzinfo=local_zone())
    return _epoch_ms(value)


def calculate_time_range(start_date: str, end_date: str) -> TimeRange:
    """Build the analytics window for two wall-clock bounds.

    An end bound without time, or with a ``00:00`` time, is stretched to
    ``23:59:59.999`` so that picking a single day covers the whole day.

    Args:
        start_date: Local wall-clock start.
        end_date: Local wall-clock end.

    Returns:
        TimeRange with millisecond and UTC ISO forms.

    Raises:
        InvalidDateError: If either bound is malformed.
        InvalidTimeRangeError: If start falls after end.
    """
    start = parse_local_datetime(start_date)
    end = parse_local_datetime(end_date)

    _, has_time, time_part = end_date.partition("T")
    if not has_time or time_part == "00:00":
        end = end.replace(hour=23, minute=59, second=59, microsecond=999000)

    start_ms = _epoch_ms(start)
    end_ms = _epoch_ms(end)
    if start_ms > end_ms:
        raise InvalidTimeRangeError(
            f"Range start {start_date!r} is after end {end_date!r}"
        )

    return TimeRange(
        start_ms=start_ms,
        end_ms=end_ms,
        start_iso=_format_utc_iso(start),
        end_iso=_format_utc_iso(end),
    )


def get_default_time_range(
    mode: RangeMode | str, now: datetime | None = None
) -> DateRangeSelection:
    """Default picker bounds for a preset window.

    ``day`` (and ``custom`` or unknown modes) return today's midnight for both
    bounds; :func:`calculate_time_range` extends that end to the end of day.
    """
    current = now if now is not None else datetime.now(tz=local_zone())
    if current.tzinfo is not None:
        current = current.astimezone(local_zone())

    if mode == "hour":
        return DateRangeSelection(
            start_date=to_local_datetime_string(current - timedelta(hours=1)),
            end_date=to_local_datetime_string(current),
        )
    if mode == "week":
        return DateRangeSelection(
            start_date=to_local_datetime_string(current - timedelta(days=7)),
            end_date=to_local_datetime_string(current),
        )

    today = _midnight(current.date())
    return DateRangeSelection(
        start_date=to_local_datetime_string(today),
        end_date=to_local_datetime_string(today),
    )


def filter_by_time_range(
    points: pd.DataFrame, time_range: TimeRange, column: str = "time"
) -> pd.DataFrame:
    """Keep rows whose millisecond ``column`` falls inside the range."""
    if points.empty:
        return points.copy()
    times = points[column]
    mask = (times >= time_range.start_ms) & (times <= time_range.end_ms)
    return points.loc[mask].reset_index(drop=True)


def format_timestamp_for_display(timestamp_ms: int) -> str:
    """Chart axis label (local ``HH:MM``)."""
    return _from_epoch_ms(timestamp_ms).strftime("%H:%M")


def format_timestamp_for_tooltip(timestamp_ms: int) -> str:
    """Chart tooltip label, e.g. ``Aug 15, 14:30``."""
    local = _from_epoch_ms(timestamp_ms)
    return f"{local:%b} {local.day}, {local:%H:%M}"


def _midnight(day: date) -> datetime:
    return datetime(day.year, day.month, day.day)


def _epoch_ms(value: datetime) -> int:
    return (value - _EPOCH) // _ONE_MS


def _from_epoch_ms(timestamp_ms: int) -> datetime:
    return (_EPOCH + timestamp_ms * _ONE_MS).astimezone(local_zone())


def _format_utc_iso(value: datetime) -> str:
    utc = value.astimezone(timezone.utc)
    millis = utc.microsecond // 1000
    return f"{utc.strftime('%Y-%m-%dT%H:%M:%S')}.{millis:03d}Z"
