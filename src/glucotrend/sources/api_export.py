"""Lectura de exportaciones JSON de lecturas de glucosa de la API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from dateutil import parser

from glucotrend.dates import ensure_utc_iso
from glucotrend.errors import InvalidDateError
from glucotrend.glucose import MG_DL, UNITS
from glucotrend.model import GlucoseReading

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiExportPaths:
    """Where API reading exports are dropped.

    Attributes:
        root: Folder containing the exports.
        pattern: Glob matched by export files.
    """

    root: Path
    pattern: str = "glucose_*.json"


class ApiExportSource:
    """Reading source over ``GET /glucose-readings`` JSON dumps."""

    def __init__(self, paths: ApiExportPaths) -> None:
        self._paths = paths

    def validate(self) -> None:
        """Validate that the export directory exists."""
        if not self._paths.root.exists():
            raise FileNotFoundError(str(self._paths.root))

    def newest_json(self) -> Path:
        """Return the newest export matching ``paths.pattern`` by mtime."""
        files = sorted(
            self._paths.root.glob(self._paths.pattern),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )
        if not files:
            raise FileNotFoundError(
                f"No {self._paths.pattern} in {self._paths.root}"
            )
        return files[0]

    def load_readings(self, path: Path) -> list[GlucoseReading]:
        """Parse an API export into typed readings.

        Args:
            path: Path to JSON file.

        Returns:
            Readings sorted by ``reading_time``.

        Raises:
            ValueError: If the JSON is not a list or a reading has no time.
        """
        text = path.read_text(encoding="utf-8")
        raw = _extract_json_list(text)
        if not isinstance(raw, list):
            raise ValueError("Glucose export JSON must be a list")

        out: list[GlucoseReading] = []
        for item in raw:
            reading = _item_to_reading(item)
            if reading is not None:
                out.append(reading)
        skipped = len(raw) - len(out)
        if skipped:
            logger.debug("Skipped %d unusable items in %s", skipped, path.name)
        out.sort(key=lambda r: r.reading_time)
        return out


def _optional_text(item: dict[str, Any], key: str) -> str | None:
    """Texto opcional normalizado (vacio -> None)."""
    value = item.get(key)
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def _item_to_reading(item: Any) -> GlucoseReading | None:
    """Convierte un item dict en GlucoseReading; None si falta el valor."""
    if not isinstance(item, dict):
        return None
    value = item.get("reading")
    if value is None:
        return None
    unit = item.get("unit") or MG_DL
    if unit not in UNITS:
        logger.warning("Skipping reading with unknown unit %r", unit)
        return None
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        logger.warning("Skipping reading with non-numeric value %r", value)
        return None
    return GlucoseReading(
        reading_time=_parse_reading_time(item.get("reading_time")),
        value=numeric,
        unit=unit,
        meal_context=_optional_text(item, "meal_context"),
        notes=_optional_text(item, "notes"),
    )


def _extract_json_list(text: str) -> Any:
    """Extract JSON array from text, tolerating leading non-JSON (e.g. log lines)."""
    start = text.find("[")
    if start >= 0:
        return json.loads(text[start:])
    return json.loads(text)


def _parse_reading_time(value: Any) -> datetime:
    """Parse the stored timestamp; values without zone are UTC."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Missing reading_time")
    stamp = ensure_utc_iso(value.strip())
    try:
        return parser.isoparse(stamp)
    except ValueError as exc:
        raise InvalidDateError(value) from exc
