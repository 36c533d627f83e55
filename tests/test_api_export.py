from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from glucotrend.errors import InvalidDateError
from glucotrend.sources.api_export import (
    ApiExportPaths,
    ApiExportSource,
    _extract_json_list,
    _parse_reading_time,
)


def _write(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_load_readings_parses_api_items(tmp_path: Path) -> None:
    p = _write(
        tmp_path / "glucose_2025-08-17.json",
        [
            {
                "id": 2,
                "reading": 6.1,
                "unit": "mmol/L",
                "reading_time": "2025-08-17T20:36:00.000Z",
                "meal_context": "after_dinner",
                "notes": "  pasta ",
            },
            {
                "id": 1,
                "reading": 104,
                "unit": "mg/dL",
                "reading_time": "2025-08-17T08:00:00",
            },
        ],
    )
    readings = ApiExportSource(ApiExportPaths(root=tmp_path)).load_readings(p)

    assert [r.value for r in readings] == [104.0, 6.1]
    first, second = readings
    assert first.reading_time == datetime(2025, 8, 17, 8, 0, tzinfo=timezone.utc)
    assert first.meal_context is None
    assert second.unit == "mmol/L"
    assert second.meal_context == "after_dinner"
    assert second.notes == "pasta"


def test_validate_raises_when_root_missing(tmp_path: Path) -> None:
    missing = tmp_path / "noexiste"
    src = ApiExportSource(ApiExportPaths(root=missing))
    with pytest.raises(FileNotFoundError, match=str(missing)):
        src.validate()


def test_newest_json_raises_when_no_files(tmp_path: Path) -> None:
    src = ApiExportSource(ApiExportPaths(root=tmp_path))
    with pytest.raises(FileNotFoundError, match="No glucose_"):
        src.newest_json()


def test_newest_json_ignores_other_files(tmp_path: Path) -> None:
    (tmp_path / "meals_2025.json").write_text("[]", encoding="utf-8")
    p = _write(tmp_path / "glucose_2025.json", [])
    assert ApiExportSource(ApiExportPaths(root=tmp_path)).newest_json() == p


def test_newest_json_custom_pattern(tmp_path: Path) -> None:
    _write(tmp_path / "glucose_2025.json", [])
    p = _write(tmp_path / "lecturas_2025.json", [])
    paths = ApiExportPaths(root=tmp_path, pattern="lecturas_*.json")
    assert ApiExportSource(paths).newest_json() == p


def test_load_readings_not_list_raises(tmp_path: Path) -> None:
    p = _write(tmp_path / "obj.json", {"detail": "Not authenticated"})
    src = ApiExportSource(ApiExportPaths(root=tmp_path))
    with pytest.raises(ValueError, match="must be a list"):
        src.load_readings(p)


def test_load_readings_invalid_json_raises(tmp_path: Path) -> None:
    p = tmp_path / "bad.json"
    p.write_text("not json", encoding="utf-8")
    src = ApiExportSource(ApiExportPaths(root=tmp_path))
    with pytest.raises(json.JSONDecodeError):
        src.load_readings(p)


def test_load_readings_skips_unusable_items(tmp_path: Path) -> None:
    p = _write(
        tmp_path / "mixed.json",
        [
            {"reading": 100, "unit": "mg/dL", "reading_time": "2025-08-17T08:00:00Z"},
            {"unit": "mg/dL", "reading_time": "2025-08-17T09:00:00Z"},
            {"reading": 5, "unit": "mg/L", "reading_time": "2025-08-17T10:00:00Z"},
            {"reading": "HI", "unit": "mg/dL", "reading_time": "2025-08-17T11:00:00Z"},
            {"reading": [120], "reading_time": "2025-08-17T12:00:00Z"},
            "string",
            None,
        ],
    )
    readings = ApiExportSource(ApiExportPaths(root=tmp_path)).load_readings(p)
    assert len(readings) == 1
    assert readings[0].value == 100.0


def test_load_readings_defaults_unit_to_mg_dl(tmp_path: Path) -> None:
    p = _write(
        tmp_path / "no_unit.json",
        [{"reading": 120, "reading_time": "2025-08-17T08:00:00Z"}],
    )
    readings = ApiExportSource(ApiExportPaths(root=tmp_path)).load_readings(p)
    assert readings[0].unit == "mg/dL"


def test_load_readings_missing_time_raises(tmp_path: Path) -> None:
    p = _write(tmp_path / "no_ts.json", [{"reading": 100, "unit": "mg/dL"}])
    src = ApiExportSource(ApiExportPaths(root=tmp_path))
    with pytest.raises(ValueError, match="Missing reading_time"):
        src.load_readings(p)


def test_parse_reading_time_keeps_offset() -> None:
    ts = _parse_reading_time("2025-08-17T20:36:00-03:00")
    assert ts.utcoffset() is not None
    assert ts.astimezone(timezone.utc).hour == 23


def test_parse_reading_time_invalid_raises() -> None:
    with pytest.raises(InvalidDateError):
        _parse_reading_time("ayer a la tarde")


def test_extract_json_list_with_leading_garbage() -> None:
    text = 'WARNING: token near expiry\n[{"reading": 100}]'
    raw = _extract_json_list(text)
    assert raw == [{"reading": 100}]
