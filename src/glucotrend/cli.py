"""CLI para resumir una exportacion de lecturas de glucosa en un rango de tiempo."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from glucotrend.dates import (
    calculate_time_range,
    filter_by_time_range,
    get_default_time_range,
)
from glucotrend.errors import GlucotrendError
from glucotrend.glucose import MG_DL, UNITS, format_glucose_value
from glucotrend.readings import readings_to_frame
from glucotrend.sources.api_export import ApiExportPaths, ApiExportSource
from glucotrend.trends import (
    calculate_confidence_interval,
    calculate_ema,
    calculate_trend,
    detect_outliers,
)

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="Resumen de glucosa: promedio, intervalo, tendencia y outliers."
    )
    parser.add_argument(
        "--export-dir",
        default=str(Path.home() / "glucotrend" / "exports"),
        help="Directorio con glucose_*.json (default: ~/glucotrend/exports).",
    )
    parser.add_argument(
        "--mode",
        choices=["hour", "day", "week", "custom"],
        default="day",
        help="Ventana predefinida (default: day).",
    )
    parser.add_argument("--start", help="Inicio YYYY-MM-DD[THH:MM] (modo custom).")
    parser.add_argument("--end", help="Fin YYYY-MM-DD[THH:MM] (modo custom).")
    parser.add_argument(
        "--unit",
        choices=list(UNITS),
        default=MG_DL,
        help="Unidad de salida (default: mg/dL).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log de depuracion.",
    )
    return parser.parse_args()


def main() -> int:
    """Run the summary CLI.

    Returns:
        Exit code (0 on success, 1 on missing export or bad dates).
    """
    ns = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    selection = get_default_time_range(ns.mode)
    start = ns.start or selection.start_date
    end = ns.end or selection.end_date

    source = ApiExportSource(ApiExportPaths(root=Path(ns.export_dir).expanduser()))
    try:
        time_range = calculate_time_range(start, end)
        source.validate()
        export_file = source.newest_json()
        readings = source.load_readings(export_file)
    except (FileNotFoundError, GlucotrendError, ValueError) as exc:
        print(f"Error: {exc}")
        return 1

    frame = filter_by_time_range(readings_to_frame(readings, ns.unit), time_range)
    logger.debug(
        "%d of %d readings inside %s .. %s",
        len(frame),
        len(readings),
        time_range.start_iso,
        time_range.end_iso,
    )

    print(f"OK: Export file: {export_file}")
    print(f"OK: Range: {start} -> {end}")
    if frame.empty:
        print("Sin lecturas en el rango.")
        return 0

    values = frame["value"].tolist()
    interval = calculate_confidence_interval(values)
    trend = calculate_trend(values)
    ema = calculate_ema(values)
    outliers = detect_outliers(values)

    def fmt(value: float) -> str:
        return format_glucose_value(value, ns.unit)

    print(f"Lecturas: {len(values)}")
    print(
        f"Promedio: {fmt(interval.mean)} {ns.unit} "
        f"(IC 95%: {fmt(interval.lower)} - {fmt(interval.upper)})"
    )
    print(f"Tendencia: {trend.direction} (fuerza {trend.strength:.2f})")
    print(f"EMA ultima: {fmt(ema[-1])} {ns.unit}")
    if outliers:
        print("Outliers: " + ", ".join(fmt(v) for v in outliers))
    return 0
