"""Calculos de tendencia para graficos de impacto (insulina, comidas, glucosa).

Ninguna funcion lanza excepciones por falta de datos: con series mas cortas
que el minimo requerido devuelven un valor de respaldo documentado, para que
un tablero nunca se caiga por una ventana con pocas lecturas.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

import pandas as pd
from scipy.stats import norm

from glucotrend.model import ConfidenceInterval, Trend

_STABLE_THRESHOLD = 0.1
_MIN_BASELINE = 0.1


@dataclass(frozen=True)
class SmoothingOptions:
    """Configuration for exponential smoothing."""

    alpha: float = 0.3


@dataclass(frozen=True)
class IntervalOptions:
    """Configuration for confidence intervals."""

    confidence_level: float = 0.95

    def __post_init__(self) -> None:
        if not 0 < self.confidence_level < 1:
            raise ValueError(
                f"confidence_level must be in (0, 1): {self.confidence_level}"
            )


@dataclass(frozen=True)
class OutlierOptions:
    """Configuration for IQR outlier fences."""

    factor: float = 1.5


def calculate_moving_average(
    data: Sequence[float], window_size: int
) -> list[float]:
    """Trailing simple moving average.

    Output item ``i`` is the mean of ``data[i : i + window_size]``, so the
    result lines up with the tail of the input series.

    Args:
        data: Chronological values.
        window_size: Number of samples per window.

    Returns:
        ``len(data) - window_size + 1`` means, or ``data`` unchanged when it
        is shorter than the window.
    """
    if len(data) < window_size or window_size <= 0:
        return list(data)
    means = _series(data).rolling(window=window_size).mean()
    return means.iloc[window_size - 1 :].tolist()


def calculate_ema(
    data: Sequence[float], options: SmoothingOptions | None = None
) -> list[float]:
    """Exponential moving average seeded with the first sample."""
    if len(data) == 0:
        return []
    alpha = (options or SmoothingOptions()).alpha
    return _series(data).ewm(alpha=alpha, adjust=False).mean().tolist()


def calculate_confidence_interval(
    data: Sequence[float], options: IntervalOptions | None = None
) -> ConfidenceInterval:
    """Normal-approximation confidence interval around the sample mean.

    The z-score comes from the inverse normal CDF for ``confidence_level``,
    rounded to two decimals like a printed z-table (0.95 -> 1.96).

    Args:
        data: Sample values.
        options: Interval configuration.

    Returns:
        Interval with Bessel-corrected spread. With fewer than two points
        the interval collapses onto the single value (0 when empty).
    """
    series = _series(data)
    if len(series) < 2:
        value = float(series.iloc[0]) if len(series) else 0.0
        return ConfidenceInterval(lower=value, upper=value, mean=value)

    level = (options or IntervalOptions()).confidence_level
    mean = float(series.mean())
    std_dev = float(series.std(ddof=1))
    margin = z_score(level) * std_dev / math.sqrt(len(series))
    return ConfidenceInterval(lower=mean - margin, upper=mean + margin, mean=mean)


def z_score(confidence_level: float) -> float:
    """Two-sided z-score for a confidence level, two decimals."""
    if not 0 < confidence_level < 1:
        raise ValueError(f"confidence_level must be in (0, 1): {confidence_level}")
    return round(float(norm.ppf(0.5 + confidence_level / 2)), 2)


def calculate_trend(data: Sequence[float]) -> Trend:
    """Compare the mean of the second half of a series with the first half.

    Differences below 0.1 are ``stable``. Strength is the relative change,
    with a 0.1 floor on the baseline, clamped to ``[0, 1]``.
    """
    if len(data) < 2:
        return Trend(direction="stable", strength=0.0)

    series = _series(data)
    split = len(series) // 2
    first_avg = float(series.iloc[:split].mean())
    second_avg = float(series.iloc[split:].mean())
    difference = second_avg - first_avg

    if abs(difference) < _STABLE_THRESHOLD:
        return Trend(direction="stable", strength=0.0)

    strength = abs(difference) / max(abs(first_avg), _MIN_BASELINE)
    return Trend(
        direction="increasing" if difference > 0 else "decreasing",
        strength=min(strength, 1.0),
    )


def calculate_loess_smoothing(
    data: Sequence[float], window_size: int = 5
) -> list[float]:
    """Centered local average, same length as the input.

    Windows span ``window_size // 2`` samples each side and shrink at the
    edges. Not a true LOESS fit: no local regression, only the mean.
    """
    if len(data) < window_size or window_size <= 0:
        return list(data)
    half = window_size // 2
    smoothed = (
        _series(data).rolling(window=2 * half + 1, center=True, min_periods=1).mean()
    )
    return smoothed.tolist()


def detect_outliers(
    data: Sequence[float], options: OutlierOptions | None = None
) -> list[float]:
    """Values outside the IQR fences, in their original order.

    Quartiles are taken by index on the sorted copy
    (``floor(n * 0.25)``, ``floor(n * 0.75)``), not interpolated.
    """
    if len(data) < 4:
        return []
    factor = (options or OutlierOptions()).factor
    ordered = sorted(data)
    q1 = ordered[math.floor(len(ordered) * 0.25)]
    q3 = ordered[math.floor(len(ordered) * 0.75)]
    iqr = q3 - q1
    lower = q1 - factor * iqr
    upper = q3 + factor * iqr
    return [value for value in data if value < lower or value > upper]


def calculate_seasonality(data: Sequence[float], period: int) -> list[float]:
    """Replace each sample by the mean of its phase (``index % period``).

    Seasonal component only; trend and residual are discarded. Needs at
    least two full periods, otherwise ``data`` comes back unchanged.
    """
    if period <= 0 or len(data) < period * 2:
        return list(data)
    series = _series(data)
    phase = pd.Series(range(len(series))) % period
    return series.groupby(phase).transform("mean").tolist()


def _series(data: Sequence[float]) -> pd.Series:
    if isinstance(data, pd.Series):
        return data.reset_index(drop=True).astype(float)
    return pd.Series(list(data), dtype=float)
