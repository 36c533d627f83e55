"""Jerarquía de excepciones del paquete."""

from __future__ import annotations


class GlucotrendError(Exception):
    """Base class for every error raised by glucotrend."""


class InvalidDateError(GlucotrendError, ValueError):
    """A date/time string could not be parsed."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid date string: {value}")
        self.value = value


class InvalidTimeRangeError(GlucotrendError, ValueError):
    """Start of a time range falls after its end."""


class UnknownUnitError(GlucotrendError, ValueError):
    """Glucose unit other than mg/dL or mmol/L."""

    def __init__(self, unit: str) -> None:
        super().__init__(f"Unknown glucose unit: {unit}")
        self.unit = unit


class RetryAborted(GlucotrendError):
    """Retry loop stopped because its cancel token was triggered."""

    def __init__(self) -> None:
        super().__init__("Aborted")


class MaxAttemptsError(GlucotrendError):
    """Polling probe never produced a truthy value."""

    def __init__(self) -> None:
        super().__init__("Max attempts reached")
