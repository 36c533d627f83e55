"""Reintentos genericos para llamadas a la API y sondeos de condiciones.

- ``retry_async``: backoff exponencial con jitter opcional.
- ``find_with_retry``: sondeo con espera lineal.
- La cancelacion es cooperativa: el token se revisa solo entre intentos.
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from glucotrend.errors import MaxAttemptsError, RetryAborted

T = TypeVar("T")

AttemptHook = Callable[[int, "BaseException | None"], None]

logger = logging.getLogger(__name__)

_JITTER_MS = 100


class CancelToken:
    """Cooperative cancellation flag shared with a retry loop."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


@dataclass(frozen=True)
class RetryOptions:
    """Configuration for :func:`retry_async`.

    Attributes:
        max_attempts: Attempts including the first try.
        base_delay_ms: Delay after the first failure.
        factor: Exponential backoff factor.
        jitter: Add up to 100 ms of random delay per wait.
        on_attempt: Called as ``(attempt, None)`` before each try and
            ``(attempt, error)`` after each failure.
        cancel_token: Checked before every attempt.
    """

    max_attempts: int = 5
    base_delay_ms: int = 300
    factor: float = 1.8
    jitter: bool = True
    on_attempt: AttemptHook | None = None
    cancel_token: CancelToken | None = None


@dataclass(frozen=True)
class ProbeOptions:
    """Configuration for :func:`find_with_retry`."""

    max_attempts: int = 5
    delay_ms: int = 300


def backoff_delay_ms(options: RetryOptions, attempt: int) -> int:
    """Wait before retrying after failed ``attempt`` (jitter not included)."""
    return math.ceil(options.base_delay_ms * options.factor ** (attempt - 1))


async def retry_async(
    fn: Callable[[], Awaitable[T]], options: RetryOptions | None = None
) -> T:
    """Await ``fn()`` until it succeeds or attempts run out.

    Args:
        fn: Zero-argument coroutine factory.
        options: Retry configuration.

    Returns:
        The first successful result.

    Raises:
        RetryAborted: If the cancel token is set when an attempt is due.
        Exception: The last error from ``fn`` once ``max_attempts`` fail.
    """
    opts = options or RetryOptions()
    attempt = 1
    while True:
        if opts.cancel_token is not None and opts.cancel_token.cancelled:
            logger.debug("Retry aborted before attempt %d", attempt)
            raise RetryAborted()
        try:
            if opts.on_attempt is not None:
                opts.on_attempt(attempt, None)
            return await fn()
        except Exception as exc:
            if opts.on_attempt is not None:
                opts.on_attempt(attempt, exc)
            if attempt >= opts.max_attempts:
                logger.warning("Giving up after %d attempts: %s", attempt, exc)
                raise
            wait = backoff_delay_ms(opts, attempt)
            if opts.jitter:
                wait += random.randrange(_JITTER_MS)
            logger.debug(
                "Attempt %d failed (%s); retrying in %d ms", attempt, exc, wait
            )
            await _sleep_ms(wait)
            attempt += 1


async def find_with_retry(
    probe: Callable[[], T], options: ProbeOptions | None = None
) -> T:
    """Poll a synchronous probe until it returns a truthy value.

    Probe errors count as misses. The wait grows linearly
    (``delay_ms * attempt``).

    Raises:
        MaxAttemptsError: After ``max_attempts`` misses.
    """
    opts = options or ProbeOptions()
    attempt = 1
    while True:
        try:
            result = probe()
        except Exception as exc:
            logger.debug("Probe attempt %d raised: %s", attempt, exc)
            result = None
        if result:
            return result
        if attempt >= opts.max_attempts:
            raise MaxAttemptsError()
        await _sleep_ms(opts.delay_ms * attempt)
        attempt += 1


async def _sleep_ms(delay_ms: float) -> None:
    await asyncio.sleep(delay_ms / 1000)
