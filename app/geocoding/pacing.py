"""Minimum-interval pacing for rate-limited providers.

A ``Pacer`` is owned by one batch and passed to every call against the
provider it guards, so retries and structured/free-form alternation share a
single budget.  ``wait()`` suspends until at least ``interval_s`` has elapsed
since the previous call started, then records the new start time.
"""
from __future__ import annotations

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


class Pacer:
    """Enforce a minimum wall-clock interval between consecutive calls.

    Parameters
    ----------
    interval_s:
        Minimum seconds between call starts.  Must be ``>= 0``.
    clock:
        Monotonic clock returning seconds.  Defaults to ``time.monotonic``.
    sleep:
        Blocking sleep taking seconds.  Defaults to ``time.sleep``.
    """

    def __init__(
        self,
        interval_s: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if interval_s < 0:
            raise ValueError(f"interval_s must be >= 0; got {interval_s}")
        self.interval_s = interval_s
        self._clock = clock
        self._sleep = sleep
        self._last_call: float | None = None
        self.calls = 0

    def remaining(self) -> float:
        """Seconds left before the next call may start (``0.0`` if none)."""
        if self._last_call is None:
            return 0.0
        return max(0.0, self.interval_s - (self._clock() - self._last_call))

    def wait(self) -> float:
        """Block until the next call may start; return the seconds slept."""
        delay = self.remaining()
        if delay > 0:
            logger.debug("pacer: sleeping %.3fs", delay)
            self._sleep(delay)
        self._last_call = self._clock()
        self.calls += 1
        return delay

    @property
    def last_call(self) -> float | None:
        """Clock value at the start of the most recent call."""
        return self._last_call
