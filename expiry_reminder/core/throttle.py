"""Fixed-interval throttle for outbound sends.

The email provider rate-limits requests, so consecutive email sends are
spaced at least `interval` seconds apart, measured from the end of the
previous send when the caller marks it. The first send goes out
immediately. Clock and sleep are injectable so tests run instantly.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class FixedIntervalThrottle:
    """Enforce a minimum spacing between consecutive calls to `wait()`."""

    def __init__(
        self,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if interval < 0:
            raise ValueError(f"interval must be >= 0, got {interval}")
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._last: float | None = None

    async def wait(self) -> float:
        """Block until the next send is allowed. Returns seconds waited."""
        waited = 0.0
        if self._last is not None:
            remaining = self._last + self.interval - self._clock()
            if remaining > 0:
                logger.debug("Throttling next send for %.2fs", remaining)
                await self._sleep(remaining)
                waited = remaining
        self._last = self._clock()
        return waited

    def mark(self) -> None:
        """Restart the interval now, e.g. once a send has completed."""
        self._last = self._clock()

    def reset(self) -> None:
        self._last = None
