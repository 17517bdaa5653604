"""
Fixed-rate async ticker used to gate calls to the remote API.
"""

from __future__ import annotations

import asyncio


class Throttle:
    """Fixed-rate ticker.

    ``wait()`` returns at most once per ``interval`` seconds. Ticks are
    scheduled on a fixed grid from the first call; when the caller falls
    behind, missed ticks are dropped instead of firing in a burst.
    """

    def __init__(self, interval: float) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self._interval = interval
        self._next: float | None = None

    @property
    def interval(self) -> float:
        return self._interval

    async def wait(self) -> None:
        loop = asyncio.get_running_loop()
        now = loop.time()
        if self._next is None:
            self._next = now + self._interval
        elif self._next <= now:
            missed = int((now - self._next) // self._interval) + 1
            self._next += missed * self._interval
        delay = self._next - now
        if delay > 0:
            await asyncio.sleep(delay)
        self._next += self._interval
