"""
chronofuel/clock.py

Time sources for the engine.

Cooldowns are checked against the clock, never waited on, so a simulated
clock can drive the whole system deterministically.
"""

import time
import logging

logger = logging.getLogger("chronofuel.clock")


class SystemClock:
    """Wall-clock seconds since the epoch."""

    def __call__(self) -> int:
        return int(time.time())


class ManualClock:
    """
    Clock that only moves when told to.

    Usage:
        clock = ManualClock(start=1_700_000_000)
        engine = RewardEngine(ledger, clock=clock)
        clock.advance(24 * 3600)
    """

    def __init__(self, start: int = 0):
        self._now = int(start)

    def __call__(self) -> int:
        return self._now

    @property
    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        """Move forward by `seconds`; the clock never goes backwards."""
        if seconds < 0:
            raise ValueError("Clock cannot move backwards")
        self._now += int(seconds)
        return self._now

    def set(self, timestamp: int) -> int:
        """Jump to an absolute timestamp at or after the current one."""
        if timestamp < self._now:
            raise ValueError(f"Clock cannot move backwards: {timestamp} < {self._now}")
        self._now = int(timestamp)
        return self._now
