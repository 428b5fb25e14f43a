"""Microsecond clocks used by the controllers and filters."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod

MICROS_PERIOD = 2**32  # the microsecond counter wraps at 32 bits


class Clock(ABC):
    """Source of a wrapping microsecond timestamp and blocking delays."""

    @abstractmethod
    def micros(self) -> int:
        """Current timestamp in microseconds, wrapping at MICROS_PERIOD."""

    @abstractmethod
    def delay(self, ms: int) -> None:
        """Wait for the given number of milliseconds."""


class SystemClock(Clock):
    """Clock backed by the monotonic system timer."""

    def micros(self) -> int:
        return (time.monotonic_ns() // 1000) % MICROS_PERIOD

    def delay(self, ms: int) -> None:
        time.sleep(ms / 1000.0)


class ManualClock(Clock):
    """Clock that only moves when told to; delays advance it instantly."""

    def __init__(self, start_us: int = 0) -> None:
        if start_us < 0:
            raise ValueError("start time must not be negative")
        self._now = start_us

    def micros(self) -> int:
        return self._now % MICROS_PERIOD

    def delay(self, ms: int) -> None:
        self.advance(ms * 1000)

    def advance(self, us: int) -> None:
        """Move the clock forward by the given number of microseconds."""
        if us < 0:
            raise ValueError("a clock cannot move backwards")
        self._now += us