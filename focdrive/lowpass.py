"""First-order low pass filter driven by elapsed time."""

from __future__ import annotations

from .timing import MICROS_PERIOD, Clock, SystemClock


class LowPassFilter:
    """Low pass filter called with a sample, returning the filtered value."""

    def __init__(self, time_constant: float, clock: Clock | None = None) -> None:
        self.time_constant = time_constant
        self._clock = clock if clock is not None else SystemClock()
        self._y_prev = 0.0
        self._timestamp_prev = self._clock.micros()

    def __call__(self, x: float) -> float:
        now = self._clock.micros()
        dt = ((now - self._timestamp_prev) % MICROS_PERIOD) * 1e-6

        if dt > 0.3:
            # too long since the last sample: restart from the input
            self._y_prev = x
            self._timestamp_prev = now
            return x

        total = self.time_constant + dt
        alpha = self.time_constant / total if total > 0 else 0.0
        y = alpha * self._y_prev + (1.0 - alpha) * x
        self._y_prev = y
        self._timestamp_prev = now
        return y