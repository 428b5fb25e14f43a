"""Discrete PID controller with anti-windup and output ramp limiting."""

from __future__ import annotations

from .foc_utils import constrain
from .timing import MICROS_PERIOD, Clock, SystemClock


class PIDController:
    """PID controller called with the tracking error, returning the output."""

    def __init__(
        self,
        p: float,
        i: float,
        d: float,
        ramp: float,
        limit: float,
        clock: Clock | None = None,
    ) -> None:
        self.p = p
        self.i = i
        self.d = d
        self.output_ramp = ramp  # maximum output change per second
        self.limit = limit  # maximum absolute output
        self._clock = clock if clock is not None else SystemClock()
        self._error_prev = 0.0
        self._output_prev = 0.0
        self._integral_prev = 0.0
        self._timestamp_prev = self._clock.micros()

    def __call__(self, error: float) -> float:
        now = self._clock.micros()
        ts = ((now - self._timestamp_prev) % MICROS_PERIOD) * 1e-6
        if ts <= 0 or ts > 0.5:
            ts = 1e-3

        proportional = self.p * error
        # Tustin integration
        integral = self._integral_prev + self.i * ts * 0.5 * (error + self._error_prev)
        integral = constrain(integral, -self.limit, self.limit)
        derivative = self.d * (error - self._error_prev) / ts

        output = constrain(proportional + integral + derivative, -self.limit, self.limit)

        if self.output_ramp > 0:
            rate = (output - self._output_prev) / ts
            if rate > self.output_ramp:
                output = self._output_prev + self.output_ramp * ts
            elif rate < -self.output_ramp:
                output = self._output_prev - self.output_ramp * ts

        self._integral_prev = integral
        self._output_prev = output
        self._error_prev = error
        self._timestamp_prev = now
        return output

    def reset(self) -> None:
        """Forget the integral, the previous output and the previous error."""
        self._integral_prev = 0.0
        self._output_prev = 0.0
        self._error_prev = 0.0