"""Base class for position sensors with rotation counting and velocity."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum

from .foc_utils import TWO_PI
from .timing import MICROS_PERIOD, Clock, SystemClock


class Direction(IntEnum):
    """Natural direction of a sensor."""

    CW = 1
    CCW = -1
    UNKNOWN = 0


class Pullup(IntEnum):
    """Pull-up configuration of sensor inputs."""

    USE_INTERN = 0x00
    USE_EXTERN = 0x01


class Sensor(ABC):
    """Angle sensor; subclasses supply the raw shaft angle in [0, 2*pi].

    The base class tracks full rotations and computes velocity from the
    values captured by update(), so update() must be called often enough
    that no full rotation is missed between calls.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock if clock is not None else SystemClock()
        # velocity is not recomputed when less time than this has passed (s)
        self.min_elapsed_time = 0.0001
        self._velocity = 0.0
        self._angle_prev = 0.0
        self._angle_prev_ts = 0
        self._vel_angle_prev = 0.0
        self._vel_angle_prev_ts = 0
        self._full_rotations = 0
        self._vel_full_rotations = 0

    @abstractmethod
    def read_sensor_angle(self) -> float:
        """Read the shaft angle from the hardware, in radians within [0, 2*pi]."""

    def init(self) -> None:
        """Prime the internal state so the first readings do not jump from zero."""
        self.read_sensor_angle()
        self._vel_angle_prev = self.read_sensor_angle()
        self._vel_angle_prev_ts = self._clock.micros()
        self._clock.delay(1)
        self.read_sensor_angle()
        self._angle_prev = self.read_sensor_angle()
        self._angle_prev_ts = self._clock.micros()

    def update(self) -> None:
        """Read the hardware and update angle, timestamp and rotation count."""
        value = self.read_sensor_angle()
        self._angle_prev_ts = self._clock.micros()
        d_angle = value - self._angle_prev
        # a large jump means the angle wrapped around
        if abs(d_angle) > 0.8 * TWO_PI:
            self._full_rotations += -1 if d_angle > 0 else 1
        self._angle_prev = value

    def measure_velocity(self) -> float:
        """Angular velocity in rad/s from the values captured by update()."""
        elapsed_us = (self._angle_prev_ts - self._vel_angle_prev_ts) % MICROS_PERIOD
        ts = elapsed_us * 1e-6
        if ts < self.min_elapsed_time:
            return self._velocity
        rotations = self._full_rotations - self._vel_full_rotations
        self._velocity = (rotations * TWO_PI + (self._angle_prev - self._vel_angle_prev)) / ts
        self._vel_angle_prev = self._angle_prev
        self._vel_full_rotations = self._full_rotations
        self._vel_angle_prev_ts = self._angle_prev_ts
        return self._velocity

    def mechanical_angle(self) -> float:
        """Shaft angle within one turn, as captured by the last update()."""
        return self._angle_prev

    def angle(self) -> float:
        """Total position in radians including full rotations."""
        return self._full_rotations * TWO_PI + self._angle_prev

    def precise_angle(self) -> float:
        """Total position in radians, computed in double precision."""
        return float(self._full_rotations) * TWO_PI + float(self._angle_prev)

    def full_rotations(self) -> int:
        """Number of full rotations counted so far."""
        return self._full_rotations

    def needs_search(self) -> bool:
        """True if the sensor must search for its absolute zero (e.g. an index)."""
        return False