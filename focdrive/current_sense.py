"""Base class for phase current sensing with Clarke and Park transforms."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .drivers import BLDCDriver
from .foc_utils import (
    ONE_SQRT3,
    TWO_SQRT3,
    DQCurrent,
    PhaseCurrent,
    fast_cos,
    fast_sin,
    sqrt_approx,
)


def _clarke(current: PhaseCurrent) -> tuple[float, float]:
    """Return (i_alpha, i_beta) for the measured phase currents."""
    if not current.b:
        # phase b not measured: recover it from a + b + c = 0
        b = -current.a - current.c
        return current.a, ONE_SQRT3 * current.a + TWO_SQRT3 * b
    # filter measurement noise using a + b + c = 0
    mid = (current.a + current.b + current.c) / 3.0
    a = current.a - mid
    b = current.b - mid
    return a, ONE_SQRT3 * a + TWO_SQRT3 * b


class CurrentSense(ABC):
    """Phase current measurement; subclasses read the hardware."""

    def __init__(self) -> None:
        self.skip_align = False
        self.driver: BLDCDriver | None = None
        self.initialized = False
        self.params: Any = None

    @abstractmethod
    def init(self) -> bool:
        """Initialise ADCs and synchronisation; return True on success."""

    def link_driver(self, driver: BLDCDriver) -> None:
        """Link the motor driver, for when the two must be synchronised."""
        self.driver = driver

    @abstractmethod
    def driver_align(self, align_voltage: float) -> int:
        """Check phase order and direction against the driver.

        Return 0 on failure and a positive status on success.
        """

    @abstractmethod
    def get_phase_currents(self) -> PhaseCurrent:
        """Read the phase currents; c is 0 when only two phases are measured."""

    def get_dc_current(self, angle_el: float = 0.0) -> float:
        """Current magnitude, signed by the q direction when an angle is given."""
        i_alpha, i_beta = _clarke(self.get_phase_currents())
        sign = 1.0
        if angle_el:
            q = i_beta * fast_cos(angle_el) - i_alpha * fast_sin(angle_el)
            sign = 1.0 if q > 0 else -1.0
        return sign * sqrt_approx(i_alpha * i_alpha + i_beta * i_beta)

    def get_foc_currents(self, angle_el: float) -> DQCurrent:
        """d/q currents at the given electrical angle in [0, 2*pi]."""
        i_alpha, i_beta = _clarke(self.get_phase_currents())
        ct = fast_cos(angle_el)
        st = fast_sin(angle_el)
        return DQCurrent(
            d=i_alpha * ct + i_beta * st,
            q=i_beta * ct - i_alpha * st,
        )