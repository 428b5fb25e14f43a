"""Interface for three-phase BLDC drivers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any


class PhaseState(IntEnum):
    """Switching state of one driver phase."""

    PHASE_OFF = 0  # both sides off
    PHASE_ON = 1  # both sides driven with PWM
    PHASE_HI = 2  # only the high side driven (6-PWM only)
    PHASE_LO = 3  # only the low side driven (6-PWM only)


class BLDCDriver(ABC):
    """Hardware-specific three-phase driver."""

    pwm_frequency: int = 0  # Hz
    voltage_power_supply: float = 0.0
    voltage_limit: float = 0.0
    dc_a: float = 0.0
    dc_b: float = 0.0
    dc_c: float = 0.0
    initialized: bool = False
    params: Any = None

    @abstractmethod
    def init(self) -> bool:
        """Initialise the hardware; return True on success."""

    @abstractmethod
    def enable(self) -> None:
        """Enable the hardware."""

    @abstractmethod
    def disable(self) -> None:
        """Disable the hardware."""

    @abstractmethod
    def set_pwm(self, ua: float, ub: float, uc: float) -> None:
        """Apply the three phase voltages."""

    @abstractmethod
    def set_phase_state(self, sa: PhaseState, sb: PhaseState, sc: PhaseState) -> None:
        """Set each phase active or high impedance."""