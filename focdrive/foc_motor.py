"""Common state, sensing and monitoring for field oriented motors."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import IntEnum, IntFlag
from typing import TextIO

from .current_sense import CurrentSense
from .defaults import (
    DEF_CURR_FILTER_TF,
    DEF_CURRENT_LIM,
    DEF_INDEX_SEARCH_TARGET_VELOCITY,
    DEF_MON_DOWNSAMPLE,
    DEF_MOTION_DOWNSAMPLE,
    DEF_P_ANGLE_P,
    DEF_PID_CURR_D,
    DEF_PID_CURR_I,
    DEF_PID_CURR_P,
    DEF_PID_CURR_RAMP,
    DEF_PID_VEL_D,
    DEF_PID_VEL_I,
    DEF_PID_VEL_LIMIT,
    DEF_PID_VEL_P,
    DEF_PID_VEL_RAMP,
    DEF_POWER_SUPPLY,
    DEF_VEL_FILTER_TF,
    DEF_VEL_LIM,
    DEF_VOLTAGE_SENSOR_ALIGN,
)
from .foc_utils import NOT_SET, DQCurrent, DQVoltage, normalize_angle
from .lowpass import LowPassFilter
from .pid import PIDController
from .sensor import Direction, Sensor
from .timing import Clock, SystemClock

logger = logging.getLogger(__name__)


class MotionControlType(IntEnum):
    """Outer control loop."""

    TORQUE = 0x00
    VELOCITY = 0x01
    ANGLE = 0x02
    VELOCITY_OPENLOOP = 0x03
    ANGLE_OPENLOOP = 0x04


class TorqueControlType(IntEnum):
    """How torque is controlled."""

    VOLTAGE = 0x00
    DC_CURRENT = 0x01
    FOC_CURRENT = 0x02


class FOCModulationType(IntEnum):
    """Phase voltage modulation algorithm."""

    SINE_PWM = 0x00
    SPACE_VECTOR_PWM = 0x01
    TRAPEZOID_120 = 0x02
    TRAPEZOID_150 = 0x03


class FOCMotorStatus(IntEnum):
    """Lifecycle status of a motor."""

    UNINITIALIZED = 0x00
    INITIALIZING = 0x01
    UNCALIBRATED = 0x02
    CALIBRATING = 0x03
    READY = 0x04
    ERROR = 0x08
    CALIB_FAILED = 0x0E
    INIT_FAILED = 0x0F


class MonitorVariable(IntFlag):
    """Bits selecting the variables printed by FOCMotor.monitor()."""

    TARGET = 0b1000000
    VOLT_Q = 0b0100000
    VOLT_D = 0b0010000
    CURR_Q = 0b0001000
    CURR_D = 0b0000100
    VEL = 0b0000010
    ANGLE = 0b0000001


class FOCMotor(ABC):
    """Motor state shared by all motor types; subclasses drive the hardware."""

    def __init__(self, clock: Clock | None = None) -> None:
        self.clock = clock if clock is not None else SystemClock()

        # state
        self.target = 0.0
        self.shaft_angle = 0.0
        self.electrical_angle = 0.0
        self.shaft_velocity = 0.0
        self.current_sp = 0.0
        self.shaft_velocity_sp = 0.0
        self.shaft_angle_sp = 0.0
        self.voltage = DQVoltage()
        self.current = DQCurrent()
        self.voltage_bemf = 0.0

        # configuration
        self.voltage_sensor_align = DEF_VOLTAGE_SENSOR_ALIGN
        self.velocity_index_search = DEF_INDEX_SEARCH_TARGET_VELOCITY

        # physical parameters
        self.phase_resistance = NOT_SET
        self.pole_pairs = 1
        self.kv_rating = NOT_SET
        self.phase_inductance = NOT_SET

        # limits
        self.voltage_limit = DEF_POWER_SUPPLY
        self.current_limit = DEF_CURRENT_LIM
        self.velocity_limit = DEF_VEL_LIM

        self.enabled = False
        self.motor_status = FOCMotorStatus.UNINITIALIZED

        self.foc_modulation = FOCModulationType.SINE_PWM
        self.modulation_centered = True

        self.torque_controller = TorqueControlType.VOLTAGE
        self.controller = MotionControlType.TORQUE

        c = self.clock
        self.pid_current_q = PIDController(
            DEF_PID_CURR_P, DEF_PID_CURR_I, DEF_PID_CURR_D, DEF_PID_CURR_RAMP, DEF_POWER_SUPPLY, c
        )
        self.pid_current_d = PIDController(
            DEF_PID_CURR_P, DEF_PID_CURR_I, DEF_PID_CURR_D, DEF_PID_CURR_RAMP, DEF_POWER_SUPPLY, c
        )
        self.lpf_current_q = LowPassFilter(DEF_CURR_FILTER_TF, c)
        self.lpf_current_d = LowPassFilter(DEF_CURR_FILTER_TF, c)
        self.pid_velocity = PIDController(
            DEF_PID_VEL_P, DEF_PID_VEL_I, DEF_PID_VEL_D, DEF_PID_VEL_RAMP, DEF_PID_VEL_LIMIT, c
        )
        self.p_angle = PIDController(DEF_P_ANGLE_P, 0.0, 0.0, 0.0, DEF_VEL_LIM, c)
        self.lpf_velocity = LowPassFilter(DEF_VEL_FILTER_TF, c)
        self.lpf_angle = LowPassFilter(0.0, c)
        self.motion_downsample = DEF_MOTION_DOWNSAMPLE
        self.motion_cnt = 0

        # sensor
        self.sensor_offset = 0.0
        self.zero_electric_angle = NOT_SET
        self.sensor_direction: Direction | float = NOT_SET

        # monitoring
        self.monitor_downsample = DEF_MON_DOWNSAMPLE
        self.monitor_start_char = ""
        self.monitor_end_char = ""
        self.monitor_separator = "\t"
        self.monitor_decimals = 4
        self.monitor_variables = (
            MonitorVariable.TARGET
            | MonitorVariable.VOLT_Q
            | MonitorVariable.VEL
            | MonitorVariable.ANGLE
        )
        self._monitor_cnt = 0

        self.sensor: Sensor | None = None
        self.current_sense: CurrentSense | None = None
        self.monitor_port: TextIO | None = None

    def link_sensor(self, sensor: Sensor) -> None:
        """Attach the position sensor."""
        self.sensor = sensor

    def link_current_sense(self, current_sense: CurrentSense) -> None:
        """Attach the current sensing."""
        self.current_sense = current_sense

    def read_shaft_angle(self) -> float:
        """Filtered shaft angle in rad; the stored value when there is no sensor."""
        if self.sensor is None:
            return self.shaft_angle
        direction = float(self.sensor_direction)
        return direction * self.lpf_angle(self.sensor.angle()) - self.sensor_offset

    def read_shaft_velocity(self) -> float:
        """Filtered shaft velocity in rad/s; the stored value when there is no sensor."""
        if self.sensor is None:
            return self.shaft_velocity
        direction = float(self.sensor_direction)
        return direction * self.lpf_velocity(self.sensor.measure_velocity())

    def read_electrical_angle(self) -> float:
        """Electrical angle in [0, 2*pi); the stored value when there is no sensor."""
        if self.sensor is None:
            return self.electrical_angle
        factor = float(self.sensor_direction) * self.pole_pairs
        return normalize_angle(factor * self.sensor.mechanical_angle() - self.zero_electric_angle)

    def use_monitoring(self, port: TextIO) -> None:
        """Send monitoring output to the given text stream."""
        self.monitor_port = port
        logger.debug("MOT: Monitor enabled!")

    def _format(self, value: float) -> str:
        return f"{value:.{int(self.monitor_decimals)}f}"

    def monitor(self) -> None:
        """Write one line of the selected variables every monitor_downsample calls."""
        if not self.monitor_downsample:
            return
        count = self._monitor_cnt
        self._monitor_cnt += 1
        if count < self.monitor_downsample:
            return
        self._monitor_cnt = 0
        if self.monitor_port is None:
            return

        selected = MonitorVariable(self.monitor_variables)
        values: list[float] = []
        if MonitorVariable.TARGET in selected:
            values.append(self.target)
        if MonitorVariable.VOLT_Q in selected:
            values.append(self.voltage.q)
        if MonitorVariable.VOLT_D in selected:
            values.append(self.voltage.d)
        if selected & (MonitorVariable.CURR_Q | MonitorVariable.CURR_D):
            c = DQCurrent(self.current.d, self.current.q)
            if (
                self.current_sense is not None
                and self.torque_controller != TorqueControlType.FOC_CURRENT
            ):
                c = self.current_sense.get_foc_currents(self.electrical_angle)
                c.q = self.lpf_current_q(c.q)
                c.d = self.lpf_current_d(c.d)
            if MonitorVariable.CURR_Q in selected:
                values.append(c.q * 1000)  # mA
            if MonitorVariable.CURR_D in selected:
                values.append(c.d * 1000)  # mA
        if MonitorVariable.VEL in selected:
            values.append(self.shaft_velocity)
        if MonitorVariable.ANGLE in selected:
            values.append(self.shaft_angle)

        if not values:
            return
        body = self.monitor_separator.join(self._format(v) for v in values)
        self.monitor_port.write(self.monitor_start_char + body + self.monitor_end_char + "\n")

    @abstractmethod
    def init(self) -> None:
        """Initialise the motor hardware."""

    @abstractmethod
    def enable(self) -> None:
        """Enable the motor."""

    @abstractmethod
    def disable(self) -> None:
        """Disable the motor."""

    @abstractmethod
    def init_foc(
        self,
        zero_electric_offset: float = NOT_SET,
        sensor_direction: Direction = Direction.CW,
    ) -> bool:
        """Align sensor and motor; skipped when the offset is given. True on success."""

    @abstractmethod
    def loop_foc(self) -> None:
        """Run one iteration of the FOC algorithm."""

    @abstractmethod
    def move(self, new_target: float = NOT_SET) -> None:
        """Run the outer motion control loop, optionally with a new target."""

    @abstractmethod
    def set_phase_voltage(self, uq: float, ud: float, angle_el: float) -> None:
        """Apply the d/q voltages at the electrical angle."""