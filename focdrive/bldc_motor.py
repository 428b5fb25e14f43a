"""Three-phase brushless DC motor under field oriented control."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from .drivers import BLDCDriver
from .foc_motor import (
    FOCModulationType,
    FOCMotor,
    FOCMotorStatus,
    MotionControlType,
    TorqueControlType,
)
from .foc_utils import (
    MIN_ANGLE_DETECT_MOVEMENT,
    NOT_SET,
    RPM_TO_RADS,
    SQRT2,
    THREE_PI_2,
    TWO_PI,
    constrain,
    electrical_angle,
    is_set,
    normalize_angle,
)
from .modulation import (
    PhaseOutput,
    inverse_park,
    openloop_angle_step,
    openloop_sample_time,
    openloop_velocity_step,
    openloop_voltage,
    sine_pwm,
    space_vector_pwm,
    trapezoid_120,
    trapezoid_150,
)
from .sensor import Direction
from .timing import Clock

logger = logging.getLogger(__name__)

_OPENLOOP = (MotionControlType.ANGLE_OPENLOOP, MotionControlType.VELOCITY_OPENLOOP)
_ALIGN_STEPS = 500


def _sweep(reverse: bool) -> Iterator[float]:
    """Electrical angles covering one revolution starting at 3*pi/2."""
    steps = range(_ALIGN_STEPS, -1, -1) if reverse else range(_ALIGN_STEPS + 1)
    for step in steps:
        yield THREE_PI_2 + TWO_PI * step / _ALIGN_STEPS


class BLDCMotor(FOCMotor):
    """BLDC motor driven through a three-phase driver."""

    def __init__(
        self,
        pole_pairs: int,
        phase_resistance: float = NOT_SET,
        kv_rating: float = NOT_SET,
        phase_inductance: float = NOT_SET,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(clock)
        self.pole_pairs = pole_pairs
        self.phase_resistance = phase_resistance
        # the KV rating is given as rms, stored as amplitude
        self.kv_rating = kv_rating * SQRT2 if is_set(kv_rating) else NOT_SET
        self.phase_inductance = phase_inductance
        self.torque_controller = TorqueControlType.VOLTAGE
        self.driver: BLDCDriver | None = None
        self.ua = 0.0
        self.ub = 0.0
        self.uc = 0.0
        self.u_alpha = 0.0
        self.u_beta = 0.0
        self._open_loop_timestamp = 0

    def link_driver(self, driver: BLDCDriver) -> None:
        """Attach the driver that applies the phase voltages."""
        self.driver = driver

    def _require_driver(self) -> BLDCDriver:
        if self.driver is None:
            raise RuntimeError("no driver linked to the motor")
        return self.driver

    def init(self) -> None:
        """Check the driver, settle the limits and enable the motor."""
        driver = self.driver
        if driver is None or not driver.initialized:
            self.motor_status = FOCMotorStatus.INIT_FAILED
            logger.debug("MOT: Init not possible, driver not initialized")
            return
        self.motor_status = FOCMotorStatus.INITIALIZING
        logger.debug("MOT: Init")

        if self.voltage_limit > driver.voltage_limit:
            self.voltage_limit = driver.voltage_limit
        if self.voltage_sensor_align > self.voltage_limit:
            self.voltage_sensor_align = self.voltage_limit

        if self.current_sense is not None:
            self.pid_current_q.limit = self.voltage_limit
            self.pid_current_d.limit = self.voltage_limit
        if is_set(self.phase_resistance) or self.torque_controller != TorqueControlType.VOLTAGE:
            self.pid_velocity.limit = self.current_limit
        else:
            self.pid_velocity.limit = self.voltage_limit
        self.p_angle.limit = self.velocity_limit

        self.clock.delay(500)
        logger.debug("MOT: Enable driver.")
        self.enable()
        self.clock.delay(500)
        self.motor_status = FOCMotorStatus.UNCALIBRATED

    def disable(self) -> None:
        """Zero the outputs and disable the driver."""
        driver = self._require_driver()
        driver.set_pwm(0.0, 0.0, 0.0)
        driver.disable()
        self.enabled = False

    def enable(self) -> None:
        """Enable the driver with zero outputs."""
        driver = self._require_driver()
        driver.enable()
        driver.set_pwm(0.0, 0.0, 0.0)
        self.enabled = True

    def init_foc(
        self,
        zero_electric_offset: float = NOT_SET,
        sensor_direction: Direction = Direction.CW,
    ) -> bool:
        """Align sensor and current sense with the motor; True when ready."""
        ok = True
        self.motor_status = FOCMotorStatus.CALIBRATING

        if is_set(zero_electric_offset):
            self.zero_electric_angle = zero_electric_offset
            self.sensor_direction = sensor_direction

        self.clock.delay(500)
        if self.sensor is not None:
            ok = self._align_sensor()
            self.sensor.update()
            self.shaft_angle = self.read_shaft_angle()
        else:
            ok = False
            logger.debug("MOT: No sensor.")

        self.clock.delay(500)
        if ok:
            if self.current_sense is not None:
                if not self.current_sense.initialized:
                    self.motor_status = FOCMotorStatus.CALIB_FAILED
                    logger.debug("MOT: Init FOC error, current sense not initialized")
                    ok = False
                else:
                    ok = self._align_current_sense()
            else:
                logger.debug("MOT: No current sense.")

        if ok:
            logger.debug("MOT: Ready.")
            self.motor_status = FOCMotorStatus.READY
        else:
            logger.debug("MOT: Init FOC failed.")
            self.motor_status = FOCMotorStatus.CALIB_FAILED
            self.disable()
        return ok

    def _align_current_sense(self) -> bool:
        logger.debug("MOT: Align current sense.")
        status = self.current_sense.driver_align(self.voltage_sensor_align)
        if not status:
            logger.debug("MOT: Align error!")
            return False
        logger.debug("MOT: Success: %s", status)
        return status > 0

    def _align_sensor(self) -> bool:
        logger.debug("MOT: Align sensor.")
        sensor = self.sensor
        if sensor.needs_search() and not self._absolute_zero_search():
            return False

        if not is_set(self.sensor_direction):
            for angle in _sweep(reverse=False):
                self.set_phase_voltage(self.voltage_sensor_align, 0.0, angle)
                sensor.update()
                self.clock.delay(2)
            sensor.update()
            mid_angle = sensor.angle()
            for angle in _sweep(reverse=True):
                self.set_phase_voltage(self.voltage_sensor_align, 0.0, angle)
                sensor.update()
                self.clock.delay(2)
            sensor.update()
            end_angle = sensor.angle()
            self.set_phase_voltage(0.0, 0.0, 0.0)
            self.clock.delay(200)

            moved = abs(mid_angle - end_angle)
            if moved < MIN_ANGLE_DETECT_MOVEMENT:
                logger.debug("MOT: Failed to notice movement")
                return False
            if mid_angle < end_angle:
                logger.debug("MOT: sensor_direction==CCW")
                self.sensor_direction = Direction.CCW
            else:
                logger.debug("MOT: sensor_direction==CW")
                self.sensor_direction = Direction.CW
            if abs(moved * self.pole_pairs - TWO_PI) > 0.5:
                logger.debug("MOT: PP check: fail - estimated pp: %s", TWO_PI / moved)
            else:
                logger.debug("MOT: PP check: OK!")
        else:
            logger.debug("MOT: Skip dir calib.")

        if not is_set(self.zero_electric_angle):
            self.set_phase_voltage(self.voltage_sensor_align, 0.0, THREE_PI_2)
            self.clock.delay(700)
            sensor.update()
            self.zero_electric_angle = 0.0
            self.zero_electric_angle = self.read_electrical_angle()
            self.clock.delay(20)
            logger.debug("MOT: Zero elec. angle: %s", self.zero_electric_angle)
            self.set_phase_voltage(0.0, 0.0, 0.0)
            self.clock.delay(200)
        else:
            logger.debug("MOT: Skip offset calib.")
        return True

    def _absolute_zero_search(self) -> bool:
        logger.debug("MOT: Index search...")
        sensor = self.sensor
        limit_vel = self.velocity_limit
        limit_volt = self.voltage_limit
        self.velocity_limit = self.velocity_index_search
        self.voltage_limit = self.voltage_sensor_align
        self.shaft_angle = 0.0
        while sensor.needs_search() and self.shaft_angle < TWO_PI:
            self._angle_openloop(1.5 * TWO_PI)
            sensor.update()
        self.set_phase_voltage(0.0, 0.0, 0.0)
        self.velocity_limit = limit_vel
        self.voltage_limit = limit_volt
        found = not sensor.needs_search()
        logger.debug("MOT: Success!" if found else "MOT: Error: Not found!")
        return found

    def loop_foc(self) -> None:
        """Update the sensor, run the torque loop and apply the phase voltages."""
        if self.sensor is not None:
            self.sensor.update()
        if self.controller in _OPENLOOP:
            return
        if not self.enabled:
            return

        self.electrical_angle = self.read_electrical_angle()
        mode = self.torque_controller
        if mode == TorqueControlType.DC_CURRENT:
            if self.current_sense is None:
                return
            measured = self.current_sense.get_dc_current(self.electrical_angle)
            self.current.q = self.lpf_current_q(measured)
            self.voltage.q = self.pid_current_q(self.current_sp - self.current.q)
            if is_set(self.phase_inductance):
                self.voltage.d = constrain(
                    -self.current_sp * self.shaft_velocity * self.pole_pairs * self.phase_inductance,
                    -self.voltage_limit,
                    self.voltage_limit,
                )
            else:
                self.voltage.d = 0.0
        elif mode == TorqueControlType.FOC_CURRENT:
            if self.current_sense is None:
                return
            self.current = self.current_sense.get_foc_currents(self.electrical_angle)
            self.current.q = self.lpf_current_q(self.current.q)
            self.current.d = self.lpf_current_d(self.current.d)
            self.voltage.q = self.pid_current_q(self.current_sp - self.current.q)
            self.voltage.d = self.pid_current_d(-self.current.d)

        self.set_phase_voltage(self.voltage.q, self.voltage.d, self.electrical_angle)

    def _lag_compensation(self, current: float) -> float:
        if not is_set(self.phase_inductance):
            return 0.0
        return constrain(
            -current * self.shaft_velocity * self.pole_pairs * self.phase_inductance,
            -self.voltage_limit,
            self.voltage_limit,
        )

    def _voltage_from_current(self, current_sp: float) -> None:
        if not is_set(self.phase_resistance):
            self.voltage.q = current_sp
        else:
            self.voltage.q = constrain(
                current_sp * self.phase_resistance + self.voltage_bemf,
                -self.voltage_limit,
                self.voltage_limit,
            )
        self.voltage.d = self._lag_compensation(current_sp)

    def move(self, new_target: float = NOT_SET) -> None:
        """Run the outer motion loop selected by the controller."""
        count = self.motion_cnt
        self.motion_cnt += 1
        if count < self.motion_downsample:
            return
        self.motion_cnt = 0

        if self.controller not in _OPENLOOP:
            self.shaft_angle = self.read_shaft_angle()
        self.shaft_velocity = self.read_shaft_velocity()

        if not self.enabled:
            return
        if is_set(new_target):
            self.target = new_target

        if is_set(self.kv_rating):
            self.voltage_bemf = self.shaft_velocity / self.kv_rating / RPM_TO_RADS
        if self.current_sense is None and is_set(self.phase_resistance):
            self.current.q = (self.voltage.q - self.voltage_bemf) / self.phase_resistance

        controller = self.controller
        if controller == MotionControlType.TORQUE:
            if self.torque_controller == TorqueControlType.VOLTAGE:
                if not is_set(self.phase_resistance):
                    uq = self.target
                else:
                    uq = self.target * self.phase_resistance + self.voltage_bemf
                self.voltage.q = constrain(uq, -self.voltage_limit, self.voltage_limit)
                self.voltage.d = self._lag_compensation(self.target)
            else:
                self.current_sp = self.target
        elif controller == MotionControlType.ANGLE:
            self.shaft_angle_sp = self.target
            self.shaft_velocity_sp = self.p_angle(self.shaft_angle_sp - self.shaft_angle)
            self.current_sp = self.pid_velocity(self.shaft_velocity_sp - self.shaft_velocity)
            if self.torque_controller == TorqueControlType.VOLTAGE:
                self._voltage_from_current(self.current_sp)
        elif controller == MotionControlType.VELOCITY:
            self.shaft_velocity_sp = self.target
            self.current_sp = self.pid_velocity(self.shaft_velocity_sp - self.shaft_velocity)
            if self.torque_controller == TorqueControlType.VOLTAGE:
                self._voltage_from_current(self.current_sp)
        elif controller == MotionControlType.VELOCITY_OPENLOOP:
            self.shaft_velocity_sp = self.target
            self.voltage.q = self._velocity_openloop(self.shaft_velocity_sp)
            self.voltage.d = 0.0
        elif controller == MotionControlType.ANGLE_OPENLOOP:
            self.shaft_angle_sp = self.target
            self.voltage.q = self._angle_openloop(self.shaft_angle_sp)
            self.voltage.d = 0.0

    def set_phase_voltage(self, uq: float, ud: float, angle_el: float) -> None:
        """Modulate the d/q voltages at the electrical angle and apply them."""
        driver = self._require_driver()
        limit = driver.voltage_limit
        centered = bool(self.modulation_centered)
        mode = self.foc_modulation
        output: PhaseOutput
        if mode == FOCModulationType.TRAPEZOID_120:
            output = trapezoid_120(uq, angle_el, limit, centered)
        elif mode == FOCModulationType.TRAPEZOID_150:
            output = trapezoid_150(uq, angle_el, limit, centered)
        elif mode == FOCModulationType.SPACE_VECTOR_PWM:
            output = space_vector_pwm(uq, ud, angle_el, limit, centered)
        elif mode == FOCModulationType.SINE_PWM:
            self.u_alpha, self.u_beta = inverse_park(uq, ud, angle_el)
            output = sine_pwm(uq, ud, angle_el, limit, centered)
        else:
            raise ValueError(f"unknown modulation type: {mode!r}")

        if output.states is not None:
            driver.set_phase_state(*output.states)
        self.ua, self.ub, self.uc = output.ua, output.ub, output.uc
        driver.set_pwm(self.ua, self.ub, self.uc)

    def _openloop_uq(self) -> float:
        uq, current_q = openloop_voltage(
            self.voltage_limit, self.current_limit, self.phase_resistance, self.voltage_bemf
        )
        if current_q is not None:
            self.current.q = current_q
        return uq

    def _velocity_openloop(self, target_velocity: float) -> float:
        now = self.clock.micros()
        ts = openloop_sample_time(now, self._open_loop_timestamp)
        self.shaft_angle, self.shaft_velocity = openloop_velocity_step(
            self.shaft_angle, target_velocity, ts
        )
        uq = self._openloop_uq()
        self.set_phase_voltage(uq, 0.0, electrical_angle(self.shaft_angle, self.pole_pairs))
        self._open_loop_timestamp = now
        return uq

    def _angle_openloop(self, target_angle: float) -> float:
        now = self.clock.micros()
        ts = openloop_sample_time(now, self._open_loop_timestamp)
        self.shaft_angle, self.shaft_velocity = openloop_angle_step(
            self.shaft_angle, target_angle, self.velocity_limit, ts
        )
        uq = self._openloop_uq()
        self.set_phase_voltage(
            uq, 0.0, electrical_angle(normalize_angle(self.shaft_angle), self.pole_pairs)
        )
        self._open_loop_timestamp = now
        return uq