"""Commands for motion control mode, torque mode, enabling and targets of a motor."""

from __future__ import annotations

import re

from .commander import Commander, parse_float
from .commands import CMD_MOTION_TYPE, CMD_STATUS, CMD_TORQUE_TYPE, SCMD_DOWNSAMPLE
from .foc_motor import FOCMotor, MotionControlType, TorqueControlType
from .foc_utils import is_set

_MOTION_NAMES = {
    MotionControlType.TORQUE: "torque",
    MotionControlType.VELOCITY: "vel",
    MotionControlType.ANGLE: "angle",
    MotionControlType.VELOCITY_OPENLOOP: "vel open",
    MotionControlType.ANGLE_OPENLOOP: "angle open",
}

_TORQUE_NAMES = {
    TorqueControlType.VOLTAGE: "volt",
    TorqueControlType.DC_CURRENT: "dc curr",
    TorqueControlType.FOC_CURRENT: "foc curr",
}


def _tokens(text: str, separator: str) -> list[str]:
    """Split on any of the separator characters, dropping empty pieces."""
    if not separator:
        return [text] if text else []
    pattern = "[" + re.escape(separator) + "]"
    return [piece for piece in re.split(pattern, text) if piece]


class MotionCommander(Commander):
    """Commander that also understands motion and target commands for a motor."""

    def motion(self, motor: FOCMotor, user_cmd: str, separator: str = " ") -> None:
        """Handle C (motion type), T (torque type), E (enable) or a target."""
        cmd = self._char(user_cmd, 0)
        sub_cmd = self._char(user_cmd, 1)
        get = self._is_sentinel(sub_cmd)
        value_index = 2 if "A" <= sub_cmd <= "Z" and sub_cmd else 1
        value = parse_float(user_cmd[value_index:])

        if cmd == CMD_MOTION_TYPE:
            self._print_verbose("Motion:")
            if sub_cmd == SCMD_DOWNSAMPLE:
                self._print_verbose(" downsample: ")
                if not get:
                    motor.motion_downsample = int(value)
                self._println(int(motor.motion_downsample))
                return
            if not get and value >= 0 and int(value) < len(MotionControlType):
                motor.controller = MotionControlType(int(value))
            self._println(_MOTION_NAMES[motor.controller])
        elif cmd == CMD_TORQUE_TYPE:
            self._print_verbose("Torque: ")
            if not get and 0 <= int(value) < len(TorqueControlType):
                motor.torque_controller = TorqueControlType(int(value))
            self._println(_TORQUE_NAMES[motor.torque_controller])
            if motor.torque_controller == TorqueControlType.VOLTAGE:
                if not is_set(motor.phase_resistance):
                    motor.pid_velocity.limit = motor.voltage_limit
            else:
                motor.pid_velocity.limit = motor.current_limit
        elif cmd == CMD_STATUS:
            self._print_verbose("Status: ")
            if not get:
                if value:
                    motor.enable()
                else:
                    motor.disable()
            self._println(int(motor.enabled))
        else:
            self.target(motor, user_cmd, separator)

    def target(self, motor: FOCMotor, user_cmd: str, separator: str = " ") -> None:
        """Set the target and optionally the velocity and torque limits.

        The values are separated by the separator: the target alone, or
        ``target torque`` for velocity modes, or ``target velocity torque``
        for angle modes.
        """
        if self._is_sentinel(self._char(user_cmd, 0)):
            self._println_machine_readable(float(motor.target))
            return

        values = _tokens(user_cmd, separator)
        first = values[0] if values else ""
        motor.target = parse_float(first)
        rest = [parse_float(piece) for piece in values[1:]]
        controller = motor.controller

        if controller == MotionControlType.VELOCITY:
            if rest:
                self._set_closed_loop_torque(motor, rest[0])
        elif controller == MotionControlType.ANGLE:
            if rest:
                motor.velocity_limit = rest[0]
                motor.p_angle.limit = rest[0]
                if len(rest) > 1:
                    self._set_closed_loop_torque(motor, rest[1])
        elif controller == MotionControlType.VELOCITY_OPENLOOP:
            if rest:
                self._set_openloop_torque(motor, rest[0])
        elif controller == MotionControlType.ANGLE_OPENLOOP:
            if rest:
                motor.velocity_limit = rest[0]
                if len(rest) > 1:
                    self._set_openloop_torque(motor, rest[1])

        self._print_verbose("Target: ")
        self._println(float(motor.target))

    @staticmethod
    def _set_closed_loop_torque(motor: FOCMotor, torque: float) -> None:
        motor.pid_velocity.limit = torque
        if not is_set(motor.phase_resistance) and motor.torque_controller == TorqueControlType.VOLTAGE:
            motor.voltage_limit = torque
        else:
            motor.current_limit = torque

    @staticmethod
    def _set_openloop_torque(motor: FOCMotor, torque: float) -> None:
        if not is_set(motor.phase_resistance):
            motor.voltage_limit = torque
        else:
            motor.current_limit = torque