"""Text command protocol: callbacks by command letter plus PID, filter and scalar access.

A command is a letter, an optional sub-command letter and a value, ended by
the end-of-line character, for example ``P1.5\\n``. The end of a string counts
as the end of the line as well.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Protocol

from .commands import (
    CMD_DECIMAL,
    CMD_SCAN,
    CMD_VERBOSE,
    SCMD_LPF_TF,
    SCMD_PID_D,
    SCMD_PID_I,
    SCMD_PID_LIM,
    SCMD_PID_P,
    SCMD_PID_RAMP,
)
from .lowpass import LowPassFilter
from .pid import PIDController

MAX_COMMAND_LENGTH = 20
MAX_CALLBACKS = 20

_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


class VerboseMode(IntEnum):
    """How much the commander writes back."""

    NOTHING = 0x00  # write nothing, good for monitoring
    ON_REQUEST = 0x01  # write only requested values
    USER_FRIENDLY = 0x02  # write values with textual labels
    MACHINE_READABLE = 0x03  # write values prefixed with their command letters


class Writer(Protocol):
    def write(self, text: str) -> Any: ...


def parse_float(text: str) -> float:
    """Parse the leading number of the text; 0.0 when there is none."""
    match = _FLOAT_PREFIX.match(text)
    return float(match.group(1)) if match else 0.0


def parse_int(text: str) -> int:
    """Parse the leading integer of the text; 0 when there is none."""
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


@dataclass(frozen=True)
class _Callback:
    command_id: str
    handler: Callable[[str], Any]
    label: str | None


class Commander:
    """Dispatches text commands to registered callbacks and writes replies."""

    def __init__(self, com_port: Writer | None = None, eol: str = "\n", echo: bool = False) -> None:
        self.com_port = com_port
        self.eol = eol
        self.echo = echo
        self.verbose = VerboseMode.USER_FRIENDLY
        self.decimal_places = 3
        self._callbacks: list[_Callback] = []
        self._received: list[str] = []

    def add(self, command_id: str, callback: Callable[[str], Any], label: str | None = None) -> None:
        """Register a callback receiving the text after the command letter."""
        if len(command_id) != 1:
            raise ValueError("a command id is a single character")
        if len(self._callbacks) >= MAX_CALLBACKS:
            raise ValueError(f"at most {MAX_CALLBACKS} commands can be added")
        self._callbacks.append(_Callback(command_id, callback, label))

    def run(self, reader: Any = None, eol: str | None = None) -> None:
        """Read characters from the reader and execute every completed command.

        Without a reader the com port is used. Replies go to the reader while
        it is being read.
        """
        if reader is None:
            if self.com_port is None:
                return
            reader = self.com_port
        saved_port, saved_eol = self.com_port, self.eol
        self.com_port = reader
        if eol is not None:
            self.eol = eol
        try:
            while True:
                ch = reader.read(1)
                if not ch:
                    break
                self._received.append(ch)
                if self.echo:
                    self._print(ch)
                if self._is_sentinel(ch):
                    command = "".join(self._received)
                    self._received.clear()
                    self.execute(command)
                if len(self._received) >= MAX_COMMAND_LENGTH:
                    # too long to be a command: drop it
                    self._received.clear()
        finally:
            self.com_port = saved_port
            self.eol = saved_eol

    def execute(self, user_input: str) -> None:
        """Execute one command line."""
        if not user_input:
            return
        command_id = user_input[0]
        rest = user_input[1:]
        if command_id == CMD_SCAN:
            for entry in self._callbacks:
                self._print_machine_readable(CMD_SCAN)
                self._print(entry.command_id)
                self._print(":")
                self._println(entry.label or "")
        elif command_id == CMD_VERBOSE:
            if not self._is_sentinel(self._char(user_input, 1)):
                try:
                    self.verbose = VerboseMode(parse_int(rest))
                except ValueError:
                    pass
            self._print_verbose("Verb:")
            self._print_machine_readable(CMD_VERBOSE)
            if self.verbose == VerboseMode.NOTHING:
                self._println("off!")
            elif self.verbose in (VerboseMode.ON_REQUEST, VerboseMode.USER_FRIENDLY):
                self._println("on!")
            else:
                self._println_machine_readable("machine")
        elif command_id == CMD_DECIMAL:
            if not self._is_sentinel(self._char(user_input, 1)):
                self.decimal_places = parse_int(rest) & 0xFF
            self._print_verbose("Decimal:")
            self._print_machine_readable(CMD_DECIMAL)
            self._println(self.decimal_places)
        else:
            for entry in self._callbacks:
                if entry.command_id == command_id:
                    self._print_machine_readable(command_id)
                    entry.handler(rest)
                    break

    def pid(self, pid: PIDController, user_cmd: str) -> None:
        """Get or set a PID gain, ramp or limit: P, I, D, R or L followed by a value."""
        cmd = self._char(user_cmd, 0)
        get = self._is_sentinel(self._char(user_cmd, 1))
        value = parse_float(user_cmd[1:])
        fields = {
            SCMD_PID_P: ("P: ", "p"),
            SCMD_PID_I: ("I: ", "i"),
            SCMD_PID_D: ("D: ", "d"),
            SCMD_PID_RAMP: ("ramp: ", "output_ramp"),
            SCMD_PID_LIM: ("limit: ", "limit"),
        }
        if cmd not in fields:
            self._print_error()
            return
        label, attribute = fields[cmd]
        self._print_verbose(label)
        if not get:
            setattr(pid, attribute, value)
        self._println(float(getattr(pid, attribute)))

    def lpf(self, lpf: LowPassFilter, user_cmd: str) -> None:
        """Get or set a filter time constant: F followed by a value."""
        cmd = self._char(user_cmd, 0)
        get = self._is_sentinel(self._char(user_cmd, 1))
        value = parse_float(user_cmd[1:])
        if cmd != SCMD_LPF_TF:
            self._print_error()
            return
        self._print_verbose("Tf: ")
        if not get:
            lpf.time_constant = value
        self._println(float(lpf.time_constant))

    def scalar(self, value: float, user_cmd: str) -> float:
        """Return the value the command sets, or the given one for a get; print it."""
        if not self._is_sentinel(self._char(user_cmd, 0)):
            value = parse_float(user_cmd)
        value = float(value)
        self._println(value)
        return value

    # parsing helpers

    @staticmethod
    def _char(text: str, index: int) -> str:
        return text[index] if index < len(text) else ""

    def _is_sentinel(self, ch: str) -> bool:
        if ch == self.eol or ch == "":
            return True
        if ch == "\r":
            self._print_verbose("Warn: \\r detected! \n")
        return False

    # output helpers

    def _emit(self, text: str) -> None:
        if self.com_port is None or self.verbose == VerboseMode.NOTHING:
            return
        self.com_port.write(text)

    def _format(self, value: Any) -> str:
        if isinstance(value, float):
            return f"{value:.{int(self.decimal_places)}f}"
        if isinstance(value, int):
            return str(int(value))
        return str(value)

    def _print(self, value: Any) -> None:
        self._emit(self._format(value))

    def _println(self, value: Any = "") -> None:
        self._emit(self._format(value) + "\n")

    def _print_verbose(self, message: str) -> None:
        if self.verbose == VerboseMode.USER_FRIENDLY:
            self._print(message)

    def _print_machine_readable(self, value: Any) -> None:
        if self.verbose == VerboseMode.MACHINE_READABLE:
            self._print(value)

    def _println_machine_readable(self, value: Any) -> None:
        if self.verbose == VerboseMode.MACHINE_READABLE:
            self._println(value)

    def _print_error(self) -> None:
        self._println("err")