import io

import pytest

from focdrive.commander import Commander, VerboseMode, parse_float, parse_int
from focdrive.lowpass import LowPassFilter
from focdrive.pid import PIDController
from focdrive.timing import ManualClock


class Duplex:
    def __init__(self, incoming: str) -> None:
        self._in = io.StringIO(incoming)
        self.out: list[str] = []

    def read(self, size: int) -> str:
        return self._in.read(size)

    def write(self, text: str) -> None:
        self.out.append(text)

    @property
    def text(self) -> str:
        return "".join(self.out)


def make_pid() -> PIDController:
    return PIDController(1.0, 2.0, 0.0, 0.0, 10.0, ManualClock())


def test_parse_float_prefix():
    assert parse_float("1.5abc") == 1.5
    assert parse_float("-2e3") == -2e3
    assert parse_float("abc") == 0.0
    assert parse_float("") == 0.0


def test_parse_int_prefix():
    assert parse_int("42x") == 42
    assert parse_int("-7") == -7
    assert parse_int("") == 0


def test_pid_set_updates_gain_and_prints():
    port = io.StringIO()
    commander = Commander(port)
    pid = make_pid()
    commander.pid(pid, "P2.5\n")
    assert pid.p == 2.5
    assert port.getvalue() == "P: 2.500\n"


def test_pid_get_leaves_value():
    commander = Commander(io.StringIO())
    pid = make_pid()
    commander.pid(pid, "I\n")
    assert pid.i == 2.0


@pytest.mark.parametrize(
    "command, attribute, value",
    [("D0.25\n", "d", 0.25), ("R50\n", "output_ramp", 50.0), ("L3\n", "limit", 3.0)],
)
def test_pid_sets_each_field(command, attribute, value):
    commander = Commander()
    pid = make_pid()
    commander.pid(pid, command)
    assert getattr(pid, attribute) == value


def test_pid_unknown_field_reports_error():
    port = io.StringIO()
    Commander(port).pid(make_pid(), "X1\n")
    assert port.getvalue() == "err\n"


def test_lpf_sets_time_constant():
    lpf = LowPassFilter(0.01, ManualClock())
    commander = Commander(io.StringIO())
    commander.lpf(lpf, "F0.02\n")
    assert lpf.time_constant == 0.02
    commander.lpf(lpf, "F\n")
    assert lpf.time_constant == 0.02


def test_lpf_unknown_reports_error():
    port = io.StringIO()
    Commander(port).lpf(LowPassFilter(0.01, ManualClock()), "Q1\n")
    assert port.getvalue() == "err\n"


def test_scalar_set_and_get():
    commander = Commander()
    assert commander.scalar(1.0, "4.5\n") == 4.5
    assert commander.scalar(1.0, "\n") == 1.0


def test_execute_dispatches_callback_with_rest():
    received = []
    commander = Commander()
    commander.add("A", received.append)
    commander.execute("A12\n")
    assert received == ["12\n"]


def test_add_rejects_more_than_twenty():
    commander = Commander()
    for index in range(20):
        commander.add(chr(ord("a") + index), lambda _: None)
    with pytest.raises(ValueError):
        commander.add("Z", lambda _: None)


def test_add_rejects_long_id():
    with pytest.raises(ValueError):
        Commander().add("AB", lambda _: None)


def test_scan_lists_labels():
    port = io.StringIO()
    commander = Commander(port)
    commander.add("A", lambda _: None, "motor")
    commander.add("B", lambda _: None)
    commander.execute("?\n")
    assert port.getvalue() == "A:motor\nB:\n"


def test_verbose_machine_readable():
    port = io.StringIO()
    commander = Commander(port)
    commander.execute("@3\n")
    assert commander.verbose == VerboseMode.MACHINE_READABLE
    assert port.getvalue() == "@machine\n"


def test_verbose_nothing_silences_output():
    port = io.StringIO()
    commander = Commander(port)
    commander.execute("@0\n")
    commander.pid(make_pid(), "X\n")
    assert commander.verbose == VerboseMode.NOTHING
    assert port.getvalue() == ""


def test_verbose_invalid_value_keeps_mode():
    commander = Commander(io.StringIO())
    commander.execute("@9\n")
    assert commander.verbose == VerboseMode.USER_FRIENDLY


def test_decimal_places_command():
    port = io.StringIO()
    commander = Commander(port)
    commander.execute("#2\n")
    assert commander.decimal_places == 2
    assert port.getvalue() == "Decimal:2\n"


def test_machine_readable_prefixes_callback_letter():
    port = io.StringIO()
    commander = Commander(port)
    commander.verbose = VerboseMode.MACHINE_READABLE
    commander.add("K", lambda _: None)
    commander.execute("K1\n")
    assert port.getvalue() == "K"


def test_run_reads_commands_from_stream():
    received = []
    commander = Commander()
    commander.add("P", received.append)
    stream = Duplex("P1\nP2\n")
    commander.run(stream)
    assert received == ["1\n", "2\n"]


def test_run_drops_overlong_input():
    received = []
    commander = Commander()
    commander.add("B", received.append)
    commander.run(Duplex("A" * 20 + "B7\n"))
    assert received == ["7\n"]


def test_run_with_custom_eol():
    received = []
    commander = Commander()
    commander.add("P", received.append)
    commander.run(Duplex("P5;"), ";")
    assert received == ["5;"]
    assert commander.eol == "\n"


def test_run_echo_writes_characters_back():
    commander = Commander(echo=True)
    stream = Duplex("Z\n")
    commander.run(stream)
    assert stream.text == "Z\n"
    assert commander.com_port is None


def test_run_without_port_does_nothing():
    received = []
    commander = Commander()
    commander.add("P", received.append)
    commander.run()
    assert received == []


def test_carriage_return_warns():
    port = io.StringIO()
    commander = Commander(port)
    pid = make_pid()
    commander.pid(pid, "P\r")
    assert "Warn" in port.getvalue()
    assert pid.p == 0.0