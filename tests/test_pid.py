import pytest

from focdrive.pid import PIDController
from focdrive.timing import ManualClock


def test_proportional_only():
    clock = ManualClock()
    pid = PIDController(2.0, 0.0, 0.0, 0.0, 10.0, clock)
    assert pid(1.5) == pytest.approx(2.0 * 1.5)


def test_output_is_limited():
    clock = ManualClock()
    pid = PIDController(100.0, 0.0, 0.0, 0.0, 5.0, clock)
    assert pid(1.0) == 5.0
    assert pid(-1.0) == -5.0


def test_integral_grows_and_saturates():
    clock = ManualClock()
    pid = PIDController(0.0, 10.0, 0.0, 0.0, 1.0, clock)
    outputs = []
    for _ in range(200):
        clock.advance(1000)
        outputs.append(pid(1.0))
    assert all(b >= a for a, b in zip(outputs, outputs[1:]))
    assert outputs[0] > 0
    assert outputs[-1] == pytest.approx(1.0)


def test_ramp_limits_first_step():
    clock = ManualClock()
    pid = PIDController(10.0, 0.0, 0.0, 100.0, 20.0, clock)
    clock.advance(1000)
    assert pid(1.0) == pytest.approx(100.0 * 1000 * 1e-6)


def test_sample_time_fallback_for_zero_and_long_gaps():
    fast_clock = ManualClock()
    fast = PIDController(0.0, 0.0, 1.0, 0.0, 1e6, fast_clock)
    slow_clock = ManualClock()
    slow = PIDController(0.0, 0.0, 1.0, 0.0, 1e6, slow_clock)
    slow_clock.advance(1_000_000)
    normal_clock = ManualClock()
    normal = PIDController(0.0, 0.0, 1.0, 0.0, 1e6, normal_clock)
    normal_clock.advance(10_000)

    zero_gap = fast(1.0)
    assert zero_gap == pytest.approx(1.0 / 1e-3)
    assert slow(1.0) == pytest.approx(zero_gap)
    assert normal(1.0) < zero_gap


def test_reset_restores_fresh_behaviour():
    clock = ManualClock()
    pid = PIDController(1.0, 50.0, 0.1, 0.0, 10.0, clock)
    for _ in range(5):
        clock.advance(1000)
        pid(2.0)
    pid.reset()
    fresh = PIDController(1.0, 50.0, 0.1, 0.0, 10.0, clock)
    clock.advance(1000)
    assert pid(0.5) == pytest.approx(fresh(0.5))


def test_sample_time_survives_counter_wrap():
    clock = ManualClock(start_us=2**32 - 500)
    wrapped = PIDController(0.0, 0.0, 1.0, 0.0, 1e6, clock)
    clock.advance(10_000)
    plain_clock = ManualClock()
    plain = PIDController(0.0, 0.0, 1.0, 0.0, 1e6, plain_clock)
    plain_clock.advance(10_000)
    assert wrapped(1.0) == pytest.approx(plain(1.0))