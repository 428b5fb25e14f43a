import pytest

from focdrive.lowpass import LowPassFilter
from focdrive.timing import ManualClock


def test_long_gap_passes_input_through():
    clock = ManualClock()
    lpf = LowPassFilter(0.01, clock)
    clock.advance(400_000)
    assert lpf(5.0) == 5.0


def test_zero_time_constant_passes_input():
    clock = ManualClock()
    lpf = LowPassFilter(0.0, clock)
    clock.advance(1000)
    assert lpf(3.25) == pytest.approx(3.25)
    assert lpf(-1.5) == pytest.approx(-1.5)


def test_filtered_value_lies_between_previous_and_input():
    clock = ManualClock()
    lpf = LowPassFilter(0.01, clock)
    clock.advance(1000)
    y = lpf(4.0)
    assert 0.0 < y < 4.0


def test_converges_to_constant_input():
    clock = ManualClock()
    lpf = LowPassFilter(0.01, clock)
    values = []
    for _ in range(500):
        clock.advance(1000)
        values.append(lpf(2.0))
    assert all(b >= a for a, b in zip(values, values[1:]))
    assert values[-1] == pytest.approx(2.0, rel=1e-6)


def test_larger_time_constant_filters_more():
    clock = ManualClock()
    light = LowPassFilter(0.001, clock)
    heavy = LowPassFilter(0.1, clock)
    clock.advance(1000)
    assert heavy(1.0) < light(1.0)


def test_counter_wrap_is_not_a_long_gap():
    clock = ManualClock(start_us=2**32 - 500)
    lpf = LowPassFilter(0.01, clock)
    clock.advance(1000)
    y = lpf(4.0)
    assert 0.0 < y < 4.0


def test_time_constant_can_be_changed():
    clock = ManualClock()
    lpf = LowPassFilter(0.5, clock)
    lpf.time_constant = 0.0
    clock.advance(1000)
    assert lpf(7.0) == pytest.approx(7.0)