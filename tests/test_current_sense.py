import math

import pytest

from focdrive.current_sense import CurrentSense
from focdrive.foc_utils import PhaseCurrent


class FakeSense(CurrentSense):
    def __init__(self, phases):
        super().__init__()
        self.phases = phases

    def init(self):
        self.initialized = True
        return True

    def driver_align(self, align_voltage):
        return 1

    def get_phase_currents(self):
        return self.phases


def balanced(magnitude, theta):
    return PhaseCurrent(
        magnitude * math.cos(theta),
        magnitude * math.cos(theta - 2 * math.pi / 3),
        magnitude * math.cos(theta + 2 * math.pi / 3),
    )


def test_base_class_is_abstract():
    with pytest.raises(TypeError):
        CurrentSense()


def test_link_driver_stores_driver():
    sense = FakeSense(PhaseCurrent())
    marker = object()
    sense.link_driver(marker)
    assert sense.driver is marker


@pytest.mark.parametrize("angle", [0.3, 1.0, 2.5, 4.0, 5.5])
def test_foc_current_magnitude_independent_of_angle(angle):
    sense = FakeSense(balanced(2.0, 0.7))
    reference = sense.get_foc_currents(0.0)
    dq = sense.get_foc_currents(angle)
    assert math.hypot(dq.d, dq.q) == pytest.approx(math.hypot(reference.d, reference.q), rel=0.02)


def test_missing_b_phase_is_reconstructed():
    missing = FakeSense(PhaseCurrent(1.0, 0.0, 5.0)).get_foc_currents(1.2)
    full = FakeSense(PhaseCurrent(1.0, -6.0, 5.0)).get_foc_currents(1.2)
    assert missing.d == pytest.approx(full.d)
    assert missing.q == pytest.approx(full.q)


def test_dc_current_without_angle_is_positive_magnitude():
    sense = FakeSense(PhaseCurrent(1.0, -0.5, -0.5))
    assert sense.get_dc_current() == pytest.approx(1.0, rel=0.05)


@pytest.mark.parametrize("angle", [0.5, 1.57, 3.0, 4.5, 6.0])
def test_dc_current_sign_follows_q_current(angle):
    sense = FakeSense(PhaseCurrent(1.0, -0.5, -0.5))
    dc = sense.get_dc_current(angle)
    q = sense.get_foc_currents(angle).q
    assert (dc > 0) == (q > 0)
    assert abs(dc) == pytest.approx(1.0, rel=0.05)


def test_angle_outside_range_is_rejected():
    sense = FakeSense(PhaseCurrent(1.0, -0.5, -0.5))
    with pytest.raises(ValueError):
        sense.get_foc_currents(7.0)