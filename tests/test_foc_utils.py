import math

import pytest

from focdrive.foc_utils import (
    NOT_SET,
    PI_2,
    TWO_PI,
    constrain,
    electrical_angle,
    fast_cos,
    fast_sin,
    is_set,
    normalize_angle,
    round_half_away,
    sign,
    sqrt_approx,
)

GRID = [TWO_PI * k / 360 for k in range(361)]


def test_is_set():
    assert is_set(NOT_SET) is False
    assert is_set(0.0) is True


@pytest.mark.parametrize("value,expected", [(-3.0, -1), (0.0, 0), (2.5, 1)])
def test_sign(value, expected):
    assert sign(value) == expected


def test_constrain_limits():
    assert constrain(5.0, -1.0, 1.0) == 1.0
    assert constrain(-5.0, -1.0, 1.0) == -1.0
    assert constrain(0.25, -1.0, 1.0) == 0.25


@pytest.mark.parametrize("value", [0.2, 1.5, 2.49, 7.5, 100.7])
def test_round_is_symmetric_and_close(value):
    r = round_half_away(value)
    assert r == -round_half_away(-value)
    assert abs(r - value) <= 0.5


@pytest.mark.parametrize("n", [0, 1, 4, 11])
def test_round_halves_away_from_zero(n):
    assert round_half_away(n + 0.5) == n + 1
    assert round_half_away(-(n + 0.5)) == -(n + 1)


def test_fast_sin_tracks_sine():
    for a in GRID:
        assert abs(fast_sin(a) - math.sin(a)) < 0.006


def test_fast_cos_tracks_cosine():
    for a in GRID:
        assert abs(fast_cos(a) - math.cos(a)) < 0.006


def test_fast_sin_endpoints():
    assert fast_sin(0.0) == 0.0
    assert fast_sin(PI_2) == pytest.approx(1.0)


def test_fast_sin_rejects_out_of_range():
    with pytest.raises(ValueError):
        fast_sin(-1.0)


@pytest.mark.parametrize("angle", [-20.0, -1.0, 0.0, 3.0, 7.0, 100.0])
def test_normalize_angle_range_and_congruence(angle):
    a = normalize_angle(angle)
    assert 0.0 <= a < TWO_PI
    turns = (angle - a) / TWO_PI
    assert turns == pytest.approx(round(turns), abs=1e-9)


def test_electrical_angle():
    assert electrical_angle(0.5, 4) == pytest.approx(2.0)


def test_sqrt_approx_error_bound():
    for x in [0.01, 0.5, 1.0, 2.0, 4.0, 10.0, 144.0, 1e4]:
        assert abs(sqrt_approx(x) - math.sqrt(x)) / math.sqrt(x) < 0.04


def test_sqrt_approx_zero():
    assert sqrt_approx(0.0) == 0.0