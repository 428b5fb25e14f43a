"""Numeric helpers for field oriented control: fast trig, angles, clamping."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass

TWO_SQRT3 = 1.15470053838
SQRT3 = 1.73205080757
ONE_SQRT3 = 0.57735026919
SQRT3_2 = 0.86602540378
SQRT2 = 1.41421356237
D2R_120 = 2.09439510239
PI = 3.14159265359
PI_2 = 1.57079632679
PI_3 = 1.0471975512
TWO_PI = 6.28318530718
THREE_PI_2 = 4.71238898038
PI_6 = 0.52359877559
RPM_TO_RADS = 0.10471975512

NOT_SET = -12345.0
HIGH_IMPEDANCE = 0
HIGH_Z = HIGH_IMPEDANCE
ACTIVE = 1
NC = NOT_SET

MIN_ANGLE_DETECT_MOVEMENT = TWO_PI / 101.0

# sin(x) * 10000 for a quarter turn in 200 points
_SINE_TABLE = (
    0, 79, 158, 237, 316, 395, 473, 552, 631, 710, 789, 867, 946, 1024, 1103, 1181,
    1260, 1338, 1416, 1494, 1572, 1650, 1728, 1806, 1883, 1961, 2038, 2115, 2192,
    2269, 2346, 2423, 2499, 2575, 2652, 2728, 2804, 2879, 2955, 3030, 3105, 3180,
    3255, 3329, 3404, 3478, 3552, 3625, 3699, 3772, 3845, 3918, 3990, 4063, 4135,
    4206, 4278, 4349, 4420, 4491, 4561, 4631, 4701, 4770, 4840, 4909, 4977, 5046,
    5113, 5181, 5249, 5316, 5382, 5449, 5515, 5580, 5646, 5711, 5775, 5839, 5903,
    5967, 6030, 6093, 6155, 6217, 6279, 6340, 6401, 6461, 6521, 6581, 6640, 6699,
    6758, 6815, 6873, 6930, 6987, 7043, 7099, 7154, 7209, 7264, 7318, 7371, 7424,
    7477, 7529, 7581, 7632, 7683, 7733, 7783, 7832, 7881, 7930, 7977, 8025, 8072,
    8118, 8164, 8209, 8254, 8298, 8342, 8385, 8428, 8470, 8512, 8553, 8594, 8634,
    8673, 8712, 8751, 8789, 8826, 8863, 8899, 8935, 8970, 9005, 9039, 9072, 9105,
    9138, 9169, 9201, 9231, 9261, 9291, 9320, 9348, 9376, 9403, 9429, 9455, 9481,
    9506, 9530, 9554, 9577, 9599, 9621, 9642, 9663, 9683, 9702, 9721, 9739, 9757,
    9774, 9790, 9806, 9821, 9836, 9850, 9863, 9876, 9888, 9899, 9910, 9920, 9930,
    9939, 9947, 9955, 9962, 9969, 9975, 9980, 9985, 9989, 9992, 9995, 9997, 9999,
    10000, 10000,
)
_TABLE_SCALE = 126.6873  # table points per radian


@dataclass
class DQCurrent:
    """Currents in the rotating d/q frame."""

    d: float = 0.0
    q: float = 0.0


@dataclass
class PhaseCurrent:
    """Per-phase currents; c is 0 when only two phases are measured."""

    a: float = 0.0
    b: float = 0.0
    c: float = 0.0


@dataclass
class DQVoltage:
    """Voltages in the rotating d/q frame."""

    d: float = 0.0
    q: float = 0.0


def is_set(value: float) -> bool:
    """Return True unless the value is the NOT_SET marker."""
    return value != NOT_SET


def sign(value: float) -> int:
    """Return -1, 0 or 1 according to the sign of the value."""
    if value < 0:
        return -1
    return 1 if value > 0 else 0


def constrain(amount: float, low: float, high: float) -> float:
    """Clamp amount into [low, high]."""
    if amount < low:
        return low
    if amount > high:
        return high
    return amount


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(value + 0.5) if value >= 0 else int(value - 0.5)


def _table(index: int) -> float:
    if not 0 <= index < len(_SINE_TABLE):
        raise ValueError("angle must lie between 0 and 2*pi")
    return 0.0001 * _SINE_TABLE[index]


def fast_sin(angle: float) -> float:
    """Table-based sine for an angle in [0, 2*pi], precision about 0.005."""
    scaled = round_half_away(_TABLE_SCALE * angle)
    if angle < PI_2:
        return _table(scaled)
    if angle < PI:
        return _table(398 - scaled)
    if angle < THREE_PI_2:
        return -_table(scaled - 398)
    return -_table(796 - scaled)


def fast_cos(angle: float) -> float:
    """Table-based cosine for an angle in [0, 2*pi]."""
    shifted = angle + PI_2
    if shifted > TWO_PI:
        shifted -= TWO_PI
    return fast_sin(shifted)


def normalize_angle(angle: float) -> float:
    """Map a radian angle into [0, 2*pi)."""
    a = math.fmod(angle, TWO_PI)
    return a if a >= 0 else a + TWO_PI


def electrical_angle(shaft_angle: float, pole_pairs: int) -> float:
    """Electrical angle from the mechanical shaft angle."""
    return shaft_angle * pole_pairs


def sqrt_approx(number: float) -> float:
    """Square root approximation via the fast inverse square root trick (3-4% error)."""
    (bits,) = struct.unpack("<i", struct.pack("<f", number))
    bits = (0x5F375A86 - (bits >> 1)) & 0xFFFFFFFF
    (inverse,) = struct.unpack("<f", struct.pack("<I", bits))
    return number * inverse