"""Phase voltage modulation and open-loop motion steps for three-phase motors."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .drivers import PhaseState
from .foc_utils import (
    HIGH_IMPEDANCE,
    PI_2,
    PI_3,
    PI_6,
    SQRT3,
    SQRT3_2,
    TWO_PI,
    constrain,
    fast_cos,
    fast_sin,
    is_set,
    normalize_angle,
    sign,
    sqrt_approx,
)
from .timing import MICROS_PERIOD

# 60 degree steps: 1 positive, -1 negative, 0 high impedance
TRAP_120_MAP = (
    (HIGH_IMPEDANCE, 1, -1),
    (-1, 1, HIGH_IMPEDANCE),
    (-1, HIGH_IMPEDANCE, 1),
    (HIGH_IMPEDANCE, -1, 1),
    (1, -1, HIGH_IMPEDANCE),
    (1, HIGH_IMPEDANCE, -1),
)

# 30 degree steps: 1 positive, -1 negative, 0 high impedance
TRAP_150_MAP = (
    (HIGH_IMPEDANCE, 1, -1),
    (-1, 1, -1),
    (-1, 1, HIGH_IMPEDANCE),
    (-1, 1, 1),
    (-1, HIGH_IMPEDANCE, 1),
    (-1, -1, 1),
    (HIGH_IMPEDANCE, -1, 1),
    (1, -1, 1),
    (1, -1, HIGH_IMPEDANCE),
    (1, -1, -1),
    (1, HIGH_IMPEDANCE, -1),
    (1, 1, -1),
)

_ON = PhaseState.PHASE_ON
_OFF = PhaseState.PHASE_OFF


@dataclass(frozen=True)
class PhaseOutput:
    """Phase voltages to apply, with phase states when the modulation sets them."""

    ua: float
    ub: float
    uc: float
    states: tuple[PhaseState, PhaseState, PhaseState] | None = None


def inverse_park(uq: float, ud: float, angle_el: float) -> tuple[float, float]:
    """Return (u_alpha, u_beta) for d/q voltages at the electrical angle."""
    angle = normalize_angle(angle_el)
    ca = fast_cos(angle)
    sa = fast_sin(angle)
    return ca * ud - sa * uq, sa * ud + ca * uq


def _sector(angle_el: float, count: int) -> int:
    # PI/6 offset aligns the trapezoid sectors with the other modulations
    return min(int(count * (normalize_angle(angle_el + PI_6) / TWO_PI)), count - 1)


def _trapezoid(table, sector: int, uq: float, center: float) -> PhaseOutput:
    pattern = table[sector]
    values = [level * uq + center for level in pattern]
    states = [_ON, _ON, _ON]
    for phase, level in enumerate(pattern):
        if level == HIGH_IMPEDANCE:
            values[phase] = center
            states[phase] = _OFF
            break
    return PhaseOutput(values[0], values[1], values[2], (states[0], states[1], states[2]))


def trapezoid_120(uq: float, angle_el: float, voltage_limit: float, centered: bool) -> PhaseOutput:
    """Block commutation in six 60 degree sectors, one phase floating."""
    center = voltage_limit / 2 if centered else uq
    return _trapezoid(TRAP_120_MAP, _sector(angle_el, 6), uq, center)


def trapezoid_150(uq: float, angle_el: float, voltage_limit: float, centered: bool) -> PhaseOutput:
    """Block commutation in twelve 30 degree sectors."""
    center = voltage_limit / 2 if centered else uq
    return _trapezoid(TRAP_150_MAP, _sector(angle_el, 12), uq, center)


def sine_pwm(uq: float, ud: float, angle_el: float, voltage_limit: float, centered: bool) -> PhaseOutput:
    """Sinusoidal PWM: inverse Park and Clarke transforms."""
    u_alpha, u_beta = inverse_park(uq, ud, angle_el)
    center = voltage_limit / 2
    ua = u_alpha + center
    ub = -0.5 * u_alpha + SQRT3_2 * u_beta + center
    uc = -0.5 * u_alpha - SQRT3_2 * u_beta + center
    if not centered:
        lowest = min(ua, ub, uc)
        ua -= lowest
        ub -= lowest
        uc -= lowest
    return PhaseOutput(ua, ub, uc)


def space_vector_pwm(
    uq: float, ud: float, angle_el: float, voltage_limit: float, centered: bool
) -> PhaseOutput:
    """Space vector PWM, centred on half the limit or pulled down to zero."""
    if ud:
        u_out = sqrt_approx(ud * ud + uq * uq) / voltage_limit
        angle = normalize_angle(angle_el + math.atan2(uq, ud))
    else:
        u_out = uq / voltage_limit
        angle = normalize_angle(angle_el + PI_2)

    sector = math.floor(angle / PI_3) + 1
    t1 = SQRT3 * fast_sin(sector * PI_3 - angle) * u_out
    t2 = SQRT3 * fast_sin(angle - (sector - 1.0) * PI_3) * u_out
    t0 = 1 - t1 - t2 if centered else 0.0
    half = t0 / 2

    duties = {
        1: (t1 + t2 + half, t2 + half, half),
        2: (t1 + half, t1 + t2 + half, half),
        3: (half, t1 + t2 + half, t2 + half),
        4: (half, t1 + half, t1 + t2 + half),
        5: (t2 + half, half, t1 + t2 + half),
        6: (t1 + t2 + half, half, t1 + half),
    }
    ta, tb, tc = duties.get(sector, (0.0, 0.0, 0.0))
    return PhaseOutput(ta * voltage_limit, tb * voltage_limit, tc * voltage_limit)


def openloop_sample_time(now_us: int, last_us: int) -> float:
    """Seconds since the last open-loop step, 1 ms when implausible."""
    ts = ((now_us - last_us) % MICROS_PERIOD) * 1e-6
    if ts <= 0 or ts > 0.5:
        ts = 1e-3
    return ts


def openloop_velocity_step(
    shaft_angle: float, target_velocity: float, ts: float
) -> tuple[float, float]:
    """Return (new shaft angle, shaft velocity) for one velocity open-loop step."""
    return normalize_angle(shaft_angle + target_velocity * ts), target_velocity


def openloop_angle_step(
    shaft_angle: float, target_angle: float, velocity_limit: float, ts: float
) -> tuple[float, float]:
    """Return (new shaft angle, shaft velocity) moving towards the target angle."""
    error = target_angle - shaft_angle
    if abs(error) > abs(velocity_limit * ts):
        return shaft_angle + sign(error) * abs(velocity_limit) * ts, velocity_limit
    return target_angle, 0.0


def openloop_voltage(
    voltage_limit: float, current_limit: float, phase_resistance: float, voltage_bemf: float
) -> tuple[float, float | None]:
    """Return (q voltage, estimated q current) for open-loop driving.

    Without a known phase resistance the voltage limit is used and no
    current estimate is made.
    """
    if not is_set(phase_resistance):
        return voltage_limit, None
    bemf = abs(voltage_bemf)
    uq = constrain(current_limit * phase_resistance + bemf, -voltage_limit, voltage_limit)
    return uq, (uq - bemf) / phase_resistance