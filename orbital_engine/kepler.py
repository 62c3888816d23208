"""
Kepler Solver for the orbital engine.

Pure functions over floats:
- Kepler's equation M = E - e*sin(E) solved for the eccentric anomaly
- True anomaly from eccentric anomaly
- Orbital radius from the conic equation
- Kepler's third law (period, mean motion)
- Vis-viva speed and flight path angle

Every formula with a variable denominator is pre-clamped so that a
near-parabolic orbit cannot produce a division by zero or NaN mid-tick.
"""

from __future__ import annotations

import logging
import math

from .config import (
    KEPLER_MAX_ITERATIONS,
    KEPLER_TOLERANCE,
    MAX_ECCENTRICITY,
    RADIUS_DENOMINATOR_FLOOR,
)


logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi

# Bisection cap; enough to shrink [0, 2pi] below 1e-12
BISECTION_MAX_ITERATIONS = 64


def normalize_angle(angle: float) -> float:
    """Wrap an angle into [0, 2pi)."""
    wrapped = math.fmod(angle, TWO_PI)
    if wrapped < 0:
        wrapped += TWO_PI
    # fmod of a tiny negative number can round up to exactly 2pi
    if wrapped >= TWO_PI:
        wrapped = 0.0
    return wrapped


def clamp_eccentricity(e: float, max_eccentricity: float = MAX_ECCENTRICITY) -> float:
    """Restrict eccentricity to [0, max_eccentricity]."""
    return max(0.0, min(e, max_eccentricity))


def kepler_residual(E: float, e: float, M: float) -> float:
    """f(E) = E - e*sin(E) - M."""
    return E - e * math.sin(E) - M


def solve_kepler_equation(
    M: float,
    e: float,
    max_iterations: int = KEPLER_MAX_ITERATIONS,
    tolerance: float = KEPLER_TOLERANCE,
    max_eccentricity: float = MAX_ECCENTRICITY,
) -> float:
    """
    Solve Kepler's equation for the eccentric anomaly.

    Newton-Raphson from E0 = M:

        E <- E - (E - e*sin(E) - M) / (1 - e*cos(E))

    stopping when the step is below tolerance. Starting from E0 = M can
    overshoot badly for e close to 1 and small M; if the residual is still
    above tolerance after max_iterations, bisection on [0, 2pi] finishes the
    job (f is monotonic there because f'(E) = 1 - e*cos(E) >= 1 - e > 0).

    Args:
        M: Mean anomaly (radians, any value; normalized to [0, 2pi))
        e: Eccentricity (clamped to [0, max_eccentricity])
        max_iterations: Newton iteration cap
        tolerance: Convergence tolerance on the Newton step

    Returns:
        Eccentric anomaly E in radians
    """
    M = normalize_angle(M)
    e = clamp_eccentricity(e, max_eccentricity)

    E = M
    for _ in range(max_iterations):
        f = E - e * math.sin(E) - M
        f_prime = 1.0 - e * math.cos(E)
        delta = f / f_prime
        E -= delta
        if abs(delta) < tolerance:
            break

    if abs(kepler_residual(E, e, M)) < tolerance:
        return E

    logger.debug(
        "Newton did not converge for M=%.6f e=%.6f after %d iterations; bisecting",
        M, e, max_iterations,
    )
    return _bisect_kepler(M, e, tolerance)


def _bisect_kepler(M: float, e: float, tolerance: float) -> float:
    low, high = 0.0, TWO_PI
    mid = M
    for _ in range(BISECTION_MAX_ITERATIONS):
        mid = 0.5 * (low + high)
        f = kepler_residual(mid, e, M)
        if abs(f) < tolerance * 0.5:
            break
        if f > 0:
            high = mid
        else:
            low = mid
    return mid


def true_anomaly(
    E: float,
    e: float,
    max_eccentricity: float = MAX_ECCENTRICITY,
) -> float:
    """
    True anomaly from eccentric anomaly.

    nu = 2 * atan2(sqrt(1+e) * sin(E/2), sqrt(1-e) * cos(E/2))
    """
    e = clamp_eccentricity(e, max_eccentricity)
    return 2.0 * math.atan2(
        math.sqrt(1.0 + e) * math.sin(E / 2.0),
        math.sqrt(1.0 - e) * math.cos(E / 2.0),
    )


def orbital_radius(
    a: float,
    e: float,
    nu: float,
    denominator_floor: float = RADIUS_DENOMINATOR_FLOOR,
) -> float:
    """
    Distance from the focus at true anomaly nu.

    r = a(1 - e^2) / max(1 + e*cos(nu), floor)
    """
    denominator = max(1.0 + e * math.cos(nu), denominator_floor)
    return a * (1.0 - e * e) / denominator


def orbital_period(semi_major_axis: float, central_mass: float, g: float) -> float:
    """
    Kepler's third law.

    T^2 = 4pi^2 a^3 / (G M)
    """
    if semi_major_axis <= 0 or central_mass <= 0 or g <= 0:
        raise ValueError("Orbital period needs positive a, central mass and G")
    return TWO_PI * math.sqrt(semi_major_axis ** 3 / (g * central_mass))


def mean_motion(period: float) -> float:
    """n = 2pi / T."""
    return TWO_PI / period


def vis_viva_speed(r: float, a: float, central_mass: float, g: float) -> float:
    """
    Orbital speed from the vis-viva equation.

    v = sqrt(G M (2/r - 1/a)), floored at zero under the root.
    """
    if r <= 0 or a <= 0:
        return 0.0
    v_squared = g * central_mass * (2.0 / r - 1.0 / a)
    return math.sqrt(max(0.0, v_squared))


def flight_path_angle(e: float, nu: float) -> float:
    """Angle between the velocity and the local horizontal."""
    return math.atan2(e * math.sin(nu), 1.0 + e * math.cos(nu))
