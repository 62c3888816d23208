"""
Gravity helpers for vehicles flying near celestial bodies.

Point-mass gravity only: each body pulls on the vehicle if the vehicle is
inside that body's influence radius. Orbital parameters derived here are
for display (HUD orbit type, apsides, stability check) and do not feed the
propagator.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .bodies import CelestialBody
from .config import DEFAULT_G
from .inertial import InertialBody
from .vector import Vector3D


# Below this separation forces are treated as zero
MIN_FORCE_DISTANCE = 0.1

INFLUENCE_EXPONENT = 0.33
INFLUENCE_SCALE = 100.0
INFLUENCE_CAP = 5000.0

# A body "captures" a vehicle inside this many body radii
GRAVITY_WELL_RADII = 5.0

STABLE_ECCENTRICITY = 0.9
SAFE_PERIAPSIS_RADII = 1.5


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass
class GravitationalForce:
    """Force on body a from body b."""
    fx: float
    fy: float
    distance: float
    magnitude: float = 0.0


@dataclass
class GravityResult:
    """
    Outcome of one apply_gravity step.

    Attributes:
        acceleration: Magnitude of the applied acceleration
        closest_body: Nearest body whose influence contains the vehicle
        closest_distance: Distance to that body (inf if none)
        in_gravity_well: Within GRAVITY_WELL_RADII body radii of closest_body
    """
    acceleration: float
    closest_body: Optional[CelestialBody]
    closest_distance: float
    in_gravity_well: bool


class OrbitType(Enum):
    """Conic classification from specific orbital energy."""
    ELLIPTICAL = "elliptical"  # Bound
    PARABOLIC = "parabolic"    # Exactly escape energy
    HYPERBOLIC = "hyperbolic"  # Flyby


@dataclass
class OrbitalParameters:
    distance: float
    velocity: float
    specific_energy: float
    orbit_type: OrbitType
    semi_major_axis: float
    eccentricity: float
    apoapsis: float
    periapsis: float
    is_stable: bool


# =============================================================================
# FORCES
# =============================================================================

def gravitational_force(
    position_a: Vector3D,
    mass_a: float,
    position_b: Vector3D,
    mass_b: float,
    g: float = DEFAULT_G,
) -> GravitationalForce:
    """
    Newtonian attraction of a toward b in the plane.

    F = G * m_a * m_b / r^2, zero when the two are closer than
    MIN_FORCE_DISTANCE.
    """
    offset = position_b - position_a
    distance = offset.planar_magnitude
    if distance < MIN_FORCE_DISTANCE:
        return GravitationalForce(fx=0.0, fy=0.0, distance=0.0)

    magnitude = g * mass_a * mass_b / (distance * distance)
    return GravitationalForce(
        fx=offset.x / distance * magnitude,
        fy=offset.y / distance * magnitude,
        distance=distance,
        magnitude=magnitude,
    )


def influence_radius(mass: float) -> float:
    """Simplified sphere of influence: (m/1000)^0.33 * 100, capped at 5000."""
    if mass <= 0:
        return 0.0
    return min((mass / 1000.0) ** INFLUENCE_EXPONENT * INFLUENCE_SCALE, INFLUENCE_CAP)


def apply_gravity(
    vehicle: InertialBody,
    bodies: Iterable[CelestialBody],
    g: float = DEFAULT_G,
    dt: float = 1.0,
) -> GravityResult:
    """
    Pull a vehicle toward every body whose influence radius contains it.

    The summed force is applied with the vehicle's base mass.
    """
    total_fx = 0.0
    total_fy = 0.0
    closest_body = None
    closest_distance = math.inf

    for body in bodies:
        force = gravitational_force(
            vehicle.position, vehicle.mass, body.position, body.mass, g
        )
        if force.distance < influence_radius(body.mass):
            total_fx += force.fx
            total_fy += force.fy
            if force.distance < closest_distance:
                closest_distance = force.distance
                closest_body = body

    vehicle.apply_force(total_fx, total_fy, dt)

    ax = total_fx / vehicle.mass
    ay = total_fy / vehicle.mass
    in_well = (
        closest_body is not None
        and closest_distance < closest_body.radius * GRAVITY_WELL_RADII
    )
    return GravityResult(
        acceleration=math.hypot(ax, ay),
        closest_body=closest_body,
        closest_distance=closest_distance,
        in_gravity_well=in_well,
    )


def escape_velocity(central_mass: float, distance: float, g: float = DEFAULT_G) -> float:
    """v_esc = sqrt(2 G M / r); zero at non-positive distance."""
    if distance <= 0 or central_mass <= 0:
        return 0.0
    return math.sqrt(2.0 * g * central_mass / distance)


# =============================================================================
# ORBIT CLASSIFICATION
# =============================================================================

def orbital_parameters(
    vehicle: InertialBody,
    central: CelestialBody,
    g: float = DEFAULT_G,
) -> Optional[OrbitalParameters]:
    """
    Two-body orbit of a vehicle relative to a central body.

    Returns:
        OrbitalParameters, or None when the vehicle sits on the body centre
        or the body has no mass
    """
    offset = vehicle.position - central.position
    relative_velocity = vehicle.velocity - central.velocity
    r = offset.planar_magnitude
    mu = g * central.mass
    if r == 0 or mu <= 0:
        return None

    v = relative_velocity.planar_magnitude
    energy = v * v / 2.0 - mu / r

    if energy < 0:
        orbit_type = OrbitType.ELLIPTICAL
    elif energy == 0:
        orbit_type = OrbitType.PARABOLIC
    else:
        orbit_type = OrbitType.HYPERBOLIC

    if orbit_type is OrbitType.ELLIPTICAL:
        a = -mu / (2.0 * energy)
        h = offset.x * relative_velocity.y - offset.y * relative_velocity.x
        e = math.sqrt(max(0.0, 1.0 + 2.0 * energy * h * h / (mu * mu)))
        apoapsis = a * (1.0 + e)
        periapsis = a * (1.0 - e)
    else:
        a = math.inf
        e = 1.0
        apoapsis = math.inf
        periapsis = math.inf

    return OrbitalParameters(
        distance=r,
        velocity=v,
        specific_energy=energy,
        orbit_type=orbit_type,
        semi_major_axis=a,
        eccentricity=e,
        apoapsis=apoapsis,
        periapsis=periapsis,
        is_stable=orbit_type is OrbitType.ELLIPTICAL and e < STABLE_ECCENTRICITY,
    )


def is_in_stable_orbit(
    vehicle: InertialBody,
    central: CelestialBody,
    g: float = DEFAULT_G,
) -> bool:
    """Bound, eccentricity under 0.9 and periapsis clear of 1.5 body radii."""
    params = orbital_parameters(vehicle, central, g)
    if params is None:
        return False
    return (
        params.is_stable
        and params.periapsis > central.radius * SAFE_PERIAPSIS_RADII
    )


def hill_sphere_radius(
    body: CelestialBody,
    central: Optional[CelestialBody],
    orbit_radius: float,
) -> float:
    """
    Region where a body's gravity dominates its parent's.

    r_H = a * (m / 3M)^(1/3); a body with no parent (a star) gets ten
    times its radius.
    """
    if central is None or central.mass <= 0:
        return body.radius * 10.0
    return orbit_radius * (body.mass / (3.0 * central.mass)) ** (1.0 / 3.0)
