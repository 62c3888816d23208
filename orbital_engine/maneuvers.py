"""
Maneuver Planner for the orbital engine.

Closed-form orbital maneuvers layered on top of an InertialBody:

- Hohmann transfer planning between circular orbits
- Prograde / retrograde burns relative to a body
- Orbital insertion (circularize at the current radius)
- Gravity assist (slingshot) heuristic
- Aerobraking through an exponential atmosphere
- Lagrange points of a two-body system and station keeping

Calculations return result dataclasses; execute_* / apply_* methods also
change the vehicle's velocity. Multi-tick maneuvers (insertion, station
keeping) are driven by calling them once per tick; a caller stops one by
no longer calling it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Optional

from .bodies import CelestialBody
from .config import DEFAULT_G
from .inertial import InertialBody
from .kepler import vis_viva_speed
from .vector import Vector3D


# =============================================================================
# HEURISTIC CONSTANTS
# =============================================================================

# Gravity assist
ASSIST_INFLUENCE_PER_MASS = 10.0
ASSIST_MIN_DEFLECTION = 0.1
ASSIST_BOOST = 0.3
ASSIST_MAX_TURN = math.pi / 2

# Aerobraking
SURFACE_DENSITY = 1.0
SCALE_HEIGHT_DIVISOR = 5.0
DRAG_COEFFICIENT = 0.5
CROSS_SECTION_AREA = 10.0
HEAT_FACTOR = 0.01

# Lagrange points
MIN_LAGRANGE_SEPARATION = 0.1
STATION_KEEPING_STRENGTH = 0.05
LAGRANGE_PROXIMITY = 500.0


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass
class HohmannTransfer:
    """
    Two-burn transfer between circular orbits.

    Attributes:
        delta_v1: Departure burn magnitude
        delta_v2: Circularization burn magnitude
        total_delta_v: delta_v1 + delta_v2
        transfer_time: Half the transfer ellipse's period
        expanding: True when raising the orbit
    """
    delta_v1: float
    delta_v2: float
    total_delta_v: float
    transfer_time: float
    expanding: bool


@dataclass
class BurnResult:
    angle: float
    delta_v: float
    direction: str
    success: bool = True


@dataclass
class InsertionPlan:
    """
    Burn needed to circularize at the current radius.

    Attributes:
        delta_v: Magnitude of the velocity change
        angle: Burn heading
        duration: Burn time at full main-thruster acceleration
        required_velocity: Circular orbit velocity at this radius
        current_radius: Distance from the body
    """
    delta_v: float
    angle: float
    duration: float
    required_velocity: Vector3D
    current_radius: float


@dataclass
class InsertionResult:
    remaining_delta_v: float
    angle: float
    progress: float  # 0-1


@dataclass
class GravityAssistResult:
    delta_v: float
    angle: float
    success: bool


@dataclass
class AerobrakingResult:
    """
    Outcome of one aerobraking step.

    Attributes:
        in_atmosphere: Vehicle is at or below the top of the atmosphere
        drag_force: Drag magnitude (0 outside the atmosphere)
        altitude: Height above the surface
        density: Atmospheric density at that altitude
        heat_generation: Heat load from friction
        delta_v: Speed lost this step
    """
    in_atmosphere: bool
    drag_force: float = 0.0
    altitude: float = 0.0
    density: float = 0.0
    heat_generation: float = 0.0
    delta_v: float = 0.0


@dataclass
class LagrangePoint:
    name: str
    position: Vector3D
    stable: bool


@dataclass
class LagrangePoints:
    """The five equilibrium points of a primary/secondary pair."""
    l1: LagrangePoint
    l2: LagrangePoint
    l3: LagrangePoint
    l4: LagrangePoint
    l5: LagrangePoint

    def __iter__(self) -> Iterator[LagrangePoint]:
        return iter((self.l1, self.l2, self.l3, self.l4, self.l5))

    def get(self, name: str) -> LagrangePoint:
        """Look up a point by name ("L1" ... "L5")."""
        for point in self:
            if point.name == name.upper():
                return point
        raise KeyError(f"Unknown Lagrange point: {name}")


@dataclass
class NearLagrangePoint:
    name: str
    distance: float
    stable: bool


@dataclass
class StationKeepingResult:
    active: bool
    distance: float
    correction_applied: float = 0.0


# =============================================================================
# PLANNER
# =============================================================================

class ManeuverPlanner:
    """
    Orbital maneuver calculator bound to a gravitational constant.

    Usage:
        planner = ManeuverPlanner(gravitational_constant=2.0)
        transfer = planner.calculate_hohmann_transfer(1000, 2000, 1000)
        planner.execute_prograde_burn(ship, planet.position, planet.mass, 1.0, dt)
    """

    def __init__(self, gravitational_constant: float = DEFAULT_G) -> None:
        if gravitational_constant <= 0:
            raise ValueError("gravitational_constant must be positive")
        self.g = gravitational_constant

    # -------------------------------------------------------------------------
    # Orbit planning
    # -------------------------------------------------------------------------

    def calculate_orbital_velocity(self, r: float, a: float, central_mass: float) -> float:
        """Vis-viva speed at radius r on an orbit of semi-major axis a."""
        return vis_viva_speed(r, a, central_mass, self.g)

    def calculate_hohmann_transfer(
        self,
        r1: float,
        r2: float,
        central_mass: float,
    ) -> Optional[HohmannTransfer]:
        """
        Plan a Hohmann transfer from circular radius r1 to r2.

        Args:
            r1: Current circular orbit radius
            r2: Target circular orbit radius
            central_mass: Mass of the body being orbited

        Returns:
            HohmannTransfer, or None if the radii are equal or not positive
        """
        if r1 == r2 or r1 <= 0 or r2 <= 0 or central_mass <= 0:
            return None

        mu = self.g * central_mass
        transfer_a = (r1 + r2) / 2.0

        v1 = math.sqrt(mu / r1)
        v_transfer_1 = math.sqrt(mu * (2.0 / r1 - 1.0 / transfer_a))
        v2 = math.sqrt(mu / r2)
        v_transfer_2 = math.sqrt(mu * (2.0 / r2 - 1.0 / transfer_a))

        delta_v1 = abs(v_transfer_1 - v1)
        delta_v2 = abs(v2 - v_transfer_2)

        return HohmannTransfer(
            delta_v1=delta_v1,
            delta_v2=delta_v2,
            total_delta_v=delta_v1 + delta_v2,
            transfer_time=math.pi * math.sqrt(transfer_a ** 3 / mu),
            expanding=r2 > r1,
        )

    # -------------------------------------------------------------------------
    # Burns
    # -------------------------------------------------------------------------

    def execute_prograde_burn(
        self,
        body: InertialBody,
        body_position: Vector3D,
        body_mass: float,
        burn_strength: float,
        dt: float,
    ) -> BurnResult:
        """Thrust along the circular-orbit direction (raises the far side)."""
        return self._orbit_relative_burn(
            body, body_position, body_mass, burn_strength, dt, "prograde", 0.0
        )

    def execute_retrograde_burn(
        self,
        body: InertialBody,
        body_position: Vector3D,
        body_mass: float,
        burn_strength: float,
        dt: float,
    ) -> BurnResult:
        """Thrust against the circular-orbit direction (lowers the far side)."""
        return self._orbit_relative_burn(
            body, body_position, body_mass, burn_strength, dt, "retrograde", math.pi
        )

    def _orbit_relative_burn(
        self,
        body: InertialBody,
        body_position: Vector3D,
        body_mass: float,
        burn_strength: float,
        dt: float,
        direction: str,
        offset: float,
    ) -> BurnResult:
        if body.distance_to(body_position) == 0:
            return BurnResult(angle=0.0, delta_v=0.0, direction=direction, success=False)

        orbital_velocity = body.circular_orbit_velocity(body_position, body_mass, self.g)
        angle = orbital_velocity.heading + offset
        delta_v = body.apply_burn(angle, burn_strength, dt)
        return BurnResult(angle=angle, delta_v=delta_v, direction=direction)

    def calculate_orbital_insertion(
        self,
        body: InertialBody,
        body_position: Vector3D,
        body_mass: float,
    ) -> InsertionPlan:
        """Velocity change that would put the vehicle on a circular orbit here."""
        required = body.circular_orbit_velocity(body_position, body_mass, self.g)
        gap = required - body.velocity
        delta_v = gap.planar_magnitude

        return InsertionPlan(
            delta_v=delta_v,
            angle=gap.heading,
            duration=delta_v / (body.main_thruster_force / body.effective_mass),
            required_velocity=required,
            current_radius=body.distance_to(body_position),
        )

    def execute_orbital_insertion(
        self,
        body: InertialBody,
        body_position: Vector3D,
        body_mass: float,
        burn_strength: float,
        dt: float,
    ) -> InsertionResult:
        """
        One tick of a circularization burn.

        The step is limited to the remaining delta-v so the vehicle never
        overshoots the circular velocity.
        """
        plan = self.calculate_orbital_insertion(body, body_position, body_mass)
        if plan.delta_v == 0:
            return InsertionResult(remaining_delta_v=0.0, angle=plan.angle, progress=1.0)

        step = min(body.burn_acceleration(burn_strength) * dt, plan.delta_v)
        body.velocity = body.velocity + Vector3D.from_polar(plan.angle, step)

        return InsertionResult(
            remaining_delta_v=plan.delta_v - step,
            angle=plan.angle,
            progress=min(1.0, step / plan.delta_v),
        )

    # -------------------------------------------------------------------------
    # Environment-assisted maneuvers
    # -------------------------------------------------------------------------

    def apply_gravity_assist(
        self,
        body: InertialBody,
        body_position: Vector3D,
        body_velocity: Vector3D,
        body_mass: float,
    ) -> GravityAssistResult:
        """
        Slingshot heuristic.

        Inside mass * 10 of the body the velocity relative to it is turned
        by deflection * pi/2 and boosted by 1 + 0.3 * deflection, where
        deflection = 1 - distance / influence. Below a deflection of 0.1
        nothing happens.
        """
        distance = body.distance_to(body_position)
        influence = body_mass * ASSIST_INFLUENCE_PER_MASS
        if distance == 0 or influence <= 0:
            return GravityAssistResult(delta_v=0.0, angle=0.0, success=False)

        deflection = max(0.0, 1.0 - distance / influence)
        if deflection <= ASSIST_MIN_DEFLECTION:
            return GravityAssistResult(delta_v=0.0, angle=0.0, success=False)

        relative = body.velocity - body_velocity
        relative_speed = relative.planar_magnitude
        boost = 1.0 + deflection * ASSIST_BOOST
        exit_angle = relative.heading + deflection * ASSIST_MAX_TURN

        exit_velocity = Vector3D.from_polar(exit_angle, relative_speed * boost)
        body.velocity = Vector3D(body_velocity.x, body_velocity.y, 0.0) + exit_velocity

        return GravityAssistResult(
            delta_v=relative_speed * (boost - 1.0),
            angle=exit_angle,
            success=True,
        )

    def apply_aerobraking(
        self,
        body: InertialBody,
        body_position: Vector3D,
        body_radius: float,
        atmosphere_height: float,
        dt: float,
    ) -> AerobrakingResult:
        """
        Atmospheric drag pass.

        Density falls off as exp(-altitude / (h/5)); drag is
        0.5 * rho * v^2 * Cd * A with Cd = 0.5 and A = 10, applied against
        the velocity using the base mass. The speed lost in one step never
        exceeds the current speed. Below the surface there is no drag.
        """
        if atmosphere_height <= 0:
            return AerobrakingResult(in_atmosphere=False)

        altitude = body.distance_to(body_position) - body_radius
        if altitude < 0 or altitude > atmosphere_height:
            return AerobrakingResult(in_atmosphere=False, altitude=altitude)

        scale_height = atmosphere_height / SCALE_HEIGHT_DIVISOR
        density = SURFACE_DENSITY * math.exp(-altitude / scale_height)

        speed = body.speed
        if speed == 0:
            return AerobrakingResult(in_atmosphere=True, altitude=altitude, density=density)

        drag_force = 0.5 * density * speed * speed * DRAG_COEFFICIENT * CROSS_SECTION_AREA
        speed_loss = min(drag_force / body.mass * dt, speed)
        body.velocity = body.velocity * ((speed - speed_loss) / speed)

        return AerobrakingResult(
            in_atmosphere=True,
            drag_force=drag_force,
            altitude=altitude,
            density=density,
            heat_generation=drag_force * speed * HEAT_FACTOR,
            delta_v=speed_loss,
        )

    # -------------------------------------------------------------------------
    # Lagrange points
    # -------------------------------------------------------------------------

    def calculate_lagrange_points(
        self,
        primary: CelestialBody,
        secondary: CelestialBody,
    ) -> Optional[LagrangePoints]:
        """
        L1-L5 for a primary/secondary pair, in the plane of the two bodies.

        Collinear points use the small-mass-ratio approximations
        (mu = m2 / (m1 + m2)); L4 and L5 sit 60 degrees ahead of and behind
        the secondary at the same distance from the primary.

        Returns:
            LagrangePoints, or None if the bodies coincide or have no mass
        """
        offset = secondary.position - primary.position
        distance = offset.planar_magnitude
        total_mass = primary.mass + secondary.mass
        if distance < MIN_LAGRANGE_SEPARATION or total_mass <= 0:
            return None

        angle = offset.heading
        mu = secondary.mass / total_mass
        hill = (mu / 3.0) ** (1.0 / 3.0)
        origin = Vector3D(primary.x, primary.y, 0.0)

        def point(name: str, heading: float, radius: float, stable: bool = False) -> LagrangePoint:
            return LagrangePoint(name, origin + Vector3D.from_polar(heading, radius), stable)

        return LagrangePoints(
            l1=point("L1", angle, distance * (1.0 - hill)),
            l2=point("L2", angle, distance * (1.0 + hill)),
            l3=point("L3", angle + math.pi, distance * (1.0 + 5.0 * mu / 12.0)),
            l4=point("L4", angle + math.pi / 3.0, distance, stable=True),
            l5=point("L5", angle - math.pi / 3.0, distance, stable=True),
        )

    def nearest_lagrange_point(
        self,
        position: Vector3D,
        primary: CelestialBody,
        secondary: CelestialBody,
        threshold: float = LAGRANGE_PROXIMITY,
    ) -> Optional[NearLagrangePoint]:
        """Closest Lagrange point within threshold of a position, if any."""
        points = self.calculate_lagrange_points(primary, secondary)
        if points is None:
            return None

        best = None
        for candidate in points:
            distance = (position - candidate.position).planar_magnitude
            if distance < threshold and (best is None or distance < best.distance):
                best = NearLagrangePoint(candidate.name, distance, candidate.stable)
        return best

    def maintain_lagrange_position(
        self,
        body: InertialBody,
        target: Vector3D,
        strength: float = STATION_KEEPING_STRENGTH,
        threshold: Optional[float] = None,
    ) -> StationKeepingResult:
        """
        Nudge the vehicle toward target once it drifts past threshold.

        threshold defaults to the vehicle config's station_keeping_threshold.
        """
        if threshold is None:
            threshold = body.config.station_keeping_threshold
        offset = Vector3D(target.x, target.y, 0.0) - body.position
        distance = offset.planar_magnitude
        if distance <= threshold:
            return StationKeepingResult(active=False, distance=distance)

        correction = offset.normalized() * strength
        body.velocity = body.velocity + correction
        return StationKeepingResult(
            active=True,
            distance=distance,
            correction_applied=correction.planar_magnitude,
        )
