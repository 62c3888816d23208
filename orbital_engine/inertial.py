"""
Inertial Movement for thrust-driven vehicles.

Implements Newtonian ship movement in the game plane:
- Mass (base + cargo) affects thruster acceleration
- Momentum is conserved between ticks apart from dampening
- Rotational inertia for turning thrusters
- Hull damage reduces thruster efficiency
- Optional inertial dampeners that bleed off velocity

The integrator owns its own state and reads the host VehicleRecord only
for hull and cargo; after every update it writes position, velocity and
rotation back to the record and also returns them as an InertialState.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, asdict, fields
from enum import Enum
from typing import Any, Dict, Optional, Union

from .config import InertialConfig
from .kepler import normalize_angle
from .vector import Vector3D


# =============================================================================
# HOST RECORD AND OUTPUTS
# =============================================================================

@dataclass
class VehicleRecord:
    """
    Host-side vehicle fields the integrator reads and writes.

    Attributes:
        x, y: Position
        vx, vy: Velocity
        rotation: Heading in radians
        rotation_vel: Angular velocity (rad/s)
        hull: Current hull points
        max_hull: Full hull points
        mass: Base mass (None = config default)
        cargo_mass: Carried load
        inertial_dampening: Initial dampener setting
    """
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    rotation: float = 0.0
    rotation_vel: float = 0.0
    hull: float = 100.0
    max_hull: float = 100.0
    mass: Optional[float] = None
    cargo_mass: float = 0.0
    inertial_dampening: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> VehicleRecord:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


class ThrusterDirection(Enum):
    """Thruster groups and their offset from the ship heading."""
    FORWARD = "forward"
    BACKWARD = "backward"
    LEFT = "left"
    RIGHT = "right"


_HEADING_OFFSETS = {
    ThrusterDirection.FORWARD: 0.0,
    ThrusterDirection.BACKWARD: math.pi,
    ThrusterDirection.LEFT: -math.pi / 2,
    ThrusterDirection.RIGHT: math.pi / 2,
}


@dataclass
class ThrustResult:
    """
    Thruster firing descriptor, consumed by the renderer for exhaust effects.

    force already includes the damage multiplier.
    """
    active: bool
    direction: Optional[ThrusterDirection] = None
    angle: float = 0.0
    force: float = 0.0


@dataclass
class InertialState:
    """Output of one integration step."""
    x: float
    y: float
    vx: float
    vy: float
    rotation: float
    rotation_vel: float

    @property
    def speed(self) -> float:
        return math.hypot(self.vx, self.vy)


@dataclass
class RelativeVelocity:
    """Velocity decomposed along and across the ship heading."""
    forward: float
    lateral: float


@dataclass
class FlightInfo:
    """HUD summary of the vehicle's flight state."""
    speed: int
    forward_speed: int
    lateral_speed: int
    angular_velocity: float
    inertial_dampening_active: bool
    mass: float
    cargo_mass: float
    effective_mass: float
    thruster_efficiency_percent: int
    damage_multiplier: float


# =============================================================================
# INERTIAL BODY
# =============================================================================

class InertialBody:
    """
    Newtonian integrator for one vehicle.

    Usage:
        ship = VehicleRecord(x=0, y=0)
        body = InertialBody(ship)
        body.apply_thrust("forward", dt)
        body.update(dt)
    """

    def __init__(
        self,
        vehicle: VehicleRecord,
        config: Optional[InertialConfig] = None,
    ) -> None:
        self.vehicle = vehicle
        self.config = config or InertialConfig()
        cfg = self.config

        # Mass properties
        self.mass = vehicle.mass if vehicle.mass else cfg.mass
        self.cargo_mass = self._clamp_cargo(vehicle.cargo_mass)
        vehicle.cargo_mass = self.cargo_mass
        self.moment_of_inertia = self.mass * cfg.inertia_factor

        # Movement state
        self.position = Vector3D(vehicle.x, vehicle.y, 0.0)
        self.velocity = Vector3D(vehicle.vx, vehicle.vy, 0.0)
        self.rotation = vehicle.rotation
        self.angular_velocity = vehicle.rotation_vel

        # Thrusters
        self.main_thruster_force = cfg.main_thruster_force
        self.retro_thruster_force = cfg.retro_thruster_force
        self.lateral_thruster_force = cfg.lateral_thruster_force
        self.rotational_thruster_torque = cfg.rotational_thruster_torque

        # Damage effects, refreshed from the hull on every thrust
        self.thruster_efficiency = 1.0
        self.damage_multiplier = 1.0
        self.refresh_damage_effects()

        # Dampening
        self.linear_dampening = cfg.linear_dampening
        self.angular_dampening = cfg.angular_dampening
        self.dampening_strength = cfg.dampening_strength
        self.inertial_dampening_active = bool(vehicle.inertial_dampening)

    # -------------------------------------------------------------------------
    # Derived properties
    # -------------------------------------------------------------------------

    @property
    def effective_mass(self) -> float:
        """Base mass plus cargo."""
        return self.mass + self.cargo_mass

    @property
    def speed(self) -> float:
        return self.velocity.planar_magnitude

    @property
    def hull_fraction(self) -> float:
        max_hull = self.vehicle.max_hull
        if max_hull <= 0:
            return 1.0
        return max(0.0, min(1.0, self.vehicle.hull / max_hull))

    def refresh_damage_effects(self) -> None:
        """Recompute thruster efficiency (50-100%) and damage multiplier (70-100%)."""
        hull = self.hull_fraction
        self.thruster_efficiency = 0.5 + hull * 0.5
        self.damage_multiplier = 0.7 + hull * 0.3

    def _clamp_cargo(self, cargo_mass: float) -> float:
        return max(self.config.cargo_mass_min, min(cargo_mass, self.config.cargo_mass_max))

    # -------------------------------------------------------------------------
    # Force application
    # -------------------------------------------------------------------------

    def apply_thrust(
        self,
        direction: Union[ThrusterDirection, str],
        dt: float,
    ) -> ThrustResult:
        """
        Fire one thruster group for dt.

        Args:
            direction: forward, backward, left or right
            dt: Time step

        Returns:
            ThrustResult describing the firing for visual feedback
        """
        direction = ThrusterDirection(direction)
        self.refresh_damage_effects()

        if direction is ThrusterDirection.FORWARD:
            base_force = self.main_thruster_force
        elif direction is ThrusterDirection.BACKWARD:
            base_force = self.retro_thruster_force
        else:
            base_force = self.lateral_thruster_force

        force = base_force * self.thruster_efficiency
        if force <= 0:
            return ThrustResult(active=False)

        angle = self.rotation + _HEADING_OFFSETS[direction]
        applied_force = force * self.damage_multiplier
        acceleration = applied_force / self.effective_mass
        self.velocity = self.velocity + Vector3D.from_polar(angle, acceleration * dt)

        return ThrustResult(
            active=True,
            direction=direction,
            angle=angle,
            force=applied_force,
        )

    def apply_rotational_thrust(self, sign: float, dt: float) -> float:
        """
        Fire turning thrusters; +1 clockwise, -1 counter-clockwise.

        Returns:
            New angular velocity
        """
        torque = self.rotational_thruster_torque * sign
        angular_acceleration = torque / self.moment_of_inertia
        self.angular_velocity += angular_acceleration * dt
        return self.angular_velocity

    def apply_force(self, fx: float, fy: float, dt: float) -> None:
        """External force (gravity, explosions). Uses base mass, not cargo."""
        self.velocity = self.velocity + Vector3D(fx / self.mass, fy / self.mass, 0.0) * dt

    def apply_impulse(self, ix: float, iy: float) -> None:
        """Instant velocity change. Uses base mass, not cargo."""
        self.velocity = self.velocity + Vector3D(ix / self.mass, iy / self.mass, 0.0)

    def apply_burn(self, angle: float, burn_strength: float, dt: float) -> float:
        """
        Main-engine burn along an arbitrary angle (maneuver primitive).

        Force is main thrust * burn_strength * thruster efficiency over the
        effective mass.

        Returns:
            Delta-v gained this step
        """
        self.refresh_damage_effects()
        burn_force = self.main_thruster_force * burn_strength * self.thruster_efficiency
        delta_v = burn_force / self.effective_mass * dt
        self.velocity = self.velocity + Vector3D.from_polar(angle, delta_v)
        return delta_v

    def burn_acceleration(self, burn_strength: float = 1.0) -> float:
        """Acceleration a burn at the given strength would produce."""
        self.refresh_damage_effects()
        return self.main_thruster_force * burn_strength * self.thruster_efficiency / self.effective_mass

    # -------------------------------------------------------------------------
    # Controls
    # -------------------------------------------------------------------------

    def toggle_inertial_dampening(self) -> bool:
        self.inertial_dampening_active = not self.inertial_dampening_active
        return self.inertial_dampening_active

    def match_velocity(self, target_vx: float, target_vy: float, strength: float = 0.1) -> None:
        """Close a fraction of the velocity gap to a target (docking, formation)."""
        gap = Vector3D(target_vx, target_vy, 0.0) - self.velocity
        self.velocity = self.velocity + gap * strength

    def kill_velocity(self) -> None:
        """Emergency stop."""
        self.velocity = Vector3D.zero()
        self.angular_velocity = 0.0

    def set_cargo_mass(self, cargo_mass: float) -> float:
        """Set cargo (clamped to the configured range) and write it back."""
        self.cargo_mass = self._clamp_cargo(cargo_mass)
        self.vehicle.cargo_mass = self.cargo_mass
        return self.cargo_mass

    # -------------------------------------------------------------------------
    # Integration
    # -------------------------------------------------------------------------

    def update(self, dt: float) -> InertialState:
        """
        Integrate one tick.

        Dampening is a fixed per-tick decay: with inertial dampeners on,
        velocity loses dampening_strength and spin loses twice that; with
        them off only the small space-friction terms apply. Position and
        rotation then advance by velocity * dt, and the speed and spin caps
        are enforced by uniform rescaling.
        """
        cfg = self.config

        if self.inertial_dampening_active:
            self.velocity = self.velocity * (1 - self.dampening_strength)
            self.angular_velocity *= (1 - self.dampening_strength * 2)
        else:
            self.velocity = self.velocity * (1 - self.linear_dampening)
            self.angular_velocity *= (1 - self.angular_dampening)

        self.rotation = normalize_angle(self.rotation + self.angular_velocity * dt)
        self.position = self.position + self.velocity * dt

        speed = self.speed
        if speed > cfg.max_speed:
            self.velocity = self.velocity * (cfg.max_speed / speed)

        if abs(self.angular_velocity) > cfg.max_angular_velocity:
            self.angular_velocity = math.copysign(cfg.max_angular_velocity, self.angular_velocity)

        state = self.state()
        self._write_back(state)
        return state

    def state(self) -> InertialState:
        return InertialState(
            x=self.position.x,
            y=self.position.y,
            vx=self.velocity.x,
            vy=self.velocity.y,
            rotation=self.rotation,
            rotation_vel=self.angular_velocity,
        )

    def _write_back(self, state: InertialState) -> None:
        v = self.vehicle
        v.x, v.y = state.x, state.y
        v.vx, v.vy = state.vx, state.vy
        v.rotation = state.rotation
        v.rotation_vel = state.rotation_vel

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def relative_velocity(self) -> RelativeVelocity:
        """Velocity in the ship's reference frame."""
        speed = self.speed
        if speed == 0:
            return RelativeVelocity(forward=0.0, lateral=0.0)

        relative_angle = self.velocity.heading - self.rotation
        return RelativeVelocity(
            forward=speed * math.cos(relative_angle),
            lateral=speed * math.sin(relative_angle),
        )

    def circular_orbit_velocity(
        self,
        body_position: Vector3D,
        body_mass: float,
        g: float,
    ) -> Vector3D:
        """
        Velocity of a circular orbit around a body at the current distance.

        v = sqrt(G M / r), pointing 90 degrees counter-clockwise from the
        direction toward the body. Zero at zero distance.
        """
        offset = body_position - self.position
        distance = offset.planar_magnitude
        if distance == 0:
            return Vector3D.zero()

        orbital_speed = math.sqrt(g * body_mass / distance)
        tangent_angle = offset.heading + math.pi / 2
        return Vector3D.from_polar(tangent_angle, orbital_speed)

    def distance_to(self, point: Vector3D) -> float:
        return (point - self.position).planar_magnitude

    def flight_info(self) -> FlightInfo:
        relative = self.relative_velocity()
        return FlightInfo(
            speed=math.floor(self.speed),
            forward_speed=math.floor(relative.forward),
            lateral_speed=math.floor(relative.lateral),
            angular_velocity=round(self.angular_velocity, 2),
            inertial_dampening_active=self.inertial_dampening_active,
            mass=self.mass,
            cargo_mass=self.cargo_mass,
            effective_mass=self.effective_mass,
            thruster_efficiency_percent=math.floor(self.thruster_efficiency * 100),
            damage_multiplier=round(self.damage_multiplier, 2),
        )

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vehicle": self.vehicle.to_dict(),
            "mass": self.mass,
            "cargo_mass": self.cargo_mass,
            "position": [self.position.x, self.position.y],
            "velocity": [self.velocity.x, self.velocity.y],
            "rotation": self.rotation,
            "angular_velocity": self.angular_velocity,
            "inertial_dampening_active": self.inertial_dampening_active,
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        config: Optional[InertialConfig] = None,
    ) -> InertialBody:
        body = cls(VehicleRecord.from_dict(data["vehicle"]), config)
        body.mass = data["mass"]
        body.moment_of_inertia = body.mass * body.config.inertia_factor
        body.cargo_mass = data["cargo_mass"]
        body.position = Vector3D.from_tuple(tuple(data["position"]))
        body.velocity = Vector3D.from_tuple(tuple(data["velocity"]))
        body.rotation = data["rotation"]
        body.angular_velocity = data["angular_velocity"]
        body.inertial_dampening_active = data["inertial_dampening_active"]
        return body
