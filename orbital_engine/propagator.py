"""
Orbital Propagator for the orbital engine.

Implements Kepler's laws for celestial bodies:
- Elliptical orbits with eccentricity (first law)
- Varying orbital speed via Kepler's equation (second law)
- Period from semi-major axis and central mass (third law)
- Inclined orbital planes rotated into world space
- Nested orbits (moon around planet around star)

Per body the propagator goes uninitialized -> initialized(elements) and
then loops on update_orbit(dt) until the body is removed. Querying a body
that was never initialized returns None so callers can skip it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from .bodies import CelestialBody
from .config import OrbitConfig
from .elements import ElementStore, OrbitalElements
from .kepler import (
    TWO_PI,
    flight_path_angle,
    normalize_angle,
    orbital_radius,
    solve_kepler_equation,
    true_anomaly,
    vis_viva_speed,
)
from .rng import SeededRandom, Seed
from .vector import Vector3D


logger = logging.getLogger(__name__)


# =============================================================================
# ELEMENT RANDOMIZATION BUCKETS
# =============================================================================

# (cumulative probability, low, high); tuned for visual variety
ECCENTRICITY_BUCKETS = (
    (0.40, 0.05, 0.12),  # Slightly elliptical
    (0.75, 0.12, 0.25),  # Moderately elliptical
    (1.00, 0.25, 0.45),  # Highly elliptical
)

# Degrees
INCLINATION_BUCKETS = (
    (0.50, 2.0, 8.0),    # Low
    (0.80, 8.0, 20.0),   # Medium
    (1.00, 20.0, 40.0),  # High
)


def _draw_bucketed(rng: SeededRandom, buckets) -> float:
    roll = rng.next()
    for threshold, low, high in buckets:
        if roll < threshold:
            return rng.range(low, high)
    _, low, high = buckets[-1]
    return rng.range(low, high)


# =============================================================================
# OUTPUT STATE
# =============================================================================

@dataclass
class OrbitState:
    """
    Result of one propagation step.

    Attributes:
        body_id: Body that was advanced
        position: World position (central body offset applied)
        velocity: World velocity (central body velocity added)
        radius: Distance from the central body
        mean_anomaly: M after the step, in [0, 2pi)
        eccentric_anomaly: E solved from M
        true_anomaly: nu derived from E
    """
    body_id: str
    position: Vector3D
    velocity: Vector3D
    radius: float
    mean_anomaly: float
    eccentric_anomaly: float
    true_anomaly: float


# =============================================================================
# PROPAGATOR
# =============================================================================

class OrbitalPropagator:
    """
    Advances every registered orbit once per tick.

    The propagator keeps two registries keyed by body id: the element store
    (one OrbitalElements per orbiting body) and the bodies it has seen, so a
    record's central_body_id can be resolved to a current world position
    each tick.
    """

    def __init__(
        self,
        config: Optional[OrbitConfig] = None,
        store: Optional[ElementStore] = None,
    ) -> None:
        self.config = config or OrbitConfig()
        self.elements = store if store is not None else ElementStore()
        self.bodies: dict[str, CelestialBody] = {}
        # orbits already reported as missing their central body
        self._orphaned: set[str] = set()

    @property
    def g(self) -> float:
        return self.config.gravitational_constant

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register_body(self, body: CelestialBody) -> None:
        """Make a body resolvable as a central body."""
        self.bodies[body.body_id] = body

    def initialize_orbit(
        self,
        body: CelestialBody,
        central_body: CelestialBody,
        semi_major_axis: float,
        seed: Optional[Seed] = None,
    ) -> OrbitalElements:
        """
        Generate orbital elements for a body from a seed.

        Eccentricity and inclination come from weighted buckets; the three
        orientation angles and the epoch mean anomaly are uniform in
        [0, 2pi). The period follows from Kepler's third law.

        Args:
            body: Body that will orbit
            central_body: Body being orbited
            semi_major_axis: Average orbital radius
            seed: Number or string seed; defaults to the body name, or the
                body id for unnamed bodies

        Returns:
            The stored OrbitalElements
        """
        rng = SeededRandom(seed if seed is not None else (body.name or body.body_id))

        eccentricity = _draw_bucketed(rng, ECCENTRICITY_BUCKETS)
        inclination = math.radians(_draw_bucketed(rng, INCLINATION_BUCKETS))

        ascending_node = rng.next() * TWO_PI
        argument_of_periapsis = rng.next() * TWO_PI
        mean_anomaly_at_epoch = rng.next() * TWO_PI

        return self.define_orbit(
            body,
            central_body,
            semi_major_axis,
            eccentricity,
            inclination=inclination,
            ascending_node=ascending_node,
            argument_of_periapsis=argument_of_periapsis,
            mean_anomaly_at_epoch=mean_anomaly_at_epoch,
        )

    def define_orbit(
        self,
        body: CelestialBody,
        central_body: CelestialBody,
        semi_major_axis: float,
        eccentricity: float,
        inclination: float = 0.0,
        ascending_node: float = 0.0,
        argument_of_periapsis: float = 0.0,
        mean_anomaly_at_epoch: float = 0.0,
    ) -> OrbitalElements:
        """Store an orbit with explicitly chosen elements."""
        elements = OrbitalElements.create(
            semi_major_axis=semi_major_axis,
            eccentricity=eccentricity,
            central_body_id=central_body.body_id,
            central_mass=central_body.mass,
            g=self.g,
            inclination=inclination,
            ascending_node=ascending_node,
            argument_of_periapsis=argument_of_periapsis,
            mean_anomaly_at_epoch=mean_anomaly_at_epoch,
        )

        self.register_body(body)
        self.register_body(central_body)
        self.elements.set(body.body_id, elements)

        logger.debug(
            "Orbit for %s around %s: a=%.1f e=%.3f i=%.1fdeg T=%.1f",
            body.name or body.body_id, central_body.name or central_body.body_id,
            semi_major_axis, eccentricity, math.degrees(inclination), elements.period,
        )
        return elements

    def unregister_body(self, body: CelestialBody) -> None:
        """Forget a body and its orbit. Orbits around it are skipped from now on."""
        self.bodies.pop(body.body_id, None)
        self.elements.remove(body.body_id)

    def remove_orbit(self, body: CelestialBody) -> Optional[OrbitalElements]:
        """Stop propagating a body; it stays resolvable as a central body."""
        return self.elements.remove(body.body_id)

    def reset(self) -> None:
        """Drop all orbital data."""
        self.elements.clear()
        self.bodies.clear()
        self._orphaned.clear()

    def get_orbital_elements(self, body: CelestialBody) -> Optional[OrbitalElements]:
        return self.elements.get(body.body_id)

    # -------------------------------------------------------------------------
    # Propagation
    # -------------------------------------------------------------------------

    def update_orbit(self, body: CelestialBody, dt: float) -> Optional[OrbitState]:
        """
        Advance a body along its ellipse by dt.

        M += n*dt, solve Kepler's equation for E, derive nu and r, place the
        body in its orbital plane, rotate the plane into world space and
        offset by the central body. Writes orbit_x ... orbit_vz on the body.

        Returns:
            OrbitState, or None if the body has no orbit or its central body
            is unknown
        """
        elements = self.elements.get(body.body_id)
        if elements is None:
            return None

        central = self.bodies.get(elements.central_body_id)
        if central is None:
            if body.body_id not in self._orphaned:
                self._orphaned.add(body.body_id)
                logger.warning(
                    "Skipping orbit updates for %s: central body %s is not registered",
                    body.body_id, elements.central_body_id,
                )
            return None
        self._orphaned.discard(body.body_id)

        cfg = self.config
        elements.mean_anomaly = normalize_angle(
            elements.mean_anomaly + elements.mean_motion * dt
        )
        elements.eccentric_anomaly = solve_kepler_equation(
            elements.mean_anomaly,
            elements.eccentricity,
            max_iterations=cfg.kepler_max_iterations,
            tolerance=cfg.kepler_tolerance,
            max_eccentricity=cfg.max_eccentricity,
        )
        elements.true_anomaly = true_anomaly(
            elements.eccentric_anomaly,
            elements.eccentricity,
            max_eccentricity=cfg.max_eccentricity,
        )

        r = orbital_radius(
            elements.semi_major_axis,
            elements.eccentricity,
            elements.true_anomaly,
            denominator_floor=cfg.radius_denominator_floor,
        )

        # Argument of latitude: angle from the ascending node in the orbital plane
        theta = elements.true_anomaly + elements.argument_of_periapsis
        relative_position = self._plane_to_world(
            r * math.cos(theta), r * math.sin(theta), elements
        )

        speed = vis_viva_speed(r, elements.semi_major_axis, elements.central_mass, self.g)
        gamma = flight_path_angle(elements.eccentricity, elements.true_anomaly)
        heading = theta + math.pi / 2.0 - gamma
        relative_velocity = self._plane_to_world(
            speed * math.cos(heading), speed * math.sin(heading), elements
        )

        position = central.position + relative_position
        velocity = central.velocity + relative_velocity

        body.orbit_x, body.orbit_y, body.orbit_z = position.to_tuple()
        body.orbit_vx, body.orbit_vy, body.orbit_vz = velocity.to_tuple()

        return OrbitState(
            body_id=body.body_id,
            position=position,
            velocity=velocity,
            radius=r,
            mean_anomaly=elements.mean_anomaly,
            eccentric_anomaly=elements.eccentric_anomaly,
            true_anomaly=elements.true_anomaly,
        )

    @staticmethod
    def _plane_to_world(px: float, py: float, elements: OrbitalElements) -> Vector3D:
        """
        Rotate node-frame coordinates into world space.

        The x axis of the node frame points at the ascending node. Tilt by
        the inclination about that axis, then turn by the longitude of the
        ascending node about world Z.
        """
        cos_node = math.cos(elements.ascending_node)
        sin_node = math.sin(elements.ascending_node)
        cos_i = math.cos(elements.inclination)
        sin_i = math.sin(elements.inclination)

        return Vector3D(
            px * cos_node - py * sin_node * cos_i,
            px * sin_node + py * cos_node * cos_i,
            py * sin_i,
        )

    # -------------------------------------------------------------------------
    # Timing
    # -------------------------------------------------------------------------

    def time_to_periapsis(self, body: CelestialBody) -> Optional[float]:
        elements = self.elements.get(body.body_id)
        if elements is None:
            return None
        return elements.time_to_periapsis()

    def time_to_apoapsis(self, body: CelestialBody) -> Optional[float]:
        elements = self.elements.get(body.body_id)
        if elements is None:
            return None
        return elements.time_to_apoapsis()
