"""
Simulation World for the orbital engine.

Owns everything that moves and runs the per-tick update pass:

- Celestial bodies and their orbits (through the OrbitalPropagator)
- Thrust-driven vehicles (one InertialBody each)
- The ManeuverPlanner bound to the world's gravitational constant
- An event log with optional callbacks

Each tick updates orbits parent-before-child (a moon is placed after the
planet it circles has moved), copies every OrbitState into its body, then
integrates vehicles. Only after the whole pass is a WorldSnapshot built, so
renderers never see a half-updated world.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Optional, Union

from .bodies import CelestialBody, new_body_id
from .config import EngineConfig
from .elements import OrbitalElements
from .gravity import apply_gravity
from .inertial import InertialBody, InertialState, VehicleRecord
from .maneuvers import ManeuverPlanner
from .propagator import OrbitalPropagator
from .rng import Seed


logger = logging.getLogger(__name__)


DEFAULT_TIME_STEP = 1.0 / 60.0


# =============================================================================
# EVENTS
# =============================================================================

class SimulationEventType(Enum):
    """Types of events recorded by the world."""
    # Registry events
    BODY_ADDED = auto()
    BODY_REMOVED = auto()
    VEHICLE_ADDED = auto()
    VEHICLE_REMOVED = auto()

    # Orbit events
    ORBIT_INITIALIZED = auto()
    ORBIT_REMOVED = auto()

    # Run events
    SIMULATION_STARTED = auto()
    SIMULATION_ENDED = auto()


@dataclass
class SimulationEvent:
    """
    Something that happened in the world.

    Attributes:
        event_type: The type of event.
        timestamp: Simulation time when the event occurred.
        subject_id: Body or vehicle involved (if applicable).
        data: Additional event-specific data.
    """
    event_type: SimulationEventType
    timestamp: float
    subject_id: Optional[str] = None
    data: dict = field(default_factory=dict)

    def __str__(self) -> str:
        subject = f"[{self.subject_id}] " if self.subject_id else ""
        return f"T+{self.timestamp:.2f}s {subject}{self.event_type.name}"


# =============================================================================
# SNAPSHOT
# =============================================================================

@dataclass(frozen=True)
class BodySnapshot:
    body_id: str
    name: str
    position: tuple[float, float, float]
    velocity: tuple[float, float, float]


@dataclass(frozen=True)
class WorldSnapshot:
    """Read-only view of the world after a complete tick."""
    time: float
    tick: int
    bodies: dict[str, BodySnapshot]
    vehicles: dict[str, InertialState]


# =============================================================================
# WORLD
# =============================================================================

class SimulationWorld:
    """
    Tick-driven container for bodies, orbits and vehicles.

    Usage:
        world = SimulationWorld()
        star = world.add_body(CelestialBody(mass=1000, name="Sol"))
        planet = world.add_body(CelestialBody(mass=10, name="Terra"))
        world.initialize_orbit(planet.body_id, star.body_id, 1000, seed="Terra")
        snapshot = world.tick()

    Attributes:
        config: Engine configuration
        propagator: Orbit propagator (owns the element store)
        planner: Maneuver planner using the same G
        vehicles: Dict of vehicle_id to InertialBody
        events: Event log
        current_time: Simulation time
        tick_count: Completed ticks
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        time_step: float = DEFAULT_TIME_STEP,
        gravity_enabled: bool = False,
    ) -> None:
        """
        Args:
            config: Engine configuration (defaults if omitted)
            time_step: Default dt for tick() and run()
            gravity_enabled: Pull vehicles toward bodies each tick
        """
        if time_step <= 0:
            raise ValueError("time_step must be positive")

        self.config = config or EngineConfig()
        self.time_step = time_step
        self.gravity_enabled = gravity_enabled

        self.propagator = OrbitalPropagator(self.config.orbit)
        self.planner = ManeuverPlanner(self.config.gravitational_constant)
        self.vehicles: dict[str, InertialBody] = {}

        self.current_time: float = 0.0
        self.tick_count: int = 0

        self.events: list[SimulationEvent] = []
        self._event_callbacks: list[Callable[[SimulationEvent], None]] = []

    @property
    def bodies(self) -> dict[str, CelestialBody]:
        return self.propagator.bodies

    @property
    def g(self) -> float:
        return self.config.gravitational_constant

    # -------------------------------------------------------------------------
    # Body Management
    # -------------------------------------------------------------------------

    def add_body(self, body: CelestialBody) -> CelestialBody:
        self.propagator.register_body(body)
        self._log_event(SimulationEventType.BODY_ADDED, body.body_id, {"name": body.name})
        return body

    def remove_body(self, body_id: str) -> Optional[CelestialBody]:
        """
        Remove a body and its orbit.

        Bodies that orbited it keep their elements but are skipped until a
        body with the same id is added again.
        """
        body = self.bodies.get(body_id)
        if body is None:
            return None
        self.propagator.unregister_body(body)
        self._log_event(SimulationEventType.BODY_REMOVED, body_id)
        return body

    def get_body(self, body_id: str) -> Optional[CelestialBody]:
        return self.bodies.get(body_id)

    def _require_body(self, body_id: str) -> CelestialBody:
        body = self.bodies.get(body_id)
        if body is None:
            raise KeyError(f"Unknown body: {body_id}")
        return body

    # -------------------------------------------------------------------------
    # Orbits
    # -------------------------------------------------------------------------

    def initialize_orbit(
        self,
        body_id: str,
        central_body_id: str,
        semi_major_axis: float,
        seed: Optional[Seed] = None,
    ) -> OrbitalElements:
        """Give a body seeded random orbital elements around another body."""
        body = self._require_body(body_id)
        central = self._require_body(central_body_id)
        elements = self.propagator.initialize_orbit(body, central, semi_major_axis, seed)
        self._log_orbit(body, elements)
        return elements

    def define_orbit(
        self,
        body_id: str,
        central_body_id: str,
        semi_major_axis: float,
        eccentricity: float,
        **angles: float,
    ) -> OrbitalElements:
        """Give a body explicit orbital elements (angles in radians)."""
        body = self._require_body(body_id)
        central = self._require_body(central_body_id)
        elements = self.propagator.define_orbit(
            body, central, semi_major_axis, eccentricity, **angles
        )
        self._log_orbit(body, elements)
        return elements

    def remove_orbit(self, body_id: str) -> Optional[OrbitalElements]:
        body = self.bodies.get(body_id)
        if body is None:
            return None
        elements = self.propagator.remove_orbit(body)
        if elements is not None:
            self._log_event(SimulationEventType.ORBIT_REMOVED, body_id)
        return elements

    def _log_orbit(self, body: CelestialBody, elements: OrbitalElements) -> None:
        self._log_event(
            SimulationEventType.ORBIT_INITIALIZED,
            body.body_id,
            {
                "central_body_id": elements.central_body_id,
                "semi_major_axis": elements.semi_major_axis,
                "eccentricity": elements.eccentricity,
                "period": elements.period,
            },
        )

    def orbit_depth(self, body_id: str) -> int:
        """
        Number of orbit links between a body and the root of its hierarchy.

        A star is 0, a planet 1, a moon 2. A cycle in the hierarchy raises
        ValueError.
        """
        depth = 0
        seen = {body_id}
        elements = self.propagator.elements.get(body_id)
        while elements is not None:
            depth += 1
            parent = elements.central_body_id
            if parent in seen:
                raise ValueError(f"Orbit hierarchy contains a cycle at {parent}")
            seen.add(parent)
            elements = self.propagator.elements.get(parent)
        return depth

    def update_order(self) -> list[str]:
        """Ids of orbiting bodies sorted parent-before-child."""
        orbiting = [body_id for body_id in self.propagator.elements if body_id in self.bodies]
        return sorted(orbiting, key=self.orbit_depth)

    # -------------------------------------------------------------------------
    # Vehicle Management
    # -------------------------------------------------------------------------

    def add_vehicle(
        self,
        vehicle: Union[VehicleRecord, InertialBody],
        vehicle_id: Optional[str] = None,
    ) -> str:
        """
        Add a vehicle; a bare VehicleRecord gets an InertialBody built with
        the world's inertial config.

        Returns:
            The vehicle id
        """
        if isinstance(vehicle, VehicleRecord):
            vehicle = InertialBody(vehicle, self.config.inertial)
        vehicle_id = vehicle_id or new_body_id()
        self.vehicles[vehicle_id] = vehicle
        self._log_event(SimulationEventType.VEHICLE_ADDED, vehicle_id)
        return vehicle_id

    def remove_vehicle(self, vehicle_id: str) -> Optional[InertialBody]:
        vehicle = self.vehicles.pop(vehicle_id, None)
        if vehicle is not None:
            self._log_event(SimulationEventType.VEHICLE_REMOVED, vehicle_id)
        return vehicle

    def get_vehicle(self, vehicle_id: str) -> Optional[InertialBody]:
        return self.vehicles.get(vehicle_id)

    # -------------------------------------------------------------------------
    # Simulation Loop
    # -------------------------------------------------------------------------

    def tick(self, dt: Optional[float] = None) -> WorldSnapshot:
        """
        Run one complete update pass and return the resulting snapshot.

        Args:
            dt: Time step (defaults to time_step)
        """
        dt = self.time_step if dt is None else dt

        for body_id in self.update_order():
            body = self.bodies[body_id]
            state = self.propagator.update_orbit(body, dt)
            if state is not None:
                body.apply_orbit_state(state)

        bodies = list(self.bodies.values())
        for vehicle in self.vehicles.values():
            if self.gravity_enabled:
                apply_gravity(vehicle, bodies, self.g, dt)
            vehicle.update(dt)

        self.current_time += dt
        self.tick_count += 1
        return self.snapshot()

    def run(self, duration: float, dt: Optional[float] = None) -> WorldSnapshot:
        """
        Tick until duration has elapsed.

        Returns:
            Snapshot after the last tick
        """
        dt = self.time_step if dt is None else dt
        steps = max(1, round(duration / dt))

        self._log_event(SimulationEventType.SIMULATION_STARTED, data={"duration": duration})
        logger.info("Running %d ticks of %.4fs", steps, dt)

        snapshot = self.snapshot()
        for _ in range(steps):
            snapshot = self.tick(dt)

        self._log_event(SimulationEventType.SIMULATION_ENDED, data={"ticks": steps})
        return snapshot

    def snapshot(self) -> WorldSnapshot:
        return WorldSnapshot(
            time=self.current_time,
            tick=self.tick_count,
            bodies={
                body_id: BodySnapshot(
                    body_id=body_id,
                    name=body.name,
                    position=body.position.to_tuple(),
                    velocity=body.velocity.to_tuple(),
                )
                for body_id, body in self.bodies.items()
            },
            vehicles={
                vehicle_id: vehicle.state()
                for vehicle_id, vehicle in self.vehicles.items()
            },
        )

    # -------------------------------------------------------------------------
    # Event Logging
    # -------------------------------------------------------------------------

    def add_event_callback(self, callback: Callable[[SimulationEvent], None]) -> None:
        """Register a function called with every new event."""
        self._event_callbacks.append(callback)

    def remove_event_callback(self, callback: Callable[[SimulationEvent], None]) -> None:
        if callback in self._event_callbacks:
            self._event_callbacks.remove(callback)

    def _log_event(
        self,
        event_type: SimulationEventType,
        subject_id: Optional[str] = None,
        data: Optional[dict] = None,
    ) -> SimulationEvent:
        """Log a simulation event and notify callbacks."""
        event = SimulationEvent(
            event_type=event_type,
            timestamp=self.current_time,
            subject_id=subject_id,
            data=data or {},
        )
        self.events.append(event)

        for callback in self._event_callbacks:
            try:
                callback(event)
            except Exception:
                logger.exception("Event callback failed for %s", event_type.name)

        return event
