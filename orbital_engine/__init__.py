"""Deterministic orbital mechanics and inertial flight dynamics engine."""

from .vector import Vector3D

from .config import (
    DEFAULT_G,
    EngineConfig,
    InertialConfig,
    OrbitConfig,
)

from .rng import (
    SeededRandom,
    hash_seed,
)

from .kepler import (
    flight_path_angle,
    mean_motion,
    normalize_angle,
    orbital_period,
    orbital_radius,
    solve_kepler_equation,
    true_anomaly,
    vis_viva_speed,
)

from .elements import (
    ElementStore,
    OrbitalElements,
)

from .bodies import CelestialBody

from .propagator import (
    OrbitalPropagator,
    OrbitState,
)

from .inertial import (
    # Host record
    VehicleRecord,
    # Outputs
    FlightInfo,
    InertialState,
    RelativeVelocity,
    ThrustResult,
    ThrusterDirection,
    # Integrator
    InertialBody,
)

from .gravity import (
    OrbitType,
    OrbitalParameters,
    apply_gravity,
    escape_velocity,
    gravitational_force,
    hill_sphere_radius,
    influence_radius,
    is_in_stable_orbit,
    orbital_parameters,
)

from .maneuvers import (
    # Results
    AerobrakingResult,
    BurnResult,
    GravityAssistResult,
    HohmannTransfer,
    InsertionPlan,
    InsertionResult,
    LagrangePoint,
    LagrangePoints,
    NearLagrangePoint,
    StationKeepingResult,
    # Planner
    ManeuverPlanner,
)

from .world import (
    SimulationEvent,
    SimulationEventType,
    SimulationWorld,
    WorldSnapshot,
)

from .persistence import (
    load_world,
    save_world,
    world_from_dict,
    world_to_dict,
)

__all__ = [
    # Vector
    "Vector3D",
    # Configuration
    "DEFAULT_G",
    "EngineConfig",
    "InertialConfig",
    "OrbitConfig",
    # Random numbers
    "SeededRandom",
    "hash_seed",
    # Kepler solver
    "flight_path_angle",
    "mean_motion",
    "normalize_angle",
    "orbital_period",
    "orbital_radius",
    "solve_kepler_equation",
    "true_anomaly",
    "vis_viva_speed",
    # Orbital elements
    "ElementStore",
    "OrbitalElements",
    "CelestialBody",
    # Propagator
    "OrbitalPropagator",
    "OrbitState",
    # Inertial movement
    "VehicleRecord",
    "FlightInfo",
    "InertialState",
    "RelativeVelocity",
    "ThrustResult",
    "ThrusterDirection",
    "InertialBody",
    # Gravity
    "OrbitType",
    "OrbitalParameters",
    "apply_gravity",
    "escape_velocity",
    "gravitational_force",
    "hill_sphere_radius",
    "influence_radius",
    "is_in_stable_orbit",
    "orbital_parameters",
    # Maneuvers
    "AerobrakingResult",
    "BurnResult",
    "GravityAssistResult",
    "HohmannTransfer",
    "InsertionPlan",
    "InsertionResult",
    "LagrangePoint",
    "LagrangePoints",
    "NearLagrangePoint",
    "StationKeepingResult",
    "ManeuverPlanner",
    # World
    "SimulationEvent",
    "SimulationEventType",
    "SimulationWorld",
    "WorldSnapshot",
    # Persistence
    "load_world",
    "save_world",
    "world_from_dict",
    "world_to_dict",
]
