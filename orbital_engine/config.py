"""
Tunable simulation constants for the orbital engine.

The defaults are gameplay values, not physical ones: the gravitational
constant is inflated so orbits are visibly fast, and the vehicle thrusters,
dampening and speed caps are tuned for feel.

Configuration can be built three ways:
- EngineConfig() for the defaults
- EngineConfig.from_json(path) / from_dict(data) for a stored profile
- EngineConfig.from_env() which reads a .env file and ORBITAL_ENGINE_* variables
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv


logger = logging.getLogger(__name__)


# =============================================================================
# DEFAULTS
# =============================================================================

# Simulation gravitational constant (was 0.5 in early builds; raised for
# faster, more visible orbits)
DEFAULT_G = 2.0

# Kepler solver
KEPLER_MAX_ITERATIONS = 10
KEPLER_TOLERANCE = 1e-6
MAX_ECCENTRICITY = 0.9999  # Parabolic singularity guard
RADIUS_DENOMINATOR_FLOOR = 0.0001

# Vehicle limits
MAX_SPEED = 1200.0
MAX_ANGULAR_VELOCITY = 6.0  # rad/s
CARGO_MASS_MIN = 0.0
CARGO_MASS_MAX = 500.0

# Environment variable names
ENV_CONFIG_PATH = "ORBITAL_ENGINE_CONFIG"
ENV_G = "ORBITAL_ENGINE_G"
ENV_MAX_SPEED = "ORBITAL_ENGINE_MAX_SPEED"
ENV_MAX_ANGULAR_VELOCITY = "ORBITAL_ENGINE_MAX_ANGULAR_VELOCITY"


# =============================================================================
# CONFIG DATACLASSES
# =============================================================================

@dataclass
class OrbitConfig:
    """Constants used by the Kepler solver and the orbital propagator."""
    gravitational_constant: float = DEFAULT_G
    kepler_max_iterations: int = KEPLER_MAX_ITERATIONS
    kepler_tolerance: float = KEPLER_TOLERANCE
    max_eccentricity: float = MAX_ECCENTRICITY
    radius_denominator_floor: float = RADIUS_DENOMINATOR_FLOOR

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if self.gravitational_constant <= 0:
            raise ValueError("gravitational_constant must be positive")
        if self.kepler_max_iterations < 1:
            raise ValueError("kepler_max_iterations must be at least 1")
        if self.kepler_tolerance <= 0:
            raise ValueError("kepler_tolerance must be positive")
        if not 0.0 < self.max_eccentricity < 1.0:
            raise ValueError("max_eccentricity must be in (0, 1)")
        if self.radius_denominator_floor <= 0:
            raise ValueError("radius_denominator_floor must be positive")


@dataclass
class InertialConfig:
    """
    Default vehicle physics.

    Attributes:
        mass: Base mass when the vehicle record does not provide one
        main_thruster_force: Forward thrust
        retro_thruster_force: Reverse thrust
        lateral_thruster_force: Strafe thrust (left/right)
        rotational_thruster_torque: Turning torque
        inertia_factor: Moment of inertia = mass * inertia_factor
        linear_dampening: Per-tick velocity decay with dampeners off
        angular_dampening: Per-tick spin decay with dampeners off
        dampening_strength: Per-tick decay with inertial dampeners on
        max_speed: Linear speed cap
        max_angular_velocity: Spin cap (rad/s)
        cargo_mass_min: Lower cargo clamp
        cargo_mass_max: Upper cargo clamp
        station_keeping_threshold: Distance beyond which Lagrange station
            keeping applies a correction
    """
    mass: float = 100.0
    main_thruster_force: float = 1000.0
    retro_thruster_force: float = 500.0
    lateral_thruster_force: float = 375.0
    rotational_thruster_torque: float = 35.0
    inertia_factor: float = 2.0
    linear_dampening: float = 0.001
    angular_dampening: float = 0.05
    dampening_strength: float = 0.15
    max_speed: float = MAX_SPEED
    max_angular_velocity: float = MAX_ANGULAR_VELOCITY
    cargo_mass_min: float = CARGO_MASS_MIN
    cargo_mass_max: float = CARGO_MASS_MAX
    station_keeping_threshold: float = 50.0

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if self.mass <= 0:
            raise ValueError("mass must be positive")
        if self.inertia_factor <= 0:
            raise ValueError("inertia_factor must be positive")
        for name in ("linear_dampening", "angular_dampening", "dampening_strength"):
            value = getattr(self, name)
            if not 0.0 <= value < 1.0:
                raise ValueError(f"{name} must be in [0, 1)")
        # Angular decay runs at double strength with dampeners on
        if self.dampening_strength * 2 > 1.0:
            raise ValueError("dampening_strength must not exceed 0.5")
        if self.max_speed <= 0 or self.max_angular_velocity <= 0:
            raise ValueError("speed caps must be positive")
        if self.cargo_mass_min < 0 or self.cargo_mass_max < self.cargo_mass_min:
            raise ValueError("cargo mass range is invalid")


@dataclass
class EngineConfig:
    """Complete engine configuration."""
    orbit: OrbitConfig = field(default_factory=OrbitConfig)
    inertial: InertialConfig = field(default_factory=InertialConfig)

    @property
    def gravitational_constant(self) -> float:
        return self.orbit.gravitational_constant

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EngineConfig':
        """Create configuration from a dictionary; unknown keys are rejected."""
        return cls(
            orbit=_build_section(OrbitConfig, data.get("orbit", {})),
            inertial=_build_section(InertialConfig, data.get("inertial", {})),
        )

    @classmethod
    def from_json(cls, path: str) -> 'EngineConfig':
        """Load configuration from JSON file."""
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Engine config not found: {path}")

        with open(config_path) as f:
            data = json.load(f)

        logger.info("Loaded engine config from %s", config_path)
        return cls.from_dict(data)

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> 'EngineConfig':
        """
        Build configuration from the environment.

        Loads a .env file first (without overriding variables already set),
        then applies ORBITAL_ENGINE_CONFIG (a JSON profile) and the individual
        ORBITAL_ENGINE_* overrides on top of it.
        """
        load_dotenv(dotenv_path)

        config_path = os.environ.get(ENV_CONFIG_PATH)
        data = cls.from_json(config_path).to_dict() if config_path else cls().to_dict()

        if ENV_G in os.environ:
            data["orbit"]["gravitational_constant"] = _env_float(ENV_G)
        if ENV_MAX_SPEED in os.environ:
            data["inertial"]["max_speed"] = _env_float(ENV_MAX_SPEED)
        if ENV_MAX_ANGULAR_VELOCITY in os.environ:
            data["inertial"]["max_angular_velocity"] = _env_float(ENV_MAX_ANGULAR_VELOCITY)

        return cls.from_dict(data)


def _build_section(section_cls, data: Dict[str, Any]):
    known = {f.name for f in fields(section_cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(
            f"Unknown {section_cls.__name__} keys: {', '.join(sorted(unknown))}"
        )
    return section_cls(**data)


def _env_float(name: str) -> float:
    raw = os.environ[name]
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
