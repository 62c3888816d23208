"""
Host-side celestial body record.

The propagator reads a central body's world position, velocity and mass
from here and writes the orbit output fields (orbit_x ... orbit_vz) of the
orbiting body. Copying those outputs into the body's own position is the
host's job (see CelestialBody.apply_orbit_state and SimulationWorld.tick).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, asdict, fields
from typing import Any, Dict, TYPE_CHECKING

from .vector import Vector3D

if TYPE_CHECKING:
    from .propagator import OrbitState


def new_body_id() -> str:
    """Stable identifier assigned once when a body is created."""
    return uuid.uuid4().hex


@dataclass
class CelestialBody:
    """
    A star, planet, moon or station that can anchor or follow an orbit.

    Attributes:
        mass: Mass in simulation units (drives G*M)
        radius: Physical radius (aerobraking, Lagrange proximity)
        name: Display name
        body_id: Stable identifier (never derived from position)
        x, y, z: Current world position
        vx, vy, vz: Current world velocity
        orbit_x ... orbit_vz: Last propagator output
        atmosphere_height: Height of the atmosphere above the surface
            (0 = airless)
    """
    mass: float
    radius: float = 0.0
    name: str = ""
    body_id: str = field(default_factory=new_body_id)
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    vz: float = 0.0
    orbit_x: float = 0.0
    orbit_y: float = 0.0
    orbit_z: float = 0.0
    orbit_vx: float = 0.0
    orbit_vy: float = 0.0
    orbit_vz: float = 0.0
    atmosphere_height: float = 0.0

    @property
    def position(self) -> Vector3D:
        return Vector3D(self.x, self.y, self.z)

    @property
    def velocity(self) -> Vector3D:
        return Vector3D(self.vx, self.vy, self.vz)

    def apply_orbit_state(self, state: OrbitState) -> None:
        """Copy a propagator result into the body's world position/velocity."""
        self.x, self.y, self.z = state.position.to_tuple()
        self.vx, self.vy, self.vz = state.velocity.to_tuple()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CelestialBody:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
