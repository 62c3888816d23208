"""
Vector type shared by the orbital propagator, the inertial integrator and the
maneuver planner.

World space is right-handed with the game plane spanned by X and Y; Z is
only populated by inclined orbits. Vehicles live in the plane (z = 0).
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass
class Vector3D:
    """
    3D vector for positions, velocities and directions in world space.

    Equality is tolerance based so that values produced by different
    integration paths compare equal.
    """
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: Vector3D) -> Vector3D:
        return Vector3D(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3D) -> Vector3D:
        return Vector3D(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vector3D:
        return Vector3D(self.x * scalar, self.y * scalar, self.z * scalar)

    def __rmul__(self, scalar: float) -> Vector3D:
        return self.__mul__(scalar)

    def __truediv__(self, scalar: float) -> Vector3D:
        if scalar == 0:
            raise ValueError("Cannot divide vector by zero")
        return Vector3D(self.x / scalar, self.y / scalar, self.z / scalar)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector3D):
            return False
        eps = 1e-10
        return (abs(self.x - other.x) < eps and
                abs(self.y - other.y) < eps and
                abs(self.z - other.z) < eps)

    @property
    def magnitude(self) -> float:
        """Vector length."""
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    @property
    def planar_magnitude(self) -> float:
        """Length of the XY projection (vehicle speed, in-plane distance)."""
        return math.hypot(self.x, self.y)

    @property
    def heading(self) -> float:
        """Angle of the XY projection in radians, measured from +X."""
        return math.atan2(self.y, self.x)

    def normalized(self) -> Vector3D:
        """Unit vector in the same direction; the zero vector stays zero."""
        mag = self.magnitude
        if mag == 0:
            return Vector3D(0.0, 0.0, 0.0)
        return self / mag

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @classmethod
    def from_tuple(cls, t: tuple[float, ...]) -> Vector3D:
        """Create from a 2- or 3-tuple."""
        if len(t) == 2:
            return cls(t[0], t[1], 0.0)
        return cls(t[0], t[1], t[2])

    @classmethod
    def from_polar(cls, angle_rad: float, length: float = 1.0) -> Vector3D:
        """In-plane vector of the given length pointing along angle_rad."""
        return cls(math.cos(angle_rad) * length, math.sin(angle_rad) * length, 0.0)

    @classmethod
    def zero(cls) -> Vector3D:
        return cls(0.0, 0.0, 0.0)

    def __repr__(self) -> str:
        return f"Vector3D({self.x:.6g}, {self.y:.6g}, {self.z:.6g})"
