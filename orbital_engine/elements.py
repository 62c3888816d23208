"""
Orbital element records and the id-keyed element store.

Each celestial body that orbits something owns exactly one OrbitalElements
record. Records reference their central body by id only; the central body
may itself be orbiting (moon -> planet -> star), so ownership never flows
up the hierarchy.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Iterator, Optional

from .kepler import TWO_PI, mean_motion, orbital_period


@dataclass
class OrbitalElements:
    """
    Classical orbital elements plus the propagator's running state.

    Attributes:
        semi_major_axis: a, half the long axis of the ellipse (> 0)
        eccentricity: e, 0 = circle, 0 < e < 1 = ellipse
        inclination: i, tilt of the orbital plane (radians)
        ascending_node: Omega, longitude of the ascending node (radians)
        argument_of_periapsis: omega, angle from node to periapsis (radians)
        mean_anomaly_at_epoch: M0 (radians)
        period: T from Kepler's third law
        mean_motion: n = 2pi / T
        central_body_id: Stable id of the body being orbited
        central_mass: Central mass the period was derived from
        mean_anomaly: Current M
        eccentric_anomaly: Current E
        true_anomaly: Current nu
    """
    semi_major_axis: float
    eccentricity: float
    inclination: float
    ascending_node: float
    argument_of_periapsis: float
    mean_anomaly_at_epoch: float
    period: float
    mean_motion: float
    central_body_id: str
    central_mass: float
    mean_anomaly: float = 0.0
    eccentric_anomaly: float = 0.0
    true_anomaly: float = 0.0

    def __post_init__(self):
        if not self.semi_major_axis > 0:
            raise ValueError(f"Semi-major axis must be positive, got {self.semi_major_axis}")
        if not 0.0 <= self.eccentricity < 1.0:
            raise ValueError(f"Eccentricity must be in [0, 1), got {self.eccentricity}")
        if not self.period > 0:
            raise ValueError(f"Period must be positive, got {self.period}")

    @classmethod
    def create(
        cls,
        semi_major_axis: float,
        eccentricity: float,
        central_body_id: str,
        central_mass: float,
        g: float,
        inclination: float = 0.0,
        ascending_node: float = 0.0,
        argument_of_periapsis: float = 0.0,
        mean_anomaly_at_epoch: float = 0.0,
    ) -> OrbitalElements:
        """
        Build a record, deriving period and mean motion.

        The running anomalies start at M0 (E and nu are refined on the
        first propagator update).
        """
        period = orbital_period(semi_major_axis, central_mass, g)
        return cls(
            semi_major_axis=semi_major_axis,
            eccentricity=eccentricity,
            inclination=inclination,
            ascending_node=ascending_node,
            argument_of_periapsis=argument_of_periapsis,
            mean_anomaly_at_epoch=mean_anomaly_at_epoch,
            period=period,
            mean_motion=mean_motion(period),
            central_body_id=central_body_id,
            central_mass=central_mass,
            mean_anomaly=mean_anomaly_at_epoch,
            eccentric_anomaly=mean_anomaly_at_epoch,
            true_anomaly=mean_anomaly_at_epoch,
        )

    @property
    def periapsis(self) -> float:
        """Closest distance to the central body, a(1 - e)."""
        return self.semi_major_axis * (1.0 - self.eccentricity)

    @property
    def apoapsis(self) -> float:
        """Farthest distance from the central body, a(1 + e)."""
        return self.semi_major_axis * (1.0 + self.eccentricity)

    @property
    def semi_latus_rectum(self) -> float:
        return self.semi_major_axis * (1.0 - self.eccentricity ** 2)

    def time_since_periapsis(self) -> float:
        return (self.mean_anomaly / TWO_PI) * self.period

    def time_to_periapsis(self) -> float:
        """Time until the next periapsis passage."""
        return self.period - self.time_since_periapsis()

    def time_to_apoapsis(self) -> float:
        """Time until the next apoapsis passage (always less than one period)."""
        return math.fmod(self.time_to_periapsis() + self.period / 2.0, self.period)

    def copy(self) -> OrbitalElements:
        return OrbitalElements(**asdict(self))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> OrbitalElements:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


class ElementStore:
    """
    Registry of orbital elements keyed by stable body id.

    Owned by the simulation world; the propagator looks records up by id
    every tick.
    """

    def __init__(self) -> None:
        self._elements: dict[str, OrbitalElements] = {}

    def set(self, body_id: str, elements: OrbitalElements) -> None:
        self._elements[body_id] = elements

    def get(self, body_id: str) -> Optional[OrbitalElements]:
        return self._elements.get(body_id)

    def remove(self, body_id: str) -> Optional[OrbitalElements]:
        return self._elements.pop(body_id, None)

    def clear(self) -> None:
        self._elements.clear()

    def ids(self) -> list[str]:
        return list(self._elements)

    def __contains__(self, body_id: object) -> bool:
        return body_id in self._elements

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[str]:
        return iter(self._elements)

    def items(self):
        return self._elements.items()

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {body_id: el.to_dict() for body_id, el in self._elements.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Dict[str, Any]]) -> ElementStore:
        store = cls()
        for body_id, element_data in data.items():
            store.set(body_id, OrbitalElements.from_dict(element_data))
        return store
