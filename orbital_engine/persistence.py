"""
Save and load a SimulationWorld as JSON.

Floats are written with repr precision, so a loaded world holds exactly the
same element records (current anomalies included), body states and vehicle
states as the saved one and continues propagating without a jump.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from .bodies import CelestialBody
from .config import EngineConfig
from .elements import ElementStore
from .inertial import InertialBody
from .world import SimulationWorld


logger = logging.getLogger(__name__)

SAVE_FORMAT_VERSION = 1


def world_to_dict(world: SimulationWorld) -> Dict[str, Any]:
    """Serialize a world to plain JSON-compatible data."""
    return {
        "version": SAVE_FORMAT_VERSION,
        "current_time": world.current_time,
        "tick_count": world.tick_count,
        "time_step": world.time_step,
        "gravity_enabled": world.gravity_enabled,
        "config": world.config.to_dict(),
        "bodies": [body.to_dict() for body in world.bodies.values()],
        "elements": world.propagator.elements.to_dict(),
        "vehicles": {
            vehicle_id: vehicle.to_dict()
            for vehicle_id, vehicle in world.vehicles.items()
        },
    }


def world_from_dict(data: Dict[str, Any]) -> SimulationWorld:
    """
    Rebuild a world from world_to_dict output.

    Raises:
        ValueError: If the save format version is not supported
    """
    version = data.get("version")
    if version != SAVE_FORMAT_VERSION:
        raise ValueError(f"Unsupported save format version: {version}")

    config = EngineConfig.from_dict(data["config"])
    world = SimulationWorld(
        config=config,
        time_step=data["time_step"],
        gravity_enabled=data.get("gravity_enabled", False),
    )

    for body_data in data["bodies"]:
        world.propagator.register_body(CelestialBody.from_dict(body_data))

    restored = ElementStore.from_dict(data["elements"])
    for body_id, elements in restored.items():
        world.propagator.elements.set(body_id, elements)

    for vehicle_id, vehicle_data in data["vehicles"].items():
        world.vehicles[vehicle_id] = InertialBody.from_dict(vehicle_data, config.inertial)

    world.current_time = data["current_time"]
    world.tick_count = data["tick_count"]
    return world


def save_world(world: SimulationWorld, path: Union[str, Path]) -> Path:
    """Write a world to a JSON file, creating parent directories."""
    save_path = Path(path)
    save_path.parent.mkdir(parents=True, exist_ok=True)

    with open(save_path, "w") as f:
        json.dump(world_to_dict(world), f, indent=2)

    logger.info(
        "Saved world at T+%.2f (%d bodies, %d vehicles) to %s",
        world.current_time, len(world.bodies), len(world.vehicles), save_path,
    )
    return save_path


def load_world(path: Union[str, Path]) -> SimulationWorld:
    """
    Load a world saved by save_world.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    save_path = Path(path)
    if not save_path.exists():
        raise FileNotFoundError(f"World save not found: {path}")

    with open(save_path) as f:
        data = json.load(f)

    world = world_from_dict(data)
    logger.info("Loaded world at T+%.2f from %s", world.current_time, save_path)
    return world
