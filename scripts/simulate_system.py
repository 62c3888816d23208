#!/usr/bin/env python3
"""
Simulate a small star system and print orbit and maneuver summaries.

Usage:
    python scripts/simulate_system.py --duration 600
    python scripts/simulate_system.py --seed Kepler --save saves/system.json
    python scripts/simulate_system.py --load saves/system.json --duration 60 --verbose
"""

import argparse
import logging
import math

from orbital_engine import (
    CelestialBody,
    EngineConfig,
    SimulationWorld,
    VehicleRecord,
    load_world,
    save_world,
)


logger = logging.getLogger("simulate_system")


def build_system(config: EngineConfig, seed: str, time_step: float) -> SimulationWorld:
    """Star with two planets, one moon and a ship in low orbit around the first planet."""
    world = SimulationWorld(config=config, time_step=time_step, gravity_enabled=True)

    star = world.add_body(CelestialBody(mass=20000.0, radius=120.0, name="Sol"))
    inner = world.add_body(CelestialBody(mass=400.0, radius=30.0, name="Terra",
                                         atmosphere_height=15.0))
    outer = world.add_body(CelestialBody(mass=900.0, radius=45.0, name="Ares"))
    moon = world.add_body(CelestialBody(mass=5.0, radius=6.0, name="Luna"))

    world.initialize_orbit(inner.body_id, star.body_id, 1500.0, seed=f"{seed}:Terra")
    world.initialize_orbit(outer.body_id, star.body_id, 3200.0, seed=f"{seed}:Ares")
    world.initialize_orbit(moon.body_id, inner.body_id, 90.0, seed=f"{seed}:Luna")

    world.add_vehicle(VehicleRecord(x=2000.0, y=0.0, mass=100.0), vehicle_id="ship")
    return world


def print_orbits(world: SimulationWorld) -> None:
    print(f"\n{'Body':<10} {'a':>8} {'e':>6} {'i(deg)':>7} {'T':>9} {'to peri':>9}")
    print("-" * 54)
    for body_id in world.update_order():
        body = world.get_body(body_id)
        el = world.propagator.get_orbital_elements(body)
        print(
            f"{body.name:<10} {el.semi_major_axis:>8.1f} {el.eccentricity:>6.3f} "
            f"{math.degrees(el.inclination):>7.2f} {el.period:>9.1f} "
            f"{el.time_to_periapsis():>9.1f}"
        )


def print_transfer(world: SimulationWorld) -> None:
    bodies = {body.name: body for body in world.bodies.values()}
    star, inner, outer = bodies.get("Sol"), bodies.get("Terra"), bodies.get("Ares")
    if not (star and inner and outer):
        return

    r1 = (inner.position - star.position).magnitude
    r2 = (outer.position - star.position).magnitude
    transfer = world.planner.calculate_hohmann_transfer(r1, r2, star.mass)
    if transfer is None:
        return

    print(f"\nHohmann Terra -> Ares ({r1:.0f} -> {r2:.0f}):")
    print(f"  burn 1: {transfer.delta_v1:.3f}  burn 2: {transfer.delta_v2:.3f}  "
          f"total: {transfer.total_delta_v:.3f}  time: {transfer.transfer_time:.1f}")

    points = world.planner.calculate_lagrange_points(star, inner)
    if points is not None:
        print("\nSol-Terra Lagrange points:")
        for point in points:
            tag = " (stable)" if point.stable else ""
            print(f"  {point.name}: ({point.position.x:8.1f}, {point.position.y:8.1f}){tag}")


def main():
    parser = argparse.ArgumentParser(
        description="Simulate a seeded star system",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--duration", type=float, default=300.0,
                        help="Simulated seconds to run (default: 300)")
    parser.add_argument("--time-step", type=float, default=1.0 / 60.0,
                        help="Tick length in seconds (default: 1/60)")
    parser.add_argument("--seed", default="Sol",
                        help="System seed (default: Sol)")
    parser.add_argument("--env-file", default=None,
                        help="Path to a .env file with ORBITAL_ENGINE_* settings")
    parser.add_argument("--load", default=None, help="Load a saved world instead of generating one")
    parser.add_argument("--save", default=None, help="Save the world after the run")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.load:
        world = load_world(args.load)
    else:
        config = EngineConfig.from_env(args.env_file)
        world = build_system(config, args.seed, args.time_step)

    print_orbits(world)

    snapshot = world.run(args.duration)
    ship = snapshot.vehicles.get("ship")
    print(f"\nT+{snapshot.time:.1f}s after {snapshot.tick} ticks")
    if ship is not None:
        print(f"  ship at ({ship.x:.1f}, {ship.y:.1f}) speed {ship.speed:.2f}")

    print_transfer(world)

    if args.save:
        save_world(world, args.save)


if __name__ == "__main__":
    main()
