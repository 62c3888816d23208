"""
Tests for the inertial movement integrator.

Tests cover:
1. Thruster acceleration with mass, cargo and hull damage
2. Rotational thrust and external forces
3. Dampening, speed and spin caps during update
4. Write-back to the vehicle record
5. Queries, HUD info and serialization
"""

import math

import pytest

from orbital_engine.config import InertialConfig
from orbital_engine.inertial import (
    InertialBody,
    ThrusterDirection,
    VehicleRecord,
)
from orbital_engine.kepler import TWO_PI
from orbital_engine.vector import Vector3D


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def vehicle():
    """A 100-mass vehicle at rest with full hull."""
    return VehicleRecord(mass=100.0)


@pytest.fixture
def body(vehicle):
    return InertialBody(vehicle)


# =============================================================================
# THRUST
# =============================================================================

class TestThrust:
    """Thruster acceleration."""

    def test_forward_one_second(self, body):
        result = body.apply_thrust("forward", 1.0)
        assert body.velocity.x == pytest.approx(10.0)
        assert body.velocity.y == pytest.approx(0.0)
        assert result.active
        assert result.direction is ThrusterDirection.FORWARD
        assert result.force == pytest.approx(1000.0)

    @pytest.mark.parametrize("direction,expected", [
        ("backward", (-5.0, 0.0)),
        ("left", (0.0, -3.75)),
        ("right", (0.0, 3.75)),
        (ThrusterDirection.FORWARD, (10.0, 0.0)),
    ])
    def test_directions(self, body, direction, expected):
        body.apply_thrust(direction, 1.0)
        assert body.velocity.x == pytest.approx(expected[0], abs=1e-12)
        assert body.velocity.y == pytest.approx(expected[1], abs=1e-12)

    def test_thrust_follows_rotation(self, vehicle):
        vehicle.rotation = math.pi / 2
        body = InertialBody(vehicle)
        body.apply_thrust("forward", 1.0)
        assert body.velocity == Vector3D(0.0, 10.0, 0.0)

    def test_cargo_reduces_acceleration(self, vehicle):
        vehicle.cargo_mass = 100.0
        body = InertialBody(vehicle)
        body.apply_thrust("forward", 1.0)
        assert body.velocity.x == pytest.approx(5.0)

    def test_hull_damage(self, vehicle):
        vehicle.hull = 50.0
        body = InertialBody(vehicle)
        result = body.apply_thrust("forward", 1.0)
        assert body.thruster_efficiency == pytest.approx(0.75)
        assert body.damage_multiplier == pytest.approx(0.85)
        assert result.force == pytest.approx(637.5)
        assert body.velocity.x == pytest.approx(6.375)

    def test_damage_read_at_thrust_time(self, vehicle, body):
        vehicle.hull = 0.0
        body.apply_thrust("forward", 1.0)
        assert body.velocity.x == pytest.approx(1000 * 0.5 * 0.7 / 100)

    @pytest.mark.parametrize("hull,max_hull,expected", [
        (150.0, 100.0, 1.0),
        (-20.0, 100.0, 0.0),
        (10.0, 0.0, 1.0),
    ])
    def test_hull_fraction_clamped(self, hull, max_hull, expected):
        body = InertialBody(VehicleRecord(hull=hull, max_hull=max_hull))
        assert body.hull_fraction == expected

    def test_unknown_direction(self, body):
        with pytest.raises(ValueError):
            body.apply_thrust("up", 1.0)


class TestRotationAndForces:
    def test_rotational_thrust(self, body):
        assert body.apply_rotational_thrust(1, 1.0) == pytest.approx(35.0 / 200.0)
        assert body.apply_rotational_thrust(-1, 2.0) == pytest.approx(-35.0 / 200.0)

    def test_force_uses_base_mass(self, vehicle):
        vehicle.cargo_mass = 100.0
        body = InertialBody(vehicle)
        body.apply_force(100.0, -50.0, 1.0)
        assert body.velocity == Vector3D(1.0, -0.5, 0.0)

    def test_impulse(self, body):
        body.apply_impulse(50.0, 0.0)
        assert body.velocity.x == pytest.approx(0.5)

    def test_burn(self, body):
        delta_v = body.apply_burn(math.pi, 0.5, 2.0)
        assert delta_v == pytest.approx(10.0)
        assert body.velocity == Vector3D(-10.0, 0.0, 0.0)


# =============================================================================
# UPDATE
# =============================================================================

class TestUpdate:
    """Integration, dampening and caps."""

    def test_passive_decay(self, vehicle):
        vehicle.vx = 100.0
        body = InertialBody(vehicle)
        for _ in range(50):
            body.update(1.0)
        assert body.speed == pytest.approx(100.0 * 0.999 ** 50)

    def test_position_integrates_velocity(self, vehicle):
        vehicle.vx = 10.0
        body = InertialBody(vehicle)
        state = body.update(1.0)
        assert state.x == pytest.approx(10.0 * 0.999)

    def test_inertial_dampening(self, vehicle):
        vehicle.vx = 100.0
        vehicle.rotation_vel = 1.0
        body = InertialBody(vehicle)
        assert body.toggle_inertial_dampening() is True
        state = body.update(0.1)
        assert state.vx == pytest.approx(85.0)
        assert state.rotation_vel == pytest.approx(0.7)
        assert body.toggle_inertial_dampening() is False

    def test_speed_capped(self, vehicle):
        vehicle.vx, vehicle.vy = 3000.0, 4000.0
        body = InertialBody(vehicle)
        state = body.update(1 / 60)
        assert state.speed == pytest.approx(1200.0)
        assert state.vy / state.vx == pytest.approx(4.0 / 3.0)

    @pytest.mark.parametrize("spin,expected", [(10.0, 6.0), (-10.0, -6.0)])
    def test_spin_capped(self, vehicle, spin, expected):
        vehicle.rotation_vel = spin
        state = InertialBody(vehicle).update(1 / 60)
        assert state.rotation_vel == expected

    def test_caps_hold_under_sustained_thrust(self, body):
        for _ in range(2000):
            body.apply_thrust("forward", 1.0)
            body.apply_rotational_thrust(1, 1.0)
            state = body.update(1 / 60)
            assert state.speed <= 1200.0 + 1e-9
            assert abs(state.rotation_vel) <= 6.0

    def test_rotation_normalized(self, vehicle):
        vehicle.rotation = TWO_PI - 0.01
        vehicle.rotation_vel = 5.0
        state = InertialBody(vehicle).update(0.1)
        assert 0.0 <= state.rotation < TWO_PI

    def test_writes_back_to_vehicle(self, vehicle, body):
        body.apply_thrust("forward", 1.0)
        state = body.update(0.5)
        assert (vehicle.x, vehicle.y) == (state.x, state.y)
        assert (vehicle.vx, vehicle.vy) == (state.vx, state.vy)
        assert vehicle.rotation == state.rotation
        assert vehicle.rotation_vel == state.rotation_vel

    def test_custom_caps(self, vehicle):
        vehicle.vx = 500.0
        body = InertialBody(vehicle, InertialConfig(max_speed=100.0))
        assert body.update(1.0).speed == pytest.approx(100.0)


# =============================================================================
# QUERIES AND CONTROLS
# =============================================================================

class TestQueries:
    def test_relative_velocity(self, vehicle):
        vehicle.vx, vehicle.vy = 3.0, 4.0
        relative = InertialBody(vehicle).relative_velocity()
        assert relative.forward == pytest.approx(3.0)
        assert relative.lateral == pytest.approx(4.0)

    def test_relative_velocity_at_rest(self, body):
        relative = body.relative_velocity()
        assert (relative.forward, relative.lateral) == (0.0, 0.0)

    def test_circular_orbit_velocity(self, body):
        velocity = body.circular_orbit_velocity(Vector3D(100.0, 0.0, 0.0), 1000.0, 2.0)
        assert velocity == Vector3D(0.0, math.sqrt(20.0), 0.0)

    def test_circular_orbit_velocity_zero_distance(self, body):
        assert body.circular_orbit_velocity(Vector3D.zero(), 1000.0, 2.0) == Vector3D.zero()

    def test_match_velocity(self, body):
        body.match_velocity(100.0, -50.0, strength=0.5)
        assert body.velocity == Vector3D(50.0, -25.0, 0.0)

    def test_kill_velocity(self, body):
        body.apply_thrust("forward", 1.0)
        body.apply_rotational_thrust(1, 1.0)
        body.kill_velocity()
        assert body.speed == 0.0
        assert body.angular_velocity == 0.0

    @pytest.mark.parametrize("requested,expected", [(200.0, 200.0), (900.0, 500.0), (-5.0, 0.0)])
    def test_set_cargo_mass(self, vehicle, body, requested, expected):
        assert body.set_cargo_mass(requested) == expected
        assert vehicle.cargo_mass == expected
        assert body.effective_mass == 100.0 + expected

    def test_spawn_cargo_clamped_on_record(self):
        record = VehicleRecord(mass=100.0, cargo_mass=900.0)
        body = InertialBody(record)
        assert body.cargo_mass == 500.0
        assert record.cargo_mass == 500.0
        assert body.effective_mass == 600.0

    def test_flight_info(self, vehicle):
        vehicle.vx = 12.7
        vehicle.hull = 50.0
        vehicle.cargo_mass = 20.0
        info = InertialBody(vehicle).flight_info()
        assert info.speed == 12
        assert info.forward_speed == 12
        assert info.effective_mass == 120.0
        assert info.thruster_efficiency_percent == 75
        assert info.damage_multiplier == 0.85

    def test_default_mass_from_config(self):
        body = InertialBody(VehicleRecord(), InertialConfig(mass=250.0))
        assert body.mass == 250.0
        assert body.moment_of_inertia == 500.0


class TestSerialization:
    def test_round_trip_continues_identically(self, vehicle, body):
        body.apply_thrust("forward", 1.0)
        body.apply_rotational_thrust(1, 1.0)
        body.update(0.3)

        restored = InertialBody.from_dict(body.to_dict())
        for _ in range(10):
            a = body.update(0.1)
            b = restored.update(0.1)
            assert a == b
