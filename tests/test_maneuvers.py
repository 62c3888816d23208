"""
Tests for the maneuver planner.

Tests cover:
1. Hohmann transfers
2. Prograde, retrograde and insertion burns
3. Gravity assist and aerobraking heuristics
4. Lagrange points and station keeping
"""

import math

import pytest

from orbital_engine.bodies import CelestialBody
from orbital_engine.inertial import InertialBody, VehicleRecord
from orbital_engine.maneuvers import ManeuverPlanner
from orbital_engine.vector import Vector3D


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def planner():
    return ManeuverPlanner(gravitational_constant=2.0)


def make_vehicle(x=0.0, y=0.0, vx=0.0, vy=0.0, **kwargs):
    return InertialBody(VehicleRecord(x=x, y=y, vx=vx, vy=vy, mass=100.0, **kwargs))


@pytest.fixture
def body_position():
    return Vector3D(100.0, 0.0, 0.0)


# =============================================================================
# TRANSFERS
# =============================================================================

class TestHohmannTransfer:
    def test_raising_orbit(self, planner):
        transfer = planner.calculate_hohmann_transfer(1000.0, 2000.0, 1000.0)
        mu = 2000.0
        a = 1500.0
        dv1 = math.sqrt(mu * (2 / 1000.0 - 1 / a)) - math.sqrt(mu / 1000.0)
        dv2 = math.sqrt(mu / 2000.0) - math.sqrt(mu * (2 / 2000.0 - 1 / a))
        assert transfer.delta_v1 == pytest.approx(dv1)
        assert transfer.delta_v2 == pytest.approx(dv2)
        assert transfer.total_delta_v == pytest.approx(dv1 + dv2)
        assert transfer.transfer_time == pytest.approx(math.pi * math.sqrt(a ** 3 / mu))
        assert transfer.expanding

    def test_lowering_orbit_is_symmetric(self, planner):
        up = planner.calculate_hohmann_transfer(1000.0, 2000.0, 1000.0)
        down = planner.calculate_hohmann_transfer(2000.0, 1000.0, 1000.0)
        assert down.total_delta_v == pytest.approx(up.total_delta_v)
        assert down.delta_v1 == pytest.approx(up.delta_v2)
        assert not down.expanding

    def test_same_radius_returns_none(self, planner):
        assert planner.calculate_hohmann_transfer(1500.0, 1500.0, 1000.0) is None

    @pytest.mark.parametrize("r1,r2", [(0.0, 100.0), (100.0, -5.0)])
    def test_non_positive_radius_returns_none(self, planner, r1, r2):
        assert planner.calculate_hohmann_transfer(r1, r2, 1000.0) is None

    def test_orbital_velocity(self, planner):
        assert planner.calculate_orbital_velocity(1000.0, 1000.0, 1000.0) == pytest.approx(math.sqrt(2.0))

    def test_invalid_g(self):
        with pytest.raises(ValueError):
            ManeuverPlanner(gravitational_constant=0.0)


# =============================================================================
# BURNS
# =============================================================================

class TestBurns:
    def test_prograde(self, planner, body_position):
        vehicle = make_vehicle()
        result = planner.execute_prograde_burn(vehicle, body_position, 1000.0, 1.0, 1.0)
        assert result.success
        assert result.direction == "prograde"
        assert result.angle == pytest.approx(math.pi / 2)
        assert result.delta_v == pytest.approx(10.0)
        assert vehicle.velocity == Vector3D(0.0, 10.0, 0.0)

    def test_retrograde(self, planner, body_position):
        vehicle = make_vehicle()
        result = planner.execute_retrograde_burn(vehicle, body_position, 1000.0, 0.5, 1.0)
        assert result.direction == "retrograde"
        assert vehicle.velocity == Vector3D(0.0, -5.0, 0.0)

    def test_zero_distance_fails(self, planner):
        vehicle = make_vehicle(vx=3.0)
        result = planner.execute_prograde_burn(vehicle, Vector3D.zero(), 1000.0, 1.0, 1.0)
        assert not result.success
        assert result.delta_v == 0.0
        assert vehicle.velocity == Vector3D(3.0, 0.0, 0.0)

    def test_damage_reduces_burn(self, planner, body_position):
        vehicle = make_vehicle(hull=0.0)
        result = planner.execute_prograde_burn(vehicle, body_position, 1000.0, 1.0, 1.0)
        assert result.delta_v == pytest.approx(5.0)


class TestOrbitalInsertion:
    def test_plan(self, planner, body_position):
        vehicle = make_vehicle()
        plan = planner.calculate_orbital_insertion(vehicle, body_position, 1000.0)
        assert plan.delta_v == pytest.approx(math.sqrt(20.0))
        assert plan.angle == pytest.approx(math.pi / 2)
        assert plan.duration == pytest.approx(math.sqrt(20.0) / 10.0)
        assert plan.current_radius == pytest.approx(100.0)
        assert plan.required_velocity == Vector3D(0.0, math.sqrt(20.0), 0.0)

    def test_partial_burn(self, planner, body_position):
        vehicle = make_vehicle()
        result = planner.execute_orbital_insertion(vehicle, body_position, 1000.0, 1.0, 0.1)
        assert result.progress == pytest.approx(1.0 / math.sqrt(20.0))
        assert result.remaining_delta_v == pytest.approx(math.sqrt(20.0) - 1.0)

    def test_never_overshoots(self, planner, body_position):
        vehicle = make_vehicle()
        result = planner.execute_orbital_insertion(vehicle, body_position, 1000.0, 1.0, 1.0)
        assert result.progress == 1.0
        assert result.remaining_delta_v == pytest.approx(0.0)
        assert vehicle.velocity == Vector3D(0.0, math.sqrt(20.0), 0.0)

    def test_already_circular(self, planner, body_position):
        vehicle = make_vehicle()
        vehicle.velocity = vehicle.circular_orbit_velocity(body_position, 1000.0, 2.0)
        result = planner.execute_orbital_insertion(vehicle, body_position, 1000.0, 1.0, 1.0)
        assert result.progress == 1.0
        assert result.remaining_delta_v == 0.0

    def test_converges_over_ticks(self, planner, body_position):
        vehicle = make_vehicle(vx=-3.0)
        for _ in range(20):
            result = planner.execute_orbital_insertion(vehicle, body_position, 1000.0, 1.0, 0.1)
        assert result.remaining_delta_v == pytest.approx(0.0, abs=1e-9)


# =============================================================================
# ENVIRONMENT-ASSISTED
# =============================================================================

class TestGravityAssist:
    def test_close_pass_deflects_and_boosts(self, planner, body_position):
        vehicle = make_vehicle(vx=10.0)
        result = planner.apply_gravity_assist(vehicle, body_position, Vector3D.zero(), 100.0)
        deflection = 0.9
        boost = 1 + deflection * 0.3
        exit_angle = deflection * math.pi / 2

        assert result.success
        assert result.angle == pytest.approx(exit_angle)
        assert result.delta_v == pytest.approx(10.0 * (boost - 1))
        assert vehicle.velocity == Vector3D.from_polar(exit_angle, 10.0 * boost)

    def test_body_velocity_added_back(self, planner, body_position):
        vehicle = make_vehicle(vx=15.0)
        planner.apply_gravity_assist(vehicle, body_position, Vector3D(5.0, 0.0, 0.0), 100.0)
        exit_angle = 0.9 * math.pi / 2
        expected = Vector3D(5.0, 0.0, 0.0) + Vector3D.from_polar(exit_angle, 10.0 * 1.27)
        assert vehicle.velocity == expected

    def test_distant_pass_has_no_effect(self, planner):
        vehicle = make_vehicle(vx=10.0)
        result = planner.apply_gravity_assist(vehicle, Vector3D(950.0, 0.0, 0.0), Vector3D.zero(), 100.0)
        assert not result.success
        assert (result.delta_v, result.angle) == (0.0, 0.0)
        assert vehicle.velocity == Vector3D(10.0, 0.0, 0.0)


class TestAerobraking:
    def test_above_atmosphere_no_effect(self, planner):
        vehicle = make_vehicle(x=200.0, vx=10.0)
        result = planner.apply_aerobraking(vehicle, Vector3D.zero(), 100.0, 50.0, 1.0)
        assert result.in_atmosphere is False
        assert result.drag_force == 0.0
        assert vehicle.velocity == Vector3D(10.0, 0.0, 0.0)

    def test_drag_inside_atmosphere(self, planner):
        vehicle = make_vehicle(x=120.0, vx=10.0)
        result = planner.apply_aerobraking(vehicle, Vector3D.zero(), 100.0, 50.0, 0.1)
        density = math.exp(-2.0)
        drag = 0.5 * density * 100.0 * 0.5 * 10.0
        assert result.in_atmosphere
        assert result.altitude == pytest.approx(20.0)
        assert result.density == pytest.approx(density)
        assert result.drag_force == pytest.approx(drag)
        assert result.heat_generation == pytest.approx(drag * 10.0 * 0.01)
        assert vehicle.speed == pytest.approx(10.0 - drag / 100.0 * 0.1)

    def test_drag_never_reverses_velocity(self, planner):
        vehicle = make_vehicle(x=100.0, vx=100.0)
        result = planner.apply_aerobraking(vehicle, Vector3D.zero(), 100.0, 50.0, 1.0)
        assert result.delta_v == pytest.approx(100.0)
        assert vehicle.velocity.x >= 0.0
        assert vehicle.speed == pytest.approx(0.0)

    def test_airless_body(self, planner):
        vehicle = make_vehicle(x=100.0, vx=10.0)
        result = planner.apply_aerobraking(vehicle, Vector3D.zero(), 100.0, 0.0, 1.0)
        assert not result.in_atmosphere
        assert vehicle.speed == pytest.approx(10.0)

    def test_below_surface_no_effect(self, planner):
        vehicle = make_vehicle(vx=10.0)
        result = planner.apply_aerobraking(vehicle, Vector3D.zero(), 2000.0, 10.0, 1.0)
        assert not result.in_atmosphere
        assert result.altitude == pytest.approx(-2000.0)
        assert result.drag_force == 0.0
        assert vehicle.velocity == Vector3D(10.0, 0.0, 0.0)

    def test_at_rest_in_atmosphere(self, planner):
        vehicle = make_vehicle(x=110.0)
        result = planner.apply_aerobraking(vehicle, Vector3D.zero(), 100.0, 50.0, 1.0)
        assert result.in_atmosphere
        assert result.drag_force == 0.0


# =============================================================================
# LAGRANGE POINTS
# =============================================================================

class TestLagrangePoints:
    @pytest.fixture
    def primary(self):
        return CelestialBody(mass=1000.0, name="Sol")

    @pytest.fixture
    def secondary(self):
        return CelestialBody(mass=10.0, name="Terra", x=1000.0)

    def test_positions(self, planner, primary, secondary):
        points = planner.calculate_lagrange_points(primary, secondary)
        mu = 10.0 / 1010.0
        hill = (mu / 3) ** (1 / 3)

        assert points.l1.position == Vector3D(1000.0 * (1 - hill), 0.0, 0.0)
        assert points.l2.position == Vector3D(1000.0 * (1 + hill), 0.0, 0.0)
        assert points.l3.position.x == pytest.approx(-1000.0 * (1 + 5 * mu / 12))
        assert points.l3.position.y == pytest.approx(0.0, abs=1e-9)
        assert points.l4.position == Vector3D(500.0, 1000.0 * math.sin(math.pi / 3), 0.0)
        assert points.l5.position == Vector3D(500.0, -1000.0 * math.sin(math.pi / 3), 0.0)

    def test_stability_flags(self, planner, primary, secondary):
        points = planner.calculate_lagrange_points(primary, secondary)
        assert [p.stable for p in points] == [False, False, False, True, True]
        assert [p.name for p in points] == ["L1", "L2", "L3", "L4", "L5"]
        assert points.get("l4") is points.l4

    def test_unknown_point_name(self, planner, primary, secondary):
        with pytest.raises(KeyError):
            planner.calculate_lagrange_points(primary, secondary).get("L6")

    def test_coincident_bodies(self, planner, primary):
        twin = CelestialBody(mass=10.0, x=0.05)
        assert planner.calculate_lagrange_points(primary, twin) is None

    def test_massless_pair(self, planner):
        a = CelestialBody(mass=0.0)
        b = CelestialBody(mass=0.0, x=100.0)
        assert planner.calculate_lagrange_points(a, b) is None

    def test_nearest_point(self, planner, primary, secondary):
        near = planner.nearest_lagrange_point(Vector3D(510.0, 860.0, 0.0), primary, secondary)
        assert near.name == "L4"
        assert near.stable
        assert near.distance < 20.0

    def test_nothing_nearby(self, planner, primary, secondary):
        assert planner.nearest_lagrange_point(
            Vector3D(0.0, 0.0, 0.0), primary, secondary, threshold=100.0
        ) is None


class TestStationKeeping:
    def test_correction_when_drifting(self, planner):
        vehicle = make_vehicle()
        result = planner.maintain_lagrange_position(vehicle, Vector3D(100.0, 0.0, 0.0))
        assert result.active
        assert result.distance == pytest.approx(100.0)
        assert result.correction_applied == pytest.approx(0.05)
        assert vehicle.velocity == Vector3D(0.05, 0.0, 0.0)

    def test_no_correction_inside_threshold(self, planner):
        vehicle = make_vehicle()
        result = planner.maintain_lagrange_position(vehicle, Vector3D(30.0, 40.0, 0.0))
        assert not result.active
        assert result.distance == pytest.approx(50.0)
        assert vehicle.speed == 0.0
