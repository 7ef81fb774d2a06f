"""Tests for TRAVELING and EXPLORING."""

import random

import pytest

from conftest import make_ctx, make_probe, make_system, make_world
from probesim.math_utils import Vector2
from probesim.simulation.context import TickContext
from probesim.state_machine import ProbeState
from probesim.states.exploring import process_exploring
from probesim.states.traveling import process_traveling
from probesim.world import LOG_ADVISORY, LOG_AUTONOMY


def _traveler(origin, target, **kwargs):
    probe = make_probe(system=origin, state=ProbeState.TRAVELING, **kwargs)
    probe.target_system_id = target.id
    return probe


def _explorer(x, y, heading, plutonium, **kwargs):
    probe = make_probe(position=Vector2(x, y), state=ProbeState.EXPLORING, plutonium=plutonium, **kwargs)
    probe.heading = heading
    return probe


class _FullSectorRandom(random.Random):
    """Always rolls the maximum system count for a new sector."""

    def randint(self, a, b):
        return b


class TestTraveling:
    def test_progress_and_arrival(self, config):
        origin = make_system("sys-a", 1000, 1000, visited=True)
        target = make_system("sys-b", 1100, 1000)
        probe = _traveler(origin, target)
        world = make_world([origin, target], [probe])

        process_traveling(probe, make_ctx(world, config, delta=5.0), 5.0)
        assert probe.state is ProbeState.TRAVELING
        assert probe.progress == pytest.approx(50.0)
        assert probe.position == Vector2(1050, 1000)
        assert probe.location_id == "sys-a"

        process_traveling(probe, make_ctx(world, config, delta=5.0), 5.0)
        assert probe.state is ProbeState.IDLE
        assert probe.location_id == "sys-b"
        assert probe.target_system_id is None
        assert probe.position == Vector2(1100, 1000)
        assert target.visited and target.discovered

    def test_solar_sail_is_slow(self, config):
        origin = make_system("sys-a", 1000, 1000)
        target = make_system("sys-b", 1100, 1000)
        probe = _traveler(origin, target)
        probe.is_solar_sailing = True
        world = make_world([origin, target], [probe])

        process_traveling(probe, make_ctx(world, config, delta=10.0), 10.0)

        assert probe.progress == pytest.approx(5.0)
        assert probe.position == Vector2(1005, 1000)

    def test_arrival_clears_solar_sail(self, config):
        origin = make_system("sys-a", 1000, 1000)
        target = make_system("sys-b", 1001, 1000)
        probe = _traveler(origin, target)
        probe.is_solar_sailing = True
        world = make_world([origin, target], [probe])

        process_traveling(probe, make_ctx(world, config, delta=10.0), 10.0)

        assert probe.state is ProbeState.IDLE
        assert probe.is_solar_sailing is False

    def test_zero_length_route_arrives_immediately(self, config):
        origin = make_system("sys-a", 1000, 1000)
        twin = make_system("sys-b", 1000, 1000)
        probe = _traveler(origin, twin)
        world = make_world([origin, twin], [probe])

        process_traveling(probe, make_ctx(world, config, delta=0.0), 0.0)

        assert probe.state is ProbeState.IDLE
        assert probe.location_id == "sys-b"

    def test_passive_scan_along_route(self, config):
        origin = make_system("sys-a", 1000, 1000)
        target = make_system("sys-b", 1100, 1000)
        hidden = make_system("sys-hidden", 1050, 1100, discovered=False)
        probe = _traveler(origin, target)
        world = make_world([origin, target, hidden], [probe])
        ctx = make_ctx(world, config, delta=5.0)

        process_traveling(probe, ctx, 5.0)

        assert hidden.discovered
        assert any("Proximity Alert" in m for m in ctx.effects.log_messages)

    def test_missing_target_goes_idle_with_advisory(self, config):
        origin = make_system("sys-a", 1000, 1000)
        probe = make_probe(system=origin, state=ProbeState.TRAVELING)
        probe.target_system_id = "sys-gone"
        world = make_world([origin], [probe])

        process_traveling(probe, make_ctx(world, config), 1.0)

        assert probe.state is ProbeState.IDLE
        assert probe.target_system_id is None
        advisory = world.log.by_category(LOG_ADVISORY)
        assert advisory and advisory[-1].level == "WARNING"

    def test_crossing_into_uncharted_sector_generates_it(self, config):
        origin = make_system("sys-a", 1900, 1500, visited=True)
        target = make_system("sys-b", 2100, 1500)
        probe = _traveler(origin, target)
        world = make_world([origin, target], [probe])
        world.generated_sectors.discard((2, 1))
        ctx = TickContext(world, config, _FullSectorRandom(7), 12.0)
        ctx.begin_step()

        process_traveling(probe, ctx, 12.0)

        assert probe.state is ProbeState.TRAVELING
        assert probe.position.x == pytest.approx(2020)
        assert (2, 1) in world.generated_sectors
        new_ids = ctx.effects.new_system_ids
        assert len(new_ids) == config.universe.max_systems_per_sector
        for system_id in new_ids:
            assert system_id.startswith("sys-2-1-")
            assert 2000 <= world.systems[system_id].position.x < 3000


class TestExploring:
    def test_fuelless_probe_drifts_on_solar_sail(self, config):
        """No fuel: 10 s at flight speed 1 covers 10 * 0.05 * 10 = 5 units."""
        probe = _explorer(5500, 5500, heading=0.0, plutonium=0.0)
        world = make_world([], [probe])

        process_exploring(probe, make_ctx(world, config, delta=10.0), 10.0)

        assert probe.position == Vector2(5505, 5500)
        assert probe.fuel == 0.0
        assert probe.is_solar_sailing is True
        assert probe.state is ProbeState.EXPLORING

    def test_burn_proportional_to_distance(self, config):
        probe = _explorer(5500, 5500, heading=90.0, plutonium=50.0)
        world = make_world([], [probe])

        process_exploring(probe, make_ctx(world, config, delta=2.0), 2.0)

        assert probe.position == Vector2(5500, 5520)
        assert probe.fuel == pytest.approx(46.0)
        assert probe.is_solar_sailing is False

    def test_fuel_clamps_at_zero(self, config):
        probe = _explorer(5500, 5500, heading=0.0, plutonium=0.5)
        world = make_world([], [probe])

        process_exploring(probe, make_ctx(world, config), 1.0)

        # full speed this step, since fuel was available when it started
        assert probe.position == Vector2(5510, 5500)
        assert probe.fuel == 0.0
        assert probe.is_solar_sailing is True

    def test_docks_at_system_in_range(self, config):
        system = make_system("sys-dock", 5508, 5500, discovered=False)
        probe = _explorer(5500, 5500, heading=0.0, plutonium=100.0)
        world = make_world([system], [probe])

        process_exploring(probe, make_ctx(world, config), 1.0)

        assert probe.state is ProbeState.IDLE
        assert probe.location_id == "sys-dock"
        assert probe.heading is None
        assert probe.is_docked
        assert probe.position == system.position
        assert system.visited and system.discovered

    def test_entering_new_sector_generates_it(self, config):
        probe = _explorer(999, 500, heading=0.0, plutonium=100.0)
        world = make_world([], [probe])
        world.generated_sectors.discard((1, 0))

        process_exploring(probe, make_ctx(world, config), 1.0)

        assert (1, 0) in world.generated_sectors

    def test_auto_divert_toward_unvisited_system(self, config):
        target = make_system("sys-target", 5000, 5200)
        probe = _explorer(5000, 5000, heading=0.0, plutonium=100.0, autonomy_level=1, autonomy=True)
        world = make_world([target], [probe])
        ctx = make_ctx(world, config)

        process_exploring(probe, ctx, 1.0)

        expected = probe.position.heading_to(target.position)
        assert probe.heading == pytest.approx(expected)
        assert 90.0 < probe.heading < 95.0
        # 2 units of travel burn plus the turn
        assert probe.fuel == pytest.approx(100.0 - 2.0 - expected * 0.2)
        assert probe.last_diversion_check == ctx.now
        assert world.log.by_category(LOG_AUTONOMY)

    def test_auto_divert_ignores_targets_beyond_scan_range(self, config):
        target = make_system("sys-far", 5000, 5400)
        probe = _explorer(5000, 5000, heading=0.0, plutonium=500.0, autonomy_level=1, autonomy=True)
        world = make_world([target], [probe])

        process_exploring(probe, make_ctx(world, config), 1.0)

        assert probe.heading == 0.0

    def test_auto_divert_requires_autonomy(self, config):
        target = make_system("sys-target", 5000, 5200)
        probe = _explorer(5000, 5000, heading=0.0, plutonium=500.0)
        world = make_world([target], [probe])

        process_exploring(probe, make_ctx(world, config), 1.0)

        assert probe.heading == 0.0

    def test_safety_override_turns_back_when_fuel_is_low(self, config):
        home = make_system("sys-home", 4000, 5000, visited=True)
        probe = _explorer(5000, 5000, heading=0.0, plutonium=10.0)
        world = make_world([home], [probe])

        process_exploring(probe, make_ctx(world, config), 1.0)

        assert probe.heading == pytest.approx(180.0)
        # turn cost 36 exceeds the 8 units left: clamped, solar sail engaged
        assert probe.fuel == 0.0
        assert probe.is_solar_sailing is True
        warning = world.log.by_category(LOG_ADVISORY)[-1]
        assert warning.level == "WARNING"
        assert "CRITICAL FUEL" in warning.message

    def test_safety_check_is_throttled(self, config):
        home = make_system("sys-home", 1000, 5000, visited=True)
        probe = _explorer(5000, 5000, heading=0.0, plutonium=100.0)
        world = make_world([home], [probe])

        process_exploring(probe, make_ctx(world, config, delta=0.5), 0.5)
        assert probe.heading == pytest.approx(180.0)
        assert probe.last_safety_check == 0.5

        probe.heading = 0.0
        process_exploring(probe, make_ctx(world, config, delta=0.5), 0.5)
        assert probe.heading == 0.0

        world.clock = 1.0
        process_exploring(probe, make_ctx(world, config, delta=0.5), 0.5)
        assert probe.heading == pytest.approx(180.0)
