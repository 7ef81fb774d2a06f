"""Tests for lazy sector generation and the starting map."""

import random

from conftest import make_ctx, make_world
from probesim.config.simulation_config import UniverseConfig
from probesim.entities.probe import ResourceType
from probesim.math_utils import Vector2
from probesim.universe import create_initial_world, generate_systems_for_sector, sector_key
from probesim.universe.sectors import richness_factor

ORIGIN = Vector2(1000, 1000)


def test_sector_key_floors_negative_coordinates():
    assert sector_key(Vector2(1500, 999.9), 1000) == (1, 0)
    assert sector_key(Vector2(-0.5, -1000), 1000) == (-1, -1)


def test_generation_is_deterministic_for_a_seed():
    config = UniverseConfig()
    first = generate_systems_for_sector((3, -2), random.Random(9), config, ORIGIN)
    second = generate_systems_for_sector((3, -2), random.Random(9), config, ORIGIN)

    assert [s.id for s in first] == [s.id for s in second]
    assert [s.position for s in first] == [s.position for s in second]
    assert [s.resource_yield for s in first] == [s.resource_yield for s in second]


def test_generated_systems_respect_bounds():
    config = UniverseConfig()
    rng = random.Random(1234)
    for sx in range(-3, 4):
        systems = generate_systems_for_sector((sx, 5), rng, config, ORIGIN)
        assert 0 <= len(systems) <= config.max_systems_per_sector
        for index, system in enumerate(systems):
            assert system.id == f"sys-{sx}-5-{index}"
            assert sector_key(system.position, config.sector_size) == (sx, 5)
            assert sx * 1000 + 50 <= system.position.x < sx * 1000 + 950
            assert 5 <= system.abundance(ResourceType.METAL) <= 100
            assert system.remaining(ResourceType.METAL) > 0
            assert system.science_remaining == system.science_total
            assert not (system.discovered or system.visited or system.analyzed)


def test_richness_is_capped():
    config = UniverseConfig()
    assert richness_factor(2500, config) == 0.5
    assert richness_factor(50_000, config) == config.richness_factor_cap


class TestEnsureSector:
    def test_sector_generated_once(self, config):
        world = make_world()
        world.generated_sectors.clear()
        ctx = make_ctx(world, config)
        position = Vector2(4321, 4321)

        first = ctx.ensure_sector(position)
        count = len(world.systems)
        second = ctx.ensure_sector(position)

        assert sector_key(position, 1000) in world.generated_sectors
        assert len(first) == count
        assert second == []
        assert len(world.systems) == count

    def test_known_sector_consumes_no_randomness(self, config):
        world = make_world()
        ctx = make_ctx(world, config)
        state = ctx.rng.getstate()

        assert ctx.ensure_sector(Vector2(1200, 1200)) == []
        assert ctx.rng.getstate() == state


class TestInitialWorld:
    def test_starting_map(self, config):
        world = create_initial_world(config)

        assert list(world.systems) == ["sys-earth", "sys-neighbor-1", "sys-neighbor-2"]
        earth = world.systems["sys-earth"]
        assert earth.position == Vector2(1000, 1000)
        assert earth.discovered and earth.visited and earth.analyzed
        assert all(s.discovered for s in world.systems.values())
        assert sector_key(earth.position, 1000) in world.generated_sectors

    def test_genesis_probe(self, config):
        world = create_initial_world(config)

        assert len(world.probes) == 1
        genesis = world.probes[0]
        assert genesis.name == "Genesis-1"
        assert genesis.location_id == "sys-earth"
        assert genesis.origin_system_id == "sys-earth"
        assert genesis.metal == 100.0
        assert genesis.fuel == 100.0
        assert world.lineage.get(genesis.id).generation == 0

    def test_stock_blueprints(self, config):
        world = create_initial_world(config)
        assert set(world.blueprints) == {"bp-mark1", "bp-mark2", "bp-mark3", "bp-vonneumann"}
