"""Pytest configuration and fixtures for probe simulation tests."""

import random

import pytest

from probesim.config.simulation_config import SimulationConfig
from probesim.entities.probe import Probe, ProbeStats, ResourceType
from probesim.entities.solar_system import SolarSystem
from probesim.math_utils import Vector2
from probesim.simulation.context import TickContext
from probesim.state_machine import ProbeState
from probesim.world import World


@pytest.fixture
def seeded_rng():
    """Provide a deterministic RNG for tests."""
    return random.Random(42)


@pytest.fixture
def config():
    return SimulationConfig(seed=42)


@pytest.fixture
def engine(config):
    """Setup a simulation engine on the standard starting map."""
    from probesim.simulation.engine import SimulationEngine

    return SimulationEngine(config)


@pytest.fixture
def world(engine):
    return engine.world


def make_system(
    system_id,
    x=1000.0,
    y=1000.0,
    metal=1000.0,
    plutonium=500.0,
    abundance=50.0,
    science=100.0,
    discovered=True,
    visited=False,
    analyzed=False,
):
    return SolarSystem(
        id=system_id,
        name=system_id.replace("sys-", "").title(),
        position=Vector2(x, y),
        resources={ResourceType.METAL: abundance, ResourceType.PLUTONIUM: abundance},
        resource_yield={ResourceType.METAL: metal, ResourceType.PLUTONIUM: plutonium},
        science_total=science,
        science_remaining=science,
        discovered=discovered,
        visited=visited,
        analyzed=analyzed,
    )


def make_probe(
    probe_id="probe-1",
    system=None,
    position=None,
    state=ProbeState.IDLE,
    metal=0.0,
    plutonium=0.0,
    autonomy_level=0,
    autonomy=False,
    **stats,
):
    if position is None:
        position = system.position.copy() if system is not None else Vector2(1000, 1000)
    location = system.id if system is not None else None
    return Probe(
        id=probe_id,
        name=probe_id.title(),
        model="Mark I",
        position=position,
        origin_system_id=location,
        location_id=location,
        state=state,
        inventory={ResourceType.METAL: metal, ResourceType.PLUTONIUM: plutonium},
        stats=ProbeStats(autonomy_level=autonomy_level, **stats),
        last_scanned_system_id=location,
        is_autonomy_enabled=autonomy,
    )


def make_world(systems=(), probes=()):
    """World with every sector near the origin already charted.

    Keeps the generator (and its RNG draws) out of tests that do not
    exercise it.
    """
    return World(
        probes=list(probes),
        systems={s.id: s for s in systems},
        generated_sectors={(sx, sy) for sx in range(-5, 8) for sy in range(-5, 8)},
    )


def make_ctx(world, config, delta=1.0, seed=7):
    ctx = TickContext(world, config, random.Random(seed), delta)
    ctx.begin_step()
    return ctx
