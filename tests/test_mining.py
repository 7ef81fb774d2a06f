"""Tests for fractional mining, depletion and same-tick visibility."""

import pytest

from conftest import make_ctx, make_probe, make_system, make_world
from probesim.entities.probe import ResourceType
from probesim.state_machine import ProbeState
from probesim.states.mining import process_mining


def test_fractional_buffer_transfers_whole_units(config):
    """Rate 1.0/s for 3.5 s moves 3 units and keeps 0.5 in the buffer."""
    system = make_system("sys-a", metal=1000, abundance=50)
    probe = make_probe(system=system, state=ProbeState.MINING_METAL, mining_speed=1.0)
    world = make_world([system], [probe])

    update = process_mining(probe, make_ctx(world, config, delta=3.5), 3.5)

    assert update.probe.metal == 3
    assert update.probe.mining_buffer == pytest.approx(0.5)
    assert update.probe.progress == pytest.approx(50.0)
    assert update.probe.mining_batch_progress == 3
    assert system.remaining(ResourceType.METAL) == 997


def test_small_steps_accumulate(config):
    system = make_system("sys-a", metal=1000, abundance=50)
    probe = make_probe(system=system, state=ProbeState.MINING_METAL)
    world = make_world([system], [probe])

    for _ in range(7):
        process_mining(probe, make_ctx(world, config, delta=0.5), 0.5)

    assert probe.metal == 3
    assert probe.mining_buffer == pytest.approx(0.5)
    assert system.remaining(ResourceType.METAL) == 997


def test_transfer_clamped_to_remaining_yield(config):
    system = make_system("sys-a", metal=2, abundance=100)
    probe = make_probe(system=system, state=ProbeState.MINING_METAL, mining_speed=5.0)
    world = make_world([system], [probe])
    ctx = make_ctx(world, config, delta=1.0)

    process_mining(probe, ctx, 1.0)

    assert probe.metal == 2
    assert system.remaining(ResourceType.METAL) == 0
    assert probe.state is ProbeState.IDLE
    assert any("Metal depleted" in m for m in ctx.effects.log_messages)


def test_depleted_at_start_goes_idle(config):
    system = make_system("sys-a", plutonium=0)
    probe = make_probe(system=system, state=ProbeState.MINING_PLUTONIUM)
    world = make_world([system], [probe])

    process_mining(probe, make_ctx(world, config), 1.0)

    assert probe.state is ProbeState.IDLE
    assert probe.fuel == 0


def test_two_probes_same_system_see_each_others_extraction(config):
    """The second probe's clamp reflects the yield the first one just took."""
    system = make_system("sys-a", metal=5, abundance=100)
    first = make_probe("probe-1", system=system, state=ProbeState.MINING_METAL, mining_speed=2.0)
    second = make_probe("probe-2", system=system, state=ProbeState.MINING_METAL, mining_speed=2.0)
    world = make_world([system], [first, second])
    ctx = make_ctx(world, config, delta=1.0)

    process_mining(first, ctx, 1.0)
    ctx.begin_step()
    process_mining(second, ctx, 1.0)

    assert first.metal == 4
    assert second.metal == 1
    assert first.metal + second.metal == 5
    assert system.remaining(ResourceType.METAL) == 0
    assert second.state is ProbeState.IDLE


def test_two_probes_same_tick_through_engine(config):
    from probesim.simulation.engine import SimulationEngine

    system = make_system("sys-a", metal=5, abundance=100, visited=True, analyzed=True)
    first = make_probe("probe-1", system=system, state=ProbeState.MINING_METAL, mining_speed=2.0)
    second = make_probe("probe-2", system=system, state=ProbeState.MINING_METAL, mining_speed=2.0)
    engine = SimulationEngine(config, world=make_world([system], [first, second]))

    engine.tick(1.0)

    world = engine.world
    assert world.get_probe("probe-1").metal == 4
    assert world.get_probe("probe-2").metal == 1
    assert world.systems["sys-a"].remaining(ResourceType.METAL) == 0
    # the committed world is a new copy; the inputs were not mutated
    assert first.metal == 0
    assert system.remaining(ResourceType.METAL) == 5
