"""Tests for the autonomy rule ladder, behavior modes and decision commit."""

import pytest

from conftest import make_ctx, make_probe, make_system, make_world
from probesim.autonomy.behaviors import (
    DefaultBehavior,
    FocusExploringBehavior,
    FocusMiningBehavior,
    FocusReplicationBehavior,
    FocusScienceBehavior,
    get_behavior,
)
from probesim.autonomy.decisions import (
    DeployRelay,
    Idle,
    MineMetal,
    MinePlutonium,
    Replicate,
    Research,
    Scan,
    Travel,
)
from probesim.autonomy.engine import AutonomyEngine, is_eligible
from probesim.autonomy.modes import BehaviorMode
from probesim.autonomy.rules import AnalyzeOnArrival, evaluate_rules
from probesim.config.science import RELAY_NETWORK
from probesim.entities.probe import ResourceType
from probesim.replication import ReplicationService
from probesim.simulation.engine import SimulationEngine
from probesim.state_machine import ProbeState
from probesim.world import LOG_AUTONOMY


@pytest.fixture
def autonomy(config):
    return AutonomyEngine(ReplicationService(config))


def _autonomous(system, mode=BehaviorMode.DEFAULT, **kwargs):
    kwargs.setdefault("autonomy_level", 2)
    probe = make_probe("probe-0", system=system, autonomy=True, **kwargs)
    probe.ai_behavior = mode
    return probe


def _analyzed(system_id, x=1000, y=1000, **kwargs):
    return make_system(system_id, x, y, visited=True, analyzed=True, **kwargs)


class TestEligibility:
    def test_requires_level_and_switch(self):
        system = _analyzed("sys-a")
        assert is_eligible(_autonomous(system))
        assert not is_eligible(_autonomous(system, autonomy_level=0))

        disabled = _autonomous(system)
        disabled.is_autonomy_enabled = False
        assert not is_eligible(disabled)

    @pytest.mark.parametrize(
        "state",
        [ProbeState.TRAVELING, ProbeState.REPLICATING, ProbeState.EXPLORING, ProbeState.SCANNING],
    )
    def test_uninterruptible_states(self, state):
        assert not is_eligible(_autonomous(_analyzed("sys-a"), state=state))

    def test_mining_is_interruptible(self):
        assert is_eligible(_autonomous(_analyzed("sys-a"), state=ProbeState.MINING_METAL))


class TestRuleLadder:
    def test_analyze_on_arrival_does_not_end_the_ladder(self, config):
        system = make_system("sys-a", visited=True)
        probe = _autonomous(system)
        ctx = make_ctx(make_world([system], [probe]), config)

        decision = evaluate_rules(probe, system, ctx)

        assert system.analyzed
        assert [(r.kind, r.entity_id) for r in ctx.narrative_requests] == [("lore", "sys-a")]
        assert isinstance(decision, MineMetal)

    def test_analyze_runs_once(self, config):
        system = make_system("sys-a", visited=True)
        probe = _autonomous(system)
        ctx = make_ctx(make_world([system], [probe]), config)
        rule = AnalyzeOnArrival()

        rule.act(probe, system, ctx)
        assert not rule.applies(probe, system, ctx)
        assert len(ctx.narrative_requests) == 1

    def test_sweep_new_system(self, config):
        system = _analyzed("sys-a")
        probe = _autonomous(system)
        probe.last_scanned_system_id = "sys-previous"
        ctx = make_ctx(make_world([system], [probe]), config)

        decision = evaluate_rules(probe, system, ctx)

        assert isinstance(decision, Scan)


class TestDefaultBehavior:
    def test_fresh_probe_mines_metal(self, config):
        system = _analyzed("sys-a")
        probe = _autonomous(system)
        ctx = make_ctx(make_world([system], [probe]), config)

        assert DefaultBehavior().decide(probe, system, ctx) == MineMetal(
            "Default behavior: mining Metal"
        )

    def test_batch_continues_then_switches(self, config):
        system = _analyzed("sys-a")
        probe = _autonomous(system, state=ProbeState.MINING_METAL)
        ctx = make_ctx(make_world([system], [probe]), config)

        probe.mining_batch_progress = 9
        assert isinstance(DefaultBehavior().decide(probe, system, ctx), MineMetal)

        probe.mining_batch_progress = 10
        decision = DefaultBehavior().decide(probe, system, ctx)
        assert isinstance(decision, MinePlutonium)
        assert "batch complete" in decision.reason

    def test_falls_back_to_remaining_resource(self, config):
        system = _analyzed("sys-a", metal=0)
        probe = _autonomous(system)
        ctx = make_ctx(make_world([system], [probe]), config)

        assert isinstance(DefaultBehavior().decide(probe, system, ctx), MinePlutonium)

    def test_idle_when_depleted(self, config):
        system = _analyzed("sys-a", metal=0, plutonium=0)
        probe = _autonomous(system)
        ctx = make_ctx(make_world([system], [probe]), config)

        assert isinstance(DefaultBehavior().decide(probe, system, ctx), Idle)


class TestFocusMining:
    def test_drains_current_system_first(self, config):
        system = _analyzed("sys-a", metal=0)
        probe = _autonomous(system, mode=BehaviorMode.FOCUS_MINING)
        ctx = make_ctx(make_world([system], [probe]), config)

        assert isinstance(FocusMiningBehavior().decide(probe, system, ctx), MinePlutonium)

    def test_travels_to_nearest_rich_system(self, config):
        here = _analyzed("sys-a", metal=0, plutonium=0)
        poor = make_system("sys-poor", 1050, 1000, metal=50, plutonium=10)
        rich = make_system("sys-rich", 1100, 1000, metal=800)
        richer_but_far = make_system("sys-far", 1500, 1000, metal=5000)
        probe = _autonomous(here, plutonium=100)
        ctx = make_ctx(make_world([here, poor, rich, richer_but_far], [probe]), config)

        decision = FocusMiningBehavior().decide(probe, here, ctx)

        assert decision == Travel("sys-rich", "Focus Mining: traveling to Rich (100 LY)")

    def test_idle_when_travel_unaffordable_and_no_fuel_here(self, config):
        here = _analyzed("sys-a", metal=0, plutonium=0)
        rich = make_system("sys-rich", 2000, 1000, metal=800)
        probe = _autonomous(here, plutonium=10)
        ctx = make_ctx(make_world([here, rich], [probe]), config)

        assert isinstance(FocusMiningBehavior().decide(probe, here, ctx), Idle)


class TestFocusExploring:
    def test_scans_new_arrival(self, config):
        here = _analyzed("sys-a")
        probe = _autonomous(here)
        probe.last_scanned_system_id = None
        ctx = make_ctx(make_world([here], [probe]), config)

        assert isinstance(FocusExploringBehavior().decide(probe, here, ctx), Scan)

    def test_visits_unexplored_system(self, config):
        here = _analyzed("sys-a")
        target = make_system("sys-b", 1200, 1000)
        probe = _autonomous(here, plutonium=100)
        ctx = make_ctx(make_world([here, target], [probe]), config)

        decision = FocusExploringBehavior().decide(probe, here, ctx)

        assert isinstance(decision, Travel)
        assert decision.target_id == "sys-b"

    def test_refuels_when_short(self, config):
        here = _analyzed("sys-a")
        target = make_system("sys-b", 1200, 1000)
        probe = _autonomous(here, plutonium=5)
        ctx = make_ctx(make_world([here, target], [probe]), config)

        assert isinstance(FocusExploringBehavior().decide(probe, here, ctx), MinePlutonium)

    def test_scans_when_everything_is_explored(self, config):
        here = _analyzed("sys-a")
        other = _analyzed("sys-b", 1200, 1000)
        probe = _autonomous(here, plutonium=100)
        ctx = make_ctx(make_world([here, other], [probe]), config)

        assert isinstance(FocusExploringBehavior().decide(probe, here, ctx), Scan)


class TestFocusScience:
    def test_researches_local_science(self, config):
        here = _analyzed("sys-a", science=50)
        probe = _autonomous(here)
        ctx = make_ctx(make_world([here], [probe]), config)

        assert isinstance(FocusScienceBehavior().decide(probe, here, ctx), Research)

    def test_deploys_relay_when_unlocked(self, config):
        here = _analyzed("sys-a", science=0)
        probe = _autonomous(here, metal=400)
        world = make_world([here], [probe])
        world.purchased_unlocks.add(RELAY_NETWORK)
        ctx = make_ctx(world, config)

        assert isinstance(FocusScienceBehavior().decide(probe, here, ctx), DeployRelay)

    def test_travels_to_meaningful_science(self, config):
        here = _analyzed("sys-a", science=0)
        trace = make_system("sys-trace", 1050, 1000, science=3)
        rich = make_system("sys-rich", 1300, 1000, science=80)
        probe = _autonomous(here, plutonium=100)
        ctx = make_ctx(make_world([here, trace, rich], [probe]), config)

        decision = FocusScienceBehavior().decide(probe, here, ctx)

        assert isinstance(decision, Travel)
        assert decision.target_id == "sys-rich"


class TestFocusReplication:
    def test_keeps_fuel_for_the_next_hop(self, config):
        """600/350 on board, next stocked system 1000 away: 350 - 300 < 200."""
        here = _analyzed("sys-a", metal=0, plutonium=400)
        stocked = make_system("sys-b", 2000, 1000, metal=5000, plutonium=5000)
        probe = _autonomous(here, mode=BehaviorMode.FOCUS_REPLICATION, metal=600, plutonium=350)
        probe.origin_system_id = "sys-home"
        ctx = make_ctx(make_world([here, stocked], [probe]), config)

        decision = FocusReplicationBehavior().decide(probe, here, ctx)

        assert isinstance(decision, MinePlutonium)
        assert "post-replication travel" in decision.reason

    def test_replicates_with_enough_reserve(self, config):
        here = _analyzed("sys-a", plutonium=400)
        stocked = make_system("sys-b", 2000, 1000, metal=5000, plutonium=5000)
        probe = _autonomous(here, mode=BehaviorMode.FOCUS_REPLICATION, metal=600, plutonium=600)
        probe.origin_system_id = "sys-home"
        ctx = make_ctx(make_world([here, stocked], [probe]), config)

        assert isinstance(FocusReplicationBehavior().decide(probe, here, ctx), Replicate)

    def test_cooldown(self, config):
        here = _analyzed("sys-a")
        probe = _autonomous(here, mode=BehaviorMode.FOCUS_REPLICATION, metal=600, plutonium=600)
        world = make_world([here], [probe])
        world.clock = 100.0
        ctx = make_ctx(world, config, delta=1.0)
        probe.last_replication_time = 96.0

        decision = FocusReplicationBehavior().decide(probe, here, ctx)

        assert decision == Idle("Focus Replication: waiting for cooldown (15s)")

    def test_mines_missing_metal(self, config):
        here = _analyzed("sys-a")
        probe = _autonomous(here, mode=BehaviorMode.FOCUS_REPLICATION, metal=100, plutonium=600)
        ctx = make_ctx(make_world([here], [probe]), config)

        assert isinstance(FocusReplicationBehavior().decide(probe, here, ctx), MineMetal)

    def test_colonized_system_sends_stocked_probe_onward(self, config):
        here = _analyzed("sys-a", plutonium=400)
        stocked = make_system("sys-b", 1200, 1000, metal=5000, plutonium=5000)
        probe = _autonomous(here, mode=BehaviorMode.FOCUS_REPLICATION, metal=600, plutonium=400)
        ctx = make_ctx(make_world([here, stocked], [probe]), config)
        assert ctx.is_colonized("sys-a")

        decision = FocusReplicationBehavior().decide(probe, here, ctx)

        assert decision == Travel("sys-b", "Focus Replication: A already colonized, traveling to B")

    def test_colonized_targets_are_skipped(self, config):
        here = _analyzed("sys-a", plutonium=400)
        settled = make_system("sys-b", 1100, 1000, metal=5000, plutonium=5000)
        open_site = make_system("sys-c", 1300, 1000, metal=5000, plutonium=5000)
        probe = _autonomous(here, mode=BehaviorMode.FOCUS_REPLICATION, metal=600, plutonium=400)
        ctx = make_ctx(make_world([here, settled, open_site], [probe]), config)
        ctx.colonized.add("sys-b")

        decision = FocusReplicationBehavior().decide(probe, here, ctx)

        assert isinstance(decision, Travel)
        assert decision.target_id == "sys-c"

    def test_colonized_without_targets_scans(self, config):
        here = _analyzed("sys-a", plutonium=400)
        probe = _autonomous(here, mode=BehaviorMode.FOCUS_REPLICATION, metal=600, plutonium=400)
        ctx = make_ctx(make_world([here], [probe]), config)

        assert isinstance(FocusReplicationBehavior().decide(probe, here, ctx), Scan)


def test_replicator_leaves_its_origin_and_settles_elsewhere(config):
    home = _analyzed("sys-a", plutonium=400)
    stocked = make_system("sys-b", 1200, 1000, metal=5000, plutonium=5000)
    probe = _autonomous(home, mode=BehaviorMode.FOCUS_REPLICATION, metal=600, plutonium=400)
    engine = SimulationEngine(config, world=make_world([home, stocked], [probe]))

    for _ in range(200):
        engine.tick(0.5)
        if len(engine.world.probes) > 1:
            break

    parent, child = engine.world.probes
    assert child.origin_system_id == "sys-b"
    assert child.location_id == "sys-b"
    assert "Focus Replication: A already colonized, traveling to B" in parent.decision_log
    assert parent.metal < 600


def test_unknown_mode_falls_back_to_default():
    assert isinstance(get_behavior("not-a-mode"), DefaultBehavior)


class TestCommit:
    def test_commits_mining_decision(self, autonomy, config):
        here = _analyzed("sys-a")
        probe = _autonomous(here)
        ctx = make_ctx(make_world([here], [probe]), config)

        decision = autonomy.step(probe, ctx)

        assert isinstance(decision, MineMetal)
        assert probe.state is ProbeState.MINING_METAL
        assert probe.decision_log == ["Default behavior: mining Metal"]
        assert ctx.world.log.by_category(LOG_AUTONOMY)[-1].message == (
            "Probe-0 (AI): Default behavior: mining Metal"
        )

    def test_repeated_decision_continues_activity(self, autonomy, config):
        here = _analyzed("sys-a")
        probe = _autonomous(here, state=ProbeState.MINING_METAL)
        probe.mining_buffer = 0.6
        probe.mining_batch_progress = 3
        ctx = make_ctx(make_world([here], [probe]), config)

        autonomy.step(probe, ctx)
        autonomy.step(probe, ctx)

        assert probe.state is ProbeState.MINING_METAL
        assert probe.mining_buffer == 0.6
        assert probe.decision_log == ["Default behavior: mining Metal batch"]

    def test_travel_burns_floored_fuel(self, autonomy, config):
        here = _analyzed("sys-a")
        target = make_system("sys-b", 1334, 1000)
        probe = _autonomous(here, mode=BehaviorMode.FOCUS_EXPLORING, plutonium=100)
        ctx = make_ctx(make_world([here, target], [probe]), config)

        decision = autonomy.step(probe, ctx)

        assert isinstance(decision, Travel)
        assert probe.state is ProbeState.TRAVELING
        assert probe.target_system_id == "sys-b"
        assert probe.fuel == 100 - 66

    def test_replicate_commit(self, autonomy, config):
        here = _analyzed("sys-a", plutonium=0)
        probe = _autonomous(here, mode=BehaviorMode.FOCUS_REPLICATION, metal=600, plutonium=350)
        probe.origin_system_id = "sys-home"
        ctx = make_ctx(make_world([here], [probe]), config)

        decision = autonomy.step(probe, ctx)

        assert isinstance(decision, Replicate)
        assert probe.state is ProbeState.REPLICATING
        assert probe.metal == 100
        assert probe.fuel == 50
        assert probe.last_replication_time == ctx.now
        assert ctx.is_colonized("sys-a")
        assert probe.pending_blueprint.stats == probe.stats

    def test_replicate_dropped_at_colonized_system(self, autonomy, config):
        here = _analyzed("sys-a", plutonium=0)
        probe = _autonomous(here, mode=BehaviorMode.FOCUS_REPLICATION, metal=600, plutonium=350)
        ctx = make_ctx(make_world([here], [probe]), config)

        assert not autonomy.commit(probe, Replicate("replicate here"), ctx)
        assert probe.state is ProbeState.IDLE
        assert probe.metal == 600
        assert probe.decision_log == []

    def test_relay_commit(self, autonomy, config):
        here = _analyzed("sys-a", science=0)
        probe = _autonomous(here, mode=BehaviorMode.FOCUS_SCIENCE, metal=450)
        world = make_world([here], [probe])
        world.purchased_unlocks.add(RELAY_NETWORK)
        ctx = make_ctx(world, config)

        decision = autonomy.step(probe, ctx)

        assert isinstance(decision, DeployRelay)
        assert world.has_relay("sys-a")
        assert probe.metal == 50

    def test_ineligible_probe_is_untouched(self, autonomy, config):
        here = _analyzed("sys-a")
        probe = _autonomous(here, autonomy_level=0)
        ctx = make_ctx(make_world([here], [probe]), config)

        assert autonomy.step(probe, ctx) is None
        assert probe.state is ProbeState.IDLE
        assert probe.decision_log == []


class TestDecisionLog:
    def test_consecutive_duplicates_suppressed(self):
        probe = make_probe()
        assert probe.record_decision("a", 10)
        assert not probe.record_decision("a", 10)
        assert probe.record_decision("b", 10)
        assert probe.record_decision("a", 10)
        assert probe.decision_log == ["a", "b", "a"]

    def test_bounded(self):
        probe = make_probe()
        for index in range(15):
            probe.record_decision(f"reason {index}", 10)
        assert len(probe.decision_log) == 10
        assert probe.decision_log[0] == "reason 5"


def test_scan_decision_through_engine(config):
    """An autonomous probe at an unscanned system sweeps it, then mines."""
    from probesim.simulation.engine import SimulationEngine

    here = make_system("sys-a", 5500, 5500, visited=True)
    probe = _autonomous(here)
    probe.last_scanned_system_id = None
    engine = SimulationEngine(config, world=make_world([here], [probe]))

    engine.tick(0.1)
    probe = engine.world.get_probe("probe-0")
    assert probe.state is ProbeState.SCANNING
    assert engine.world.systems["sys-a"].analyzed
    assert engine.narrative.pending_ids() == ["sys-a"]

    engine.run(ticks=4, delta=1.0)
    probe = engine.world.get_probe("probe-0")
    assert probe.last_scanned_system_id == "sys-a"
    assert probe.state is ProbeState.MINING_METAL
    assert probe.inventory[ResourceType.METAL] >= 1
