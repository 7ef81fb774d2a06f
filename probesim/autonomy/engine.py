"""Autonomy engine: eligibility, rule evaluation and decision commit."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from probesim.autonomy.decisions import (
    Decision,
    DeployRelay,
    Idle,
    MineMetal,
    MinePlutonium,
    Replicate,
    Research,
    Scan,
    Travel,
    activity_state,
)
from probesim.autonomy.rules import AUTONOMY_RULES, evaluate_rules
from probesim.economy import travel_fuel_cost
from probesim.relays import check_relay_deployment, deploy_relay
from probesim.state_machine import UNINTERRUPTIBLE_STATES, ProbeState, can_transition, transition
from probesim.world import LOG_AUTONOMY

if TYPE_CHECKING:
    from probesim.entities.probe import Probe
    from probesim.replication import ReplicationService
    from probesim.simulation.context import TickContext

logger = logging.getLogger(__name__)


def is_eligible(probe: Probe) -> bool:
    """Autonomy runs for enabled, capable probes that are not mid-activity."""
    return (
        probe.stats.autonomy_level > 0
        and probe.is_autonomy_enabled
        and probe.state not in UNINTERRUPTIBLE_STATES
        and probe.location_id is not None
    )


class AutonomyEngine:
    """Evaluates the rule ladder for one probe and commits the decision."""

    def __init__(self, replication: ReplicationService, rules=AUTONOMY_RULES) -> None:
        self._replication = replication
        self._rules = rules

    def step(self, probe: Probe, ctx: TickContext) -> Optional[Decision]:
        """Decide and commit. Returns the committed decision, or None."""
        if not is_eligible(probe):
            return None
        system = ctx.system(probe.location_id)
        if system is None:
            return None

        decision = evaluate_rules(probe, system, ctx, self._rules)
        if decision is None:
            return None
        if not self.commit(probe, decision, ctx):
            return None
        return decision

    def commit(self, probe: Probe, decision: Decision, ctx: TickContext) -> bool:
        """Apply a decision to the probe. Returns False if it was dropped."""
        steady = activity_state(decision)
        if steady is not None and probe.state is steady:
            self._record(probe, decision, ctx)
            return True

        if isinstance(decision, Travel):
            applied = self._commit_travel(probe, decision, ctx)
        elif isinstance(decision, Replicate):
            applied = self._commit_replicate(probe, ctx)
        elif isinstance(decision, DeployRelay):
            applied = self._commit_relay(probe, ctx)
        elif isinstance(decision, (MineMetal, MinePlutonium, Research, Scan, Idle)):
            target = steady if steady is not None else ProbeState.SCANNING
            applied = can_transition(probe.state, target)
            if applied:
                transition(probe, target, reason=decision.reason)
        else:
            raise TypeError(f"Unknown decision: {decision!r}")

        if applied:
            self._record(probe, decision, ctx)
        return applied

    def _record(self, probe: Probe, decision: Decision, ctx: TickContext) -> None:
        if probe.record_decision(decision.reason, ctx.config.autonomy.decision_log_size):
            ctx.log(f"{probe.name} (AI): {decision.reason}", category=LOG_AUTONOMY)

    def _commit_travel(self, probe: Probe, decision: Travel, ctx: TickContext) -> bool:
        target = ctx.system(decision.target_id)
        if target is None or target.id == probe.location_id:
            return False
        fuel_needed = travel_fuel_cost(
            probe.position.distance_to(target.position), ctx.config.economy
        )
        if probe.fuel < fuel_needed:
            logger.debug(f"{probe.id}: dropping unaffordable travel to {target.id}")
            return False
        transition(probe, ProbeState.TRAVELING, reason=decision.reason)
        probe.target_system_id = target.id
        probe.burn_fuel(fuel_needed)
        probe.is_solar_sailing = False
        return True

    def _commit_replicate(self, probe: Probe, ctx: TickContext) -> bool:
        if probe.location_id is None or ctx.is_colonized(probe.location_id):
            logger.debug(f"{probe.id}: {probe.location_id} already colonized this tick")
            return False
        blueprint = self._replication.synthetic_blueprint(probe)
        if self._replication.check_start(probe, blueprint).is_err():
            return False
        self._replication.start(probe, blueprint)
        probe.last_replication_time = ctx.now
        ctx.colonized.add(probe.location_id)
        return True

    def _commit_relay(self, probe: Probe, ctx: TickContext) -> bool:
        check = check_relay_deployment(ctx.world, probe, ctx.config.economy)
        if check.is_err():
            return False
        relay = deploy_relay(ctx.world, probe, ctx.config.economy, ctx.now)
        system = ctx.system(relay.system_id)
        ctx.log(f"{probe.name} deployed {relay.name} at {system.name if system else relay.system_id}.")
        return True
