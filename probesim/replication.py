"""Centralized replication service for all build paths.

Manual ``replicate`` commands, autonomous Focus Replication decisions and the
REPLICATING state processor all go through this service, so cost deduction,
refunds and child construction follow one set of rules.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from probesim.config.simulation_config import SimulationConfig
from probesim.entities.blueprint import Blueprint, BlueprintCost
from probesim.entities.probe import Probe, ResourceType, empty_inventory
from probesim.result import Err, Ok, Result
from probesim.state_machine import ProbeState, can_transition, transition

if TYPE_CHECKING:
    from probesim.simulation.context import TickContext

logger = logging.getLogger(__name__)

PLACEHOLDER_PROBE_NAME = "Constructing..."


class ReplicationService:
    """Single owner of replication rules (start, cancel, complete)."""

    def __init__(self, config: SimulationConfig) -> None:
        self._config = config

    def synthetic_blueprint(self, probe: Probe) -> Blueprint:
        """Blueprint cloning ``probe``'s own stats at the autonomous thresholds."""
        autonomy = self._config.autonomy
        return Blueprint(
            id=f"bp-auto-{probe.id}",
            name=probe.model,
            stats=probe.stats.copy(),
            cost=BlueprintCost(
                metal=autonomy.replication_metal_threshold,
                plutonium=autonomy.replication_plutonium_threshold,
                time=autonomy.autonomous_replication_time,
            ),
        )

    def check_start(self, probe: Probe, blueprint: Blueprint) -> Result[Blueprint, str]:
        if not probe.is_docked:
            return Err(f"{probe.name} must be docked to replicate")
        if not can_transition(probe.state, ProbeState.REPLICATING):
            return Err(f"{probe.name} cannot replicate while {probe.state.value}")
        if not probe.can_afford(blueprint.cost.metal, blueprint.cost.plutonium):
            return Err("Replication failed: Insufficient resources.")
        return Ok(blueprint)

    def start(self, probe: Probe, blueprint: Blueprint) -> None:
        """Deduct the cost and begin building. Caller has run ``check_start``."""
        probe.spend(blueprint.cost.metal, blueprint.cost.plutonium)
        transition(probe, ProbeState.REPLICATING, reason=f"build {blueprint.name}")
        probe.pending_blueprint = blueprint

    def cancel(self, probe: Probe) -> Optional[Blueprint]:
        """Abort a build, refunding its cost. Returns the cancelled blueprint."""
        blueprint = probe.pending_blueprint
        if blueprint is not None:
            probe.add_resource(ResourceType.METAL, blueprint.cost.metal)
            probe.add_resource(ResourceType.PLUTONIUM, blueprint.cost.plutonium)
        probe.pending_blueprint = None
        transition(probe, ProbeState.IDLE, reason="replication cancelled")
        return blueprint

    def complete(self, parent: Probe, ctx: TickContext) -> Probe:
        """Realize the parent's pending blueprint as a new probe.

        The child is queued for spawn (appended after every existing probe)
        and the parent's system joins the colonized set.
        """
        blueprint = parent.pending_blueprint
        if blueprint is None:
            raise ValueError(f"{parent.id} has no pending blueprint")

        child_id = ctx.world.allocate_probe_id()
        if blueprint.is_custom:
            name = f"{blueprint.name}-{ctx.rng.randrange(100)}"
        else:
            name = PLACEHOLDER_PROBE_NAME

        inventory = empty_inventory()
        if blueprint.initial_inventory:
            for resource, amount in blueprint.initial_inventory.items():
                inventory[resource] = float(amount)

        child = Probe(
            id=child_id,
            name=name,
            model=blueprint.name,
            position=parent.position.copy(),
            origin_system_id=parent.location_id,
            location_id=parent.location_id,
            inventory=inventory,
            stats=blueprint.stats.copy(),
            last_scanned_system_id=parent.location_id,
            is_autonomy_enabled=True,
        )

        ctx.request_spawn(child, reason="replication")
        if parent.location_id is not None:
            ctx.colonized.add(parent.location_id)
        ctx.world.lineage.record_birth(
            child.id, parent.id, parent.location_id, tick=ctx.world.tick_count
        )
        if not blueprint.is_custom:
            ctx.request_narrative("name", child.id, blueprint.name)

        parent.pending_blueprint = None
        ctx.log(f"{parent.name} finished building {blueprint.name}.")
        logger.debug(f"Replication: {parent.id} -> {child.id} at {parent.location_id}")
        return child
