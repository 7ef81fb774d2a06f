"""REPLICATING: build progress toward the pending blueprint."""

from __future__ import annotations

from typing import TYPE_CHECKING

from probesim.economy import replication_duration
from probesim.state_machine import ProbeState, transition
from probesim.states.base import StateUpdate
from probesim.world import LOG_ADVISORY

if TYPE_CHECKING:
    from probesim.entities.probe import Probe
    from probesim.replication import ReplicationService
    from probesim.simulation.context import TickContext


def make_replicating_processor(service: ReplicationService):
    """Bind the REPLICATING processor to the engine's replication service."""

    def process_replicating(probe: Probe, ctx: TickContext, delta: float) -> StateUpdate:
        blueprint = probe.pending_blueprint
        if blueprint is None:
            transition(probe, ProbeState.IDLE, reason="no blueprint")
            ctx.log(
                f"{probe.name} has no blueprint loaded; fabrication aborted.",
                level="WARNING",
                category=LOG_ADVISORY,
            )
            return StateUpdate(probe, ctx.effects)

        duration = replication_duration(
            blueprint.cost.time, probe.stats.replication_speed, ctx.config.economy
        )
        if duration <= 0:
            probe.progress = 100.0
        else:
            probe.progress += delta / duration * 100.0

        if probe.progress >= 100.0:
            service.complete(probe, ctx)
            transition(probe, ProbeState.IDLE, reason="replication complete")

        return StateUpdate(probe, ctx.effects)

    return process_replicating
