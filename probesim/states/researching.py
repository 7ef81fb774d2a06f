"""RESEARCHING: converts a system's finite science into the global pool."""

from __future__ import annotations

from typing import TYPE_CHECKING

from probesim.economy import research_rate
from probesim.simulation.mutations import ConsumeScience
from probesim.state_machine import ProbeState, transition
from probesim.states.base import StateUpdate

if TYPE_CHECKING:
    from probesim.entities.probe import Probe
    from probesim.simulation.context import TickContext


def process_researching(probe: Probe, ctx: TickContext, delta: float) -> StateUpdate:
    system = ctx.system(probe.location_id)
    if system is None:
        transition(probe, ProbeState.IDLE, reason="no system")
        return StateUpdate(probe, ctx.effects)

    remaining = system.science_remaining
    if remaining <= 0:
        transition(probe, ProbeState.IDLE, reason="science exhausted")
        ctx.log(f"{probe.name} halted. Science exhausted in {system.name}.")
        return StateUpdate(probe, ctx.effects)

    collected = min(research_rate(probe.stats.scan_speed, ctx.config.economy) * delta, remaining)
    if collected > 0:
        ctx.apply(ConsumeScience(system.id, collected))
        ctx.add_science(collected)

    total = system.science_total if system.science_total > 0 else remaining
    probe.progress = min(100.0, (total - system.science_remaining) / total * 100.0)

    if system.science_remaining <= 0:
        transition(probe, ProbeState.IDLE, reason="research complete")
        ctx.log(f"{probe.name} completed research at {system.name}.")

    return StateUpdate(probe, ctx.effects)
