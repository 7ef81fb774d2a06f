"""MINING_METAL / MINING_PLUTONIUM: fractional extraction into whole units.

The buffer accumulates ``base_rate * abundance/100 * mining_speed * dt``.
Whole units move to the inventory, clamped to the system's remaining yield,
and the buffer keeps its fractional remainder. The yield read here already
reflects extraction by probes processed earlier in the same tick.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from probesim.economy import mining_rate
from probesim.entities.probe import ResourceType
from probesim.simulation.mutations import DecreaseYield
from probesim.state_machine import ProbeState, transition
from probesim.states.base import StateUpdate

if TYPE_CHECKING:
    from probesim.entities.probe import Probe
    from probesim.simulation.context import TickContext


def mined_resource(state: ProbeState) -> ResourceType:
    if state is ProbeState.MINING_METAL:
        return ResourceType.METAL
    if state is ProbeState.MINING_PLUTONIUM:
        return ResourceType.PLUTONIUM
    raise ValueError(f"{state} is not a mining state")


def _halt_depleted(probe: Probe, ctx: TickContext, resource: ResourceType, system_name: str) -> None:
    transition(probe, ProbeState.IDLE, reason=f"{resource.value} depleted")
    ctx.log(f"{probe.name} halted. {resource.value.capitalize()} depleted at {system_name}.")


def process_mining(probe: Probe, ctx: TickContext, delta: float) -> StateUpdate:
    resource = mined_resource(probe.state)
    system = ctx.system(probe.location_id)
    if system is None:
        transition(probe, ProbeState.IDLE, reason="no system")
        return StateUpdate(probe, ctx.effects)

    available = system.remaining(resource)
    if available <= 0:
        _halt_depleted(probe, ctx, resource, system.name)
        return StateUpdate(probe, ctx.effects)

    rate = mining_rate(system.abundance(resource), probe.stats.mining_speed, ctx.config.economy)
    probe.mining_buffer += rate * delta

    if probe.mining_buffer >= 1.0:
        whole_units = math.floor(probe.mining_buffer)
        transferred = min(whole_units, available)
        probe.mining_buffer -= whole_units
        if transferred > 0:
            probe.add_resource(resource, transferred)
            probe.mining_batch_progress += transferred
            ctx.apply(DecreaseYield(system.id, resource, transferred))

    probe.progress = min(probe.mining_buffer * 100.0, 100.0)

    if system.remaining(resource) <= 0:
        _halt_depleted(probe, ctx, resource, system.name)

    return StateUpdate(probe, ctx.effects)
