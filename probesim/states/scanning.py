"""SCANNING: active sensor sweep.

On completion the sweep records the scanned system, charts the probe's sector
if it is new and discovers every system within ``scan_range``, including the
ones charted by this very sweep.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from probesim.economy import scan_progress_rate
from probesim.simulation.mutations import MarkDiscovered
from probesim.state_machine import ProbeState, transition
from probesim.states.base import StateUpdate

if TYPE_CHECKING:
    from probesim.entities.probe import Probe
    from probesim.simulation.context import TickContext


def process_scanning(probe: Probe, ctx: TickContext, delta: float) -> StateUpdate:
    probe.progress += scan_progress_rate(probe.stats.scan_speed, ctx.config.economy) * delta
    if probe.progress < 100.0:
        return StateUpdate(probe, ctx.effects)

    transition(probe, ProbeState.IDLE, reason="scan complete")
    if probe.location_id is not None:
        probe.last_scanned_system_id = probe.location_id

    already_charted = ctx.is_sector_charted(probe.position)
    ctx.ensure_sector(probe.position)
    if not already_charted:
        ctx.log(f"Uncharted sector mapped by {probe.name}.")

    found = 0
    for system in ctx.systems():
        if system.discovered:
            continue
        if probe.position.distance_to(system.position) <= probe.stats.scan_range:
            if ctx.apply(MarkDiscovered(system.id)):
                found += 1

    if found:
        ctx.log(f"{probe.name} scan complete. {found} new system(s) found.")
    else:
        ctx.log(f"{probe.name} scan complete. No new signals detected.")
    return StateUpdate(probe, ctx.effects)
