"""TRAVELING: straight-line transit between two known systems.

``progress`` holds the completed percentage of the route. Position is
interpolated between departure and target, and the passive scan runs at the
interpolated position every step.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from probesim.economy import units_per_second
from probesim.simulation.mutations import MarkVisited
from probesim.state_machine import ProbeState, transition
from probesim.states.base import StateUpdate
from probesim.world import LOG_ADVISORY

if TYPE_CHECKING:
    from probesim.entities.probe import Probe
    from probesim.simulation.context import TickContext


def process_traveling(probe: Probe, ctx: TickContext, delta: float) -> StateUpdate:
    departure = ctx.system(probe.location_id)
    target = ctx.system(probe.target_system_id)

    if departure is None or target is None:
        transition(probe, ProbeState.IDLE, reason="route lost")
        probe.target_system_id = None
        probe.is_solar_sailing = False
        ctx.log(
            f"{probe.name} lost its navigation fix and is holding position.",
            level="WARNING",
            category=LOG_ADVISORY,
        )
        return StateUpdate(probe, ctx.effects)

    total_distance = departure.position.distance_to(target.position)
    if total_distance <= 0:
        fraction = 1.0
    else:
        speed = units_per_second(
            probe.stats.flight_speed, probe.is_solar_sailing, ctx.config.economy
        )
        fraction = probe.progress / 100.0 + speed * delta / total_distance

    position = departure.position.lerp(target.position, min(fraction, 1.0))
    ctx.ensure_sector(position)
    ctx.passive_scan(position, probe.name)

    if fraction >= 1.0:
        transition(probe, ProbeState.IDLE, reason="arrived")
        probe.position = target.position.copy()
        probe.location_id = target.id
        probe.target_system_id = None
        probe.is_solar_sailing = False
        ctx.apply(MarkVisited(target.id))
        ctx.log(f"{probe.name} arrived at {target.name}.")
    else:
        probe.progress = fraction * 100.0
        probe.position = position

    return StateUpdate(probe, ctx.effects)
