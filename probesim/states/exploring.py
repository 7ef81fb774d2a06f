"""EXPLORING: free flight along a heading.

Each step the probe moves, burns fuel in proportion to distance (only while it
has fuel, clamped at zero), charts any new sector it enters and docks at the
first system within the docking radius. If it did not dock it runs, in order:
the passive scan, the autonomous auto-divert toward a nearby unexplored
system, and the low-fuel safety override. Both checks are throttled on the
simulation clock.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from probesim.economy import burn_for_distance, turn_cost, units_per_second
from probesim.math_utils import Vector2, angular_difference
from probesim.simulation.mutations import MarkVisited
from probesim.state_machine import ProbeState, transition
from probesim.states.base import StateUpdate
from probesim.world import LOG_ADVISORY, LOG_AUTONOMY

if TYPE_CHECKING:
    from probesim.entities.probe import Probe
    from probesim.entities.solar_system import SolarSystem
    from probesim.simulation.context import TickContext

logger = logging.getLogger(__name__)

# Heading changes smaller than this are not worth a log line
_HEADING_EPSILON = 1e-6


def _check_due(last: Optional[float], now: float, interval: float) -> bool:
    return last is None or now - last >= interval


def _find_dock(probe: Probe, ctx: TickContext) -> Optional[SolarSystem]:
    radius = ctx.config.universe.docking_radius
    for system in ctx.systems():
        if probe.position.distance_to(system.position) <= radius:
            return system
    return None


def _auto_divert(probe: Probe, ctx: TickContext) -> None:
    def unexplored(system: SolarSystem) -> bool:
        return system.discovered and (not system.visited or not system.analyzed)

    target, distance = ctx.nearest_system(probe.position, unexplored)
    if target is None or distance >= probe.stats.scan_range:
        return

    new_heading = probe.position.heading_to(target.position)
    current = probe.heading if probe.heading is not None else 0.0
    if angular_difference(current, new_heading) < _HEADING_EPSILON:
        return

    cost = turn_cost(current, new_heading, ctx.config.economy)
    probe.heading = new_heading
    probe.burn_fuel(cost)
    ctx.log(f"{probe.name} (AI) auto-diverting to {target.name}.", category=LOG_AUTONOMY)


def _safety_override(probe: Probe, ctx: TickContext) -> None:
    nearest, distance = ctx.nearest_system(probe.position, lambda s: s.discovered)
    if nearest is None:
        return

    economy = ctx.config.economy
    new_heading = probe.position.heading_to(nearest.position)
    current = probe.heading if probe.heading is not None else 0.0
    turn = turn_cost(current, new_heading, economy)
    return_cost = burn_for_distance(distance, economy) + turn

    if probe.fuel < return_cost * ctx.config.autonomy.safety_margin:
        probe.heading = new_heading
        probe.burn_fuel(turn)
        ctx.log(
            f"CRITICAL FUEL: {probe.name} auto-adjusting course for {nearest.name}.",
            level="WARNING",
            category=LOG_ADVISORY,
        )


def process_exploring(probe: Probe, ctx: TickContext, delta: float) -> StateUpdate:
    if probe.heading is None:
        logger.warning(f"{probe.id} is exploring without a heading; holding position")
        return StateUpdate(probe, ctx.effects)

    economy = ctx.config.economy
    has_fuel = probe.fuel > 0
    speed = units_per_second(probe.stats.flight_speed, not has_fuel, economy)
    distance = speed * delta
    probe.position = probe.position + Vector2.from_heading(probe.heading, distance)

    if has_fuel:
        probe.burn_fuel(burn_for_distance(distance, economy))
    else:
        probe.is_solar_sailing = True

    ctx.ensure_sector(probe.position)

    dock = _find_dock(probe, ctx)
    if dock is not None:
        transition(probe, ProbeState.IDLE, reason="docked")
        probe.position = dock.position.copy()
        probe.location_id = dock.id
        probe.heading = None
        probe.is_solar_sailing = False
        ctx.apply(MarkVisited(dock.id))
        ctx.log(f"{probe.name} entered gravity well of {dock.name}. Docking initiated.")
        return StateUpdate(probe, ctx.effects)

    ctx.passive_scan(probe.position, probe.name)

    interval = ctx.config.autonomy.periodic_check_interval
    if (
        probe.stats.autonomy_level > 0
        and probe.is_autonomy_enabled
        and _check_due(probe.last_diversion_check, ctx.now, interval)
    ):
        probe.last_diversion_check = ctx.now
        _auto_divert(probe, ctx)

    if has_fuel and _check_due(probe.last_safety_check, ctx.now, interval):
        probe.last_safety_check = ctx.now
        _safety_override(probe, ctx)

    return StateUpdate(probe, ctx.effects)
