"""Behavior modes for autonomous probes.

This module contains:
- Behavior base class
- One behavior per BehaviorMode
- Shared helpers for nearest-target search and refuel fallbacks

Behaviors are pure: they read the probe, its current system and the tick
context and return a Decision. Committing the decision is the autonomy
engine's job.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Dict, Optional

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
)
from probesim.autonomy.modes import BehaviorMode
from probesim.config.science import RELAY_NETWORK
from probesim.economy import travel_fuel_cost
from probesim.entities.probe import ResourceType
from probesim.state_machine import ProbeState

if TYPE_CHECKING:
    from probesim.entities.probe import Probe
    from probesim.entities.solar_system import SolarSystem
    from probesim.simulation.context import TickContext


class Behavior(ABC):
    """Base class for behavior modes."""

    mode: BehaviorMode

    @abstractmethod
    def decide(self, probe: Probe, system: SolarSystem, ctx: TickContext) -> Decision:
        """Pick the next action for a docked probe at ``system``."""

    def _nearest(
        self,
        probe: Probe,
        ctx: TickContext,
        predicate: Callable[[SolarSystem], bool],
    ) -> tuple[Optional[SolarSystem], float]:
        return ctx.nearest_system(
            probe.position,
            lambda s: s.discovered and predicate(s),
            exclude_id=probe.location_id,
        )

    def _travel_or_refuel(
        self,
        probe: Probe,
        system: SolarSystem,
        target: SolarSystem,
        distance: float,
        ctx: TickContext,
        travel_reason: str,
        refuel_reason: str,
    ) -> Optional[Decision]:
        """Travel if affordable, else mine plutonium locally if there is any."""
        if probe.fuel >= travel_fuel_cost(distance, ctx.config.economy):
            return Travel(target_id=target.id, reason=travel_reason)
        if system.remaining(ResourceType.PLUTONIUM) > 0:
            return MinePlutonium(refuel_reason)
        return None


class DefaultBehavior(Behavior):
    """Alternate Metal/Plutonium mining in fixed-size batches."""

    mode = BehaviorMode.DEFAULT

    def decide(self, probe: Probe, system: SolarSystem, ctx: TickContext) -> Decision:
        batch_size = ctx.config.autonomy.default_batch_size
        batch = probe.mining_batch_progress
        mining_metal = probe.state is ProbeState.MINING_METAL
        mining_plutonium = probe.state is ProbeState.MINING_PLUTONIUM
        fresh = not (mining_metal or mining_plutonium)
        switch = fresh or batch >= batch_size

        if switch:
            preferred = ResourceType.PLUTONIUM if mining_metal else ResourceType.METAL
        else:
            preferred = ResourceType.METAL if mining_metal else ResourceType.PLUTONIUM

        label = preferred.value.capitalize()
        if system.remaining(preferred) > 0:
            if fresh:
                reason = f"Default behavior: mining {label}"
            elif switch:
                reason = f"Default behavior: switching to {label} (batch complete)"
            else:
                reason = f"Default behavior: mining {label} batch"
            return MineMetal(reason) if preferred is ResourceType.METAL else MinePlutonium(reason)

        if system.remaining(ResourceType.METAL) > 0:
            return MineMetal("Default behavior: mining Metal (fallback)")
        if system.remaining(ResourceType.PLUTONIUM) > 0:
            return MinePlutonium("Default behavior: mining Plutonium (fallback)")
        return Idle("Default behavior: all resources depleted")


class FocusMiningBehavior(Behavior):
    """Drain the current system, then move to the nearest rich one."""

    mode = BehaviorMode.FOCUS_MINING

    def decide(self, probe: Probe, system: SolarSystem, ctx: TickContext) -> Decision:
        if system.remaining(ResourceType.METAL) > 0:
            return MineMetal("Focus Mining: extracting Metal")
        if system.remaining(ResourceType.PLUTONIUM) > 0:
            return MinePlutonium("Focus Mining: extracting Plutonium")

        cfg = ctx.config.autonomy

        def material(s: SolarSystem) -> bool:
            return (
                s.remaining(ResourceType.METAL) > cfg.focus_mining_metal_threshold
                or s.remaining(ResourceType.PLUTONIUM) > cfg.focus_mining_plutonium_threshold
            )

        target, distance = self._nearest(probe, ctx, material)
        if target is None:
            return DefaultBehavior().decide(probe, system, ctx)

        decision = self._travel_or_refuel(
            probe,
            system,
            target,
            distance,
            ctx,
            f"Focus Mining: traveling to {target.name} ({math.floor(distance)} LY)",
            "Focus Mining: refueling for next target",
        )
        return decision or Idle("Focus Mining: no viable targets")


class FocusExploringBehavior(Behavior):
    """Visit and analyze known systems; sweep when nothing is left."""

    mode = BehaviorMode.FOCUS_EXPLORING

    def decide(self, probe: Probe, system: SolarSystem, ctx: TickContext) -> Decision:
        if probe.last_scanned_system_id != system.id:
            return Scan("Focus Exploring: scanning new arrival")

        target, distance = self._nearest(probe, ctx, lambda s: not s.visited or not s.analyzed)
        if target is not None:
            decision = self._travel_or_refuel(
                probe,
                system,
                target,
                distance,
                ctx,
                f"Focus Exploring: visiting {target.name}",
                "Focus Exploring: refueling",
            )
            if decision is not None:
                return decision

        return Scan("Focus Exploring: scanning for new systems")


class FocusScienceBehavior(Behavior):
    """Harvest science, seed relays, chase remaining science."""

    mode = BehaviorMode.FOCUS_SCIENCE

    def decide(self, probe: Probe, system: SolarSystem, ctx: TickContext) -> Decision:
        if system.science_remaining > 0:
            return Research(f"Focus Science: extracting science from {system.name}")

        if (
            RELAY_NETWORK in ctx.world.purchased_unlocks
            and not ctx.has_relay(system.id)
            and probe.metal >= ctx.config.economy.relay_cost_metal
        ):
            return DeployRelay(f"Focus Science: deploying relay at {system.name}")

        threshold = ctx.config.autonomy.meaningful_science_threshold
        target, distance = self._nearest(probe, ctx, lambda s: s.science_remaining > threshold)
        if target is not None:
            decision = self._travel_or_refuel(
                probe,
                system,
                target,
                distance,
                ctx,
                f"Focus Science: traveling to {target.name} "
                f"({math.floor(target.science_remaining)} sci remaining)",
                "Focus Science: refueling",
            )
            if decision is not None:
                return decision

        return DefaultBehavior().decide(probe, system, ctx)


class FocusReplicationBehavior(Behavior):
    """Replicate whenever thresholds allow, keeping enough fuel to move on.

    A system joins the colonized set once it hosts a replication (or is some
    probe's origin). Colonized systems are never replication sites; a stocked
    probe there moves on to the nearest uncolonized stocked system instead.
    """

    mode = BehaviorMode.FOCUS_REPLICATION

    def decide(self, probe: Probe, system: SolarSystem, ctx: TickContext) -> Decision:
        cfg = ctx.config.autonomy
        metal_needed = cfg.replication_metal_threshold
        plutonium_needed = cfg.replication_plutonium_threshold

        if probe.last_replication_time is not None:
            elapsed = ctx.now - probe.last_replication_time
            if elapsed < cfg.replication_cooldown:
                wait = math.ceil(cfg.replication_cooldown - elapsed)
                return Idle(f"Focus Replication: waiting for cooldown ({wait}s)")

        def stocked(s: SolarSystem) -> bool:
            return (
                not ctx.is_colonized(s.id)
                and s.remaining(ResourceType.METAL) >= metal_needed
                and s.remaining(ResourceType.PLUTONIUM) >= plutonium_needed
            )

        target, distance = self._nearest(probe, ctx, stocked)
        colonized_here = ctx.is_colonized(system.id)
        has_materials = probe.metal >= metal_needed and probe.fuel >= plutonium_needed

        if has_materials and not colonized_here:
            if target is not None:
                fuel_needed = travel_fuel_cost(distance, ctx.config.economy)
                if probe.fuel - plutonium_needed < fuel_needed and (
                    system.remaining(ResourceType.PLUTONIUM) > 0
                ):
                    return MinePlutonium(
                        "Focus Replication: mining Plutonium to ensure post-replication travel"
                    )
            return Replicate("Focus Replication: replicating at current system")

        if probe.metal < metal_needed and system.remaining(ResourceType.METAL) > 0:
            return MineMetal("Focus Replication: mining Metal for replication")
        if probe.fuel < plutonium_needed and system.remaining(ResourceType.PLUTONIUM) > 0:
            return MinePlutonium("Focus Replication: mining Plutonium for replication")

        if target is not None:
            if has_materials:
                travel_reason = (
                    f"Focus Replication: {system.name} already colonized, "
                    f"traveling to {target.name}"
                )
            else:
                travel_reason = f"Focus Replication: traveling to {target.name} for resources"
            decision = self._travel_or_refuel(
                probe,
                system,
                target,
                distance,
                ctx,
                travel_reason,
                "Focus Replication: refueling for travel to resource system",
            )
            if decision is not None:
                return decision

        if colonized_here and has_materials:
            return Scan(
                f"Focus Replication: {system.name} already colonized, scanning for new sites"
            )
        return Idle("Focus Replication: no viable replication or travel targets")


BEHAVIORS: Dict[BehaviorMode, Behavior] = {
    behavior.mode: behavior
    for behavior in (
        DefaultBehavior(),
        FocusMiningBehavior(),
        FocusExploringBehavior(),
        FocusScienceBehavior(),
        FocusReplicationBehavior(),
    )
}


def get_behavior(mode: BehaviorMode) -> Behavior:
    return BEHAVIORS.get(mode, BEHAVIORS[BehaviorMode.DEFAULT])
