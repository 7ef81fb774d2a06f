"""Player command surface.

Commands act on the live world between ticks. Every command returns a
``Result``: ``Ok(message)`` on success, ``Err(reason)`` on a validation
failure. Rejections are also written to the mission log as advisory
warnings prefixed with ``validation-rejected``; commands never raise for
bad player input.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Dict, Optional

from probesim.autonomy.modes import BehaviorMode
from probesim.config.autonomy import FOCUS_MODE_MIN_AUTONOMY
from probesim.config.probes import UPGRADE_COSTS
from probesim.config.science import SCIENCE_UNLOCKS
from probesim.economy import course_adjustment_cost, max_stat_level, travel_fuel_cost, upgrade_cost
from probesim.entities.blueprint import Blueprint, create_custom_blueprint
from probesim.entities.probe import STAT_NAMES, Probe, ProbeStats, ResourceType
from probesim.math_utils import Vector2, angular_difference, normalize_heading
from probesim.relays import check_relay_deployment, deploy_relay
from probesim.result import Err, Ok, Result
from probesim.simulation.mutations import MarkAnalyzed, NarrativeRequest, apply_patch
from probesim.state_machine import MINING_STATES, ProbeState, can_transition, transition
from probesim.world import LOG_ADVISORY, LOG_AUTONOMY, LOG_INFO, World

if TYPE_CHECKING:
    from probesim.simulation.engine import SimulationEngine

logger = logging.getLogger(__name__)

VALIDATION_REJECTED = "validation-rejected"

_STOPPABLE_STATES = MINING_STATES | {
    ProbeState.REPLICATING,
    ProbeState.RESEARCHING,
    ProbeState.SCANNING,
}

# Behavior modes gated behind a science module (Focus Replication has none)
_MODE_REQUIRES_UNLOCK = {
    BehaviorMode.FOCUS_MINING,
    BehaviorMode.FOCUS_EXPLORING,
    BehaviorMode.FOCUS_SCIENCE,
}


class CommandSurface:
    """Validated player commands against an engine's live world."""

    def __init__(self, engine: SimulationEngine) -> None:
        self._engine = engine

    @property
    def world(self) -> World:
        return self._engine.world

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _reject(self, reason: str) -> Err[str]:
        self.world.add_log("WARNING", LOG_ADVISORY, f"{VALIDATION_REJECTED}: {reason}")
        logger.info(f"Command rejected: {reason}")
        return Err(reason)

    def _probe(self, probe_id: str) -> Result[Probe, str]:
        probe = self.world.get_probe(probe_id)
        if probe is None:
            return self._reject(f"Unknown probe {probe_id}")
        return Ok(probe)

    def _log(self, message: str, category: str = LOG_INFO) -> Ok[str]:
        self.world.add_log("INFO", category, message)
        return Ok(message)

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def launch(self, probe_id: str, target_system_id: str) -> Result[str, str]:
        """Send a docked, idle probe to a discovered system.

        With too little fuel the probe still departs, under solar sail.
        """
        found = self._probe(probe_id)
        if found.is_err():
            return found
        probe = found.unwrap()
        if probe.state != ProbeState.IDLE or not probe.is_docked:
            return self._reject(f"{probe.name} must be idle and docked to launch")

        target = self.world.get_system(target_system_id)
        if target is None or not target.discovered:
            return self._reject(f"Unknown destination {target_system_id}")
        if target.id == probe.location_id:
            return self._reject(f"{probe.name} is already at {target.name}")

        distance = probe.position.distance_to(target.position)
        fuel_needed = travel_fuel_cost(distance, self._engine.config.economy)

        transition(probe, ProbeState.TRAVELING, reason=f"launch to {target.id}")
        probe.target_system_id = target.id
        if probe.fuel >= fuel_needed:
            probe.burn_fuel(fuel_needed)
            probe.is_solar_sailing = False
            return self._log(f"{probe.name} launched to {target.name}.")
        probe.is_solar_sailing = True
        return self._log(f"{probe.name} launched to {target.name} on solar sails. Insufficient fuel.")

    def deep_space_launch(self, probe_id: str, heading: float) -> Result[str, str]:
        """Free-flight along ``heading`` from a docked probe, or adjust course mid-flight."""
        found = self._probe(probe_id)
        if found.is_err():
            return found
        probe = found.unwrap()
        if not isinstance(heading, (int, float)) or not math.isfinite(heading):
            return self._reject(f"Invalid heading {heading!r}")
        heading = normalize_heading(heading)
        economy = self._engine.config.economy

        if probe.state == ProbeState.EXPLORING and probe.heading is not None:
            cost = course_adjustment_cost(probe.heading, heading, economy)
            change = angular_difference(probe.heading, heading)
            probe.heading = heading
            if probe.burn_fuel(cost):
                return self._log(
                    f"{probe.name} adjusted course by {change:.0f} degrees ({cost} Pu)."
                )
            self.world.add_log(
                "WARNING",
                LOG_ADVISORY,
                f"Emergency maneuver: {probe.name} exhausted its fuel adjusting course.",
            )
            return Ok(f"{probe.name} adjusted course on reserve fuel.")

        if probe.state != ProbeState.IDLE or not probe.is_docked:
            return self._reject(f"{probe.name} must be idle and docked to enter deep space")

        push = Vector2.from_heading(heading, self._engine.config.universe.deep_space_push_distance)
        transition(probe, ProbeState.EXPLORING, reason="deep space launch")
        probe.position = probe.position + push
        probe.heading = heading
        probe.location_id = None
        probe.target_system_id = None
        probe.last_diversion_check = self.world.clock
        probe.last_safety_check = self.world.clock
        probe.is_solar_sailing = probe.fuel <= 0
        return self._log(f"{probe.name} departed into deep space on heading {heading:.0f}.")

    # ------------------------------------------------------------------
    # Docked work
    # ------------------------------------------------------------------

    def mine(self, probe_id: str, resource: ResourceType) -> Result[str, str]:
        found = self._probe(probe_id)
        if found.is_err():
            return found
        probe = found.unwrap()
        try:
            resource = ResourceType(resource)
        except ValueError:
            return self._reject(f"Unknown resource {resource!r}")

        target_state = (
            ProbeState.MINING_METAL if resource == ResourceType.METAL else ProbeState.MINING_PLUTONIUM
        )
        if not probe.is_docked:
            return self._reject(f"{probe.name} must be docked to mine")
        if probe.state == target_state:
            return self._reject(f"{probe.name} is already mining {resource.value}")
        if not can_transition(probe.state, target_state):
            return self._reject(f"{probe.name} cannot mine while {probe.state.value}")
        system = self.world.get_system(probe.location_id)
        if system is None or system.remaining(resource) <= 0:
            return self._reject(f"No {resource.value} left to mine here")

        transition(probe, target_state, reason="mine command")
        return self._log(f"{probe.name} started mining {resource.value.title()} at {system.name}.")

    def scan(self, probe_id: str) -> Result[str, str]:
        found = self._probe(probe_id)
        if found.is_err():
            return found
        probe = found.unwrap()
        if probe.state != ProbeState.IDLE:
            return self._reject(f"{probe.name} must be idle to scan")
        transition(probe, ProbeState.SCANNING, reason="scan command")
        return self._log(f"{probe.name} started a long-range scan.")

    def research(self, probe_id: str) -> Result[str, str]:
        found = self._probe(probe_id)
        if found.is_err():
            return found
        probe = found.unwrap()
        if not probe.is_docked:
            return self._reject(f"{probe.name} must be docked to research")
        if not can_transition(probe.state, ProbeState.RESEARCHING):
            return self._reject(f"{probe.name} cannot research while {probe.state.value}")
        system = self.world.get_system(probe.location_id)
        if system is None or system.science_remaining <= 0:
            return self._reject("No science left to collect here")
        transition(probe, ProbeState.RESEARCHING, reason="research command")
        return self._log(f"{probe.name} began research at {system.name}.")

    def replicate(self, probe_id: str, blueprint_id: str) -> Result[str, str]:
        found = self._probe(probe_id)
        if found.is_err():
            return found
        probe = found.unwrap()
        blueprint = self.world.blueprints.get(blueprint_id)
        if blueprint is None:
            return self._reject(f"Unknown blueprint {blueprint_id}")

        replication = self._engine.replication
        check = replication.check_start(probe, blueprint)
        if check.is_err():
            return self._reject(check.error)
        replication.start(probe, blueprint)
        return self._log(f"{probe.name} started fabricating a {blueprint.name}.")

    def stop_operation(self, probe_id: str) -> Result[str, str]:
        """Halt mining, research, scanning or replication. Builds are refunded."""
        found = self._probe(probe_id)
        if found.is_err():
            return found
        probe = found.unwrap()
        if probe.state not in _STOPPABLE_STATES:
            return self._reject(f"{probe.name} has no operation to stop")

        if probe.state == ProbeState.REPLICATING:
            self._engine.replication.cancel(probe)
            return self._log(f"{probe.name} halted replication. Resources refunded.")
        state = probe.state
        transition(probe, ProbeState.IDLE, reason="stop command")
        return self._log(f"{probe.name} halted {state.value.replace('_', ' ')}.")

    def analyze(self, probe_id: str) -> Result[str, str]:
        """Mark the docked system analyzed and request its lore."""
        found = self._probe(probe_id)
        if found.is_err():
            return found
        probe = found.unwrap()
        if not probe.is_docked:
            return self._reject(f"{probe.name} must be docked to analyze")
        system = self.world.get_system(probe.location_id)
        if system is None:
            return self._reject(f"{probe.name} is not at a known system")
        if not apply_patch(system, MarkAnalyzed(system.id)):
            return self._reject(f"{system.name} has already been analyzed")
        self._engine.narrative.enqueue(NarrativeRequest("lore", system.id, system.name))
        return self._log(f"{probe.name} is analyzing {system.name}.")

    # ------------------------------------------------------------------
    # Autonomy
    # ------------------------------------------------------------------

    def set_autonomy(self, probe_id: str, enabled: bool) -> Result[str, str]:
        found = self._probe(probe_id)
        if found.is_err():
            return found
        probe = found.unwrap()
        if enabled and probe.stats.autonomy_level <= 0:
            return self._reject(f"{probe.name} has no autonomy core")
        probe.is_autonomy_enabled = bool(enabled)
        status = "enabled" if enabled else "disabled"
        return self._log(f"{probe.name} autonomy {status}.", LOG_AUTONOMY)

    def set_behavior(self, probe_id: str, mode: BehaviorMode) -> Result[str, str]:
        found = self._probe(probe_id)
        if found.is_err():
            return found
        probe = found.unwrap()
        try:
            mode = BehaviorMode(mode)
        except ValueError:
            return self._reject(f"Unknown behavior {mode!r}")

        if mode != BehaviorMode.DEFAULT:
            if probe.stats.autonomy_level < FOCUS_MODE_MIN_AUTONOMY:
                return self._reject(
                    f"{probe.name} needs autonomy level {FOCUS_MODE_MIN_AUTONOMY} for focus modes"
                )
            if mode in _MODE_REQUIRES_UNLOCK and mode not in self.world.unlocked_behaviors:
                return self._reject(f"{mode.value} module has not been unlocked")

        probe.ai_behavior = mode
        probe.decision_log = []
        return self._log(f"{probe.name} behavior set to {mode.value}.", LOG_AUTONOMY)

    # ------------------------------------------------------------------
    # Relays
    # ------------------------------------------------------------------

    def deploy_relay(self, probe_id: str) -> Result[str, str]:
        found = self._probe(probe_id)
        if found.is_err():
            return found
        probe = found.unwrap()
        if probe.state != ProbeState.IDLE:
            return self._reject(f"{probe.name} must be idle to deploy a relay")
        check = check_relay_deployment(self.world, probe, self._engine.config.economy)
        if check.is_err():
            return self._reject(check.error)
        relay = deploy_relay(self.world, probe, self._engine.config.economy, self.world.clock)
        system = self.world.systems[relay.system_id]
        return self._log(f"{relay.name} deployed at {system.name} by {probe.name}.")

    def remove_relay(self, relay_id: str) -> Result[str, str]:
        relay = self.world.get_relay_by_id(relay_id)
        if relay is None:
            return self._reject(f"Unknown relay {relay_id}")
        del self.world.relays[relay.system_id]
        return self._log(f"{relay.name} decommissioned.")

    # ------------------------------------------------------------------
    # Progression
    # ------------------------------------------------------------------

    def upgrade(self, probe_id: str, stat: str) -> Result[str, str]:
        found = self._probe(probe_id)
        if found.is_err():
            return found
        probe = found.unwrap()
        if stat not in UPGRADE_COSTS:
            return self._reject(f"Unknown upgrade {stat!r}")
        if probe.state != ProbeState.IDLE:
            return self._reject(f"{probe.name} must be idle to upgrade")

        current = getattr(probe.stats, stat)
        cap = max_stat_level(stat, self.world.max_stat_overrides)
        if current >= cap:
            return self._reject(f"{stat} is already at maximum level")
        metal, plutonium = upgrade_cost(stat, current)
        if not probe.can_afford(metal, plutonium):
            return self._reject(f"Upgrade needs {metal} Metal and {plutonium} Plutonium")

        probe.spend(metal, plutonium)
        increment = UPGRADE_COSTS[stat]["increment"]
        setattr(probe.stats, stat, min(cap, current + increment))
        if stat == "autonomy_level":
            probe.is_autonomy_enabled = True
        return self._log(f"{probe.name} installed {UPGRADE_COSTS[stat]['name']}.")

    def purchase_unlock(self, unlock_id: str) -> Result[str, str]:
        entry = SCIENCE_UNLOCKS.get(unlock_id)
        if entry is None:
            return self._reject(f"Unknown unlock {unlock_id}")
        name, cost, prerequisites, (effect, target, amount) = entry
        world = self.world
        if unlock_id in world.purchased_unlocks:
            return self._reject(f"{name} already purchased")
        missing = [p for p in prerequisites if p not in world.purchased_unlocks]
        if missing:
            return self._reject(f"{name} requires {', '.join(missing)}")
        if world.science < cost:
            return self._reject(f"{name} needs {cost:g} science")

        world.science -= cost
        world.purchased_unlocks.add(unlock_id)
        if effect == "behavior":
            world.unlocked_behaviors.add(BehaviorMode(target))
        elif effect == "max_level":
            world.max_stat_overrides[target] = max_stat_level(target, world.max_stat_overrides) + amount
        return self._log(f"Research complete: {name}.")

    def design_blueprint(
        self,
        name: str,
        stats: ProbeStats,
        initial_inventory: Optional[Dict[ResourceType, float]] = None,
    ) -> Result[Blueprint, str]:
        """Register a custom blueprint whose cost scales with its stats."""
        name = (name or "").strip()
        if not name:
            return self._reject("Blueprint name cannot be empty")
        for stat in STAT_NAMES:
            value = getattr(stats, stat)
            if value < 0 or value > max_stat_level(stat, self.world.max_stat_overrides):
                return self._reject(f"{stat} out of range for blueprint {name}")

        number = len(self.world.blueprints) + 1
        while f"bp-custom-{number}" in self.world.blueprints:
            number += 1
        blueprint_id = f"bp-custom-{number}"
        blueprint = create_custom_blueprint(blueprint_id, name, stats, initial_inventory)
        self.world.blueprints[blueprint.id] = blueprint
        self.world.add_log("INFO", LOG_INFO, f"Blueprint {name} registered.")
        return Ok(blueprint)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def rename(self, probe_id: str, name: str) -> Result[str, str]:
        found = self._probe(probe_id)
        if found.is_err():
            return found
        probe = found.unwrap()
        name = (name or "").strip()
        if not name:
            return self._reject("Probe name cannot be empty")
        old_name = probe.name
        probe.name = name
        return self._log(f"Unit {old_name} renamed to {name}.")

    def self_destruct(self, probe_id: str) -> Result[str, str]:
        found = self._probe(probe_id)
        if found.is_err():
            return found
        probe = found.unwrap()
        self.world.remove_probe(probe.id)
        return self._log(f"{probe.name} self-destruct sequence initiated. Signal lost.")
