"""Per-tick working context handed to state processors and autonomy.

A ``TickContext`` wraps the tick's working copy of the world. Processors read
systems through it and request every shared change through it; the context
applies each request to the working copy straight away, so probes processed
later in the same tick observe it (sequential visibility). Spawned probes are
queued and appended by the engine once the current probe's step is done.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Callable, List, Optional, Set, Tuple

from probesim.config.simulation_config import SimulationConfig
from probesim.math_utils import Vector2
from probesim.simulation.mutations import (
    MarkDiscovered,
    NarrativeRequest,
    ProbeSpawn,
    SpawnQueue,
    StepEffects,
    SystemPatch,
    apply_patch,
)
from probesim.universe.sectors import generate_systems_for_sector, passive_scan_targets, sector_key
from probesim.world import LOG_INFO, World

if TYPE_CHECKING:
    from probesim.entities.probe import Probe
    from probesim.entities.solar_system import SolarSystem

logger = logging.getLogger(__name__)


class TickContext:
    """Mutation gateway for one tick.

    Attributes:
        world: The tick's working copy
        config: Engine configuration
        rng: Engine RNG
        delta: Seconds being simulated this tick
        now: Simulation clock at the end of this tick, used for throttles
            and cooldowns
        colonized: Systems that already host a replication, seeded from every
            probe's origin system
    """

    def __init__(
        self,
        world: World,
        config: SimulationConfig,
        rng: random.Random,
        delta: float,
    ) -> None:
        self.world = world
        self.config = config
        self.rng = rng
        self.delta = delta
        self.now = world.clock + delta
        self.colonized: Set[str] = world.origin_system_ids()
        self.origin = Vector2(*config.universe.center)
        self.narrative_requests: List[NarrativeRequest] = []
        self._spawns = SpawnQueue()
        self._effects = StepEffects()

    # ------------------------------------------------------------------
    # Step bookkeeping
    # ------------------------------------------------------------------

    def begin_step(self) -> None:
        self._effects = StepEffects()

    @property
    def effects(self) -> StepEffects:
        return self._effects

    def drain_spawns(self) -> List[ProbeSpawn]:
        return self._spawns.drain()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def system(self, system_id: Optional[str]) -> Optional[SolarSystem]:
        return self.world.get_system(system_id)

    def systems(self) -> List[SolarSystem]:
        return list(self.world.systems.values())

    def nearest_system(
        self,
        position: Vector2,
        predicate: Optional[Callable[["SolarSystem"], bool]] = None,
        exclude_id: Optional[str] = None,
        max_distance: Optional[float] = None,
    ) -> Tuple[Optional[SolarSystem], float]:
        return self.world.nearest_system(position, predicate, exclude_id, max_distance)

    def has_relay(self, system_id: str) -> bool:
        return self.world.has_relay(system_id)

    def is_colonized(self, system_id: str) -> bool:
        return system_id in self.colonized

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def apply(self, patch: SystemPatch) -> bool:
        """Apply a typed patch to the working world. Unknown systems are a no-op."""
        system = self.world.get_system(patch.system_id)
        if system is None:
            logger.debug(f"Dropping patch for unknown system: {patch!r}")
            return False
        changed = apply_patch(system, patch)
        if changed:
            self._effects.patches.append(patch)
        return changed

    def is_sector_charted(self, position: Vector2) -> bool:
        return sector_key(position, self.config.universe.sector_size) in self.world.generated_sectors

    def ensure_sector(self, position: Vector2) -> List[SolarSystem]:
        """Generate the sector containing ``position`` if it is new.

        Returns the systems created (empty when the sector was known).
        """
        key = sector_key(position, self.config.universe.sector_size)
        if key in self.world.generated_sectors:
            return []

        new_systems = generate_systems_for_sector(key, self.rng, self.config.universe, self.origin)
        self.world.generated_sectors.add(key)
        for system in new_systems:
            self.world.systems[system.id] = system
            self._effects.new_system_ids.append(system.id)
        return new_systems

    def passive_scan(self, position: Vector2, probe_name: str) -> List[SolarSystem]:
        """Discover undiscovered systems within the passive scan radius."""
        found = passive_scan_targets(
            position, self.world.systems.values(), self.config.universe.passive_scan_range
        )
        for system in found:
            self.apply(MarkDiscovered(system.id))
            self.log(f"Proximity Alert: {system.name} detected by {probe_name}.")
        return found

    def add_science(self, amount: float) -> None:
        self.world.science += amount
        self._effects.science_delta += amount

    def log(self, message: str, level: str = "INFO", category: str = LOG_INFO) -> None:
        self.world.add_log(level, category, message)
        self._effects.log_messages.append(message)

    def request_spawn(self, probe: Probe, reason: str = "") -> bool:
        queued = self._spawns.request_spawn(probe, reason=reason)
        if queued:
            self._effects.spawned_probe_ids.append(probe.id)
        return queued

    def request_narrative(self, kind: str, entity_id: str, subject: str) -> None:
        request = NarrativeRequest(kind=kind, entity_id=entity_id, subject=subject)
        self.narrative_requests.append(request)
        self._effects.narrative_requests.append(request)
