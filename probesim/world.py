"""World model: every piece of mutable simulation state in one place.

The engine never mutates the committed world during a tick. It deep-copies
the world, lets each probe step mutate the copy in turn, and swaps the copy
in once the tick completes.
"""

from __future__ import annotations

import copy
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from probesim.autonomy.modes import BehaviorMode
from probesim.entities.blueprint import Blueprint
from probesim.entities.probe import Probe
from probesim.entities.relay import Relay
from probesim.entities.solar_system import SolarSystem
from probesim.lineage import LineageTracker
from probesim.math_utils import Vector2

logger = logging.getLogger(__name__)

SectorKey = Tuple[int, int]

# Mission log categories
LOG_INFO = "info"
LOG_ADVISORY = "advisory"
LOG_EXTERNAL = "external"
LOG_AUTONOMY = "autonomy"


@dataclass(frozen=True)
class LogEntry:
    """One line of the in-world mission log."""

    tick: int
    clock: float
    level: str
    category: str
    message: str


class MissionLog:
    """Bounded FIFO of mission log entries."""

    def __init__(self, max_entries: int = 500, entries: Optional[Iterable[LogEntry]] = None) -> None:
        self._entries: Deque[LogEntry] = deque(entries or (), maxlen=max_entries)

    @property
    def max_entries(self) -> int:
        return self._entries.maxlen or 0

    def append(self, entry: LogEntry) -> None:
        self._entries.append(entry)
        logger.log(
            logging.WARNING if entry.level == "WARNING" else logging.DEBUG,
            f"[{entry.category}] t={entry.clock:.2f} {entry.message}",
        )

    def by_category(self, category: str) -> List[LogEntry]:
        return [entry for entry in self._entries if entry.category == category]

    def messages(self) -> List[str]:
        return [entry.message for entry in self._entries]

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class World:
    """Complete simulation state.

    Attributes:
        probes: Probes in stable processing order.
        systems: Systems keyed by id, in creation order.
        generated_sectors: Sector keys the generator has already filled.
        science: Global science pool.
        relays: Deployed relays keyed by system id.
        purchased_unlocks: Science unlock ids bought so far.
        unlocked_behaviors: Behavior modes enabled by science.
        max_stat_overrides: Per-stat max levels raised by science.
        blueprints: Available blueprints keyed by id.
        clock: Elapsed simulation seconds.
        tick_count: Number of completed ticks.
    """

    probes: List[Probe] = field(default_factory=list)
    systems: Dict[str, SolarSystem] = field(default_factory=dict)
    generated_sectors: Set[SectorKey] = field(default_factory=set)
    science: float = 0.0
    relays: Dict[str, Relay] = field(default_factory=dict)
    purchased_unlocks: Set[str] = field(default_factory=set)
    unlocked_behaviors: Set[BehaviorMode] = field(default_factory=set)
    max_stat_overrides: Dict[str, float] = field(default_factory=dict)
    blueprints: Dict[str, Blueprint] = field(default_factory=dict)
    clock: float = 0.0
    tick_count: int = 0
    next_probe_number: int = 1
    next_relay_number: int = 1
    log: MissionLog = field(default_factory=MissionLog)
    lineage: LineageTracker = field(default_factory=LineageTracker)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_probe(self, probe_id: str) -> Optional[Probe]:
        for probe in self.probes:
            if probe.id == probe_id:
                return probe
        return None

    def get_system(self, system_id: Optional[str]) -> Optional[SolarSystem]:
        if system_id is None:
            return None
        return self.systems.get(system_id)

    def has_relay(self, system_id: str) -> bool:
        return system_id in self.relays

    def get_relay_by_id(self, relay_id: str) -> Optional[Relay]:
        for relay in self.relays.values():
            if relay.id == relay_id:
                return relay
        return None

    def nearest_system(
        self,
        position: Vector2,
        predicate: Optional[Callable[[SolarSystem], bool]] = None,
        exclude_id: Optional[str] = None,
        max_distance: Optional[float] = None,
    ) -> Tuple[Optional[SolarSystem], float]:
        """Nearest system matching ``predicate``; ties go to creation order."""
        best: Optional[SolarSystem] = None
        best_dist = float("inf")
        for system in self.systems.values():
            if system.id == exclude_id:
                continue
            if predicate is not None and not predicate(system):
                continue
            dist = position.distance_to(system.position)
            if max_distance is not None and dist > max_distance:
                continue
            if dist < best_dist:
                best = system
                best_dist = dist
        return best, best_dist

    def origin_system_ids(self) -> Set[str]:
        """Every system some probe was built at."""
        return {p.origin_system_id for p in self.probes if p.origin_system_id is not None}

    # ------------------------------------------------------------------
    # Mutation helpers (used by the engine and the command surface)
    # ------------------------------------------------------------------

    def allocate_probe_id(self) -> str:
        probe_id = f"probe-{self.next_probe_number}"
        self.next_probe_number += 1
        return probe_id

    def allocate_relay_id(self) -> Tuple[str, str]:
        """Return (id, display name) for a new relay."""
        number = self.next_relay_number
        self.next_relay_number += 1
        return f"relay-{number}", f"Relay {number}"

    def add_log(self, level: str, category: str, message: str) -> LogEntry:
        entry = LogEntry(
            tick=self.tick_count,
            clock=self.clock,
            level=level,
            category=category,
            message=message,
        )
        self.log.append(entry)
        return entry

    def replace_probe(self, probe: Probe) -> None:
        for index, existing in enumerate(self.probes):
            if existing.id == probe.id:
                self.probes[index] = probe
                return
        raise KeyError(probe.id)

    def remove_probe(self, probe_id: str) -> Optional[Probe]:
        for index, existing in enumerate(self.probes):
            if existing.id == probe_id:
                return self.probes.pop(index)
        return None

    def copy(self) -> "World":
        """Deep copy for a tick's working state."""
        return copy.deepcopy(self)
