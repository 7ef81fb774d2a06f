"""Typed system patches and the per-step mutation record.

Systems are never edited field by field. Every change is one of the patch
records below and goes through ``apply_patch``, which is the only place the
monotone invariants are enforced:

- visibility flags (discovered, visited, analyzed) only move False -> True
- resource yields and remaining science only decrease, never below zero
- lore is written once

No patch clears a flag or adds yield.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from probesim.entities.probe import ResourceType

if TYPE_CHECKING:
    from probesim.entities.probe import Probe
    from probesim.entities.solar_system import SolarSystem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkDiscovered:
    system_id: str


@dataclass(frozen=True)
class MarkVisited:
    """Arrival: visited implies discovered."""

    system_id: str


@dataclass(frozen=True)
class MarkAnalyzed:
    system_id: str


@dataclass(frozen=True)
class DecreaseYield:
    system_id: str
    resource: ResourceType
    amount: float

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"DecreaseYield amount must be non-negative, got {self.amount}")


@dataclass(frozen=True)
class ConsumeScience:
    system_id: str
    amount: float

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"ConsumeScience amount must be non-negative, got {self.amount}")


@dataclass(frozen=True)
class SetLore:
    system_id: str
    text: str


SystemPatch = Union[MarkDiscovered, MarkVisited, MarkAnalyzed, DecreaseYield, ConsumeScience, SetLore]


def apply_patch(system: SolarSystem, patch: SystemPatch) -> bool:
    """Apply a patch in place. Returns True if anything changed."""
    if isinstance(patch, MarkDiscovered):
        if system.discovered:
            return False
        system.discovered = True
        return True

    if isinstance(patch, MarkVisited):
        changed = not (system.visited and system.discovered)
        system.visited = True
        system.discovered = True
        return changed

    if isinstance(patch, MarkAnalyzed):
        if system.analyzed:
            return False
        system.analyzed = True
        return True

    if isinstance(patch, DecreaseYield):
        current = system.resource_yield.get(patch.resource, 0.0)
        new_value = max(0.0, current - patch.amount)
        system.resource_yield[patch.resource] = new_value
        return new_value != current

    if isinstance(patch, ConsumeScience):
        current = system.science_remaining
        system.science_remaining = max(0.0, current - patch.amount)
        return system.science_remaining != current

    if isinstance(patch, SetLore):
        if system.lore is not None:
            return False
        system.lore = patch.text
        return True

    raise TypeError(f"Unknown system patch: {patch!r}")


@dataclass(frozen=True)
class NarrativeRequest:
    """Request for text from the narrative service.

    ``kind`` is "lore" (entity is a system) or "name" (entity is a probe).
    """

    kind: str
    entity_id: str
    subject: str


@dataclass
class StepEffects:
    """Everything one probe step changed besides the probe itself."""

    patches: List[SystemPatch] = field(default_factory=list)
    new_system_ids: List[str] = field(default_factory=list)
    science_delta: float = 0.0
    spawned_probe_ids: List[str] = field(default_factory=list)
    narrative_requests: List[NarrativeRequest] = field(default_factory=list)
    log_messages: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ProbeSpawn:
    """Record a requested probe spawn."""

    probe: "Probe"
    reason: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


class SpawnQueue:
    """Collects probe spawn requests for deferred application."""

    def __init__(self) -> None:
        self._pending: List[ProbeSpawn] = []
        self._ids: set[str] = set()

    def request_spawn(
        self,
        probe: "Probe",
        *,
        reason: str = "",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Queue a spawn request.

        Returns False if a probe with the same id is already queued.
        """
        if probe.id in self._ids:
            return False
        self._ids.add(probe.id)
        self._pending.append(ProbeSpawn(probe=probe, reason=reason, metadata=metadata or {}))
        return True

    def drain(self) -> List[ProbeSpawn]:
        """Return and clear pending spawns."""
        spawns = self._pending
        self._pending = []
        self._ids.clear()
        return spawns

    def pending_count(self) -> int:
        return len(self._pending)
