"""Probe entity and its stat block."""

from __future__ import annotations

import copy
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from probesim.autonomy.modes import BehaviorMode
from probesim.math_utils import Vector2
from probesim.state_machine import ProbeState

if TYPE_CHECKING:
    from probesim.entities.blueprint import Blueprint


class ResourceType(Enum):
    """Extractable resources. Plutonium doubles as fuel."""

    METAL = "metal"
    PLUTONIUM = "plutonium"


STAT_NAMES = (
    "mining_speed",
    "flight_speed",
    "replication_speed",
    "scan_range",
    "scan_speed",
    "autonomy_level",
)


@dataclass
class ProbeStats:
    """Capability block copied from a blueprint at construction time."""

    mining_speed: float = 1.0
    flight_speed: float = 1.0
    replication_speed: float = 1.0
    scan_range: float = 300.0
    scan_speed: float = 1.0
    autonomy_level: int = 0

    def copy(self) -> "ProbeStats":
        return ProbeStats(**asdict(self))

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProbeStats":
        return cls(**{name: data[name] for name in STAT_NAMES if name in data})


def empty_inventory() -> Dict[ResourceType, float]:
    return {ResourceType.METAL: 0.0, ResourceType.PLUTONIUM: 0.0}


@dataclass
class Probe:
    """A self-replicating exploration unit.

    ``location_id`` is None only while free-flying (EXPLORING); ``heading``
    is set only while EXPLORING. While TRAVELING, ``location_id`` still names
    the departure system until arrival.
    """

    id: str
    name: str
    model: str
    position: Vector2
    origin_system_id: Optional[str]
    location_id: Optional[str]
    state: ProbeState = ProbeState.IDLE
    target_system_id: Optional[str] = None
    heading: Optional[float] = None
    inventory: Dict[ResourceType, float] = field(default_factory=empty_inventory)
    stats: ProbeStats = field(default_factory=ProbeStats)
    progress: float = 0.0
    mining_buffer: float = 0.0
    mining_batch_progress: int = 0
    last_scanned_system_id: Optional[str] = None
    is_autonomy_enabled: bool = False
    ai_behavior: BehaviorMode = BehaviorMode.DEFAULT
    decision_log: List[str] = field(default_factory=list)
    last_diversion_check: Optional[float] = None
    last_safety_check: Optional[float] = None
    last_replication_time: Optional[float] = None
    is_solar_sailing: bool = False
    pending_blueprint: Optional["Blueprint"] = None

    @property
    def metal(self) -> float:
        return self.inventory[ResourceType.METAL]

    @property
    def fuel(self) -> float:
        """Plutonium on board."""
        return self.inventory[ResourceType.PLUTONIUM]

    @property
    def is_docked(self) -> bool:
        return self.location_id is not None and self.heading is None

    def can_afford(self, metal: float, plutonium: float) -> bool:
        return self.metal >= metal and self.fuel >= plutonium

    def add_resource(self, resource: ResourceType, amount: float) -> None:
        self.inventory[resource] = self.inventory[resource] + amount

    def spend(self, metal: float, plutonium: float) -> None:
        """Deduct a cost the caller has already checked with ``can_afford``."""
        self.inventory[ResourceType.METAL] = max(0.0, self.metal - metal)
        self.inventory[ResourceType.PLUTONIUM] = max(0.0, self.fuel - plutonium)

    def burn_fuel(self, amount: float) -> bool:
        """Burn fuel, clamping at zero.

        Returns False (and engages the solar sail) when the burn could not be
        fully paid.
        """
        remaining = self.fuel - amount
        if remaining < 0:
            self.inventory[ResourceType.PLUTONIUM] = 0.0
            self.is_solar_sailing = True
            return False
        self.inventory[ResourceType.PLUTONIUM] = remaining
        if remaining == 0:
            self.is_solar_sailing = True
        return True

    def record_decision(self, reason: str, max_size: int) -> bool:
        """Append a justification, skipping consecutive duplicates."""
        if self.decision_log and self.decision_log[-1] == reason:
            return False
        self.decision_log.append(reason)
        if len(self.decision_log) > max_size:
            del self.decision_log[: len(self.decision_log) - max_size]
        return True

    def copy(self) -> "Probe":
        """Deep copy used for the per-step private probe."""
        return copy.deepcopy(self)
