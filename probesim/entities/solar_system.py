"""Star system entity."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, Optional

from probesim.entities.probe import ResourceType
from probesim.math_utils import Vector2


def zero_resources() -> Dict[ResourceType, float]:
    return {ResourceType.METAL: 0.0, ResourceType.PLUTONIUM: 0.0}


@dataclass
class SolarSystem:
    """A star system.

    Position and abundance never change after creation. Visibility flags only
    rise and yields only fall; both are changed exclusively through the typed
    patches in ``probesim.simulation.mutations``.
    """

    id: str
    name: str
    position: Vector2
    resources: Dict[ResourceType, float] = field(default_factory=zero_resources)
    resource_yield: Dict[ResourceType, float] = field(default_factory=zero_resources)
    science_total: float = 0.0
    science_remaining: float = 0.0
    discovered: bool = False
    visited: bool = False
    analyzed: bool = False
    lore: Optional[str] = None

    def abundance(self, resource: ResourceType) -> float:
        return self.resources.get(resource, 0.0)

    def remaining(self, resource: ResourceType) -> float:
        return self.resource_yield.get(resource, 0.0)

    @property
    def total_yield(self) -> float:
        return sum(self.resource_yield.values())

    def copy(self) -> "SolarSystem":
        return copy.deepcopy(self)
