"""Replication blueprints and custom-design costing."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from probesim.config.probes import (
    BASE_DESIGN_COST,
    DEFAULT_BLUEPRINT_COSTS,
    DESIGN_COST_MULTIPLIERS,
    DESIGN_TIME_FACTOR,
    PROBE_MODEL_STATS,
)
from probesim.entities.probe import ProbeStats, ResourceType


@dataclass(frozen=True)
class BlueprintCost:
    """Resource and build-time cost. ``time`` is seconds at replication_speed 1."""

    metal: float
    plutonium: float
    time: float


@dataclass
class Blueprint:
    """A stat template plus its build cost."""

    id: str
    name: str
    stats: ProbeStats
    cost: BlueprintCost
    is_custom: bool = False
    initial_inventory: Optional[Dict[ResourceType, float]] = field(default=None)


def compute_design_cost(stats: ProbeStats) -> BlueprintCost:
    """Cost of a custom design with the given stats.

    metal/plutonium = base + sum(stat * multiplier), rounded up; build time is
    the base time plus ``DESIGN_TIME_FACTOR`` seconds per unit of resources.
    """
    metal = BASE_DESIGN_COST["metal"]
    plutonium = BASE_DESIGN_COST["plutonium"]
    stat_values = stats.to_dict()
    for stat_name, multipliers in DESIGN_COST_MULTIPLIERS.items():
        value = stat_values[stat_name]
        metal += value * multipliers["metal"]
        plutonium += value * multipliers["plutonium"]

    metal = math.ceil(metal)
    plutonium = math.ceil(plutonium)
    time = BASE_DESIGN_COST["time"] + (metal + plutonium) * DESIGN_TIME_FACTOR
    return BlueprintCost(metal=metal, plutonium=plutonium, time=round(time, 3))


def create_custom_blueprint(
    blueprint_id: str,
    name: str,
    stats: ProbeStats,
    initial_inventory: Optional[Dict[ResourceType, float]] = None,
) -> Blueprint:
    return Blueprint(
        id=blueprint_id,
        name=name,
        stats=stats.copy(),
        cost=compute_design_cost(stats),
        is_custom=True,
        initial_inventory=dict(initial_inventory) if initial_inventory else None,
    )


def default_blueprints() -> List[Blueprint]:
    """The stock Mark I..Von Neumann Prime blueprints."""
    blueprints = []
    for blueprint_id, model, metal, plutonium, seconds in DEFAULT_BLUEPRINT_COSTS:
        blueprints.append(
            Blueprint(
                id=blueprint_id,
                name=model,
                stats=ProbeStats.from_dict(PROBE_MODEL_STATS[model]),
                cost=BlueprintCost(metal=metal, plutonium=plutonium, time=seconds),
            )
        )
    return blueprints
