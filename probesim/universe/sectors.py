"""Sector partitioning and procedural system generation.

The universe is cut into square sectors. The first time any probe's position
enters a sector that is not in the world's generated set, 0-3 systems are
created inside it. Richness grows with distance from Earth up to a cap.
Generation is idempotent per sector key: the caller records the key and
never asks twice.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Iterable, List, Tuple

from probesim.config.universe import (
    ABUNDANCE_BASE,
    ABUNDANCE_DISTANCE_SCALE,
    ABUNDANCE_MAX,
    ABUNDANCE_MIN,
    ABUNDANCE_VARIANCE,
    METAL_YIELD_MULTIPLIER,
    PLUTONIUM_YIELD_MULTIPLIER,
    SCIENCE_BASE_PER_SYSTEM,
    SCIENCE_DISTANCE_FACTOR,
    SECTOR_EDGE_MARGIN,
    SYSTEM_NAME_PREFIXES,
    SYSTEM_NAME_SUFFIXES,
    YIELD_BASE,
    YIELD_DISTANCE_SCALE,
    YIELD_VARIANCE_MIN,
    YIELD_VARIANCE_SPAN,
)
from probesim.config.simulation_config import UniverseConfig
from probesim.entities.probe import ResourceType
from probesim.entities.solar_system import SolarSystem
from probesim.math_utils import Vector2

logger = logging.getLogger(__name__)

SectorKey = Tuple[int, int]


def sector_key(position: Vector2, sector_size: float) -> SectorKey:
    return (math.floor(position.x / sector_size), math.floor(position.y / sector_size))


def richness_factor(distance: float, config: UniverseConfig) -> float:
    return min(distance / config.richness_reference_distance, config.richness_factor_cap)


def _coordinate(sector_index: int, rng: random.Random, sector_size: float) -> float:
    span = sector_size - 2 * SECTOR_EDGE_MARGIN
    return sector_index * sector_size + math.floor(rng.random() * span) + SECTOR_EDGE_MARGIN


def _abundance(factor: float, rng: random.Random) -> int:
    base = ABUNDANCE_BASE + ABUNDANCE_DISTANCE_SCALE * factor
    variance = rng.random() * 2 * ABUNDANCE_VARIANCE - ABUNDANCE_VARIANCE
    return math.floor(max(ABUNDANCE_MIN, min(ABUNDANCE_MAX, base + variance)))


def _yield(factor: float, multiplier: float, rng: random.Random) -> int:
    base = YIELD_BASE + YIELD_DISTANCE_SCALE * factor
    variance = YIELD_VARIANCE_MIN + rng.random() * YIELD_VARIANCE_SPAN
    return math.floor(base * variance * multiplier)


def generate_system_name(rng: random.Random) -> str:
    prefix = rng.choice(SYSTEM_NAME_PREFIXES)
    suffix = rng.choice(SYSTEM_NAME_SUFFIXES)
    return f"{prefix} {suffix} {rng.randrange(999)}"


def generate_systems_for_sector(
    key: SectorKey,
    rng: random.Random,
    config: UniverseConfig,
    origin: Vector2,
) -> List[SolarSystem]:
    """Create the systems of one sector.

    Args:
        key: Sector to fill
        rng: Engine RNG; all randomness comes from here
        config: Universe configuration (sector size, richness scaling)
        origin: Position richness is measured from (Earth)

    Returns:
        New undiscovered, unvisited, unanalyzed systems with ids derived from
        the sector key
    """
    sector_x, sector_y = key
    count = rng.randint(0, config.max_systems_per_sector)
    systems: List[SolarSystem] = []

    for index in range(count):
        position = Vector2(
            _coordinate(sector_x, rng, config.sector_size),
            _coordinate(sector_y, rng, config.sector_size),
        )
        distance = origin.distance_to(position)
        factor = richness_factor(distance, config)
        science = max(0, math.floor(SCIENCE_BASE_PER_SYSTEM + distance * SCIENCE_DISTANCE_FACTOR))

        systems.append(
            SolarSystem(
                id=f"sys-{sector_x}-{sector_y}-{index}",
                name=generate_system_name(rng),
                position=position,
                resources={
                    ResourceType.METAL: _abundance(factor, rng),
                    ResourceType.PLUTONIUM: _abundance(factor, rng),
                },
                resource_yield={
                    ResourceType.METAL: _yield(factor, METAL_YIELD_MULTIPLIER, rng),
                    ResourceType.PLUTONIUM: _yield(factor, PLUTONIUM_YIELD_MULTIPLIER, rng),
                },
                science_total=float(science),
                science_remaining=float(science),
            )
        )

    logger.debug(f"Generated {count} systems in sector {key}")
    return systems


def passive_scan_targets(
    position: Vector2, systems: Iterable[SolarSystem], radius: float
) -> List[SolarSystem]:
    """Undiscovered systems within ``radius`` of ``position``."""
    return [
        system
        for system in systems
        if not system.discovered and position.distance_to(system.position) <= radius
    ]
