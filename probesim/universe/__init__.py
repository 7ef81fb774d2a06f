"""Lazy procedural universe: sector generation and the seeded starting map."""

from probesim.universe.initial import create_initial_world
from probesim.universe.sectors import (
    generate_systems_for_sector,
    passive_scan_targets,
    sector_key,
)

__all__ = [
    "create_initial_world",
    "generate_systems_for_sector",
    "passive_scan_targets",
    "sector_key",
]
