"""The starting map: Earth, two charted neighbours and the Genesis probe."""

from __future__ import annotations

from probesim.config.probes import (
    GENESIS_INVENTORY,
    GENESIS_PROBE_ID,
    GENESIS_PROBE_NAME,
    MODEL_MARK_I,
    PROBE_MODEL_STATS,
)
from probesim.config.simulation_config import SimulationConfig
from probesim.config.universe import EARTH_SYSTEM_ID
from probesim.entities.blueprint import default_blueprints
from probesim.entities.probe import Probe, ProbeStats, ResourceType
from probesim.entities.solar_system import SolarSystem
from probesim.math_utils import Vector2
from probesim.universe.sectors import sector_key
from probesim.world import LOG_INFO, MissionLog, World

EARTH_LORE = (
    "The cradle of humanity. Depleted of easy resources, but the launchpad for the future."
)


def _earth(position: Vector2) -> SolarSystem:
    return SolarSystem(
        id=EARTH_SYSTEM_ID,
        name="Earth",
        position=position,
        resources={ResourceType.METAL: 10, ResourceType.PLUTONIUM: 10},
        resource_yield={ResourceType.METAL: 1000, ResourceType.PLUTONIUM: 500},
        science_total=300.0,
        science_remaining=300.0,
        discovered=True,
        visited=True,
        analyzed=True,
        lore=EARTH_LORE,
    )


def _neighbour(
    system_id: str,
    name: str,
    position: Vector2,
    abundance: tuple,
    yields: tuple,
    science: float,
) -> SolarSystem:
    return SolarSystem(
        id=system_id,
        name=name,
        position=position,
        resources={ResourceType.METAL: abundance[0], ResourceType.PLUTONIUM: abundance[1]},
        resource_yield={ResourceType.METAL: yields[0], ResourceType.PLUTONIUM: yields[1]},
        science_total=science,
        science_remaining=science,
        discovered=True,
    )


def create_initial_world(config: SimulationConfig) -> World:
    """Build the world every new game starts from.

    Earth's sector is marked generated; the two neighbours are charted by
    hand so the first probe always has somewhere to go.
    """
    cx, cy = config.universe.center
    earth_pos = Vector2(cx, cy)
    earth = _earth(earth_pos)
    proxima = _neighbour(
        "sys-neighbor-1",
        "Proxima Centauri",
        Vector2(cx + 300, cy - 150),
        (30, 20),
        (2000, 800),
        250.0,
    )
    wolf = _neighbour(
        "sys-neighbor-2",
        "Wolf 359",
        Vector2(cx - 200, cy + 350),
        (40, 15),
        (1500, 1000),
        220.0,
    )

    genesis = Probe(
        id=GENESIS_PROBE_ID,
        name=GENESIS_PROBE_NAME,
        model=MODEL_MARK_I,
        position=earth_pos.copy(),
        origin_system_id=earth.id,
        location_id=earth.id,
        inventory={
            ResourceType.METAL: GENESIS_INVENTORY["metal"],
            ResourceType.PLUTONIUM: GENESIS_INVENTORY["plutonium"],
        },
        stats=ProbeStats.from_dict(PROBE_MODEL_STATS[MODEL_MARK_I]),
        last_scanned_system_id=earth.id,
        is_autonomy_enabled=True,
    )

    world = World(
        probes=[genesis],
        systems={s.id: s for s in (earth, proxima, wolf)},
        generated_sectors={sector_key(earth_pos, config.universe.sector_size)},
        blueprints={bp.id: bp for bp in default_blueprints()},
        log=MissionLog(config.max_log_entries),
    )
    world.lineage.record_birth(genesis.id, None, earth.id, tick=0)
    world.add_log("INFO", LOG_INFO, "Mission Control initialized.")
    world.add_log("INFO", LOG_INFO, f"{genesis.name} ready for orders.")
    return world
