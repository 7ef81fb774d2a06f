"""Snapshot persistence for the simulation world.

Snapshots are plain JSON documents validated with pydantic models on load.
Every field has a default so older or partial snapshots still load; a
document that fails validation is rejected as a whole and the caller's
current world is left untouched.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import orjson
from pydantic import BaseModel, Field, ValidationError

from probesim.autonomy.modes import BehaviorMode
from probesim.config.simulation_config import SimulationConfig
from probesim.entities.blueprint import Blueprint, BlueprintCost
from probesim.entities.probe import Probe, ProbeStats, ResourceType, empty_inventory
from probesim.entities.relay import Relay
from probesim.entities.solar_system import SolarSystem, zero_resources
from probesim.exceptions import SnapshotError
from probesim.lineage import LineageRecord, LineageTracker
from probesim.math_utils import Vector2
from probesim.result import Err, Ok, Result
from probesim.state_machine import ProbeState
from probesim.world import LogEntry, MissionLog, World

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


# =============================================================================
# Snapshot models
# =============================================================================


class StatsModel(BaseModel):
    mining_speed: float = 1.0
    flight_speed: float = 1.0
    replication_speed: float = 1.0
    scan_range: float = 300.0
    scan_speed: float = 1.0
    autonomy_level: int = 0


class BlueprintModel(BaseModel):
    id: str
    name: str
    stats: StatsModel = Field(default_factory=StatsModel)
    metal: float = 0.0
    plutonium: float = 0.0
    time: float = 0.0
    is_custom: bool = False
    initial_inventory: Optional[Dict[ResourceType, float]] = None


class ProbeModel(BaseModel):
    id: str
    name: str
    model: str = "Mark I"
    position: Tuple[float, float] = (0.0, 0.0)
    origin_system_id: Optional[str] = None
    location_id: Optional[str] = None
    state: ProbeState = ProbeState.IDLE
    target_system_id: Optional[str] = None
    heading: Optional[float] = None
    inventory: Dict[ResourceType, float] = Field(default_factory=dict)
    stats: StatsModel = Field(default_factory=StatsModel)
    progress: float = 0.0
    mining_buffer: float = 0.0
    mining_batch_progress: int = 0
    last_scanned_system_id: Optional[str] = None
    is_autonomy_enabled: bool = False
    ai_behavior: BehaviorMode = BehaviorMode.DEFAULT
    decision_log: List[str] = Field(default_factory=list)
    last_diversion_check: Optional[float] = None
    last_safety_check: Optional[float] = None
    last_replication_time: Optional[float] = None
    is_solar_sailing: bool = False
    pending_blueprint: Optional[BlueprintModel] = None


class SystemModel(BaseModel):
    id: str
    name: str
    position: Tuple[float, float]
    resources: Dict[ResourceType, float] = Field(default_factory=dict)
    resource_yield: Dict[ResourceType, float] = Field(default_factory=dict)
    science_total: float = 0.0
    science_remaining: float = 0.0
    discovered: bool = False
    visited: bool = False
    analyzed: bool = False
    lore: Optional[str] = None


class RelayModel(BaseModel):
    id: str
    name: str
    system_id: str
    position: Tuple[float, float]
    deployed_at: float = 0.0


class LogEntryModel(BaseModel):
    tick: int = 0
    clock: float = 0.0
    level: str = "INFO"
    category: str = "info"
    message: str


class LineageModel(BaseModel):
    probe_id: str
    parent_id: str
    system_id: Optional[str] = None
    tick: int = 0
    generation: int = 0


class SnapshotModel(BaseModel):
    """Complete world snapshot."""

    schema_version: int = SNAPSHOT_VERSION
    saved_at: Optional[str] = None
    clock: float = 0.0
    tick_count: int = 0
    science: float = 0.0
    next_probe_number: int = 1
    next_relay_number: int = 1
    probes: List[ProbeModel] = Field(default_factory=list)
    systems: List[SystemModel] = Field(default_factory=list)
    generated_sectors: List[Tuple[int, int]] = Field(default_factory=list)
    relays: List[RelayModel] = Field(default_factory=list)
    purchased_unlocks: List[str] = Field(default_factory=list)
    unlocked_behaviors: List[BehaviorMode] = Field(default_factory=list)
    max_stat_overrides: Dict[str, float] = Field(default_factory=dict)
    blueprints: List[BlueprintModel] = Field(default_factory=list)
    log: List[LogEntryModel] = Field(default_factory=list)
    lineage: List[LineageModel] = Field(default_factory=list)


# =============================================================================
# Capture
# =============================================================================


def _blueprint_model(blueprint: Blueprint) -> BlueprintModel:
    return BlueprintModel(
        id=blueprint.id,
        name=blueprint.name,
        stats=StatsModel(**blueprint.stats.to_dict()),
        metal=blueprint.cost.metal,
        plutonium=blueprint.cost.plutonium,
        time=blueprint.cost.time,
        is_custom=blueprint.is_custom,
        initial_inventory=blueprint.initial_inventory,
    )


def _probe_model(probe: Probe) -> ProbeModel:
    return ProbeModel(
        id=probe.id,
        name=probe.name,
        model=probe.model,
        position=probe.position.to_tuple(),
        origin_system_id=probe.origin_system_id,
        location_id=probe.location_id,
        state=probe.state,
        target_system_id=probe.target_system_id,
        heading=probe.heading,
        inventory=dict(probe.inventory),
        stats=StatsModel(**probe.stats.to_dict()),
        progress=probe.progress,
        mining_buffer=probe.mining_buffer,
        mining_batch_progress=probe.mining_batch_progress,
        last_scanned_system_id=probe.last_scanned_system_id,
        is_autonomy_enabled=probe.is_autonomy_enabled,
        ai_behavior=probe.ai_behavior,
        decision_log=list(probe.decision_log),
        last_diversion_check=probe.last_diversion_check,
        last_safety_check=probe.last_safety_check,
        last_replication_time=probe.last_replication_time,
        is_solar_sailing=probe.is_solar_sailing,
        pending_blueprint=(
            _blueprint_model(probe.pending_blueprint) if probe.pending_blueprint else None
        ),
    )


def _system_model(system: SolarSystem) -> SystemModel:
    return SystemModel(
        id=system.id,
        name=system.name,
        position=system.position.to_tuple(),
        resources=dict(system.resources),
        resource_yield=dict(system.resource_yield),
        science_total=system.science_total,
        science_remaining=system.science_remaining,
        discovered=system.discovered,
        visited=system.visited,
        analyzed=system.analyzed,
        lore=system.lore,
    )


def capture_snapshot(world: World) -> Dict[str, Any]:
    """Capture the world as a JSON-ready dict stamped with version and time."""
    snapshot = SnapshotModel(
        saved_at=datetime.now(timezone.utc).isoformat(),
        clock=world.clock,
        tick_count=world.tick_count,
        science=world.science,
        next_probe_number=world.next_probe_number,
        next_relay_number=world.next_relay_number,
        probes=[_probe_model(p) for p in world.probes],
        systems=[_system_model(s) for s in world.systems.values()],
        generated_sectors=sorted(world.generated_sectors),
        relays=[
            RelayModel(
                id=r.id,
                name=r.name,
                system_id=r.system_id,
                position=r.position.to_tuple(),
                deployed_at=r.deployed_at,
            )
            for r in world.relays.values()
        ],
        purchased_unlocks=sorted(world.purchased_unlocks),
        unlocked_behaviors=sorted(world.unlocked_behaviors, key=lambda mode: mode.value),
        max_stat_overrides=dict(world.max_stat_overrides),
        blueprints=[_blueprint_model(b) for b in world.blueprints.values()],
        log=[LogEntryModel(**vars(entry)) for entry in world.log],
        lineage=[LineageModel(**record) for record in world.lineage.to_list()],
    )
    return snapshot.model_dump(mode="json")


# =============================================================================
# Restore
# =============================================================================


def _blueprint(model: BlueprintModel) -> Blueprint:
    return Blueprint(
        id=model.id,
        name=model.name,
        stats=ProbeStats(**model.stats.model_dump()),
        cost=BlueprintCost(metal=model.metal, plutonium=model.plutonium, time=model.time),
        is_custom=model.is_custom,
        initial_inventory=dict(model.initial_inventory) if model.initial_inventory else None,
    )


def _probe(model: ProbeModel) -> Probe:
    inventory = empty_inventory()
    for resource, amount in model.inventory.items():
        if amount < 0:
            raise SnapshotError(f"Probe {model.id} has negative {resource.value}")
        inventory[resource] = amount
    return Probe(
        id=model.id,
        name=model.name,
        model=model.model,
        position=Vector2(*model.position),
        origin_system_id=model.origin_system_id,
        location_id=model.location_id,
        state=model.state,
        target_system_id=model.target_system_id,
        heading=model.heading,
        inventory=inventory,
        stats=ProbeStats(**model.stats.model_dump()),
        progress=model.progress,
        mining_buffer=model.mining_buffer,
        mining_batch_progress=model.mining_batch_progress,
        last_scanned_system_id=model.last_scanned_system_id,
        is_autonomy_enabled=model.is_autonomy_enabled,
        ai_behavior=model.ai_behavior,
        decision_log=list(model.decision_log),
        last_diversion_check=model.last_diversion_check,
        last_safety_check=model.last_safety_check,
        last_replication_time=model.last_replication_time,
        is_solar_sailing=model.is_solar_sailing,
        pending_blueprint=_blueprint(model.pending_blueprint) if model.pending_blueprint else None,
    )


def _system(model: SystemModel) -> SolarSystem:
    resources = zero_resources()
    resources.update(model.resources)
    resource_yield = zero_resources()
    resource_yield.update(model.resource_yield)
    return SolarSystem(
        id=model.id,
        name=model.name,
        position=Vector2(*model.position),
        resources=resources,
        resource_yield=resource_yield,
        science_total=model.science_total,
        science_remaining=model.science_remaining,
        discovered=model.discovered,
        visited=model.visited,
        analyzed=model.analyzed,
        lore=model.lore,
    )


def _build_world(snapshot: SnapshotModel, config: SimulationConfig) -> World:
    if snapshot.schema_version > SNAPSHOT_VERSION:
        raise SnapshotError(
            f"Snapshot schema {snapshot.schema_version} is newer than supported {SNAPSHOT_VERSION}"
        )

    probe_ids = [p.id for p in snapshot.probes]
    if len(probe_ids) != len(set(probe_ids)):
        raise SnapshotError("Snapshot contains duplicate probe ids")

    systems = {}
    for model in snapshot.systems:
        if model.id in systems:
            raise SnapshotError(f"Snapshot contains duplicate system id {model.id}")
        systems[model.id] = _system(model)

    return World(
        probes=[_probe(p) for p in snapshot.probes],
        systems=systems,
        generated_sectors={tuple(key) for key in snapshot.generated_sectors},
        science=snapshot.science,
        relays={
            r.system_id: Relay(
                id=r.id,
                name=r.name,
                system_id=r.system_id,
                position=Vector2(*r.position),
                deployed_at=r.deployed_at,
            )
            for r in snapshot.relays
        },
        purchased_unlocks=set(snapshot.purchased_unlocks),
        unlocked_behaviors=set(snapshot.unlocked_behaviors),
        max_stat_overrides=dict(snapshot.max_stat_overrides),
        blueprints={b.id: _blueprint(b) for b in snapshot.blueprints},
        clock=snapshot.clock,
        tick_count=snapshot.tick_count,
        next_probe_number=snapshot.next_probe_number,
        next_relay_number=snapshot.next_relay_number,
        log=MissionLog(
            max_entries=config.max_log_entries,
            entries=(LogEntry(**entry.model_dump()) for entry in snapshot.log),
        ),
        lineage=LineageTracker([LineageRecord(**rec.model_dump()) for rec in snapshot.lineage]),
    )


def restore_world(data: Dict[str, Any], config: SimulationConfig) -> Result[World, str]:
    """Validate a snapshot dict and build a new world from it.

    Returns:
        Ok(world) or Err(reason); never a partially restored world
    """
    try:
        snapshot = SnapshotModel.model_validate(data)
        world = _build_world(snapshot, config)
    except ValidationError as e:
        logger.warning(f"Snapshot rejected: {e.error_count()} validation error(s)")
        return Err(f"Invalid snapshot: {e}")
    except SnapshotError as e:
        logger.warning(f"Snapshot rejected: {e}")
        return Err(str(e))
    return Ok(world)


# =============================================================================
# Serialization and files
# =============================================================================


def dumps(world: World) -> bytes:
    return orjson.dumps(capture_snapshot(world), option=orjson.OPT_INDENT_2)


def loads(payload: Union[bytes, str]) -> Dict[str, Any]:
    """Parse snapshot JSON.

    Raises:
        SnapshotError: If the payload is not a JSON object
    """
    try:
        data = orjson.loads(payload)
    except orjson.JSONDecodeError as e:
        raise SnapshotError(f"Snapshot is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise SnapshotError("Snapshot root must be an object")
    return data


def save_snapshot(world: World, path: Union[str, Path]) -> Path:
    """Write the world to ``path``, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dumps(world))
    logger.info(f"Saved snapshot to {path} ({len(world.probes)} probes, {len(world.systems)} systems)")
    return path


def load_snapshot(path: Union[str, Path], config: SimulationConfig) -> Result[World, str]:
    path = Path(path)
    try:
        data = loads(path.read_bytes())
    except OSError as e:
        logger.warning(f"Failed to read snapshot {path}: {e}")
        return Err(f"Cannot read snapshot {path}: {e}")
    except SnapshotError as e:
        logger.warning(f"Snapshot rejected: {e}")
        return Err(str(e))
    return restore_world(data, config)
