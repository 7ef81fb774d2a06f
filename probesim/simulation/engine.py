"""Tick scheduler for the probe simulation.

The engine owns the committed ``World``. ``tick(delta)`` runs one step for
every probe that existed at tick start, in list order:

1. the probe's private copy is offered to the autonomy engine (if eligible),
   which may commit a decision and transition the probe;
2. the processor for the probe's (possibly new) state runs;
3. the updated probe replaces the old one in the working world, and any
   probes it spawned are appended after everyone else.

Shared changes go through the ``TickContext`` and land in the tick's working
copy immediately, so later probes in the same tick see them. The working
copy becomes the world only when every step succeeded.

Usage:
------
    engine = SimulationEngine(SimulationConfig(seed=42))
    engine.run(ticks=600, delta=0.1)
    await engine.flush_narrative()
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from probesim import persistence
from probesim.autonomy.engine import AutonomyEngine
from probesim.commands import CommandSurface
from probesim.config.simulation_config import SimulationConfig
from probesim.exceptions import SimulationError
from probesim.narrative import (
    KIND_NAME,
    FallbackNarrativeService,
    NarrativeReconciler,
    NarrativeService,
)
from probesim.replication import PLACEHOLDER_PROBE_NAME, ReplicationService
from probesim.result import Ok, Result
from probesim.simulation.context import TickContext
from probesim.simulation.mutations import NarrativeRequest, StepEffects
from probesim.state_machine import ProbeState
from probesim.states import build_processors
from probesim.universe import create_initial_world
from probesim.world import World

logger = logging.getLogger(__name__)


@dataclass
class TickReport:
    """What one tick changed, per processed probe."""

    tick: int
    clock: float
    effects: Dict[str, StepEffects] = field(default_factory=dict)
    spawned_probe_ids: List[str] = field(default_factory=list)


class SimulationEngine:
    """Runs ticks over a world and exposes the command surface.

    Attributes:
        config: Validated engine configuration
        world: The committed world (replaced wholesale at the end of a tick)
        rng: Single seeded RNG for generation and naming
        commands: Player command surface acting on ``world``
        narrative: Pending narrative requests and their reconciliation
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        world: Optional[World] = None,
        narrative_service: Optional[NarrativeService] = None,
    ) -> None:
        self.config = config or SimulationConfig()
        self.config.validate()
        self.rng = random.Random(self.config.seed)
        self.world = world if world is not None else create_initial_world(self.config)

        self.replication = ReplicationService(self.config)
        self.processors = build_processors(self.replication)
        self.autonomy = AutonomyEngine(self.replication)
        self.commands = CommandSurface(self)
        self.narrative = NarrativeReconciler(
            service=narrative_service,
            fallback=FallbackNarrativeService(self.config.seed),
            timeout=self.config.narrative_timeout,
        )

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def tick(self, delta: float) -> TickReport:
        """Advance the simulation by ``delta`` seconds.

        Raises:
            ValueError: If delta is negative or not finite
            SimulationError: If a step failed; the world and RNG are unchanged
        """
        if not isinstance(delta, (int, float)) or not math.isfinite(delta) or delta < 0:
            raise ValueError(f"delta must be a finite non-negative number, got {delta!r}")

        rng_state = self.rng.getstate()
        working = self.world.copy()
        ctx = TickContext(working, self.config, self.rng, delta)
        report = TickReport(tick=working.tick_count + 1, clock=ctx.now)

        try:
            for probe_id in [p.id for p in working.probes]:
                self._step_probe(probe_id, ctx, delta, report)
        except Exception as e:
            self.rng.setstate(rng_state)
            logger.error(f"Tick {report.tick} aborted; world left unchanged: {e}", exc_info=True)
            raise SimulationError(f"Tick {report.tick} failed: {e}") from e

        working.clock = ctx.now
        working.tick_count += 1
        self.world = working

        for request in ctx.narrative_requests:
            self.narrative.enqueue(request)
        return report

    def _step_probe(self, probe_id: str, ctx: TickContext, delta: float, report: TickReport) -> None:
        original = ctx.world.get_probe(probe_id)
        if original is None:
            return
        ctx.begin_step()
        probe = original.copy()

        self.autonomy.step(probe, ctx)
        processor = self.processors[probe.state]
        update = processor(probe, ctx, delta)

        ctx.world.replace_probe(update.probe)
        for spawn in ctx.drain_spawns():
            ctx.world.probes.append(spawn.probe)
            report.spawned_probe_ids.append(spawn.probe.id)
        report.effects[probe_id] = update.effects

    def run(self, ticks: int, delta: float) -> List[TickReport]:
        """Run ``ticks`` consecutive ticks of the same delta."""
        return [self.tick(delta) for _ in range(ticks)]

    # ------------------------------------------------------------------
    # Outside the tick
    # ------------------------------------------------------------------

    async def flush_narrative(self) -> int:
        """Resolve pending lore/name requests against the current world."""
        return await self.narrative.flush(lambda: self.world)

    def capture_snapshot(self) -> Dict[str, Any]:
        return persistence.capture_snapshot(self.world)

    def restore_snapshot(self, data: Dict[str, Any]) -> Result[World, str]:
        """Replace the world with a snapshot; on Err the world is untouched."""
        result = persistence.restore_world(data, self.config)
        if isinstance(result, Ok):
            self.world = result.value
            self._requeue_placeholder_names()
            logger.info(f"Restored snapshot at tick {self.world.tick_count}")
        return result

    def save_snapshot(self, path: Union[str, Path]) -> Path:
        return persistence.save_snapshot(self.world, path)

    def load_snapshot(self, path: Union[str, Path]) -> Result[World, str]:
        result = persistence.load_snapshot(path, self.config)
        if isinstance(result, Ok):
            self.world = result.value
            self._requeue_placeholder_names()
            logger.info(f"Loaded snapshot {path} at tick {self.world.tick_count}")
        return result

    def _requeue_placeholder_names(self) -> None:
        """Name requests are not saved; ask again for probes still unnamed."""
        for probe in self.world.probes:
            if probe.name == PLACEHOLDER_PROBE_NAME:
                self.narrative.enqueue(NarrativeRequest(KIND_NAME, probe.id, probe.model))

    def stats(self) -> Dict[str, Any]:
        """Population and progress summary for runners and dashboards."""
        world = self.world
        by_state: Dict[str, int] = {state.value: 0 for state in ProbeState}
        for probe in world.probes:
            by_state[probe.state.value] += 1
        systems = list(world.systems.values())
        return {
            "tick": world.tick_count,
            "clock": round(world.clock, 3),
            "probes": len(world.probes),
            "probes_by_state": by_state,
            "systems": len(systems),
            "discovered": sum(1 for s in systems if s.discovered),
            "visited": sum(1 for s in systems if s.visited),
            "science": round(world.science, 3),
            "relays": len(world.relays),
            "sectors": len(world.generated_sectors),
            "generations": max((rec.generation for rec in world.lineage.records), default=0),
        }
