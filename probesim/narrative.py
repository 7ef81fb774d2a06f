"""Narrative and naming text, reconciled into the world by entity id.

The simulation never waits on text generation. Ticks and commands enqueue
``NarrativeRequest`` records into a pending table keyed by entity id;
``NarrativeReconciler.flush()`` is awaited outside the tick, dispatches every
pending request, and applies each answer by looking the entity up in the
*current* world. A probe that self-destructed in the meantime simply has its
answer dropped. There are no retries and no cancellation; a failing or slow
service degrades to deterministic fallback text.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from probesim.entities.solar_system import SolarSystem
from probesim.exceptions import NarrativeError
from probesim.simulation.mutations import NarrativeRequest, SetLore, apply_patch
from probesim.world import LOG_EXTERNAL, LOG_INFO, World

logger = logging.getLogger(__name__)

KIND_LORE = "lore"
KIND_NAME = "name"

EXTERNAL_UNAVAILABLE = "external-unavailable"

_LORE_TEMPLATES = (
    "{name} shows traces of ancient volcanic activity across its inner worlds.",
    "Long-range spectra of {name} reveal a metal-rich debris disk.",
    "{name} is quiet. Too quiet. The sensors log nothing but background hiss.",
    "A thin halo of ice surrounds {name}, glittering in probe floodlights.",
    "Gravitational anomalies near {name} suggest an unseen companion.",
)


class NarrativeService(Protocol):
    """Async text provider (for example an LLM-backed service)."""

    async def system_lore(self, system: SolarSystem) -> str:
        ...

    async def probe_name(self, model: str) -> str:
        ...


class FallbackNarrativeService:
    """Deterministic text from a seeded RNG."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def lore_for(self, system_name: str) -> str:
        return self._rng.choice(_LORE_TEMPLATES).format(name=system_name)

    def name_for(self, model: str) -> str:
        return f"Unit-{self._rng.randrange(10000):04d}"

    async def system_lore(self, system: SolarSystem) -> str:
        return self.lore_for(system.name)

    async def probe_name(self, model: str) -> str:
        return self.name_for(model)


class NarrativeReconciler:
    """Pending-request table plus async dispatch and by-id application."""

    def __init__(
        self,
        service: Optional[NarrativeService] = None,
        fallback: Optional[FallbackNarrativeService] = None,
        timeout: float = 5.0,
    ) -> None:
        self._service = service
        self._fallback = fallback or FallbackNarrativeService()
        self._timeout = timeout
        self._pending: Dict[str, NarrativeRequest] = {}

    def enqueue(self, request: NarrativeRequest) -> bool:
        """Queue a request. Returns False if that entity already has one pending."""
        if request.entity_id in self._pending:
            return False
        self._pending[request.entity_id] = request
        return True

    def pending_ids(self) -> List[str]:
        return list(self._pending)

    def pending_count(self) -> int:
        return len(self._pending)

    async def flush(self, world_provider: Callable[[], World]) -> int:
        """Resolve every pending request and apply the results.

        Args:
            world_provider: Returns the world *at application time*; the
                engine may have committed new ticks while requests were
                in flight.

        Returns:
            Number of results applied to a still-existing entity
        """
        if not self._pending:
            return 0
        requests = list(self._pending.values())
        self._pending.clear()

        resolved = await asyncio.gather(
            *(self._resolve(request, world_provider) for request in requests)
        )

        applied = 0
        for request, (text, failure) in zip(requests, resolved):
            if text is None:
                continue
            world = world_provider()
            if failure is not None:
                world.add_log(
                    "WARNING",
                    LOG_EXTERNAL,
                    f"{EXTERNAL_UNAVAILABLE}: {request.kind} for {request.subject} ({failure})",
                )
            if self._apply(world, request, text):
                applied += 1
        return applied

    async def _resolve(
        self, request: NarrativeRequest, world_provider: Callable[[], World]
    ) -> Tuple[Optional[str], Optional[str]]:
        """Return (text, failure reason). Text is None if the entity vanished."""
        world = world_provider()
        system: Optional[SolarSystem] = None
        if request.kind == KIND_LORE:
            system = world.get_system(request.entity_id)
            if system is None:
                return None, None
        elif request.kind != KIND_NAME:
            raise NarrativeError(f"Unknown narrative request kind: {request.kind}")

        if self._service is None:
            return self._fallback_text(request), None

        try:
            if system is not None:
                call = self._service.system_lore(system)
            else:
                call = self._service.probe_name(request.subject)
            text = await asyncio.wait_for(call, timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Narrative service timed out for {request.entity_id}")
            return self._fallback_text(request), "timeout"
        except Exception as e:
            logger.warning(f"Narrative service failed for {request.entity_id}: {e}")
            return self._fallback_text(request), str(e) or type(e).__name__

        if not isinstance(text, str) or not text.strip():
            return self._fallback_text(request), "empty response"
        return text.strip(), None

    def _fallback_text(self, request: NarrativeRequest) -> str:
        if request.kind == KIND_LORE:
            return self._fallback.lore_for(request.subject)
        return self._fallback.name_for(request.subject)

    def _apply(self, world: World, request: NarrativeRequest, text: str) -> bool:
        if request.kind == KIND_LORE:
            system = world.get_system(request.entity_id)
            if system is None:
                return False
            return apply_patch(system, SetLore(system.id, text))

        probe = world.get_probe(request.entity_id)
        if probe is None:
            logger.debug(f"Dropping name for removed probe {request.entity_id}")
            return False
        probe.name = text
        world.add_log("INFO", LOG_INFO, f"New probe designated {text}.")
        return True
