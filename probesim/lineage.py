"""Lineage tracking for the probe family tree.

Every replication appends one record linking the child to its parent and the
system it was built at. Records for self-destructed probes are kept so the
tree stays complete.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

ROOT_PARENT = "root"


@dataclass(frozen=True)
class LineageRecord:
    probe_id: str
    parent_id: str
    system_id: Optional[str]
    tick: int
    generation: int


class LineageTracker:
    """Maintains parent-child relationships between probes."""

    def __init__(self, records: Optional[List[LineageRecord]] = None) -> None:
        self.records: List[LineageRecord] = list(records or [])
        self._by_id: Dict[str, LineageRecord] = {rec.probe_id: rec for rec in self.records}

    def record_birth(
        self,
        probe_id: str,
        parent_id: Optional[str],
        system_id: Optional[str],
        tick: int,
    ) -> LineageRecord:
        """Record a new probe.

        Args:
            probe_id: ID of the new probe
            parent_id: ID of the parent probe (None for seeded probes)
            system_id: System the probe was built at
            tick: Tick number of the birth
        """
        parent_key = parent_id if parent_id is not None else ROOT_PARENT
        parent = self._by_id.get(parent_key)
        generation = parent.generation + 1 if parent is not None else 0
        if parent_id is not None and parent is None:
            # Parent predates tracking (e.g. loaded from an older snapshot)
            generation = 1
            logger.debug(f"Lineage parent {parent_id} unknown for {probe_id}")

        record = LineageRecord(
            probe_id=probe_id,
            parent_id=parent_key,
            system_id=system_id,
            tick=tick,
            generation=generation,
        )
        self.records.append(record)
        self._by_id[probe_id] = record
        return record

    def get(self, probe_id: str) -> Optional[LineageRecord]:
        return self._by_id.get(probe_id)

    def to_list(self) -> List[Dict[str, Any]]:
        return [asdict(rec) for rec in self.records]

    def __len__(self) -> int:
        return len(self.records)
