"""Per-state update functions.

Each processor takes ``(probe, ctx, delta)``, mutates the probe (a private
copy owned by the engine for this step), requests shared changes through the
tick context and returns a ``StateUpdate``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict

from probesim.state_machine import ProbeState
from probesim.states.base import StateProcessor, StateUpdate
from probesim.states.exploring import process_exploring
from probesim.states.idle import process_idle
from probesim.states.mining import process_mining
from probesim.states.replicating import make_replicating_processor
from probesim.states.researching import process_researching
from probesim.states.scanning import process_scanning
from probesim.states.traveling import process_traveling

if TYPE_CHECKING:
    from probesim.replication import ReplicationService


def build_processors(replication: ReplicationService) -> Dict[ProbeState, StateProcessor]:
    """Processor table for every ProbeState."""
    return {
        ProbeState.IDLE: process_idle,
        ProbeState.TRAVELING: process_traveling,
        ProbeState.EXPLORING: process_exploring,
        ProbeState.MINING_METAL: process_mining,
        ProbeState.MINING_PLUTONIUM: process_mining,
        ProbeState.REPLICATING: make_replicating_processor(replication),
        ProbeState.SCANNING: process_scanning,
        ProbeState.RESEARCHING: process_researching,
    }


__all__ = ["StateProcessor", "StateUpdate", "build_processors"]
