"""Shared types for state processors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from probesim.entities.probe import Probe
    from probesim.simulation.context import TickContext
    from probesim.simulation.mutations import StepEffects


@dataclass
class StateUpdate:
    """Result of one processor call: the updated private probe and its effects."""

    probe: "Probe"
    effects: "StepEffects"


StateProcessor = Callable[["Probe", "TickContext", float], StateUpdate]
