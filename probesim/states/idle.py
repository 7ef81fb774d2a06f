"""IDLE: the rest state. Left only by a command or an autonomy decision."""

from __future__ import annotations

from typing import TYPE_CHECKING

from probesim.states.base import StateUpdate

if TYPE_CHECKING:
    from probesim.entities.probe import Probe
    from probesim.simulation.context import TickContext


def process_idle(probe: Probe, ctx: TickContext, delta: float) -> StateUpdate:
    return StateUpdate(probe, ctx.effects)
