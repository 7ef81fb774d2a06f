"""Explicit probe state machine.

Every probe carries a ``ProbeState``. Valid transitions are enumerated in
``PROBE_STATE_TRANSITIONS`` and every state change goes through
``transition()`` so an illegal flow (for example SCANNING -> TRAVELING)
fails fast instead of silently producing an impossible probe.

Every transition resets ``progress`` to 0 and clears the mining buffer.
Entering a mining state also restarts the Default-mode mining batch.

Usage:
------
    transition(probe, ProbeState.SCANNING, reason="sweep")  # OK from IDLE

    result = try_transition(probe, ProbeState.TRAVELING)
    if result.is_err():
        logger.warning(f"Invalid transition: {result.error}")
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Dict, FrozenSet, List

from probesim.exceptions import InvalidTransitionError
from probesim.result import Err, Ok, Result

if TYPE_CHECKING:
    from probesim.entities.probe import Probe


class ProbeState(Enum):
    """The eight probe activities."""

    IDLE = "idle"
    TRAVELING = "traveling"
    MINING_METAL = "mining_metal"
    MINING_PLUTONIUM = "mining_plutonium"
    REPLICATING = "replicating"
    SCANNING = "scanning"
    EXPLORING = "exploring"
    RESEARCHING = "researching"


MINING_STATES: FrozenSet[ProbeState] = frozenset(
    {ProbeState.MINING_METAL, ProbeState.MINING_PLUTONIUM}
)

# Autonomy never interrupts these; the activity must run to completion.
UNINTERRUPTIBLE_STATES: FrozenSet[ProbeState] = frozenset(
    {
        ProbeState.TRAVELING,
        ProbeState.REPLICATING,
        ProbeState.EXPLORING,
        ProbeState.SCANNING,
    }
)

# Docked work states that the autonomy engine may switch between directly
_DOCKED_WORK = [
    ProbeState.MINING_METAL,
    ProbeState.MINING_PLUTONIUM,
    ProbeState.RESEARCHING,
    ProbeState.SCANNING,
    ProbeState.REPLICATING,
    ProbeState.TRAVELING,
]

PROBE_STATE_TRANSITIONS: Dict[ProbeState, List[ProbeState]] = {
    ProbeState.IDLE: _DOCKED_WORK + [ProbeState.EXPLORING],
    ProbeState.TRAVELING: [ProbeState.IDLE],
    ProbeState.EXPLORING: [ProbeState.IDLE],
    ProbeState.SCANNING: [ProbeState.IDLE],
    ProbeState.REPLICATING: [ProbeState.IDLE],
    ProbeState.MINING_METAL: [ProbeState.IDLE]
    + [s for s in _DOCKED_WORK if s is not ProbeState.MINING_METAL],
    ProbeState.MINING_PLUTONIUM: [ProbeState.IDLE]
    + [s for s in _DOCKED_WORK if s is not ProbeState.MINING_PLUTONIUM],
    ProbeState.RESEARCHING: [ProbeState.IDLE]
    + [s for s in _DOCKED_WORK if s is not ProbeState.RESEARCHING],
}


def can_transition(current: ProbeState, target: ProbeState) -> bool:
    return target in PROBE_STATE_TRANSITIONS.get(current, [])


def try_transition(probe: Probe, target: ProbeState, reason: str = "") -> Result[ProbeState, str]:
    """Attempt a transition; Err(message) when it is not allowed."""
    current = probe.state
    if not can_transition(current, target):
        valid_targets = PROBE_STATE_TRANSITIONS.get(current, [])
        suffix = f" ({reason})" if reason else ""
        return Err(
            f"Invalid transition for {probe.id}: {current.name} -> {target.name}{suffix}. "
            f"Valid targets from {current.name}: {[t.name for t in valid_targets]}"
        )

    if target in MINING_STATES:
        probe.mining_batch_progress = 0
    probe.state = target
    probe.progress = 0.0
    probe.mining_buffer = 0.0
    return Ok(target)


def transition(probe: Probe, target: ProbeState, reason: str = "") -> ProbeState:
    """Transition, raising InvalidTransitionError on an illegal flow.

    Use this where an invalid transition is a programming error. Commands
    that may legitimately be rejected check ``can_transition`` first.
    """
    result = try_transition(probe, target, reason)
    if result.is_err():
        raise InvalidTransitionError(result.error)
    return result.unwrap()
