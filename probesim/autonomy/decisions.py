"""Tagged autonomy decisions.

Each variant carries only the fields its action needs plus a human-readable
``reason`` that ends up in the probe's decision log.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from probesim.state_machine import ProbeState


@dataclass(frozen=True)
class MineMetal:
    reason: str


@dataclass(frozen=True)
class MinePlutonium:
    reason: str


@dataclass(frozen=True)
class Travel:
    target_id: str
    reason: str


@dataclass(frozen=True)
class Scan:
    reason: str


@dataclass(frozen=True)
class Research:
    reason: str


@dataclass(frozen=True)
class DeployRelay:
    reason: str


@dataclass(frozen=True)
class Replicate:
    reason: str


@dataclass(frozen=True)
class Idle:
    reason: str


Decision = Union[MineMetal, MinePlutonium, Travel, Scan, Research, DeployRelay, Replicate, Idle]


# Decisions that map to a steady activity; repeating one continues it
_ACTIVITY_STATES = {
    MineMetal: ProbeState.MINING_METAL,
    MinePlutonium: ProbeState.MINING_PLUTONIUM,
    Research: ProbeState.RESEARCHING,
    Idle: ProbeState.IDLE,
}


def activity_state(decision: Decision) -> Optional[ProbeState]:
    """The state a decision keeps the probe in, if it is a steady activity."""
    return _ACTIVITY_STATES.get(type(decision))
