"""Deployed communication relay."""

from dataclasses import dataclass

from probesim.math_utils import Vector2


@dataclass
class Relay:
    """A static relay parked in a system; at most one per system."""

    id: str
    name: str
    system_id: str
    position: Vector2
    deployed_at: float
