"""Behavior modes a probe can run when its autonomy is enabled."""

from enum import Enum


class BehaviorMode(Enum):
    DEFAULT = "default"
    FOCUS_MINING = "focus_mining"
    FOCUS_EXPLORING = "focus_exploring"
    FOCUS_SCIENCE = "focus_science"
    FOCUS_REPLICATION = "focus_replication"
