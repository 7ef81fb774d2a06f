"""Autonomy: per-probe local decision making.

Import the engine from ``probesim.autonomy.engine``; this package only
re-exports the behavior-mode enum so entities can reference it without
pulling in the decision machinery.
"""

from probesim.autonomy.modes import BehaviorMode

__all__ = ["BehaviorMode"]
