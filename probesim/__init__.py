"""Tick-driven simulation of self-replicating exploration probes.

This package contains the pure simulation logic, with no UI or transport
dependencies. Key modules include:

- simulation: Tick scheduler (probesim.simulation.engine) and tick context
- states: Per-state update functions for the probe state machine
- autonomy: Behavior modes, rule ladder and decision commit
- universe: Lazy sector generation and the starting map
- entities: Probes, star systems, relays and blueprints
- commands: Validated player commands returning Ok/Err
- narrative: Lore and naming requests reconciled outside the tick
- persistence: pydantic-validated snapshots serialized with orjson

Design note: this module exposes a small, explicit public API via ``__all__``.
Import the engine from ``probesim.simulation.engine``.
"""

from . import autonomy as autonomy
from . import entities as entities
from . import simulation as simulation
from . import universe as universe

__all__ = [
    "autonomy",
    "entities",
    "simulation",
    "universe",
]
