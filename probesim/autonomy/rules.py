"""Priority ladder for autonomous probes.

The ladder is an ordered tuple of rules evaluated top-down. A rule whose
predicate matches either returns a decision (first decision wins) or, for
side-effect-only rules, returns None so evaluation continues with the next
rule.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional, Tuple

from probesim.autonomy.behaviors import get_behavior
from probesim.autonomy.decisions import Decision, Scan
from probesim.simulation.mutations import MarkAnalyzed

if TYPE_CHECKING:
    from probesim.entities.probe import Probe
    from probesim.entities.solar_system import SolarSystem
    from probesim.simulation.context import TickContext


class Rule(ABC):
    name: str = "rule"

    @abstractmethod
    def applies(self, probe: Probe, system: SolarSystem, ctx: TickContext) -> bool:
        ...

    @abstractmethod
    def act(self, probe: Probe, system: SolarSystem, ctx: TickContext) -> Optional[Decision]:
        ...


class AnalyzeOnArrival(Rule):
    """Analyze the current system instantly; never ends the ladder."""

    name = "analyze_on_arrival"

    def applies(self, probe: Probe, system: SolarSystem, ctx: TickContext) -> bool:
        return not system.analyzed

    def act(self, probe: Probe, system: SolarSystem, ctx: TickContext) -> Optional[Decision]:
        if ctx.apply(MarkAnalyzed(system.id)):
            ctx.request_narrative("lore", system.id, system.name)
            ctx.log(f"{probe.name} (AI) analyzed {system.name}.", category="autonomy")
        return None


class SweepNewSystem(Rule):
    """Sweep any system the probe has not scanned from yet."""

    name = "sweep_new_system"

    def applies(self, probe: Probe, system: SolarSystem, ctx: TickContext) -> bool:
        return probe.last_scanned_system_id != system.id

    def act(self, probe: Probe, system: SolarSystem, ctx: TickContext) -> Optional[Decision]:
        return Scan("Initializing sensor sweep of new system")


class DelegateToBehavior(Rule):
    """Run the probe's installed behavior mode."""

    name = "delegate_to_behavior"

    def applies(self, probe: Probe, system: SolarSystem, ctx: TickContext) -> bool:
        return True

    def act(self, probe: Probe, system: SolarSystem, ctx: TickContext) -> Optional[Decision]:
        return get_behavior(probe.ai_behavior).decide(probe, system, ctx)


AUTONOMY_RULES: Tuple[Rule, ...] = (
    AnalyzeOnArrival(),
    SweepNewSystem(),
    DelegateToBehavior(),
)


def evaluate_rules(
    probe: Probe,
    system: SolarSystem,
    ctx: TickContext,
    rules: Tuple[Rule, ...] = AUTONOMY_RULES,
) -> Optional[Decision]:
    for rule in rules:
        if not rule.applies(probe, system, ctx):
            continue
        decision = rule.act(probe, system, ctx)
        if decision is not None:
            return decision
    return None
