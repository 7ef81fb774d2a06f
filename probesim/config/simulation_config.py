"""Aggregated, tunable simulation configuration.

The constants modules hold the canonical defaults; these dataclasses carry the
values an engine instance actually runs with, so tests can tweak one knob
without monkeypatching module globals.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Optional

from probesim.config.autonomy import (
    AUTONOMOUS_REPLICATION_TIME,
    DECISION_LOG_SIZE,
    DEFAULT_BATCH_SIZE,
    FOCUS_MINING_METAL_THRESHOLD,
    FOCUS_MINING_PLUTONIUM_THRESHOLD,
    MEANINGFUL_SCIENCE_THRESHOLD,
    PERIODIC_CHECK_INTERVAL,
    REPLICATION_COOLDOWN,
    REPLICATION_METAL_THRESHOLD,
    REPLICATION_PLUTONIUM_THRESHOLD,
    SAFETY_MARGIN,
)
from probesim.config.economy import (
    BASE_FLIGHT_SPEED,
    FUEL_CONSUMPTION_RATE,
    MIN_REPLICATION_SPEED,
    MIN_RESEARCH_SPEED,
    MINING_BASE_RATE,
    RELAY_DEPLOY_COST_METAL,
    RESEARCH_RATE_BASE,
    SCAN_PROGRESS_DIVISOR,
    SOLAR_SAIL_SPEED_MULTIPLIER,
    TURN_COST_PER_DEGREE,
)
from probesim.config.universe import (
    DEEP_SPACE_PUSH_DISTANCE,
    DOCKING_RADIUS,
    MAX_SYSTEMS_PER_SECTOR,
    PASSIVE_SCAN_RANGE,
    RICHNESS_FACTOR_CAP,
    RICHNESS_REFERENCE_DISTANCE,
    SECTOR_SIZE,
    UNIVERSE_HEIGHT,
    UNIVERSE_WIDTH,
)
from probesim.exceptions import ConfigError

MAX_LOG_ENTRIES = 500
NARRATIVE_TIMEOUT = 5.0

SEED_ENV_VAR = "PROBESIM_SEED"
LOG_LEVEL_ENV_VAR = "PROBESIM_LOG_LEVEL"


@dataclass
class UniverseConfig:
    """Map extent, sectoring and proximity radii."""

    width: float = UNIVERSE_WIDTH
    height: float = UNIVERSE_HEIGHT
    sector_size: float = SECTOR_SIZE
    max_systems_per_sector: int = MAX_SYSTEMS_PER_SECTOR
    richness_reference_distance: float = RICHNESS_REFERENCE_DISTANCE
    richness_factor_cap: float = RICHNESS_FACTOR_CAP
    passive_scan_range: float = PASSIVE_SCAN_RANGE
    docking_radius: float = DOCKING_RADIUS
    deep_space_push_distance: float = DEEP_SPACE_PUSH_DISTANCE

    @property
    def center(self) -> tuple[float, float]:
        return (self.width / 2, self.height / 2)


@dataclass
class EconomyConfig:
    """Fuel, movement and work-rate constants."""

    base_flight_speed: float = BASE_FLIGHT_SPEED
    fuel_consumption_rate: float = FUEL_CONSUMPTION_RATE
    turn_cost_per_degree: float = TURN_COST_PER_DEGREE
    solar_sail_speed_multiplier: float = SOLAR_SAIL_SPEED_MULTIPLIER
    mining_base_rate: float = MINING_BASE_RATE
    research_rate_base: float = RESEARCH_RATE_BASE
    scan_progress_divisor: float = SCAN_PROGRESS_DIVISOR
    min_replication_speed: float = MIN_REPLICATION_SPEED
    min_research_speed: float = MIN_RESEARCH_SPEED
    relay_cost_metal: float = RELAY_DEPLOY_COST_METAL


@dataclass
class AutonomyConfig:
    """Decision-engine thresholds and throttles."""

    decision_log_size: int = DECISION_LOG_SIZE
    periodic_check_interval: float = PERIODIC_CHECK_INTERVAL
    safety_margin: float = SAFETY_MARGIN
    default_batch_size: int = DEFAULT_BATCH_SIZE
    focus_mining_metal_threshold: float = FOCUS_MINING_METAL_THRESHOLD
    focus_mining_plutonium_threshold: float = FOCUS_MINING_PLUTONIUM_THRESHOLD
    meaningful_science_threshold: float = MEANINGFUL_SCIENCE_THRESHOLD
    replication_metal_threshold: float = REPLICATION_METAL_THRESHOLD
    replication_plutonium_threshold: float = REPLICATION_PLUTONIUM_THRESHOLD
    replication_cooldown: float = REPLICATION_COOLDOWN
    autonomous_replication_time: float = AUTONOMOUS_REPLICATION_TIME


@dataclass
class SimulationConfig:
    """Top-level configuration for a simulation engine.

    Attributes:
        seed: Seed for the engine RNG (generator, names). None draws one.
        max_log_entries: Capacity of the in-world mission log.
        narrative_timeout: Seconds to wait on a narrative request before
            falling back to generated text.
    """

    seed: Optional[int] = None
    max_log_entries: int = MAX_LOG_ENTRIES
    narrative_timeout: float = NARRATIVE_TIMEOUT
    universe: UniverseConfig = field(default_factory=UniverseConfig)
    economy: EconomyConfig = field(default_factory=EconomyConfig)
    autonomy: AutonomyConfig = field(default_factory=AutonomyConfig)

    def validate(self) -> None:
        """Raise ConfigError if any value is out of range."""
        errors: list[str] = []

        if self.max_log_entries <= 0:
            errors.append("max_log_entries must be positive")
        if not self.narrative_timeout > 0:
            errors.append("narrative_timeout must be positive")

        for section in (self.universe, self.economy, self.autonomy):
            for f in fields(section):
                value = getattr(section, f.name)
                if not math.isfinite(value) or value < 0:
                    errors.append(
                        f"{type(section).__name__}.{f.name} must be a finite "
                        f"non-negative number (got {value!r})"
                    )

        if self.universe.sector_size <= 0:
            errors.append("universe.sector_size must be positive")
        if self.economy.scan_progress_divisor <= 0:
            errors.append("economy.scan_progress_divisor must be positive")
        if self.autonomy.decision_log_size < 1:
            errors.append("autonomy.decision_log_size must be at least 1")

        if errors:
            raise ConfigError("Invalid simulation config: " + "; ".join(errors))

    def with_overrides(self, **overrides: Any) -> "SimulationConfig":
        """Return a copy with top-level or dotted section fields replaced.

        Example:
            config.with_overrides(seed=7, **{"economy.fuel_consumption_rate": 0.1})
        """
        top_level: dict[str, Any] = {}
        sections: dict[str, dict[str, Any]] = {}
        for key, value in overrides.items():
            if "." in key:
                section_name, field_name = key.split(".", 1)
                sections.setdefault(section_name, {})[field_name] = value
            else:
                top_level[key] = value

        try:
            for section_name, values in sections.items():
                section = getattr(self, section_name)
                top_level[section_name] = replace(section, **values)
            return replace(self, **top_level)
        except (AttributeError, TypeError) as e:
            raise ConfigError(f"Unknown config override: {e}") from e

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "SimulationConfig":
        """Build a config honouring ``PROBESIM_SEED`` when set."""
        env = os.environ if environ is None else environ
        raw_seed = env.get(SEED_ENV_VAR)
        seed: Optional[int] = None
        if raw_seed:
            try:
                seed = int(raw_seed)
            except ValueError as e:
                raise ConfigError(f"{SEED_ENV_VAR} must be an integer, got {raw_seed!r}") from e
        config = cls(seed=seed)
        config.validate()
        return config
