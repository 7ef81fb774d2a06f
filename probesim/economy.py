"""Resource and fuel arithmetic.

Pure functions shared by the state processors, the autonomy engine and the
command surface. Plutonium is both a resource and fuel; a probe out of fuel
keeps moving at the solar-sail multiplier instead of stopping.
"""

from __future__ import annotations

import math
from typing import Tuple

from probesim.config.probes import MAX_STAT_LEVELS, UPGRADE_COSTS
from probesim.config.simulation_config import EconomyConfig
from probesim.math_utils import angular_difference


def travel_fuel_cost(distance: float, economy: EconomyConfig) -> int:
    """Whole plutonium units needed for a directed trip."""
    return math.floor(distance * economy.fuel_consumption_rate)


def burn_for_distance(distance: float, economy: EconomyConfig) -> float:
    """Continuous burn while free-flying (not floored)."""
    return distance * economy.fuel_consumption_rate


def turn_cost(current_heading: float, new_heading: float, economy: EconomyConfig) -> float:
    """Fuel to swing from one heading to another along the shorter arc."""
    return angular_difference(current_heading, new_heading) * economy.turn_cost_per_degree


def course_adjustment_cost(current_heading: float, new_heading: float, economy: EconomyConfig) -> int:
    """Commanded course change cost, rounded up to whole units."""
    return math.ceil(turn_cost(current_heading, new_heading, economy) - 1e-9)


def units_per_second(flight_speed: float, solar_sailing: bool, economy: EconomyConfig) -> float:
    speed = economy.base_flight_speed * flight_speed
    if solar_sailing:
        speed *= economy.solar_sail_speed_multiplier
    return speed


def mining_rate(abundance: float, mining_speed: float, economy: EconomyConfig) -> float:
    """Units per second extracted at the given abundance (0-100)."""
    return economy.mining_base_rate * (abundance / 100.0) * mining_speed


def research_rate(scan_speed: float, economy: EconomyConfig) -> float:
    return economy.research_rate_base * max(economy.min_research_speed, scan_speed)


def scan_progress_rate(scan_speed: float, economy: EconomyConfig) -> float:
    """Progress percentage points per second."""
    return scan_speed / economy.scan_progress_divisor


def replication_duration(build_time: float, replication_speed: float, economy: EconomyConfig) -> float:
    """Seconds to realize a blueprint at the given replication speed."""
    return build_time / max(economy.min_replication_speed, replication_speed)


def max_stat_level(stat: str, overrides: dict) -> float:
    return overrides.get(stat, MAX_STAT_LEVELS[stat])


def upgrade_cost(stat: str, current_value: float) -> Tuple[int, int]:
    """(metal, plutonium) for the next level of ``stat``.

    Raises:
        KeyError: If ``stat`` is not upgradeable
    """
    entry = UPGRADE_COSTS[stat]
    level_factor = current_value
    if stat == "scan_range":
        level_factor = current_value / entry["increment"]
    metal = math.floor(entry["metal"] * (level_factor + 1))
    plutonium = math.floor(entry["plutonium"] * (level_factor + 1))
    return metal, plutonium
