"""Resource, fuel and work-rate constants.

Plutonium doubles as fuel. All rates are per second of simulated time.
"""

# =============================================================================
# PROPULSION
# =============================================================================

BASE_FLIGHT_SPEED = 10.0  # Map units per second at flight_speed 1
FUEL_CONSUMPTION_RATE = 0.2  # Plutonium per unit distance
TURN_COST_PER_DEGREE = 0.2  # Plutonium per degree of heading change
SOLAR_SAIL_SPEED_MULTIPLIER = 0.05  # Speed multiplier when out of fuel

# =============================================================================
# WORK RATES
# =============================================================================

MINING_BASE_RATE = 2.0  # Units/s at abundance 100 and mining_speed 1
RESEARCH_RATE_BASE = 1.0  # Science/s at scan_speed 1
SCAN_PROGRESS_DIVISOR = 0.03  # progress += scan_speed * dt / divisor (3s sweep)

# Stat floors so a zeroed stat slows work instead of dividing by zero
MIN_REPLICATION_SPEED = 0.1
MIN_RESEARCH_SPEED = 0.1

# =============================================================================
# INFRASTRUCTURE
# =============================================================================

RELAY_DEPLOY_COST_METAL = 400
