"""Probe models, default blueprints, upgrade and design costs.

Build times are seconds of simulated time.
"""

MODEL_MARK_I = "Mark I"
MODEL_MARK_II = "Mark II"
MODEL_MARK_III = "Mark III"
MODEL_VON_NEUMANN_PRIME = "Von Neumann Prime"

# Stats per stock model
PROBE_MODEL_STATS = {
    MODEL_MARK_I: {
        "mining_speed": 1.0,
        "flight_speed": 1.0,
        "replication_speed": 1.0,
        "scan_range": 300.0,
        "scan_speed": 1.0,
        "autonomy_level": 0,
    },
    MODEL_MARK_II: {
        "mining_speed": 1.0,
        "flight_speed": 3.0,
        "replication_speed": 1.0,
        "scan_range": 450.0,
        "scan_speed": 1.5,
        "autonomy_level": 0,
    },
    MODEL_MARK_III: {
        "mining_speed": 4.0,
        "flight_speed": 1.0,
        "replication_speed": 1.0,
        "scan_range": 300.0,
        "scan_speed": 1.0,
        "autonomy_level": 0,
    },
    MODEL_VON_NEUMANN_PRIME: {
        "mining_speed": 3.0,
        "flight_speed": 2.0,
        "replication_speed": 3.0,
        "scan_range": 600.0,
        "scan_speed": 2.0,
        "autonomy_level": 0,
    },
}

# Stock blueprints: (id, model, metal, plutonium, seconds)
DEFAULT_BLUEPRINT_COSTS = (
    ("bp-mark1", MODEL_MARK_I, 50, 20, 60.0),
    ("bp-mark2", MODEL_MARK_II, 150, 80, 90.0),
    ("bp-mark3", MODEL_MARK_III, 200, 50, 120.0),
    ("bp-vonneumann", MODEL_VON_NEUMANN_PRIME, 500, 300, 180.0),
)

# =============================================================================
# CUSTOM DESIGN COSTING
# =============================================================================
# cost = BASE_DESIGN_COST + sum(stat * multiplier); time adds
# DESIGN_TIME_FACTOR seconds per unit of total resource cost.

BASE_DESIGN_COST = {"metal": 10.0, "plutonium": 10.0, "time": 30.0}

DESIGN_COST_MULTIPLIERS = {
    "mining_speed": {"metal": 100.0, "plutonium": 20.0},
    "flight_speed": {"metal": 150.0, "plutonium": 100.0},
    "replication_speed": {"metal": 50.0, "plutonium": 50.0},
    "scan_range": {"metal": 0.2, "plutonium": 0.05},
    "scan_speed": {"metal": 10.0, "plutonium": 10.0},
    "autonomy_level": {"metal": 500.0, "plutonium": 200.0},
}
DESIGN_TIME_FACTOR = 0.2

# =============================================================================
# UPGRADES
# =============================================================================
# Cost of the next level = base * (level_factor + 1). For scan_range the level
# factor is range / increment.

UPGRADE_COSTS = {
    "mining_speed": {"metal": 100, "plutonium": 10, "increment": 1.0, "name": "Carbide Drills"},
    "flight_speed": {"metal": 100, "plutonium": 20, "increment": 1.0, "name": "Ion Thrusters"},
    "scan_range": {"metal": 50, "plutonium": 5, "increment": 50.0, "name": "Sensor Array"},
    "scan_speed": {"metal": 80, "plutonium": 10, "increment": 0.5, "name": "Quantum CPU"},
    "replication_speed": {
        "metal": 200,
        "plutonium": 50,
        "increment": 0.5,
        "name": "Nano-Assembler",
    },
    "autonomy_level": {"metal": 500, "plutonium": 200, "increment": 1, "name": "Neural Core"},
}

MAX_STAT_LEVELS = {
    "mining_speed": 10.0,
    "flight_speed": 10.0,
    "replication_speed": 5.0,
    "scan_range": 1000.0,
    "scan_speed": 5.0,
    "autonomy_level": 2,
}

# Genesis probe loadout
GENESIS_PROBE_ID = "probe-0"
GENESIS_PROBE_NAME = "Genesis-1"
GENESIS_INVENTORY = {"metal": 100.0, "plutonium": 100.0}
