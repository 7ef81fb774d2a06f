"""Science unlock catalog.

Each unlock costs science from the global pool and may require other unlocks.
Effects are either a behavior-mode module, a max-level boost for a stat, or a
capability flag checked by commands (relay network).
"""

RELAY_NETWORK = "relay_network"
FOCUS_MINING_MODULE = "focus_mining_module"
FOCUS_EXPLORING_MODULE = "focus_exploring_module"
FOCUS_SCIENCE_MODULE = "focus_science_module"
ADVANCED_PROPULSION = "advanced_propulsion"
DEEP_FIELD_SENSORS = "deep_field_sensors"

# id -> (display name, cost, prerequisites, effect)
# effect: ("capability", None, 0) | ("behavior", mode_value, 0) |
#         ("max_level", stat_name, amount)
SCIENCE_UNLOCKS = {
    RELAY_NETWORK: ("Relay Network", 100.0, (), ("capability", None, 0)),
    FOCUS_MINING_MODULE: (
        "Focus Mining Module",
        150.0,
        (),
        ("behavior", "focus_mining", 0),
    ),
    FOCUS_EXPLORING_MODULE: (
        "Focus Exploring Module",
        150.0,
        (),
        ("behavior", "focus_exploring", 0),
    ),
    FOCUS_SCIENCE_MODULE: (
        "Focus Science Module",
        200.0,
        (RELAY_NETWORK,),
        ("behavior", "focus_science", 0),
    ),
    ADVANCED_PROPULSION: (
        "Advanced Propulsion",
        300.0,
        (),
        ("max_level", "flight_speed", 5),
    ),
    DEEP_FIELD_SENSORS: (
        "Deep Field Sensors",
        250.0,
        (),
        ("max_level", "scan_range", 500),
    ),
}
