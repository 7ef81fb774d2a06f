"""Universe layout and procedural generation constants."""

# Initial map extent; Earth sits at its centre
UNIVERSE_WIDTH = 2000
UNIVERSE_HEIGHT = 2000

# Side length of one square procedural sector
SECTOR_SIZE = 1000

# Systems are placed at least this far from a sector edge
SECTOR_EDGE_MARGIN = 50

# Generated systems per sector: uniform integer in [0, MAX_SYSTEMS_PER_SECTOR]
MAX_SYSTEMS_PER_SECTOR = 3

# =============================================================================
# RICHNESS SCALING
# =============================================================================
# Systems further from Earth are richer. distance_factor =
# min(distance / RICHNESS_REFERENCE_DISTANCE, RICHNESS_FACTOR_CAP)

RICHNESS_REFERENCE_DISTANCE = 5000.0
RICHNESS_FACTOR_CAP = 2.0

# Abundance (0-100): base + scale * factor, +/- variance, clamped
ABUNDANCE_BASE = 10.0
ABUNDANCE_DISTANCE_SCALE = 50.0
ABUNDANCE_VARIANCE = 15.0
ABUNDANCE_MIN = 5
ABUNDANCE_MAX = 100

# Yield: (base + scale * factor) * uniform(0.8, 1.2) * per-resource multiplier
YIELD_BASE = 1000.0
YIELD_DISTANCE_SCALE = 9000.0
YIELD_VARIANCE_MIN = 0.8
YIELD_VARIANCE_SPAN = 0.4
METAL_YIELD_MULTIPLIER = 1.0
PLUTONIUM_YIELD_MULTIPLIER = 0.5

# Finite science per system: base + distance * factor
SCIENCE_BASE_PER_SYSTEM = 50.0
SCIENCE_DISTANCE_FACTOR = 0.05

# =============================================================================
# PROXIMITY
# =============================================================================

PASSIVE_SCAN_RANGE = 150.0  # Discovery radius while moving
DOCKING_RADIUS = 5.0  # Free-flying probes dock when this close to a system
DEEP_SPACE_PUSH_DISTANCE = 10.0  # Undock push so a launch is not re-captured

# =============================================================================
# NAMES
# =============================================================================

EARTH_SYSTEM_ID = "sys-earth"

SYSTEM_NAME_PREFIXES = (
    "Alpha",
    "Beta",
    "Gamma",
    "Delta",
    "Epsilon",
    "Zeta",
    "Eta",
    "Theta",
    "Omicron",
    "Sigma",
)
SYSTEM_NAME_SUFFIXES = (
    "Majoris",
    "Minoris",
    "Prime",
    "Centauri",
    "Cygni",
    "Lyrae",
    "Eridani",
    "V",
    "X",
    "B",
)
