"""Autonomy engine and behavior-mode constants."""

# Decision log keeps the most recent justifications only
DECISION_LOG_SIZE = 10

# Minimum autonomy level for focus modes
FOCUS_MODE_MIN_AUTONOMY = 2

# Auto-divert and safety-return checks run at most once per interval (seconds)
PERIODIC_CHECK_INTERVAL = 1.0

# Safety override re-heads home when fuel < return cost * margin
SAFETY_MARGIN = 1.2

# Default mode alternates resources every batch of this many whole units
DEFAULT_BATCH_SIZE = 10

# Focus Mining: a system is worth the trip above these yields
FOCUS_MINING_METAL_THRESHOLD = 100
FOCUS_MINING_PLUTONIUM_THRESHOLD = 50

# Focus Science: ignore systems with this much science or less
MEANINGFUL_SCIENCE_THRESHOLD = 5.0

# Focus Replication
REPLICATION_METAL_THRESHOLD = 500
REPLICATION_PLUTONIUM_THRESHOLD = 300
REPLICATION_COOLDOWN = 20.0  # Seconds between autonomous replications
AUTONOMOUS_REPLICATION_TIME = 10.0  # Synthetic blueprint build time (seconds)
