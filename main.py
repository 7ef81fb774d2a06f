"""Main entry point for the probe simulation.

Runs the simulation headless: a fixed number of ticks at a fixed delta,
printing population and science stats at an interval and optionally
writing a snapshot at the end.
"""

import argparse
import asyncio
import logging
import sys

from probesim.config.simulation_config import SimulationConfig
from probesim.exceptions import ConfigError, SimulationError
from probesim.logging_config import configure_logging

logger = logging.getLogger(__name__)

SEPARATOR_WIDTH = 60


def log_stats(stats):
    logger.info(
        "tick %d (t=%.1fs): %d probes, %d/%d systems discovered, %d visited, "
        "science %.1f, %d relays, generation %d",
        stats["tick"],
        stats["clock"],
        stats["probes"],
        stats["discovered"],
        stats["systems"],
        stats["visited"],
        stats["science"],
        stats["relays"],
        stats["generations"],
    )


def run_headless(ticks: int, delta: float, stats_interval: int, seed=None, snapshot=None):
    """Run the simulation in headless mode.

    Args:
        ticks: Number of ticks to simulate
        delta: Seconds of simulation time per tick
        stats_interval: Print stats every N ticks
        seed: Optional random seed for deterministic behavior
        snapshot: Optional path to write a snapshot to when done
    """
    from probesim.simulation.engine import SimulationEngine

    config = SimulationConfig.from_env()
    if seed is not None:
        config = config.with_overrides(seed=seed)
    engine = SimulationEngine(config)

    logger.info("=" * SEPARATOR_WIDTH)
    logger.info("PROBE SIMULATION - HEADLESS")
    logger.info("=" * SEPARATOR_WIDTH)

    for tick in range(1, ticks + 1):
        engine.tick(delta)
        if stats_interval > 0 and tick % stats_interval == 0:
            asyncio.run(engine.flush_narrative())
            log_stats(engine.stats())

    asyncio.run(engine.flush_narrative())
    log_stats(engine.stats())

    if snapshot:
        path = engine.save_snapshot(snapshot)
        logger.info("Snapshot written to %s", path)
    return engine


def main():
    """Parse command-line arguments and run the simulation."""
    parser = argparse.ArgumentParser(
        description="Self-replicating probe simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Quick test run (1000 ticks of 0.1s)
  python main.py --ticks 1000

  # Long simulation with seed for reproducibility
  python main.py --ticks 100000 --seed 42 --stats-interval 5000

  # Save the final world for later inspection
  python main.py --ticks 20000 --snapshot snapshots/run.json
        """,
    )

    parser.add_argument(
        "--ticks", type=int, default=1000, help="Number of ticks to simulate (default: 1000)"
    )

    parser.add_argument(
        "--delta",
        type=float,
        default=0.1,
        help="Simulation seconds per tick (default: 0.1)",
    )

    parser.add_argument(
        "--stats-interval",
        type=int,
        default=100,
        help="Print stats every N ticks (default: 100)",
    )

    parser.add_argument(
        "--seed", type=int, default=None, help="Random seed for deterministic behavior (optional)"
    )

    parser.add_argument(
        "--snapshot",
        type=str,
        default=None,
        metavar="FILENAME",
        help="Write a world snapshot to this file when the run ends",
    )

    parser.add_argument(
        "--log-level", type=str, default=None, help="Log level (default: PROBESIM_LOG_LEVEL or INFO)"
    )

    args = parser.parse_args()
    configure_logging(level=args.log_level)

    logger.info("Configuration: %d ticks of %.3fs, stats every %d ticks", args.ticks, args.delta, args.stats_interval)
    try:
        run_headless(
            args.ticks, args.delta, args.stats_interval, seed=args.seed, snapshot=args.snapshot
        )
    except (ConfigError, SimulationError, ValueError) as e:
        logger.error("Simulation failed: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
