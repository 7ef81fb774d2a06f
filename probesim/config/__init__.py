"""Configuration package for the probe simulation.

Constants live in small themed modules (universe, economy, probes, autonomy,
science). ``simulation_config`` aggregates the tunable subset into
dataclasses that the engine carries around.
"""
