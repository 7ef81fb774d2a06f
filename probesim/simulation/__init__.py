"""Tick scheduling and the per-tick mutation context.

Import the engine from ``probesim.simulation.engine``; state processors and
autonomy import ``probesim.simulation.mutations`` without pulling it in.
"""
