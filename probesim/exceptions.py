"""Probe simulation exception hierarchy.

Centralised base classes so callers can catch narrowly. The tick itself
never raises for expected conditions (depletion, invalid commands); these
are for programming errors and rejected external input.
"""


class ProbeSimError(Exception):
    """Root of all probe-simulation exceptions."""


class ConfigError(ProbeSimError):
    """Invalid simulation configuration."""


class SimulationError(ProbeSimError):
    """A failure while advancing the simulation by one tick."""


class InvalidTransitionError(SimulationError):
    """A probe was asked to move between two states with no legal edge."""


class SnapshotError(ProbeSimError):
    """A snapshot could not be parsed, validated or written."""


class NarrativeError(ProbeSimError):
    """The external narrative/naming service failed or timed out."""
