"""Entity records for the probe simulation.

Entities are plain dataclasses; all behavior lives in the state processors,
the autonomy engine and the command surface.
"""

from probesim.entities.blueprint import Blueprint, BlueprintCost
from probesim.entities.probe import Probe, ProbeStats, ResourceType
from probesim.entities.relay import Relay
from probesim.entities.solar_system import SolarSystem

__all__ = [
    "Blueprint",
    "BlueprintCost",
    "Probe",
    "ProbeStats",
    "Relay",
    "ResourceType",
    "SolarSystem",
]
