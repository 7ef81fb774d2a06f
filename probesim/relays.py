"""Relay deployment rules shared by the command surface and autonomy."""

from __future__ import annotations

from probesim.config.science import RELAY_NETWORK
from probesim.config.simulation_config import EconomyConfig
from probesim.entities.probe import Probe
from probesim.entities.relay import Relay
from probesim.result import Err, Ok, Result
from probesim.state_machine import UNINTERRUPTIBLE_STATES
from probesim.world import World


def check_relay_deployment(world: World, probe: Probe, economy: EconomyConfig) -> Result[str, str]:
    """Ok(system_id) when ``probe`` may deploy a relay where it is docked."""
    if RELAY_NETWORK not in world.purchased_unlocks:
        return Err("Relay network has not been unlocked")
    if not probe.is_docked or probe.state in UNINTERRUPTIBLE_STATES:
        return Err(f"{probe.name} must be docked and not busy to deploy a relay")
    system = world.get_system(probe.location_id)
    if system is None:
        return Err(f"{probe.name} is not at a known system")
    if world.has_relay(system.id):
        return Err(f"A relay already exists at {system.name}")
    if probe.metal < economy.relay_cost_metal:
        return Err(f"Relay deployment needs {economy.relay_cost_metal:g} Metal")
    return Ok(system.id)


def deploy_relay(world: World, probe: Probe, economy: EconomyConfig, deployed_at: float) -> Relay:
    """Create the relay and charge the probe. Caller has run the check."""
    system = world.systems[probe.location_id]
    relay_id, relay_name = world.allocate_relay_id()
    relay = Relay(
        id=relay_id,
        name=relay_name,
        system_id=system.id,
        position=system.position.copy(),
        deployed_at=deployed_at,
    )
    world.relays[system.id] = relay
    probe.spend(economy.relay_cost_metal, 0)
    return relay
