"""Peering arithmetic for mesh and hub-spoke network topologies.

Independent utilities: deployment plans do not cross-check their region
count against these numbers.
"""

from typing import Literal

from az_fleet.errors import InvalidRangeError, InvalidTypeError

PeeringTopology = Literal["mesh", "hub-spoke"]


def mesh_peering_count(vnet_count: int) -> int:
    """Return the connections needed to fully mesh *vnet_count* VNets: n(n-1)/2."""
    if vnet_count < 0:
        raise InvalidRangeError("VNet count must be zero or greater", field="vnetCount")
    return vnet_count * (vnet_count - 1) // 2


def hub_spoke_peering_count(spoke_count: int) -> int:
    """Return the connections for a hub-spoke topology: one per spoke."""
    if spoke_count < 0:
        raise InvalidRangeError("Spoke count must be zero or greater", field="spokeCount")
    return spoke_count


def peering_count(topology: str, count: int) -> int:
    """Dispatch on *topology*; *count* is all VNets for mesh, spokes for hub-spoke."""
    if topology == "mesh":
        return mesh_peering_count(count)
    if topology == "hub-spoke":
        return hub_spoke_peering_count(count)
    raise InvalidTypeError(f"Unknown peering topology: {topology!r}", field="topology")
