"""
Per-chain network documents and registry results.

A chain's document lives at <root>/<chainId>/network-config.json:

    {
      "chainId": 10,
      "subnet": "10.0.0.0/24",
      "nodes": [
        {"address": "0xabc...", "role": "signer", "port": 30403, "rpcPort": 8575, "ip": "10.0.0.1"}
      ]
    }
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from netalloc.types import CamelModel, ChainId, NetallocError


class NodeRole(StrEnum):
    """Role a node plays in its chain."""

    BOOTSTRAP = "bootstrap"
    SIGNER = "signer"
    MEMBER = "member"
    RPC = "rpc"


class NodeRecord(CamelModel):
    """
    Resources held by one deployed node.

    Created by `NetworkRegistry.add_node`. Removed only by reconciliation
    once neither its port nor its ip is seen live.
    """

    address: str
    """Account identity of the node. Opaque to the allocator."""

    role: NodeRole
    """Role of the node."""

    port: int | None = None
    """P2P port. None only if the port pool was exhausted."""

    rpc_port: int | None = None
    """The chain's RPC port at the time the node was added."""

    ip: str | None = None
    """Container IPv4 address. None only if the address pool was exhausted."""


class ChainNetworkConfig(CamelModel):
    """Everything allocated to one chain."""

    chain_id: ChainId
    """The chain."""

    subnet: str = ""
    """CIDR of the chain's address bucket. Empty if no bucket could be bound."""

    nodes: list[NodeRecord] = Field(default_factory=list)
    """Nodes in the order they were added."""


class ReclaimableResources(CamelModel):
    """Values of one chain's orphaned nodes, ready to re-enter their pools."""

    available_ports: list[str] = Field(default_factory=list)
    """Orphaned P2P ports, as decimal strings."""

    available_ips: list[str] = Field(default_factory=list, alias="availableIPs")
    """Orphaned IPv4 addresses."""


class NodeAllocation(CamelModel):
    """
    Result of adding a node.

    A field is None when its allocator failed; the matching error is in
    `failures`. Values that were granted stay granted.
    """

    ip: str | None = None
    port: int | None = None
    rpc_port: int | None = None

    failures: list[NetallocError] = Field(default_factory=list, exclude=True)
    """Errors raised by the allocators that did not deliver."""

    @property
    def complete(self) -> bool:
        """Whether every allocator delivered."""
        return not self.failures
