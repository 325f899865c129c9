"""
Persisted pool documents.

Each pool is one JSON document shared by every chain. A pool is split into
fixed-capacity buckets; a chain is bound to exactly one bucket per pool and
draws all of its values from it.
"""

from __future__ import annotations

from pydantic import Field

from netalloc.types import BucketId, CamelModel, ChainId


class PortPoolState(CamelModel):
    """
    Contents of ports.json.

        {
          "ports": {"network_1": [30403, 30404, ...], ...},
          "chainIdMapping": {"10": "network_1"}
        }
    """

    ports: dict[BucketId, list[int]] = Field(default_factory=dict)
    """Free ports per bucket, lowest first."""

    chain_id_mapping: dict[ChainId, BucketId] = Field(default_factory=dict)
    """Bucket each chain is bound to. Never rewritten once set."""

    @property
    def buckets(self) -> dict[BucketId, list[int]]:
        """Free values per bucket."""
        return self.ports


class AddressPoolState(CamelModel):
    """
    Contents of ips.json.

    Same shape as the port pool, plus the /24 subnet that contains each
    bucket's addresses.
    """

    ips: dict[BucketId, list[str]] = Field(default_factory=dict)
    """Free IPv4 addresses per bucket, in host order."""

    chain_id_mapping: dict[ChainId, BucketId] = Field(default_factory=dict)
    """Bucket each chain is bound to. Never rewritten once set."""

    subnets: dict[BucketId, str] = Field(default_factory=dict)
    """CIDR of each bucket. Computed once when the pool is created."""

    @property
    def buckets(self) -> dict[BucketId, list[str]]:
        """Free values per bucket."""
        return self.ips


class RpcPortState(CamelModel):
    """Contents of rpcPorts.json."""

    rpc_ports: dict[ChainId, int] = Field(default_factory=dict)
    """Permanent RPC port of each chain."""
