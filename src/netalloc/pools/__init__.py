"""
Resource pools for local chain networks.

Three allocators, one persisted document each:

- PortPoolAllocator: bucketed P2P ports (ports.json)
- AddressPoolAllocator: bucketed IPv4 addresses and subnets (ips.json)
- RpcPortAllocator: one permanent RPC port per chain (rpcPorts.json)
"""

from .addresses import AddressPoolAllocator, build_subnets
from .allocator import BucketPoolAllocator
from .host import detect_primary_ipv4
from .models import AddressPoolState, PortPoolState, RpcPortState
from .ports import PortPoolAllocator
from .rpc import RpcPortAllocator

__all__ = [
    "AddressPoolAllocator",
    "AddressPoolState",
    "BucketPoolAllocator",
    "PortPoolAllocator",
    "PortPoolState",
    "RpcPortAllocator",
    "RpcPortState",
    "build_subnets",
    "detect_primary_ipv4",
]
