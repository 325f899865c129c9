"""
Network registry: per-chain node records and reconciliation.
"""

from .models import (
    ChainNetworkConfig,
    NodeAllocation,
    NodeRecord,
    NodeRole,
    ReclaimableResources,
)
from .registry import NetworkRegistry, ReclaimReport

__all__ = [
    "ChainNetworkConfig",
    "NetworkRegistry",
    "NodeAllocation",
    "NodeRecord",
    "NodeRole",
    "ReclaimReport",
    "ReclaimableResources",
]
