"""
Live process and container introspection.

Feeds reconciliation with typed snapshots of what is still running.
"""

from .containers import containers_from_network, scan_managed_networks
from .processes import parse_node_argv, scan_node_processes
from .provider import HostLiveStateProvider
from .types import LiveContainer, LiveProcess, LiveSnapshot, LiveStateProvider

__all__ = [
    "HostLiveStateProvider",
    "LiveContainer",
    "LiveProcess",
    "LiveSnapshot",
    "LiveStateProvider",
    "containers_from_network",
    "parse_node_argv",
    "scan_managed_networks",
    "scan_node_processes",
]
