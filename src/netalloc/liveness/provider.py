"""Live state provider backed by the local host."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from netalloc.config import DOCKER_NETWORK_PATTERN, NODE_PROCESS_NAME

from .containers import scan_managed_networks
from .processes import scan_node_processes
from .types import LiveContainer, LiveProcess


@dataclass(slots=True)
class HostLiveStateProvider:
    """
    Reads live node processes with psutil and containers with the docker SDK.

    Both backends block, so each scan runs in a worker thread.
    """

    process_name: str = NODE_PROCESS_NAME
    """Executable name of local node processes."""

    network_pattern: str = DOCKER_NETWORK_PATTERN
    """Regex selecting deployer-managed docker networks."""

    async def list_processes(self) -> list[LiveProcess]:
        """Node processes currently running on the host."""
        return await asyncio.to_thread(scan_node_processes, self.process_name)

    async def list_containers(self) -> list[LiveContainer]:
        """Containers currently attached to managed networks."""
        return await asyncio.to_thread(scan_managed_networks, self.network_pattern)
