"""
Structured records of live local nodes and containers.

Introspection backends translate whatever the host exposes into these
records. The registry only ever sees the records, never raw command output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from netalloc.types import ChainId


@dataclass(frozen=True, slots=True)
class LiveProcess:
    """A node process running directly on the host."""

    chain_id: ChainId
    """Value of the process's --networkid flag."""

    port: int
    """Value of the process's --port flag."""

    data_dir: str
    """Value of the process's --datadir flag."""


@dataclass(frozen=True, slots=True)
class LiveContainer:
    """A container attached to a deployer-managed network."""

    ip: str
    """Container IPv4 address, without prefix length."""

    subnet: str
    """CIDR of the network the container is attached to."""

    container_name: str
    """Container name as reported by the container runtime."""

    network_name: str
    """Name of the network the container is attached to."""


@dataclass(frozen=True, slots=True)
class LiveSnapshot:
    """Point-in-time view of everything that may still hold a resource."""

    processes: tuple[LiveProcess, ...] = field(default_factory=tuple)
    """Node processes found on the host."""

    containers: tuple[LiveContainer, ...] = field(default_factory=tuple)
    """Containers found on managed networks."""

    @property
    def ports(self) -> frozenset[int]:
        """P2P ports held by live processes."""
        return frozenset(p.port for p in self.processes)

    @property
    def ips(self) -> frozenset[str]:
        """IPv4 addresses held by live containers."""
        return frozenset(c.ip for c in self.containers)


class LiveStateProvider(Protocol):
    """
    Source of live process and container state.

    Each method raises ExternalToolError when its backend is unavailable.
    """

    async def list_processes(self) -> list[LiveProcess]:
        """Node processes currently running on the host."""
        ...

    async def list_containers(self) -> list[LiveContainer]:
        """Containers currently attached to managed networks."""
        ...
