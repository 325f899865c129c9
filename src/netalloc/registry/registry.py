"""
Network registry: the per-chain view over the three resource pools.

The Registry's Job
------------------
Deployers ask for resources one node at a time. The registry:

- Creates a chain's network document on first use, with its subnet
- Asks the port, address and RPC allocators for one value each
- Records the grant as a NodeRecord in the chain's document
- Reconciles documents against live processes and containers, returning
  the values of nodes that are gone to their pools

Reconciliation
--------------
A node is active if its port is held by a live process OR its ip is held
by a live container. Everything else is orphaned: it is dropped from the
chain's document and its port and ip re-enter the chain's buckets.
RPC ports are never reclaimed.

Lock Order
----------
`add_node` holds the chain document's lock while it calls the allocators,
which take the pool locks. Reconciliation takes chain locks one at a time
and takes pool locks only after releasing them. Pool locks are never held
while acquiring a chain lock.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

from netalloc.config import DEFAULT_POOL_CONFIG, HOST_IP_OVERRIDE, NETWORK_CONFIG_FILE, PoolConfig
from netalloc.liveness import HostLiveStateProvider, LiveSnapshot, LiveStateProvider
from netalloc.metrics import reconciliation_time, reconciliations_total
from netalloc.pools import AddressPoolAllocator, PortPoolAllocator, RpcPortAllocator
from netalloc.storage import Storage, load_document, save_document
from netalloc.types import (
    ChainId,
    ConfigNotFoundError,
    ExternalToolError,
    NetallocError,
    PoolExhaustedError,
)

from .models import (
    ChainNetworkConfig,
    NodeAllocation,
    NodeRecord,
    NodeRole,
    ReclaimableResources,
)

logger = logging.getLogger(__name__)

V = TypeVar("V")

ReclaimReport = dict[ChainId, ReclaimableResources]
"""Orphaned values per chain, as produced by reconciliation."""


@dataclass(slots=True)
class NetworkRegistry:
    """
    Orchestrates the allocators and owns every chain's node list.

    Construct once per process and pass it to every consumer.
    """

    storage: Storage
    """Backend holding every document."""

    ports: PortPoolAllocator
    """P2P port pool."""

    addresses: AddressPoolAllocator
    """IPv4 address pool and subnets."""

    rpc_ports: RpcPortAllocator
    """Permanent RPC port table."""

    live_state: LiveStateProvider = field(default_factory=HostLiveStateProvider)
    """Source of live processes and containers for reconciliation."""

    @classmethod
    def from_storage(
        cls,
        storage: Storage,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        *,
        live_state: LiveStateProvider | None = None,
        host_ip: str | None = HOST_IP_OVERRIDE,
    ) -> NetworkRegistry:
        """
        Wire a registry and its allocators onto one storage backend.

        Args:
            storage: Backend holding every document.
            config: Pool geometry for pools created from scratch.
            live_state: Reconciliation source. Defaults to host introspection.
            host_ip: Fixed primary IPv4 for subnet derivation. Detected when None.
        """
        return cls(
            storage=storage,
            ports=PortPoolAllocator(storage, config),
            addresses=AddressPoolAllocator(storage, config, host_ip=host_ip),
            rpc_ports=RpcPortAllocator(storage, config.base_rpc_port),
            live_state=live_state if live_state is not None else HostLiveStateProvider(),
        )

    def config_path(self, chain_id: ChainId) -> Path:
        """Location of a chain's network document."""
        return self.storage.root / str(chain_id) / NETWORK_CONFIG_FILE

    # -------------------------------------------------------------------------
    # Allocation
    # -------------------------------------------------------------------------

    async def add_node(
        self,
        chain_id: ChainId,
        role: NodeRole | str,
        address: str,
        *,
        reconcile: bool = True,
    ) -> NodeAllocation:
        """
        Allocate a port, an ip and the chain's RPC port for a new node.

        All three allocators are always tried. A failing allocator does not
        undo the others: the node is recorded with whatever was granted,
        and reconciliation reclaims it once the node is found not running.

        Args:
            chain_id: Chain the node joins.
            role: Node role.
            address: Account identity of the node.
            reconcile: Run `update_global_allocations` first. This reclaims every
                node whose process or container is not running yet, so a deployer
                that allocates several nodes before starting any of them must pass
                False for all but the first call.

        Returns:
            The granted values and the errors of the allocators that failed.

        Raises:
            ConfigCorruptError: If any persisted document is unreadable.
        """
        role = NodeRole(role)
        if reconcile:
            await self.update_global_allocations()

        path = self.config_path(chain_id)
        failures: list[NetallocError] = []
        async with self.storage.locked(path):
            config = await self._ensure_network_config(chain_id)

            port = await self._attempt(self.ports.allocate(chain_id), failures)
            ip = await self._attempt(self.addresses.allocate(chain_id), failures)
            rpc_port = await self.rpc_ports.allocate(chain_id)

            config.nodes.append(
                NodeRecord(address=address, role=role, port=port, rpc_port=rpc_port, ip=ip)
            )
            await save_document(self.storage, path, config)

        if failures:
            logger.error(
                "Partial allocation for %s node %s on chain %d: %s",
                role,
                address,
                chain_id,
                "; ".join(str(e) for e in failures),
            )
        else:
            logger.info(
                "Added %s node %s to chain %d (ip=%s port=%d rpc=%d)",
                role,
                address,
                chain_id,
                ip,
                port,
                rpc_port,
            )
        return NodeAllocation(ip=ip, port=port, rpc_port=rpc_port, failures=failures)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    async def load_network_config(self, chain_id: ChainId) -> ChainNetworkConfig:
        """
        Read a chain's network document.

        Raises:
            ConfigNotFoundError: If the chain has no document yet.
            ConfigCorruptError: If the document is unreadable.
        """
        path = self.config_path(chain_id)
        config = await load_document(self.storage, path, ChainNetworkConfig)
        if config is None:
            raise ConfigNotFoundError(chain_id, path)
        return config

    async def load_config(self, chain_id: ChainId) -> ChainNetworkConfig:
        """Reconcile, then read a chain's network document."""
        await self.update_global_allocations()
        return await self.load_network_config(chain_id)

    async def load_all_network_configs(self) -> list[ChainNetworkConfig]:
        """
        Read every chain's network document.

        Only directories named by a decimal chain id are considered.
        A chain directory without a document is skipped.

        Raises:
            ConfigCorruptError: If any document is unreadable.
        """
        configs: list[ChainNetworkConfig] = []
        for chain_id in await self._chain_ids():
            try:
                configs.append(await self.load_network_config(chain_id))
            except ConfigNotFoundError:
                logger.debug("Chain directory %d has no network config", chain_id)
        return configs

    async def load_rpc_port(self, chain_id: ChainId) -> int | None:
        """The chain's RPC port, or None if none was ever assigned."""
        return await self.rpc_ports.get(chain_id)

    # -------------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------------

    async def capture_snapshot(self) -> LiveSnapshot:
        """
        Query the live state provider.

        A failing backend is logged and contributes nothing. Nodes that only
        that backend would have seen then count as orphaned.
        """
        try:
            processes = await self.live_state.list_processes()
        except ExternalToolError as e:
            logger.warning("Treating live process list as empty: %s", e)
            processes = []

        try:
            containers = await self.live_state.list_containers()
        except ExternalToolError as e:
            logger.warning("Treating live container list as empty: %s", e)
            containers = []

        return LiveSnapshot(processes=tuple(processes), containers=tuple(containers))

    async def collect_and_cleanup_network_configs(
        self, snapshot: LiveSnapshot | None = None
    ) -> ReclaimReport:
        """
        Drop orphaned nodes from every chain document and report their values.

        Args:
            snapshot: Live state to check against. Captured when None.

        Returns:
            Orphaned ports and ips per chain. Every chain with a document has
            an entry, empty if nothing was orphaned.

        Raises:
            ConfigCorruptError: If any document is unreadable.
        """
        if snapshot is None:
            snapshot = await self.capture_snapshot()
        live_ports = snapshot.ports
        live_ips = snapshot.ips

        report: ReclaimReport = {}
        for chain_id in await self._chain_ids():
            path = self.config_path(chain_id)
            async with self.storage.locked(path):
                config = await load_document(self.storage, path, ChainNetworkConfig)
                if config is None:
                    continue

                active: list[NodeRecord] = []
                reclaimable = ReclaimableResources()
                for node in config.nodes:
                    if node.port in live_ports or node.ip in live_ips:
                        active.append(node)
                        continue

                    logger.info(
                        "Node %s of chain %d is not running, reclaiming port=%s ip=%s",
                        node.address,
                        config.chain_id,
                        node.port,
                        node.ip,
                    )
                    if node.port is not None:
                        reclaimable.available_ports.append(str(node.port))
                    if node.ip is not None:
                        reclaimable.available_ips.append(node.ip)

                if len(active) != len(config.nodes):
                    config.nodes = active
                    await save_document(self.storage, path, config)

            report[config.chain_id] = reclaimable
        return report

    async def update_global_allocations(self, snapshot: LiveSnapshot | None = None) -> ReclaimReport:
        """
        Reconcile, then return every orphaned port and ip to its pool.

        Values go to the back of the chain's bound bucket. Values already
        free are skipped.

        Returns:
            The reconciliation report.
        """
        with reconciliation_time.time():
            report = await self.collect_and_cleanup_network_configs(snapshot)
            for chain_id, reclaimable in report.items():
                await self.addresses.release(chain_id, reclaimable.available_ips)
                await self.ports.release(
                    chain_id, [int(port) for port in reclaimable.available_ports]
                )
        reconciliations_total.inc()
        return report

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    async def reset(self) -> None:
        """Delete every pool and chain document."""
        logger.warning("Resetting all network allocations under %s", self.storage.root)
        await self.storage.remove_tree(self.storage.root)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _chain_ids(self) -> list[ChainId]:
        names = await self.storage.list_dirs(self.storage.root)
        return sorted(int(name) for name in names if name.isascii() and name.isdigit())

    async def _ensure_network_config(self, chain_id: ChainId) -> ChainNetworkConfig:
        """Load the chain's document, creating it with a subnet if absent. Lock must be held."""
        path = self.config_path(chain_id)
        try:
            config = await self.load_network_config(chain_id)
        except ConfigNotFoundError:
            logger.info("Creating network config for chain %d", chain_id)
            config = ChainNetworkConfig(chain_id=chain_id, subnet=await self._assign_subnet(chain_id))
            await save_document(self.storage, path, config)
            return config

        if not config.subnet:
            config.subnet = await self._assign_subnet(chain_id)
            await save_document(self.storage, path, config)
        return config

    async def _assign_subnet(self, chain_id: ChainId) -> str:
        try:
            return await self.addresses.assign_subnet(chain_id)
        except PoolExhaustedError as e:
            logger.error("Cannot assign a subnet to chain %d: %s", chain_id, e)
            return ""

    @staticmethod
    async def _attempt(call: Awaitable[V], failures: list[NetallocError]) -> V | None:
        """Await an allocation, recording exhaustion instead of raising."""
        try:
            return await call
        except PoolExhaustedError as e:
            failures.append(e)
            return None
