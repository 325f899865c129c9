"""Permanent per-chain RPC port assignment."""

from __future__ import annotations

import logging

from netalloc.config import BASE_RPC_PORT, RPC_PORTS_FILE
from netalloc.metrics import allocations_total
from netalloc.storage import Storage, load_document, save_document
from netalloc.types import ChainId

from .models import RpcPortState

logger = logging.getLogger(__name__)


class RpcPortAllocator:
    """
    Assigns each chain a single RPC port from rpcPorts.json.

    An assignment is permanent: the port is never released, so a chain's
    RPC URL stays stable across node restarts.
    """

    pool_name = "rpc_ports"

    def __init__(self, storage: Storage, base_port: int = BASE_RPC_PORT) -> None:
        """
        Initialize the allocator.

        Args:
            storage: Backend holding rpcPorts.json.
            base_port: First port considered for a new chain.
        """
        self.storage = storage
        self.base_port = base_port
        self.path = storage.root / RPC_PORTS_FILE

    async def allocate(self, chain_id: ChainId) -> int:
        """
        Return the chain's RPC port, assigning one on first call.

        A new port is the lowest value at or above the base port that no
        other chain holds. There is no upper bound, so this never fails.
        """
        async with self.storage.locked(self.path):
            state = await load_document(self.storage, self.path, RpcPortState)
            if state is None:
                logger.info("RPC port file %s does not exist, creating", self.path)
                state = RpcPortState()

            port = state.rpc_ports.get(chain_id)
            if port is not None:
                return port

            used = set(state.rpc_ports.values())
            port = self.base_port
            while port in used:
                port += 1

            state.rpc_ports[chain_id] = port
            await save_document(self.storage, self.path, state)

        allocations_total.labels(pool=self.pool_name).inc()
        logger.info("Assigned RPC port %d to chain %d", port, chain_id)
        return port

    async def get(self, chain_id: ChainId) -> int | None:
        """RPC port of the chain, or None if it was never assigned."""
        state = await load_document(self.storage, self.path, RpcPortState)
        if state is None:
            return None
        return state.rpc_ports.get(chain_id)
