"""Bucketed pool of P2P TCP ports."""

from __future__ import annotations

from netalloc.config import PORTS_FILE

from .allocator import BucketPoolAllocator
from .models import PortPoolState


class PortPoolAllocator(BucketPoolAllocator[PortPoolState, int]):
    """
    Allocates P2P ports from ports.json.

    Bucket i (1-based) holds the ports

        base_port + i * port_stride + slot,  slot in [0, bucket_capacity)

    With the defaults, network_1 holds 30403..30421 and network_4 holds 30703..30721.
    """

    pool_name = "ports"
    file_name = PORTS_FILE
    state_model = PortPoolState

    async def _initial_state(self) -> PortPoolState:
        cfg = self.config
        state = PortPoolState()
        for index, bucket_id in enumerate(cfg.bucket_ids(), start=1):
            first = cfg.base_port + index * cfg.port_stride
            state.ports[bucket_id] = list(range(first, first + cfg.bucket_capacity))
        return state
