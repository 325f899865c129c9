"""
Bucketed pool of IPv4 addresses and the subnet assigned to each bucket.

Subnets are derived once, when ips.json is created, from the host's primary
IPv4 address. The first two octets are reused; the third octet steps by the
bucket capacity per bucket:

    bucket k (0-based) -> a.b.(k * capacity % 254).0/24

and the bucket's addresses are hosts .1 .. .capacity of that subnet.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from netalloc.config import DEFAULT_POOL_CONFIG, HOST_IP_OVERRIDE, IPS_FILE, PoolConfig
from netalloc.storage import Storage, load_document
from netalloc.types import ChainId, ConfigCorruptError

from .allocator import BucketPoolAllocator
from .host import detect_primary_ipv4
from .models import AddressPoolState

logger = logging.getLogger(__name__)

_THIRD_OCTET_RANGE = 254


def build_subnets(host_ip: str, config: PoolConfig) -> dict[str, tuple[str, list[str]]]:
    """
    Lay out the subnet and addresses of every bucket.

    Args:
        host_ip: Dotted IPv4 whose first two octets prefix every subnet.
        config: Pool geometry.

    Returns:
        Mapping from bucket id to (CIDR, addresses in host order).
    """
    octet_a, octet_b, _, _ = host_ip.split(".")
    layout: dict[str, tuple[str, list[str]]] = {}
    for index, bucket_id in enumerate(config.bucket_ids()):
        segment = (index * config.bucket_capacity) % _THIRD_OCTET_RANGE
        prefix = f"{octet_a}.{octet_b}.{segment}"
        hosts = [f"{prefix}.{host}" for host in range(1, config.bucket_capacity + 1)]
        layout[bucket_id] = (f"{prefix}.0/24", hosts)
    return layout


class AddressPoolAllocator(BucketPoolAllocator[AddressPoolState, str]):
    """
    Allocates container IPv4 addresses from ips.json.

    Reading a chain's subnet never allocates: call `ensure_binding` (or
    `assign_subnet`, which does both) before `subnet_for`.
    """

    pool_name = "ips"
    file_name = IPS_FILE
    state_model = AddressPoolState

    def __init__(
        self,
        storage: Storage,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        *,
        host_ip: str | None = HOST_IP_OVERRIDE,
        host_ip_provider: Callable[[], str] = detect_primary_ipv4,
    ) -> None:
        """
        Initialize the allocator.

        Args:
            storage: Backend holding the pool document.
            config: Geometry used if the pool document has to be created.
            host_ip: Fixed primary IPv4. Skips detection when given.
            host_ip_provider: Detection used when `host_ip` is None.
        """
        super().__init__(storage, config)
        self._host_ip = host_ip
        self._host_ip_provider = host_ip_provider

    async def _initial_state(self) -> AddressPoolState:
        host_ip = self._host_ip
        if host_ip is None:
            host_ip = await asyncio.to_thread(self._host_ip_provider)
        logger.info("Deriving address pool subnets from host IPv4 %s", host_ip)

        state = AddressPoolState()
        for bucket_id, (subnet, hosts) in build_subnets(host_ip, self.config).items():
            state.ips[bucket_id] = hosts
            state.subnets[bucket_id] = subnet
        return state

    async def subnet_for(self, chain_id: ChainId) -> str | None:
        """
        CIDR of the chain's bound bucket.

        Side-effect free.

        Returns:
            The subnet, or None if the chain has no bucket in this pool.
        """
        state = await load_document(self.storage, self.path, AddressPoolState)
        if state is None:
            return None
        bucket_id = state.chain_id_mapping.get(chain_id)
        if bucket_id is None:
            return None
        return state.subnets.get(bucket_id)

    async def assign_subnet(self, chain_id: ChainId) -> str:
        """
        Bind the chain to a bucket if needed and return that bucket's subnet.

        Raises:
            PoolExhaustedError: If the chain is unbound and every bucket is empty.
            ConfigCorruptError: If the bound bucket has no recorded subnet.
        """
        bucket_id = await self.ensure_binding(chain_id)
        subnet = await self.subnet_for(chain_id)
        if subnet is None:
            raise ConfigCorruptError(self.path, f"no subnet recorded for bucket {bucket_id}")
        return subnet
