"""
Bucketed pool allocation shared by the port and address allocators.

The Allocation Cycle
--------------------
Every mutating call runs one read-modify-write cycle under the pool file's lock:

1. Reload the pool document (no in-memory copy is trusted across calls)
2. Bind the chain to the first non-empty bucket if it has no binding yet
3. Pop the head of the bound bucket's free list
4. Persist the whole document
5. Return the popped value

Free lists are created in ascending order, so the head is always the
lowest free slot of the bucket.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import ClassVar, Generic, Protocol, TypeVar

from netalloc.config import DEFAULT_POOL_CONFIG, PoolConfig
from netalloc.metrics import allocations_total, pool_exhausted_total, reclaimed_total
from netalloc.storage import Storage, load_document, save_document
from netalloc.types import BucketId, CamelModel, ChainId, PoolExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T", int, str)


class BucketedState(Protocol[T]):
    """Structural view of a pool document."""

    chain_id_mapping: dict[ChainId, BucketId]

    @property
    def buckets(self) -> dict[BucketId, list[T]]: ...


S = TypeVar("S", bound=CamelModel)


class BucketPoolAllocator(ABC, Generic[S, T]):
    """
    Hands out values from a bucketed pool document.

    Subclasses describe the document and how a fresh pool is laid out.
    """

    pool_name: ClassVar[str]
    """Short pool name used in logs, metrics and errors."""

    file_name: ClassVar[str]
    """Document name under the storage root."""

    state_model: ClassVar[type[CamelModel]]
    """Pydantic model of the document."""

    def __init__(self, storage: Storage, config: PoolConfig = DEFAULT_POOL_CONFIG) -> None:
        """
        Initialize the allocator.

        Nothing is read until the first call.

        Args:
            storage: Backend holding the pool document.
            config: Geometry used if the pool document has to be created.
        """
        self.storage = storage
        self.config = config
        self.path: Path = storage.root / self.file_name

    @abstractmethod
    async def _initial_state(self) -> S:
        """Build the document of a freshly created pool."""

    # -------------------------------------------------------------------------
    # Mutating Operations
    # -------------------------------------------------------------------------

    async def allocate(self, chain_id: ChainId) -> T:
        """
        Take the lowest free value from the chain's bucket.

        Binds the chain to a bucket first if it has none.

        Args:
            chain_id: Requesting chain.

        Returns:
            The allocated value. It is no longer in any free list.

        Raises:
            PoolExhaustedError: If no bucket can serve the chain.
        """
        async with self.storage.locked(self.path):
            state = await self._load()
            bucket_id = self._bind(state, chain_id)

            free = state.buckets[bucket_id]
            if not free:
                pool_exhausted_total.labels(pool=self.pool_name).inc()
                logger.error(
                    "Bucket %s has no free %s for chain %d", bucket_id, self.pool_name, chain_id
                )
                raise PoolExhaustedError(self.pool_name, chain_id, bucket_id=bucket_id)

            value = free.pop(0)
            await save_document(self.storage, self.path, state)

        allocations_total.labels(pool=self.pool_name).inc()
        logger.info(
            "Allocated %s %s to chain %d from %s", self.pool_name, value, chain_id, bucket_id
        )
        return value

    async def ensure_binding(self, chain_id: ChainId) -> BucketId:
        """
        Bind the chain to a bucket without consuming a value.

        Idempotent: an existing binding is returned unchanged.

        Raises:
            PoolExhaustedError: If the chain is unbound and every bucket is empty.
        """
        async with self.storage.locked(self.path):
            state = await self._load()
            already_bound = chain_id in state.chain_id_mapping
            bucket_id = self._bind(state, chain_id)
            if not already_bound:
                await save_document(self.storage, self.path, state)
        return bucket_id

    async def release(self, chain_id: ChainId, values: Iterable[T]) -> list[T]:
        """
        Return reclaimed values to the back of the chain's bucket.

        A value already present in any bucket of this pool is skipped, so
        releasing the same value twice never duplicates it.

        Args:
            chain_id: Chain the values were allocated to.
            values: Values proven unused.

        Returns:
            The values actually re-inserted, in insertion order.
        """
        values = list(values)
        if not values:
            return []

        async with self.storage.locked(self.path):
            state = await self._load()
            bucket_id = state.chain_id_mapping.get(chain_id)
            if bucket_id is None:
                logger.warning(
                    "Chain %d has no %s bucket, dropping %d reclaimed values",
                    chain_id,
                    self.pool_name,
                    len(values),
                )
                return []

            present = {v for free in state.buckets.values() for v in free}
            accepted: list[T] = []
            for value in values:
                if value in present:
                    logger.debug("%s %s is already free, skipping", self.pool_name, value)
                    continue
                state.buckets[bucket_id].append(value)
                present.add(value)
                accepted.append(value)

            if accepted:
                await save_document(self.storage, self.path, state)

        if accepted:
            reclaimed_total.labels(pool=self.pool_name).inc(len(accepted))
            logger.info(
                "Returned %d %s to %s for chain %d",
                len(accepted),
                self.pool_name,
                bucket_id,
                chain_id,
            )
        return accepted

    # -------------------------------------------------------------------------
    # Read-only Operations
    # -------------------------------------------------------------------------

    async def bucket_for(self, chain_id: ChainId) -> BucketId | None:
        """Bucket the chain is bound to, or None. Never creates the pool."""
        state = await load_document(self.storage, self.path, self.state_model)
        if state is None:
            return None
        return state.chain_id_mapping.get(chain_id)

    async def free_slots(self) -> dict[BucketId, int]:
        """Number of free values per bucket. Empty if the pool does not exist yet."""
        state = await load_document(self.storage, self.path, self.state_model)
        if state is None:
            return {}
        return {bucket_id: len(free) for bucket_id, free in state.buckets.items()}

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _load(self) -> S:
        """Load the pool document, creating it on first use. Lock must be held."""
        state = await load_document(self.storage, self.path, self.state_model)
        if state is None:
            logger.info("%s pool file %s does not exist, creating", self.pool_name, self.path)
            state = await self._initial_state()
            await save_document(self.storage, self.path, state)
        return state  # type: ignore[return-value]

    def _bind(self, state: BucketedState[T], chain_id: ChainId) -> BucketId:
        """Return the chain's bucket, binding it to the first non-empty one if needed."""
        bucket_id = state.chain_id_mapping.get(chain_id)
        if bucket_id is not None:
            return bucket_id

        # Scan in document order, which is the creation order network_1..network_N.
        for candidate, free in state.buckets.items():
            if free:
                state.chain_id_mapping[chain_id] = candidate
                logger.info("Bound chain %d to %s bucket %s", chain_id, self.pool_name, candidate)
                return candidate

        pool_exhausted_total.labels(pool=self.pool_name).inc()
        logger.error("No %s bucket has free slots for chain %d", self.pool_name, chain_id)
        raise PoolExhaustedError(self.pool_name, chain_id)
