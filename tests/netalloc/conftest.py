"""
Shared pytest fixtures for all netalloc tests.

Every fixture builds on a fresh storage root under tmp_path, so tests never
share allocation state.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from netalloc.config import PoolConfig
from netalloc.pools import AddressPoolAllocator, PortPoolAllocator, RpcPortAllocator
from netalloc.registry import NetworkRegistry
from netalloc.storage import FileSystemStorage
from tests.netalloc.helpers import TEST_HOST_IP, FakeLiveState


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    """Directory holding every allocation document."""
    return tmp_path / "networks"


@pytest.fixture
def storage(storage_root: Path) -> FileSystemStorage:
    """File system storage on a fresh root."""
    return FileSystemStorage(storage_root)


@pytest.fixture
def small_config() -> PoolConfig:
    """Two buckets of three slots each."""
    return PoolConfig(bucket_count=2, bucket_capacity=3)


@pytest.fixture
def port_allocator(storage: FileSystemStorage) -> PortPoolAllocator:
    """Port pool with the default geometry."""
    return PortPoolAllocator(storage)


@pytest.fixture
def address_allocator(storage: FileSystemStorage) -> AddressPoolAllocator:
    """Address pool with the default geometry and a fixed host IPv4."""
    return AddressPoolAllocator(storage, host_ip=TEST_HOST_IP)


@pytest.fixture
def rpc_allocator(storage: FileSystemStorage) -> RpcPortAllocator:
    """RPC port table with the default base port."""
    return RpcPortAllocator(storage)


@pytest.fixture
def live_state() -> FakeLiveState:
    """Live state with nothing running."""
    return FakeLiveState()


@pytest.fixture
def registry(storage: FileSystemStorage, live_state: FakeLiveState) -> NetworkRegistry:
    """Registry over the default pools and the fake live state."""
    return NetworkRegistry.from_storage(storage, live_state=live_state, host_ip=TEST_HOST_IP)
