"""
Global configuration for local network resource allocation.

This module contains environment-specific settings and the default pool
geometry shared by every allocator.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from typing_extensions import Final

from netalloc.types import StrictBaseModel

_SUPPORTED_NETALLOC_ENVS: list[str] = ["prod", "test"]

NETALLOC_ENV = os.environ.get("NETALLOC_ENV", "prod").lower()
"""The environment flag ('prod' or 'test'). Defaults to 'prod'."""

if NETALLOC_ENV not in _SUPPORTED_NETALLOC_ENVS:
    raise ValueError(
        f"Invalid NETALLOC_ENV environment variable: '{NETALLOC_ENV}'. "
        f"Supported values: {_SUPPORTED_NETALLOC_ENVS}"
    )

# --- Storage Layout ---

STORAGE_ROOT: Final = Path(os.environ.get("NETALLOC_STORAGE_ROOT", "local-storage/networks"))
"""Directory holding the pool files and one sub-directory per chain."""

HOST_IP_OVERRIDE: Final = os.environ.get("NETALLOC_HOST_IP") or None
"""Primary IPv4 to derive subnets from. Auto-detected when unset."""

PORTS_FILE: Final = "ports.json"
"""Port pool file name."""

IPS_FILE: Final = "ips.json"
"""Address pool file name."""

RPC_PORTS_FILE: Final = "rpcPorts.json"
"""RPC port table file name."""

NETWORK_CONFIG_FILE: Final = "network-config.json"
"""Per-chain network configuration file name."""

# --- Pool Geometry ---

BUCKET_COUNT: Final = 4
"""Number of buckets per pool. Fixed at first initialization."""

BUCKET_CAPACITY: Final = 19
"""Slots per bucket. Fixed at first initialization."""

BASE_P2P_PORT: Final = 30303
"""Base of the P2P port range."""

PORT_BUCKET_STRIDE: Final = 100
"""Distance between the first ports of two consecutive buckets."""

BASE_RPC_PORT: Final = 8575
"""First port scanned when assigning an RPC port."""

BUCKET_PREFIX: Final = "network_"
"""Bucket ids are this prefix followed by a 1-based index."""

# --- Live State Introspection ---

NODE_PROCESS_NAME: Final = "geth"
"""Executable name of local node processes."""

DOCKER_NETWORK_PATTERN: Final = r"^eth(\d+)$"
"""Docker networks managed by the deployer; the group captures the chain id."""


class PoolConfig(StrictBaseModel):
    """
    Geometry of the bucketed port and address pools.

    Only consulted when a pool file is created. Existing files keep the
    geometry they were created with.
    """

    bucket_count: int = BUCKET_COUNT
    bucket_capacity: int = BUCKET_CAPACITY
    base_port: int = BASE_P2P_PORT
    port_stride: int = PORT_BUCKET_STRIDE
    base_rpc_port: int = BASE_RPC_PORT

    def bucket_ids(self) -> list[str]:
        """Bucket ids in allocation scan order."""
        return [f"{BUCKET_PREFIX}{index}" for index in range(1, self.bucket_count + 1)]

    @classmethod
    def from_yaml_file(cls, path: Path) -> PoolConfig:
        """
        Load pool geometry overrides from a YAML file.

        Keys may be snake_case or camelCase. Missing keys keep their defaults.
        """
        with path.open() as f:
            data = yaml.safe_load(f)
        # YAML returns None for empty file
        return cls.model_validate(data or {})


DEFAULT_POOL_CONFIG: Final = PoolConfig()
"""The default pool geometry: 4 buckets of 19 slots."""
