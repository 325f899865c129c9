"""Reusable type definitions shared by the allocators and the registry."""

from .base import CamelModel, StrictBaseModel
from .exceptions import (
    ConfigCorruptError,
    ConfigNotFoundError,
    ExternalToolError,
    NetallocError,
    PoolExhaustedError,
)

ChainId = int
"""Numeric identifier of one sandbox network instance."""

BucketId = str
"""Identifier of a fixed-capacity pool slice (e.g. "network_1")."""

__all__ = [
    "BucketId",
    "CamelModel",
    "ChainId",
    "StrictBaseModel",
    # Exceptions
    "NetallocError",
    "PoolExhaustedError",
    "ConfigNotFoundError",
    "ConfigCorruptError",
    "ExternalToolError",
]
