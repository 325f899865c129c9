"""Exception hierarchy for resource allocation."""

from __future__ import annotations

from pathlib import Path


class NetallocError(Exception):
    """
    Base exception for all allocation errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class PoolExhaustedError(NetallocError):
    """
    Raised when no bucket of a pool has a free slot for a chain.

    Attributes:
        pool: Name of the exhausted pool (e.g. "ports", "ips").
        chain_id: Chain that requested the slot.
        bucket_id: Bucket the chain is bound to, if a binding exists.
    """

    def __init__(self, pool: str, chain_id: int, *, bucket_id: str | None = None) -> None:
        self.pool = pool
        self.chain_id = chain_id
        self.bucket_id = bucket_id

        if bucket_id is None:
            msg = f"No {pool} bucket has a free slot for chain {chain_id}"
        else:
            msg = f"Bucket {bucket_id} has no free {pool} left for chain {chain_id}"

        super().__init__(msg)


class ConfigNotFoundError(NetallocError):
    """
    Raised when a chain has no persisted network configuration yet.

    Attributes:
        chain_id: Chain whose configuration was requested.
        path: Location the configuration was expected at.
    """

    def __init__(self, chain_id: int, path: Path) -> None:
        self.chain_id = chain_id
        self.path = path
        super().__init__(f"No network config for chain {chain_id} at {path}")


class ConfigCorruptError(NetallocError):
    """
    Raised when a persisted file cannot be parsed or fails validation.

    Always fatal: the file is never replaced with defaults.

    Attributes:
        path: The unreadable file.
        detail: Description of what went wrong.
    """

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Corrupt state file {path}: {detail}")


class ExternalToolError(NetallocError):
    """
    Raised when process or container introspection fails.

    Attributes:
        tool: The introspection backend that failed (e.g. "psutil", "docker").
        detail: Description of what went wrong.
    """

    def __init__(self, tool: str, detail: str) -> None:
        self.tool = tool
        self.detail = detail
        super().__init__(f"{tool} introspection failed: {detail}")
