"""Tests for the allocation exception hierarchy."""

from __future__ import annotations

from pathlib import Path

import pytest

from netalloc.types import (
    ConfigCorruptError,
    ConfigNotFoundError,
    ExternalToolError,
    NetallocError,
    PoolExhaustedError,
)


class TestMessages:
    """Tests for error messages and attributes."""

    def test_pool_exhausted_unbound(self) -> None:
        """Without a bucket the message names the pool."""
        error = PoolExhaustedError("ports", 10)

        assert error.bucket_id is None
        assert str(error) == "No ports bucket has a free slot for chain 10"

    def test_pool_exhausted_bound(self) -> None:
        """With a bucket the message names it."""
        error = PoolExhaustedError("ips", 10, bucket_id="network_2")

        assert str(error) == "Bucket network_2 has no free ips left for chain 10"

    def test_config_not_found(self) -> None:
        """The missing path is kept."""
        error = ConfigNotFoundError(7, Path("/x/7/network-config.json"))

        assert error.chain_id == 7
        assert "chain 7" in str(error)

    def test_config_corrupt(self) -> None:
        """Detail and path are kept."""
        error = ConfigCorruptError(Path("ports.json"), "bad")

        assert error.detail == "bad"
        assert str(error) == "Corrupt state file ports.json: bad"

    def test_external_tool(self) -> None:
        """The tool name leads the message."""
        assert str(ExternalToolError("docker", "down")) == "docker introspection failed: down"

    def test_repr(self) -> None:
        """repr shows the class and message."""
        assert repr(NetallocError("x")) == "NetallocError('x')"


@pytest.mark.parametrize(
    "error",
    [
        PoolExhaustedError("ports", 1),
        ConfigNotFoundError(1, Path("p")),
        ConfigCorruptError(Path("p"), "d"),
        ExternalToolError("psutil", "d"),
    ],
)
def test_all_errors_share_base(error: NetallocError) -> None:
    """Every error kind can be caught as NetallocError."""
    assert isinstance(error, NetallocError)
