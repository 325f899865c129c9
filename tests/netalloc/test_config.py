"""Tests for pool geometry configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from netalloc.config import DEFAULT_POOL_CONFIG, PoolConfig


class TestPoolConfig:
    """Tests for PoolConfig."""

    def test_defaults(self) -> None:
        """The default geometry is 4 buckets of 19 slots from port 30303."""
        assert DEFAULT_POOL_CONFIG.bucket_count == 4
        assert DEFAULT_POOL_CONFIG.bucket_capacity == 19
        assert DEFAULT_POOL_CONFIG.base_port == 30303
        assert DEFAULT_POOL_CONFIG.port_stride == 100
        assert DEFAULT_POOL_CONFIG.base_rpc_port == 8575

    def test_bucket_ids(self) -> None:
        """Bucket ids are 1-based and in scan order."""
        assert PoolConfig(bucket_count=3).bucket_ids() == ["network_1", "network_2", "network_3"]

    def test_frozen(self) -> None:
        """The geometry cannot be changed after construction."""
        with pytest.raises(ValidationError):
            DEFAULT_POOL_CONFIG.bucket_count = 5  # type: ignore[misc]

    def test_unknown_key_rejected(self) -> None:
        """Misspelt keys are errors, not silently ignored."""
        with pytest.raises(ValidationError):
            PoolConfig.model_validate({"bucketCnt": 2})


class TestFromYamlFile:
    """Tests for loading geometry overrides from YAML."""

    def test_camel_case_keys(self, tmp_path: Path) -> None:
        """camelCase keys override the defaults."""
        path = tmp_path / "pools.yaml"
        path.write_text("bucketCount: 2\nbucketCapacity: 5\n")

        config = PoolConfig.from_yaml_file(path)

        assert (config.bucket_count, config.bucket_capacity) == (2, 5)
        assert config.base_port == 30303

    def test_snake_case_keys(self, tmp_path: Path) -> None:
        """snake_case keys are accepted too."""
        path = tmp_path / "pools.yaml"
        path.write_text("base_rpc_port: 9000\n")

        assert PoolConfig.from_yaml_file(path).base_rpc_port == 9000

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty file yields the defaults."""
        path = tmp_path / "pools.yaml"
        path.write_text("")

        assert PoolConfig.from_yaml_file(path) == DEFAULT_POOL_CONFIG

    def test_wrong_type(self, tmp_path: Path) -> None:
        """Non-integer values are rejected."""
        path = tmp_path / "pools.yaml"
        path.write_text("bucketCount: four\n")

        with pytest.raises(ValidationError):
            PoolConfig.from_yaml_file(path)
