"""Tests for docker network discovery."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from docker.errors import DockerException
from requests.exceptions import ConnectionError as RequestsConnectionError

from netalloc.liveness import LiveContainer, containers_from_network, scan_managed_networks
from netalloc.types import ExternalToolError


def _network(name: str, containers: dict[str, Any]) -> dict[str, Any]:
    return {
        "Name": name,
        "Id": f"id-{name}",
        "IPAM": {"Config": [{"Subnet": "10.0.0.0/24", "Gateway": "10.0.0.254"}]},
        "Containers": containers,
    }


class TestContainersFromNetwork:
    """Tests for inspect document conversion."""

    def test_strips_prefix_length(self) -> None:
        """Addresses are reported without their /24."""
        attrs = _network(
            "eth10",
            {"abc": {"Name": "signer-1", "IPv4Address": "10.0.0.1/24", "IPv6Address": ""}},
        )

        assert containers_from_network(attrs) == [
            LiveContainer(
                ip="10.0.0.1",
                subnet="10.0.0.0/24",
                container_name="signer-1",
                network_name="eth10",
            )
        ]

    def test_skips_containers_without_ipv4(self) -> None:
        """Containers without an IPv4 address are ignored."""
        attrs = _network("eth10", {"abc": {"Name": "x", "IPv4Address": ""}})

        assert containers_from_network(attrs) == []

    def test_missing_sections(self) -> None:
        """Networks without IPAM or containers yield nothing."""
        assert containers_from_network({"Name": "eth10", "Containers": None}) == []


class TestScanManagedNetworks:
    """Tests for the docker-backed scan."""

    def test_selects_managed_networks(self) -> None:
        """Only networks named eth<chainId> are inspected."""
        managed = MagicMock()
        managed.name = "eth10"
        managed.attrs = _network("eth10", {"a": {"Name": "n", "IPv4Address": "10.0.0.2/24"}})
        other = MagicMock()
        other.name = "bridge"
        other.attrs = _network("bridge", {"b": {"Name": "m", "IPv4Address": "172.17.0.2/16"}})

        client = MagicMock()
        client.networks.list.return_value = [managed, other]
        with patch("docker.from_env", return_value=client):
            found = scan_managed_networks()

        assert [c.ip for c in found] == ["10.0.0.2"]
        client.close.assert_called_once()

    def test_daemon_unreachable(self) -> None:
        """Docker errors become ExternalToolError."""
        with patch("docker.from_env", side_effect=DockerException("no socket")):
            with pytest.raises(ExternalToolError) as exc_info:
                scan_managed_networks()

        assert exc_info.value.tool == "docker"

    def test_daemon_drops_mid_scan(self) -> None:
        """Transport errors after connecting become ExternalToolError and still close the client."""
        client = MagicMock()
        client.networks.list.side_effect = RequestsConnectionError("connection reset")

        with patch("docker.from_env", return_value=client):
            with pytest.raises(ExternalToolError) as exc_info:
                scan_managed_networks()

        assert exc_info.value.tool == "docker"
        client.close.assert_called_once()
