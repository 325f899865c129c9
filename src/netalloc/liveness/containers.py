"""Discovery of containers on deployer-managed docker networks."""

from __future__ import annotations

import logging
import re
from typing import Any

import docker
from docker.errors import DockerException
from requests.exceptions import RequestException

from netalloc.config import DOCKER_NETWORK_PATTERN
from netalloc.types import ExternalToolError

from .types import LiveContainer

logger = logging.getLogger(__name__)


def containers_from_network(attrs: dict[str, Any]) -> list[LiveContainer]:
    """
    Convert one `docker network inspect` document into container records.

    Containers without an IPv4 address are skipped.

    Args:
        attrs: Inspect document of a single network.
    """
    name = attrs.get("Name", "")
    configs = (attrs.get("IPAM") or {}).get("Config") or []
    subnet = next((c["Subnet"] for c in configs if c.get("Subnet")), "")

    records: list[LiveContainer] = []
    for detail in (attrs.get("Containers") or {}).values():
        address = detail.get("IPv4Address") or ""
        if not address:
            continue
        records.append(
            LiveContainer(
                ip=address.split("/", 1)[0],
                subnet=subnet,
                container_name=detail.get("Name", ""),
                network_name=name,
            )
        )
    return records


def scan_managed_networks(pattern: str = DOCKER_NETWORK_PATTERN) -> list[LiveContainer]:
    """
    List containers attached to networks whose name matches `pattern`.

    Raises:
        ExternalToolError: If the docker daemon is unreachable or drops mid-scan.
    """
    name_re = re.compile(pattern)
    try:
        client = docker.from_env()
        try:
            networks = client.networks.list(greedy=True)
            records: list[LiveContainer] = []
            for network in networks:
                if name_re.match(network.name or "") is None:
                    continue
                records.extend(containers_from_network(network.attrs))
        finally:
            client.close()
    except (DockerException, RequestException) as e:
        raise ExternalToolError("docker", str(e)) from e

    logger.debug("Found %d containers on managed networks", len(records))
    return records
