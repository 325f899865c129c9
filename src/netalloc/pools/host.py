"""Detection of the host's primary IPv4 address."""

from __future__ import annotations

import ipaddress
import logging
import socket

import psutil

from netalloc.types import ExternalToolError

logger = logging.getLogger(__name__)


def detect_primary_ipv4() -> str:
    """
    Return the first non-loopback IPv4 address bound to a local interface.

    Interfaces are visited in the order the operating system reports them.

    Raises:
        ExternalToolError: If interfaces cannot be listed or none has a usable address.
    """
    try:
        interfaces = psutil.net_if_addrs()
    except (psutil.Error, OSError) as e:
        raise ExternalToolError("psutil", f"cannot list interfaces: {e}") from e

    for name, addresses in interfaces.items():
        for address in addresses:
            if address.family != socket.AF_INET:
                continue
            if ipaddress.IPv4Address(address.address).is_loopback:
                continue
            logger.debug("Primary IPv4 %s found on %s", address.address, name)
            return address.address

    raise ExternalToolError("psutil", "no non-loopback IPv4 interface found")
