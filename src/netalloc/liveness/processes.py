"""Discovery of local node processes through psutil."""

from __future__ import annotations

import logging
import os

import psutil

from netalloc.config import NODE_PROCESS_NAME
from netalloc.types import ExternalToolError

from .types import LiveProcess

logger = logging.getLogger(__name__)


def _flag_value(argv: list[str], flag: str) -> str | None:
    """
    Value of a command-line flag, accepting both "--flag value" and "--flag=value".

    Returns None when the flag is absent or has no value.
    """
    prefix = flag + "="
    for position, arg in enumerate(argv):
        if arg == flag:
            if position + 1 < len(argv):
                return argv[position + 1]
            return None
        if arg.startswith(prefix):
            return arg[len(prefix) :]
    return None


def parse_node_argv(argv: list[str]) -> LiveProcess | None:
    """
    Extract chain id, P2P port and data dir from a node's argument vector.

    Args:
        argv: Full argument vector, executable first.

    Returns:
        The process record, or None if any required flag is missing or malformed.
    """
    chain_id = _flag_value(argv, "--networkid")
    data_dir = _flag_value(argv, "--datadir")
    port = _flag_value(argv, "--port")
    if chain_id is None or data_dir is None or port is None:
        return None
    if not (chain_id.isdigit() and port.isdigit()):
        return None
    return LiveProcess(chain_id=int(chain_id), port=int(port), data_dir=data_dir)


def scan_node_processes(process_name: str = NODE_PROCESS_NAME) -> list[LiveProcess]:
    """
    List node processes visible to the current user.

    Processes that exit or deny access during the scan are skipped.

    Raises:
        ExternalToolError: If the process table cannot be enumerated at all.
    """
    found: list[LiveProcess] = []
    try:
        for proc in psutil.process_iter(["name", "cmdline"]):
            try:
                argv = proc.info.get("cmdline") or []
                name = proc.info.get("name") or ""
                if not argv:
                    continue
                if name != process_name and os.path.basename(argv[0]) != process_name:
                    continue
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue

            record = parse_node_argv(argv)
            if record is not None:
                found.append(record)
    except (psutil.Error, OSError) as e:
        raise ExternalToolError("psutil", f"cannot enumerate processes: {e}") from e

    logger.debug("Found %d live %s processes", len(found), process_name)
    return found
