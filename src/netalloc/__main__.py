"""
Network allocation CLI entry point.

Inspect and drive the local port, address and subnet allocations of sandbox chains.

Usage::

    python -m netalloc add-node --chain 10 --role signer --address 0xabc...
    python -m netalloc show --chain 10
    python -m netalloc reconcile
    python -m netalloc reset

Options:
    --storage-root   Directory holding the allocation files
    --pool-config    YAML file overriding the pool geometry of newly created pools
    --verbose        Enable debug logging
    --no-color       Disable colored log output
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from netalloc.config import DEFAULT_POOL_CONFIG, STORAGE_ROOT, PoolConfig
from netalloc.registry import NetworkRegistry, NodeRole
from netalloc.storage import FileSystemStorage
from netalloc.types import NetallocError

logger = logging.getLogger(__name__)


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI colors for better readability."""

    # ANSI color codes
    GREY = "\x1b[38;5;244m"
    BLUE = "\x1b[38;5;39m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[38;5;196;1m"
    CYAN = "\x1b[38;5;51m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        timestamp = f"{self.CYAN}{self.formatTime(record, self.datefmt)}{self.RESET}"
        levelname = f"{color}{record.levelname:8}{self.RESET}"
        name = f"{self.BLUE}{record.name}{self.RESET}"
        return f"{timestamp} {levelname} {name}: {record.getMessage()}"


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Configure logging on stderr with optional colors."""
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler()
    handler.setLevel(level)

    if no_color:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = ColoredFormatter(datefmt="%Y-%m-%d %H:%M:%S")

    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def build_registry(storage_root: Path, pool_config_path: Path | None = None) -> NetworkRegistry:
    """Create the process-wide registry on a file system root."""
    config = DEFAULT_POOL_CONFIG
    if pool_config_path is not None:
        config = PoolConfig.from_yaml_file(pool_config_path)
    return NetworkRegistry.from_storage(FileSystemStorage(storage_root), config)


async def run_command(registry: NetworkRegistry, args: argparse.Namespace) -> int:
    """
    Execute one subcommand and print its result as JSON on stdout.

    Returns:
        Process exit code.
    """
    if args.command == "add-node":
        allocation = await registry.add_node(
            args.chain, args.role, args.address, reconcile=not args.no_reconcile
        )
        print(allocation.model_dump_json(by_alias=True, indent=2))
        return 0 if allocation.complete else 1

    if args.command == "show":
        config = await registry.load_network_config(args.chain)
        print(config.to_json())
        return 0

    if args.command == "reconcile":
        report = await registry.update_global_allocations()
        print(
            json.dumps(
                {str(chain_id): r.model_dump(by_alias=True) for chain_id, r in report.items()},
                indent=2,
            )
        )
        return 0

    if args.command == "reset":
        await registry.reset()
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="netalloc",
        description="Local network resource allocation for sandbox chains",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--storage-root",
        type=Path,
        default=STORAGE_ROOT,
        help=f"Directory holding the allocation files (default: {STORAGE_ROOT})",
    )
    parser.add_argument(
        "--pool-config",
        type=Path,
        default=None,
        help="YAML file overriding the geometry of newly created pools",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored log output",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    add_node = commands.add_parser("add-node", help="Allocate resources for a new node")
    add_node.add_argument("--chain", type=int, required=True, help="Chain id")
    add_node.add_argument(
        "--role",
        required=True,
        choices=[role.value for role in NodeRole],
        help="Node role",
    )
    add_node.add_argument("--address", required=True, help="Node account address")
    add_node.add_argument(
        "--no-reconcile",
        action="store_true",
        help="Skip reconciliation before allocating",
    )

    show = commands.add_parser("show", help="Print a chain's network config")
    show.add_argument("--chain", type=int, required=True, help="Chain id")

    commands.add_parser("reconcile", help="Reclaim resources of nodes that are not running")
    commands.add_parser("reset", help="Delete all allocation files")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose, no_color=args.no_color)

    registry = build_registry(args.storage_root, args.pool_config)
    try:
        return asyncio.run(run_command(registry, args))
    except NetallocError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
