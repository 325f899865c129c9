"""
File system implementation of allocation state storage.

Each document is a JSON file under a single root directory:

- ports.json, ips.json, rpcPorts.json at the root
- <chainId>/network-config.json for every chain

Writes go to a sibling temporary file which is then renamed over the target,
so a crash never leaves a truncated document behind.

Locking happens at two levels. An asyncio.Lock per path serializes tasks of
this process. An exclusive flock on "<file>.lock" serializes processes. Both
are held from the read to the write of a read-modify-write cycle.
"""

from __future__ import annotations

import asyncio
import fcntl
import logging
import os
import shutil
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import IO

logger = logging.getLogger(__name__)

LOCK_SUFFIX = ".lock"
"""Suffix of the advisory lock file kept next to each document."""


class FileSystemStorage:
    """
    Storage backed by JSON files on the local file system.

    Blocking file and lock calls run in worker threads so the event loop
    stays responsive while another process holds a lock.
    """

    def __init__(self, root: Path | str) -> None:
        """
        Initialize file system storage.

        The root directory is created lazily on first write.

        Args:
            root: Directory holding all documents.
        """
        self.root = Path(root)
        self._locks: dict[Path, asyncio.Lock] = {}

    # -------------------------------------------------------------------------
    # Document Operations
    # -------------------------------------------------------------------------

    async def read_text(self, path: Path) -> str | None:
        """Read a whole document, or None if it does not exist."""
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None

    async def write_text(self, path: Path, data: str) -> None:
        """Atomically replace a whole document."""
        await asyncio.to_thread(_atomic_write, path, data)

    async def list_dirs(self, path: Path) -> list[str]:
        """List sub-directory names in lexical order."""
        return await asyncio.to_thread(_list_dirs, path)

    async def remove_tree(self, path: Path) -> None:
        """Delete a directory tree. Missing directories are ignored."""
        if await asyncio.to_thread(path.exists):
            logger.info("Removing %s", path)
            await asyncio.to_thread(shutil.rmtree, path)

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    @asynccontextmanager
    async def locked(self, path: Path) -> AsyncIterator[None]:
        """Hold the in-process and the cross-process lock for a document."""
        key = path.resolve()
        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            handle = await asyncio.to_thread(_acquire_flock, key)
            try:
                yield
            finally:
                await asyncio.to_thread(_release_flock, handle)


def _atomic_write(path: Path, data: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        # Leave no stray temporary file behind.
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _list_dirs(path: Path) -> list[str]:
    if not path.is_dir():
        return []
    return sorted(entry.name for entry in path.iterdir() if entry.is_dir())


def _acquire_flock(path: Path) -> IO[str]:
    path.parent.mkdir(parents=True, exist_ok=True)
    handle = open(path.with_name(path.name + LOCK_SUFFIX), "a+")
    try:
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
    except OSError:
        handle.close()
        raise
    return handle


def _release_flock(handle: IO[str]) -> None:
    try:
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
    finally:
        handle.close()
