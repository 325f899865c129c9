"""
Abstract storage interface for persisted allocation state.

Defines the Protocol that all storage implementations must follow.
Uses structural subtyping for flexibility.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from pathlib import Path
from typing import Protocol


class Storage(Protocol):
    """
    Protocol for allocation state storage.

    All storage implementations must provide these methods.
    Uses structural subtyping - any class with matching methods satisfies the protocol.

    Storage Organization
    --------------------
    - Pool files: one document per pool, shared by every chain
    - Chain files: one document per chain id, in its own directory

    Every method may suspend. Callers that read, modify and write a document
    must hold `locked(path)` for the whole span.
    """

    root: Path
    """Directory all paths are resolved against."""

    # -------------------------------------------------------------------------
    # Document Operations
    # -------------------------------------------------------------------------

    async def read_text(self, path: Path) -> str | None:
        """
        Read a whole document.

        Args:
            path: File to read.

        Returns:
            File contents, or None if the file does not exist.
        """
        ...

    async def write_text(self, path: Path, data: str) -> None:
        """
        Replace a whole document.

        Readers never observe a partially written file.

        Args:
            path: File to write. Parent directories are created.
            data: New contents.
        """
        ...

    async def list_dirs(self, path: Path) -> list[str]:
        """
        List sub-directory names.

        Args:
            path: Directory to list.

        Returns:
            Names sorted lexically. Empty if the directory does not exist.
        """
        ...

    async def remove_tree(self, path: Path) -> None:
        """
        Delete a directory and everything below it.

        Missing directories are ignored.
        """
        ...

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def locked(self, path: Path) -> AbstractAsyncContextManager[None]:
        """
        Hold exclusive access to a document.

        Serializes read-modify-write cycles on the same path, both between
        tasks of one process and between processes.
        """
        ...

