"""
Storage module for persisted allocation state.

Provides the storage abstraction shared by the pool allocators and the
network registry. Uses plain JSON files guarded by advisory locks.
"""

from .documents import load_document, save_document
from .files import FileSystemStorage
from .storage import Storage

__all__ = [
    "Storage",
    "FileSystemStorage",
    "load_document",
    "save_document",
]
