"""Typed load and save of persisted documents."""

from __future__ import annotations

from pathlib import Path
from typing import TypeVar

from pydantic import ValidationError

from netalloc.types import CamelModel, ConfigCorruptError

from .storage import Storage

M = TypeVar("M", bound=CamelModel)


async def load_document(storage: Storage, path: Path, model: type[M]) -> M | None:
    """
    Load and validate a persisted document.

    Args:
        storage: Backend holding the document.
        path: Document location.
        model: Pydantic model the document must satisfy.

    Returns:
        The validated document, or None if the file does not exist.

    Raises:
        ConfigCorruptError: If the file cannot be decoded or does not match the model.
    """
    try:
        raw = await storage.read_text(path)
    except UnicodeDecodeError as e:
        raise ConfigCorruptError(path, str(e)) from e
    if raw is None:
        return None
    try:
        return model.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigCorruptError(path, str(e)) from e


async def save_document(storage: Storage, path: Path, document: CamelModel) -> None:
    """Persist a document with camel-case keys."""
    await storage.write_text(path, document.to_json() + "\n")
