"""File-name routing onto entity kinds."""

from __future__ import annotations

from pathlib import Path

from core.constants import ARCHIVE_FILE_EXTENSION
from core.types import EntityKind

_KIND_BY_FILE_STEM = {kind.value: kind for kind in EntityKind}


def resolve_entity_kind(file_path: Path) -> EntityKind | None:
    """Map an archive file to its entity kind.

    Args:
        file_path: File whose stem names the entity, e.g. ``subject.jsonlines``.

    Returns:
        Matching entity kind, or None for files this tool does not know.
    """
    return _KIND_BY_FILE_STEM.get(file_path.stem.lower())


def list_archive_files(source_dir: Path) -> list[Path]:
    """Return archive data files under a directory in sorted order."""
    return sorted(
        file_path
        for file_path in source_dir.rglob("*")
        if file_path.is_file() and file_path.suffix.lower() == ARCHIVE_FILE_EXTENSION
    )
