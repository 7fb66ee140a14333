"""Public SDK surface for the archive tool.

This module provides a stable import path for library users.
It re-exports the ingestion entry point, store, and typed models.
"""

from __future__ import annotations

from core.config import ArchiveConfig
from core.json_blobs import TagItem
from core.types import (
    ArchiveDatabaseInfo,
    Character,
    EntityKind,
    Episode,
    IngestOptions,
    IngestResult,
    Person,
    PersonCharacter,
    Subject,
    SubjectCharacter,
    SubjectPerson,
    SubjectRelation,
)
from ingest.pipeline import ArchiveIngestRunner, RunStage, ingest_archive
from store.archive_store import ArchiveStore

__all__ = [
    "ArchiveConfig",
    "ArchiveDatabaseInfo",
    "ArchiveIngestRunner",
    "ArchiveStore",
    "Character",
    "EntityKind",
    "Episode",
    "IngestOptions",
    "IngestResult",
    "Person",
    "PersonCharacter",
    "RunStage",
    "Subject",
    "SubjectCharacter",
    "SubjectPerson",
    "SubjectRelation",
    "TagItem",
    "ingest_archive",
]
