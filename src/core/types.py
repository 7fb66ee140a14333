"""Shared typed models.

This module defines the immutable archive entity records and the
option/result models exchanged by ingest, store, SDK, and CLI layers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping, Union

from core.json_blobs import (
    EMPTY_LIST_BLOB,
    EMPTY_MAPPING_BLOB,
    TagItem,
    decode_counts,
    decode_tags,
)


class EntityKind(str, Enum):
    """Closed set of archive entity kinds, valued by their file stem."""

    CHARACTER = "character"
    EPISODE = "episode"
    PERSON = "person"
    PERSON_CHARACTER = "person-characters"
    SUBJECT = "subject"
    SUBJECT_CHARACTER = "subject-characters"
    SUBJECT_PERSON = "subject-persons"
    SUBJECT_RELATION = "subject-relations"


@dataclass(frozen=True)
class Subject:
    """Anime, book, music, game, or real-world title.

    The id is assigned during ingestion. Tags and the two count
    breakdowns are kept in stored form and materialized on access.

    Attributes:
        id: Run-scoped sequential identity starting at 1.
        type: Upstream subject category code.
        name: Original title.
        name_cn: Chinese title.
        infobox: Raw wiki infobox markup.
        platform: Upstream platform code.
        summary: Description text.
        nsfw: Whether the subject is marked adult-only.
        score: Average rating.
        rank: Global rank, 0 when unranked.
        date: Release date text as published upstream.
        series: Whether the subject is a series entry.
        tags_json: Stored tag list.
        score_details_json: Stored rating histogram.
        favorite_json: Stored collection-status counts.
    """

    id: int
    type: int
    name: str
    name_cn: str
    infobox: str
    platform: int
    summary: str
    nsfw: bool
    score: float
    rank: int
    date: str
    series: bool
    tags_json: str = EMPTY_LIST_BLOB
    score_details_json: str = EMPTY_MAPPING_BLOB
    favorite_json: str = EMPTY_MAPPING_BLOB

    @property
    def tags(self) -> list[TagItem]:
        return decode_tags(self.tags_json)

    @property
    def score_details(self) -> dict[str, int]:
        return decode_counts(self.score_details_json)

    @property
    def favorite(self) -> dict[str, int]:
        return decode_counts(self.favorite_json)


@dataclass(frozen=True)
class Episode:
    """Single episode belonging to a subject."""

    id: int
    name: str
    name_cn: str
    description: str
    airdate: str
    disc: int
    duration: str
    subject_id: int
    sort: float
    type: int


@dataclass(frozen=True)
class Character:
    """Fictional character."""

    id: int
    role: int
    name: str
    infobox: str
    summary: str
    comments: int
    collects: int


@dataclass(frozen=True)
class Person:
    """Real-world person or organization.

    Attributes:
        career: Career role names, None when the source omits them.
    """

    id: int
    name: str
    type: int
    career: tuple[str, ...] | None
    infobox: str
    summary: str
    comments: int
    collects: int


@dataclass(frozen=True)
class PersonCharacter:
    """Voice or cast link between a person and a character in a subject."""

    person_id: int
    subject_id: int
    character_id: int
    summary: str


@dataclass(frozen=True)
class SubjectCharacter:
    """Appearance of a character in a subject."""

    character_id: int
    subject_id: int
    type: int
    order: int


@dataclass(frozen=True)
class SubjectPerson:
    """Staff credit of a person on a subject."""

    person_id: int
    subject_id: int
    position: int


@dataclass(frozen=True)
class SubjectRelation:
    """Directed relation between two subjects.

    Attributes:
        relation_id: Identity from the source when present, otherwise
            assigned by the store on insert.
    """

    subject_id: int
    relation_type: int
    related_subject_id: int
    order: int
    relation_id: int | None = None


@dataclass(frozen=True)
class ArchiveDatabaseInfo:
    """Manifest metadata describing the fetched archive bundle."""

    id: int
    name: str
    label: str
    content_type: str
    size: int
    url: str
    browser_download_url: str
    node_id: str
    created_at: str
    updated_at: str


ArchiveRecord = Union[
    Subject,
    Episode,
    Character,
    Person,
    PersonCharacter,
    SubjectCharacter,
    SubjectPerson,
    SubjectRelation,
]

RECORD_TYPE_BY_KIND: Mapping[EntityKind, type] = {
    EntityKind.CHARACTER: Character,
    EntityKind.EPISODE: Episode,
    EntityKind.PERSON: Person,
    EntityKind.PERSON_CHARACTER: PersonCharacter,
    EntityKind.SUBJECT: Subject,
    EntityKind.SUBJECT_CHARACTER: SubjectCharacter,
    EntityKind.SUBJECT_PERSON: SubjectPerson,
    EntityKind.SUBJECT_RELATION: SubjectRelation,
}


@dataclass(frozen=True)
class IngestOptions:
    """Ingest command options.

    Attributes:
        bundle_path: Local bundle zip; skips the download when set.
        source_dir: Already-extracted directory; skips download and extraction.
        recreate: Drop and recreate all tables before ingesting.
    """

    bundle_path: Path | None = None
    source_dir: Path | None = None
    recreate: bool = False


@dataclass(frozen=True)
class IngestResult:
    """Outcome of a single ingestion run.

    Attributes:
        success: Whether every known file was ingested.
        database_path: Destination store path on success.
        error_message: Failure description on failure.
        ingested_files: Names of files ingested to completion.
        skipped_files: Names of unrecognized files that were skipped.
        record_counts: Records committed per entity kind value.
    """

    success: bool
    database_path: Path | None = None
    error_message: str | None = None
    ingested_files: tuple[str, ...] = ()
    skipped_files: tuple[str, ...] = ()
    record_counts: Mapping[str, int] = field(default_factory=dict)
