"""Relational schema of the local archive snapshot.

One table per entity kind. Junction tables use composite primary keys;
subject relations fall back to store-assigned ids.
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)

from core.types import (
    ArchiveDatabaseInfo,
    Character,
    EntityKind,
    Episode,
    Person,
    PersonCharacter,
    Subject,
    SubjectCharacter,
    SubjectPerson,
    SubjectRelation,
)

ARCHIVE_METADATA = MetaData()

archive_database_info_table = Table(
    "archive_database_info",
    ARCHIVE_METADATA,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("name", String, nullable=False),
    Column("label", String, nullable=False),
    Column("content_type", String, nullable=False),
    Column("size", Integer, nullable=False),
    Column("url", String, nullable=False),
    Column("browser_download_url", String, nullable=False),
    Column("node_id", String, nullable=False),
    Column("created_at", String, nullable=False),
    Column("updated_at", String, nullable=False),
)

subject_table = Table(
    "subject",
    ARCHIVE_METADATA,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("type", Integer, nullable=False),
    Column("name", Text, nullable=False),
    Column("name_cn", Text, nullable=False),
    Column("infobox", Text, nullable=False),
    Column("platform", Integer, nullable=False),
    Column("summary", Text, nullable=False),
    Column("nsfw", Boolean, nullable=False),
    Column("score", Float, nullable=False),
    Column("rank", Integer, nullable=False),
    Column("date", String, nullable=False),
    Column("series", Boolean, nullable=False),
    Column("tags_json", Text, nullable=False),
    Column("score_details_json", Text, nullable=False),
    Column("favorite_json", Text, nullable=False),
)

episode_table = Table(
    "episode",
    ARCHIVE_METADATA,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("name", Text, nullable=False),
    Column("name_cn", Text, nullable=False),
    Column("description", Text, nullable=False),
    Column("airdate", String, nullable=False),
    Column("disc", Integer, nullable=False),
    Column("duration", String, nullable=False),
    Column("subject_id", Integer, nullable=False, index=True),
    Column("sort", Float, nullable=False),
    Column("type", Integer, nullable=False),
)

character_table = Table(
    "character",
    ARCHIVE_METADATA,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("role", Integer, nullable=False),
    Column("name", Text, nullable=False),
    Column("infobox", Text, nullable=False),
    Column("summary", Text, nullable=False),
    Column("comments", Integer, nullable=False),
    Column("collects", Integer, nullable=False),
)

person_table = Table(
    "person",
    ARCHIVE_METADATA,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("name", Text, nullable=False),
    Column("type", Integer, nullable=False),
    Column("career_json", Text, nullable=True),
    Column("infobox", Text, nullable=False),
    Column("summary", Text, nullable=False),
    Column("comments", Integer, nullable=False),
    Column("collects", Integer, nullable=False),
)

person_character_table = Table(
    "person_character",
    ARCHIVE_METADATA,
    Column("person_id", Integer, primary_key=True, autoincrement=False),
    Column("subject_id", Integer, primary_key=True, autoincrement=False),
    Column("character_id", Integer, primary_key=True, autoincrement=False),
    Column("summary", Text, nullable=False),
)

subject_character_table = Table(
    "subject_character",
    ARCHIVE_METADATA,
    Column("character_id", Integer, primary_key=True, autoincrement=False),
    Column("subject_id", Integer, primary_key=True, autoincrement=False),
    Column("type", Integer, nullable=False),
    Column("order", Integer, nullable=False),
)

subject_person_table = Table(
    "subject_person",
    ARCHIVE_METADATA,
    Column("subject_id", Integer, primary_key=True, autoincrement=False),
    Column("person_id", Integer, primary_key=True, autoincrement=False),
    Column("position", Integer, primary_key=True, autoincrement=False),
)

subject_relation_table = Table(
    "subject_relation",
    ARCHIVE_METADATA,
    Column("relation_id", Integer, primary_key=True, autoincrement=True),
    Column("subject_id", Integer, nullable=False, index=True),
    Column("relation_type", Integer, nullable=False),
    Column("related_subject_id", Integer, nullable=False),
    Column("order", Integer, nullable=False),
)

TABLE_BY_KIND: dict[EntityKind, Table] = {
    EntityKind.CHARACTER: character_table,
    EntityKind.EPISODE: episode_table,
    EntityKind.PERSON: person_table,
    EntityKind.PERSON_CHARACTER: person_character_table,
    EntityKind.SUBJECT: subject_table,
    EntityKind.SUBJECT_CHARACTER: subject_character_table,
    EntityKind.SUBJECT_PERSON: subject_person_table,
    EntityKind.SUBJECT_RELATION: subject_relation_table,
}

TABLE_BY_RECORD_TYPE: dict[type, Table] = {
    Character: character_table,
    Episode: episode_table,
    Person: person_table,
    PersonCharacter: person_character_table,
    Subject: subject_table,
    SubjectCharacter: subject_character_table,
    SubjectPerson: subject_person_table,
    SubjectRelation: subject_relation_table,
    ArchiveDatabaseInfo: archive_database_info_table,
}
