"""Line-to-record parsers for each archive entity kind.

Field names are matched case-insensitively. Missing fields fall back to
neutral defaults, identity fields are required, and a field present with
the wrong JSON type rejects the whole line.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Mapping

from core.json_blobs import TagItem, encode_counts, encode_tags
from core.types import (
    ArchiveDatabaseInfo,
    ArchiveRecord,
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

Payload = Mapping[str, Any]

PENDING_SUBJECT_ID = 0


def parse_line(kind: EntityKind, line: str) -> ArchiveRecord | None:
    """Parse one JSON line into the record type of ``kind``.

    Subject records come back with a placeholder id; the caller assigns
    the real one after a successful parse.

    Args:
        kind: Entity kind of the file the line belongs to.
        line: Raw JSON text.

    Returns:
        Parsed record, or None for a JSON ``null`` line.

    Raises:
        ValueError: If the line is not valid JSON or does not match the shape.
    """
    payload = json.loads(line)
    if payload is None:
        return None
    return _PARSERS[kind](_normalize_keys(payload))


def parse_archive_info(document: str) -> ArchiveDatabaseInfo:
    """Parse the upstream manifest document.

    Raises:
        ValueError: If the document is not a valid manifest object.
    """
    payload = _normalize_keys(json.loads(document))
    return ArchiveDatabaseInfo(
        id=_int(payload, "id", required=True),
        name=_str(payload, "name"),
        label=_str(payload, "label"),
        content_type=_str(payload, "content_type"),
        size=_int(payload, "size"),
        url=_str(payload, "url"),
        browser_download_url=_str(payload, "browser_download_url"),
        node_id=_str(payload, "node_id"),
        created_at=_str(payload, "created_at"),
        updated_at=_str(payload, "updated_at"),
    )


def _parse_subject(payload: Payload) -> Subject:
    return Subject(
        id=PENDING_SUBJECT_ID,
        type=_int(payload, "type"),
        name=_str(payload, "name"),
        name_cn=_str(payload, "name_cn"),
        infobox=_str(payload, "infobox"),
        platform=_int(payload, "platform"),
        summary=_str(payload, "summary"),
        nsfw=_bool(payload, "nsfw"),
        score=_float(payload, "score"),
        rank=_int(payload, "rank"),
        date=_str(payload, "date"),
        series=_bool(payload, "series"),
        tags_json=encode_tags(_tags(payload, "tags")),
        score_details_json=encode_counts(_counts(payload, "score_details")),
        favorite_json=encode_counts(_counts(payload, "favorite")),
    )


def _parse_episode(payload: Payload) -> Episode:
    return Episode(
        id=_int(payload, "id", required=True),
        name=_str(payload, "name"),
        name_cn=_str(payload, "name_cn"),
        description=_str(payload, "description"),
        airdate=_str(payload, "airdate"),
        disc=_int(payload, "disc"),
        duration=_str(payload, "duration"),
        subject_id=_int(payload, "subject_id"),
        sort=_float(payload, "sort"),
        type=_int(payload, "type"),
    )


def _parse_character(payload: Payload) -> Character:
    return Character(
        id=_int(payload, "id", required=True),
        role=_int(payload, "role"),
        name=_str(payload, "name"),
        infobox=_str(payload, "infobox"),
        summary=_str(payload, "summary"),
        comments=_int(payload, "comments"),
        collects=_int(payload, "collects"),
    )


def _parse_person(payload: Payload) -> Person:
    return Person(
        id=_int(payload, "id", required=True),
        name=_str(payload, "name"),
        type=_int(payload, "type"),
        career=_optional_strings(payload, "career"),
        infobox=_str(payload, "infobox"),
        summary=_str(payload, "summary"),
        comments=_int(payload, "comments"),
        collects=_int(payload, "collects"),
    )


def _parse_person_character(payload: Payload) -> PersonCharacter:
    return PersonCharacter(
        person_id=_int(payload, "person_id", required=True),
        subject_id=_int(payload, "subject_id", required=True),
        character_id=_int(payload, "character_id", required=True),
        summary=_str(payload, "summary"),
    )


def _parse_subject_character(payload: Payload) -> SubjectCharacter:
    return SubjectCharacter(
        character_id=_int(payload, "character_id", required=True),
        subject_id=_int(payload, "subject_id", required=True),
        type=_int(payload, "type"),
        order=_int(payload, "order"),
    )


def _parse_subject_person(payload: Payload) -> SubjectPerson:
    return SubjectPerson(
        person_id=_int(payload, "person_id", required=True),
        subject_id=_int(payload, "subject_id", required=True),
        position=_int(payload, "position", required=True),
    )


def _parse_subject_relation(payload: Payload) -> SubjectRelation:
    relation_id = payload.get("relation_id")
    return SubjectRelation(
        subject_id=_int(payload, "subject_id"),
        relation_type=_int(payload, "relation_type"),
        related_subject_id=_int(payload, "related_subject_id"),
        order=_int(payload, "order"),
        relation_id=None if relation_id is None else _int(payload, "relation_id"),
    )


_PARSERS: Mapping[EntityKind, Callable[[Payload], ArchiveRecord]] = {
    EntityKind.CHARACTER: _parse_character,
    EntityKind.EPISODE: _parse_episode,
    EntityKind.PERSON: _parse_person,
    EntityKind.PERSON_CHARACTER: _parse_person_character,
    EntityKind.SUBJECT: _parse_subject,
    EntityKind.SUBJECT_CHARACTER: _parse_subject_character,
    EntityKind.SUBJECT_PERSON: _parse_subject_person,
    EntityKind.SUBJECT_RELATION: _parse_subject_relation,
}


def supported_kinds() -> tuple[EntityKind, ...]:
    """Return entity kinds that have a registered parser."""
    return tuple(_PARSERS)


def _normalize_keys(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValueError(f"expected JSON object, got {type(payload).__name__}")
    return {str(key).lower(): value for key, value in payload.items()}


def _int(payload: Payload, key: str, required: bool = False) -> int:
    value = payload.get(key)
    if value is None:
        if required:
            raise ValueError(f"missing required field '{key}'")
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field '{key}' expected integer, got {type(value).__name__}")
    return value


def _float(payload: Payload, key: str) -> float:
    value = payload.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field '{key}' expected number, got {type(value).__name__}")
    return float(value)


def _str(payload: Payload, key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field '{key}' expected string, got {type(value).__name__}")
    return value


def _bool(payload: Payload, key: str) -> bool:
    value = payload.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"field '{key}' expected boolean, got {type(value).__name__}")
    return value


def _optional_strings(payload: Payload, key: str) -> tuple[str, ...] | None:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"field '{key}' expected list of strings")
    return tuple(value)


def _tags(payload: Payload, key: str) -> list[TagItem]:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"field '{key}' expected list, got {type(value).__name__}")
    tags: list[TagItem] = []
    for item in value:
        item_payload = _normalize_keys(item)
        tags.append(TagItem(name=_str(item_payload, "name"), count=_int(item_payload, "count")))
    return tags


def _counts(payload: Payload, key: str) -> dict[str, int]:
    value = payload.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"field '{key}' expected object, got {type(value).__name__}")
    return {str(name): _int(value, name) for name in value}
