"""Row conversion between typed records and store tables.

This module centralizes record-to-row and row-to-record mapping.
It is reused by the record sink and by store read-back queries.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Mapping

from core.json_blobs import decode_strings, encode_strings
from core.types import ArchiveDatabaseInfo, ArchiveRecord, Person, SubjectRelation


def record_to_row(record: ArchiveRecord | ArchiveDatabaseInfo) -> dict[str, Any]:
    """Serialize a record into a column-keyed row.

    Args:
        record: Typed archive record.

    Returns:
        Row dictionary for insertion.
    """
    row = asdict(record)
    if isinstance(record, Person):
        row["career_json"] = encode_strings(row.pop("career"))
    if isinstance(record, SubjectRelation) and record.relation_id is None:
        del row["relation_id"]
    return row


def record_from_row(record_type: type, row: Mapping[str, Any]) -> Any:
    """Rebuild a typed record from a stored row.

    Args:
        record_type: Dataclass type the row belongs to.
        row: Column-keyed row mapping.

    Returns:
        Typed record instance.
    """
    values = dict(row)
    if record_type is Person:
        values["career"] = decode_strings(values.pop("career_json"))
    return record_type(**values)
