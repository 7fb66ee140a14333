"""Conversions between stored JSON blobs and structured values.

Subject tags and count breakdowns are persisted as serialized text
columns. These helpers are the only place the two shapes meet.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any, Iterable, Mapping

EMPTY_LIST_BLOB = "[]"
EMPTY_MAPPING_BLOB = "{}"


@dataclass(frozen=True)
class TagItem:
    """User-applied tag with its vote count."""

    name: str
    count: int


def encode_tags(tags: Iterable[TagItem]) -> str:
    """Serialize tag items into their stored form."""
    payload = [{"name": tag.name, "count": tag.count} for tag in tags]
    return json.dumps(payload, ensure_ascii=False)


def decode_tags(blob: str | None) -> list[TagItem]:
    """Materialize tag items from their stored form.

    Args:
        blob: Stored JSON list, or None for an empty list.

    Returns:
        Tag items in stored order.
    """
    payload = json.loads(blob or EMPTY_LIST_BLOB)
    return [TagItem(name=str(item["name"]), count=int(item["count"])) for item in payload]


def encode_counts(counts: Mapping[str, int]) -> str:
    """Serialize a string-keyed count mapping into its stored form."""
    return json.dumps({str(key): int(value) for key, value in counts.items()}, ensure_ascii=False)


def decode_counts(blob: str | None) -> dict[str, int]:
    """Materialize a string-keyed count mapping from its stored form."""
    payload: dict[str, Any] = json.loads(blob or EMPTY_MAPPING_BLOB)
    return {str(key): int(value) for key, value in payload.items()}


def encode_strings(values: Iterable[str] | None) -> str | None:
    """Serialize an optional string list, keeping None as None."""
    if values is None:
        return None
    return json.dumps(list(values), ensure_ascii=False)


def decode_strings(blob: str | None) -> tuple[str, ...] | None:
    """Materialize an optional string list from its stored form."""
    if blob is None:
        return None
    return tuple(str(value) for value in json.loads(blob))
