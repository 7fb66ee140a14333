"""Unit tests for stored blob conversions."""

from __future__ import annotations

from core.json_blobs import TagItem, decode_counts, decode_strings, decode_tags, encode_tags
from core.types import Subject


def _subject(**overrides: object) -> Subject:
    fields: dict[str, object] = {
        "id": 1,
        "type": 2,
        "name": "name",
        "name_cn": "",
        "infobox": "",
        "platform": 1,
        "summary": "",
        "nsfw": False,
        "score": 7.5,
        "rank": 10,
        "date": "",
        "series": False,
    }
    fields.update(overrides)
    return Subject(**fields)  # type: ignore[arg-type]


def test_subject_materializes_stored_tags() -> None:
    """Subject tags should be decoded from the stored blob on access."""
    subject = _subject(tags_json=encode_tags([TagItem(name="SF", count=3)]))

    assert subject.tags == [TagItem(name="SF", count=3)]


def test_subject_defaults_to_empty_blobs() -> None:
    """Missing blobs should materialize as empty structures."""
    subject = _subject()

    assert subject.tags == [] and subject.score_details == {} and subject.favorite == {}


def test_decode_handles_none_blobs() -> None:
    """None stored values should decode to empty or None values."""
    assert decode_tags(None) == []
    assert decode_counts(None) == {}
    assert decode_strings(None) is None
