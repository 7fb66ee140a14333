"""Unit tests for concurrent chunk deserialization."""

from __future__ import annotations

import json

import pytest

from core.errors import ArchiveParseError
from core.types import Character, EntityKind, Subject
from ingest.batch_deserializer import BatchDeserializer, partition_lines
from ingest.id_sequence import SubjectIdSequence
from ingest.record_parsers import parse_line


def _character_lines(count: int) -> list[str]:
    return [json.dumps({"id": index, "name": f"character-{index}"}) for index in range(1, count + 1)]


def _subject_lines(count: int) -> list[str]:
    return [json.dumps({"name": f"subject-{index}", "score": 5.0}) for index in range(count)]


def test_partition_lines_sizes_relative_to_chunk() -> None:
    """Sub-batch size should be chunk length divided by the target count."""
    lines = [str(index) for index in range(100)]

    sub_batches = partition_lines(lines, sub_batch_count=20)

    assert len(sub_batches) == 20 and all(len(batch) == 5 for batch in sub_batches)
    assert [line for batch in sub_batches for line in batch] == lines


def test_partition_lines_uses_minimum_size_of_one() -> None:
    """Chunks shorter than the target count should split into single lines."""
    sub_batches = partition_lines(["a", "b", "c"], sub_batch_count=20000)

    assert sub_batches == [["a"], ["b"], ["c"]]


def test_deserialize_chunk_preserves_line_order() -> None:
    """Concurrent output should equal a sequential single-threaded parse."""
    lines = _character_lines(1000)
    deserializer = BatchDeserializer(
        EntityKind.CHARACTER, "character.jsonlines", sub_batch_count=37, max_workers=8
    )

    records = deserializer.deserialize_chunk(lines)

    assert records == [parse_line(EntityKind.CHARACTER, line) for line in lines]
    assert all(isinstance(record, Character) for record in records)


def test_deserialize_chunk_assigns_dense_subject_ids_across_chunks() -> None:
    """Subject ids should form 1..N across chunks regardless of scheduling."""
    sequence = SubjectIdSequence()
    deserializer = BatchDeserializer(
        EntityKind.SUBJECT,
        "subject.jsonlines",
        id_sequence=sequence,
        sub_batch_count=50,
        max_workers=8,
    )

    first = deserializer.deserialize_chunk(_subject_lines(700), chunk_index=0)
    second = deserializer.deserialize_chunk(_subject_lines(300), chunk_index=1)

    ids = [record.id for record in first + second if isinstance(record, Subject)]
    assert sorted(ids) == list(range(1, 1001))
    assert sequence.issued == 1000


def test_deserialize_chunk_skips_null_lines_without_claiming_ids() -> None:
    """Null lines should yield nothing and leave the id range dense."""
    deserializer = BatchDeserializer(EntityKind.SUBJECT, "subject.jsonlines", sub_batch_count=2)

    records = deserializer.deserialize_chunk(['{"name": "a"}', "null", '{"name": "b"}'])

    assert sorted(record.id for record in records if isinstance(record, Subject)) == [1, 2]


@pytest.mark.parametrize(
    "bad_line",
    ['{"id": 31, "name": "trunc', "[" * 200000],
    ids=["truncated", "deeply_nested"],
)
def test_deserialize_chunk_surfaces_offending_line(bad_line: str) -> None:
    """A malformed line should fail the chunk and carry the raw line."""
    lines = _character_lines(50)
    lines[30] = bad_line
    deserializer = BatchDeserializer(
        EntityKind.CHARACTER, "character.jsonlines", sub_batch_count=5, max_workers=4
    )

    with pytest.raises(ArchiveParseError) as error_info:
        deserializer.deserialize_chunk(lines, chunk_index=2)

    assert error_info.value.raw_line == lines[30]
    assert error_info.value.line_position == 31
    assert "chunk 3" in str(error_info.value)


def test_deserialize_chunk_returns_empty_for_empty_chunk() -> None:
    """Empty chunks should not spawn any work."""
    deserializer = BatchDeserializer(EntityKind.EPISODE, "episode.jsonlines")

    assert deserializer.deserialize_chunk([]) == []
