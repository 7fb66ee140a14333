"""Concurrent deserialization of line chunks.

Each chunk is split into sub-batches that are parsed on worker threads.
Results are reassembled in sub-batch order, so the output preserves the
chunk's line order no matter which worker finishes first.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import replace

from core.constants import DEFAULT_MAX_WORKERS, DEFAULT_SUB_BATCH_COUNT
from core.errors import ArchiveParseError
from core.logging_config import get_logger
from core.types import ArchiveRecord, EntityKind, Subject
from ingest.id_sequence import SubjectIdSequence
from ingest.record_parsers import parse_line

_LOGGER = get_logger(__name__)


def partition_lines(lines: list[str], sub_batch_count: int) -> list[list[str]]:
    """Split a chunk into contiguous sub-batches.

    Sub-batch size is derived from the chunk's own length, so a short
    final chunk gets proportionally smaller sub-batches.

    Args:
        lines: Chunk lines in file order.
        sub_batch_count: Target number of sub-batches.

    Returns:
        Ordered sub-batches covering every line exactly once.
    """
    batch_size = max(1, len(lines) // max(1, sub_batch_count))
    return [lines[start : start + batch_size] for start in range(0, len(lines), batch_size)]


class BatchDeserializer:
    """Deserializer bound to one archive file and its entity kind."""

    def __init__(
        self,
        kind: EntityKind,
        file_label: str,
        id_sequence: SubjectIdSequence | None = None,
        sub_batch_count: int = DEFAULT_SUB_BATCH_COUNT,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        if kind is EntityKind.SUBJECT and id_sequence is None:
            id_sequence = SubjectIdSequence()
        self._kind = kind
        self._file_label = file_label
        self._id_sequence = id_sequence
        self._sub_batch_count = sub_batch_count
        self._max_workers = max_workers

    def deserialize_chunk(self, lines: list[str], chunk_index: int = 0) -> list[ArchiveRecord]:
        """Deserialize one chunk of lines concurrently.

        Args:
            lines: Non-blank chunk lines in file order.
            chunk_index: Zero-based chunk number, used in diagnostics.

        Returns:
            Records in original line order.

        Raises:
            ArchiveParseError: If any line does not match the entity shape.
        """
        if not lines:
            return []
        sub_batches = partition_lines(lines, self._sub_batch_count)
        results: list[list[ArchiveRecord]] = [[] for _ in sub_batches]
        pool = ThreadPoolExecutor(max_workers=min(self._max_workers, len(sub_batches)))
        try:
            futures: dict[Future[list[ArchiveRecord]], int] = {}
            offset = 0
            for index, sub_batch in enumerate(sub_batches):
                future = pool.submit(self._deserialize_sub_batch, sub_batch, chunk_index, offset)
                futures[future] = index
                offset += len(sub_batch)
            for future in as_completed(futures):
                results[futures[future]] = future.result()
        finally:
            pool.shutdown(wait=True, cancel_futures=True)
        return [record for sub_batch_records in results for record in sub_batch_records]

    def _deserialize_sub_batch(
        self,
        sub_batch: list[str],
        chunk_index: int,
        offset: int,
    ) -> list[ArchiveRecord]:
        records: list[ArchiveRecord] = []
        for position, line in enumerate(sub_batch, offset + 1):
            try:
                record = parse_line(self._kind, line)
            except (ValueError, RecursionError) as error:
                raise self._parse_error(error, chunk_index, position, line) from error
            if record is None:
                continue
            if isinstance(record, Subject) and self._id_sequence is not None:
                record = replace(record, id=self._id_sequence.claim())
            records.append(record)
        return records

    def _parse_error(
        self,
        error: Exception,
        chunk_index: int,
        position: int,
        line: str,
    ) -> ArchiveParseError:
        _LOGGER.error(
            "record_parse_failed",
            file=self._file_label,
            entity_kind=self._kind.value,
            chunk_index=chunk_index,
            line_position=position,
            line=line,
            reason=str(error),
        )
        return ArchiveParseError(
            f"Failed to deserialize {self._kind.value} record in {self._file_label} "
            f"(chunk {chunk_index + 1}, line {position} of chunk): {error}. "
            "The upstream archive format may have changed; the run was aborted.",
            file_path=self._file_label,
            line_position=position,
            raw_line=line,
        )
