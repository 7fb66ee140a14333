"""Per-file ingestion loop: read, deserialize, persist, chunk by chunk."""

from __future__ import annotations

from pathlib import Path

from core.config import ArchiveConfig
from core.errors import ArchiveExtractionError
from core.logging_config import get_logger
from core.types import EntityKind
from ingest.batch_deserializer import BatchDeserializer
from ingest.id_sequence import SubjectIdSequence
from ingest.line_reader import iter_line_chunks
from store.record_sink import RecordSink

_LOGGER = get_logger(__name__)


def ingest_archive_file(
    file_path: Path,
    kind: EntityKind,
    sink: RecordSink,
    config: ArchiveConfig,
    id_sequence: SubjectIdSequence | None = None,
) -> int:
    """Stream one archive file into the store.

    Chunks are processed strictly in file order. Each chunk is fully
    deserialized before it is committed as one transaction, so a failure
    leaves every earlier chunk persisted and nothing of the failing one.

    Args:
        file_path: JSON-lines file to ingest.
        kind: Entity kind resolved from the file name.
        sink: Record sink bound to the destination store.
        config: Runtime configuration with chunk and worker sizing.
        id_sequence: Run-scoped subject id sequence.

    Returns:
        Number of records committed.

    Raises:
        ArchiveParseError: If a line does not match the entity shape.
        ArchiveStoreError: If a chunk commit fails.
        ArchiveExtractionError: If the file cannot be read.
    """
    deserializer = BatchDeserializer(
        kind,
        str(file_path),
        id_sequence=id_sequence,
        sub_batch_count=config.sub_batch_count,
        max_workers=config.max_workers,
    )
    committed_count = 0
    try:
        with file_path.open(encoding="utf-8-sig") as source:
            for chunk_index, lines in enumerate(iter_line_chunks(source, config.chunk_size)):
                records = deserializer.deserialize_chunk(lines, chunk_index)
                sink.add_records(records)
                chunk_count = sink.commit()
                committed_count += chunk_count
                _LOGGER.info(
                    "chunk_committed",
                    file=file_path.name,
                    chunk_index=chunk_index,
                    line_count=len(lines),
                    record_count=chunk_count,
                )
    except (OSError, UnicodeDecodeError) as error:
        raise ArchiveExtractionError(
            f"Failed to read extracted file {file_path}: {error}. "
            "Check permissions on the scratch directory."
        ) from error
    return committed_count
