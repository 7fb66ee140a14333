"""Chunk-scoped persistence buffer.

Records are routed into per-table append buffers by their runtime type
and flushed together as one transaction per chunk.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Iterable

from sqlalchemy import Table, insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.errors import ArchiveStoreError
from core.logging_config import get_logger
from core.types import ArchiveRecord
from store.record_rows import record_to_row
from store.schema import TABLE_BY_RECORD_TYPE

_LOGGER = get_logger(__name__)


class RecordSink:
    """Buffered writer committing one chunk per transaction."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._buffers: dict[Table, list[dict[str, Any]]] = defaultdict(list)

    @property
    def pending_count(self) -> int:
        """Number of buffered, uncommitted rows."""
        return sum(len(rows) for rows in self._buffers.values())

    def add_records(self, records: Iterable[ArchiveRecord]) -> None:
        """Append records to the buffer of their entity table.

        Raises:
            ArchiveStoreError: If a record type has no destination table.
        """
        for record in records:
            table = TABLE_BY_RECORD_TYPE.get(type(record))
            if table is None:
                raise ArchiveStoreError(
                    f"No destination table for record type {type(record).__name__}."
                )
            self._buffers[table].append(record_to_row(record))

    def commit(self) -> int:
        """Write all buffered rows in a single transaction.

        The buffer is cleared whether or not the commit succeeds.

        Returns:
            Number of rows committed.

        Raises:
            ArchiveStoreError: If the transaction fails.
        """
        row_count = self.pending_count
        if row_count == 0:
            return 0
        try:
            with self._engine.begin() as connection:
                for table, rows in self._buffers.items():
                    for row_group in _group_by_columns(rows):
                        connection.execute(insert(table), row_group)
        except SQLAlchemyError as error:
            raise ArchiveStoreError(
                f"Failed to commit {row_count} buffered records: {error}. "
                "The store holds every chunk committed before this one; "
                "recreate it and rerun the import."
            ) from error
        finally:
            self._buffers.clear()
        _LOGGER.debug("sink_committed", row_count=row_count)
        return row_count


def _group_by_columns(rows: list[dict[str, Any]]) -> list[list[dict[str, Any]]]:
    """Group rows sharing a column set so each group is one executemany."""
    groups: dict[tuple[str, ...], list[dict[str, Any]]] = {}
    for row in rows:
        groups.setdefault(tuple(sorted(row)), []).append(row)
    return list(groups.values())
