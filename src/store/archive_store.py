"""SQLite-backed destination store for the archive snapshot.

This class owns the engine, schema lifecycle, manifest bookkeeping,
and read-back queries. Ingest writes go through ``RecordSink``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, func, insert, select
from sqlalchemy.exc import SQLAlchemyError

from core.errors import ArchiveStoreError
from core.logging_config import get_logger
from core.types import RECORD_TYPE_BY_KIND, ArchiveDatabaseInfo, EntityKind
from store.record_rows import record_from_row, record_to_row
from store.record_sink import RecordSink
from store.schema import (
    ARCHIVE_METADATA,
    TABLE_BY_KIND,
    archive_database_info_table,
)

_LOGGER = get_logger(__name__)


class ArchiveStore:
    """Relational store holding one table per archive entity kind."""

    def __init__(self, database_path: Path) -> None:
        """Open the store engine.

        Args:
            database_path: SQLite database file.
        """
        self.database_path = database_path
        database_path.parent.mkdir(parents=True, exist_ok=True)
        self._engine = create_engine(f"sqlite:///{database_path}")

    def ensure_schema(self) -> None:
        """Create any missing tables.

        Raises:
            ArchiveStoreError: If schema creation fails.
        """
        try:
            ARCHIVE_METADATA.create_all(self._engine)
        except SQLAlchemyError as error:
            raise ArchiveStoreError(
                f"Failed to prepare store schema at {self.database_path}: {error}."
            ) from error

    def recreate_schema(self) -> None:
        """Drop and recreate every table, discarding previous imports.

        Raises:
            ArchiveStoreError: If schema recreation fails.
        """
        try:
            ARCHIVE_METADATA.drop_all(self._engine)
            ARCHIVE_METADATA.create_all(self._engine)
        except SQLAlchemyError as error:
            raise ArchiveStoreError(
                f"Failed to recreate store schema at {self.database_path}: {error}."
            ) from error
        _LOGGER.info("store_recreated", database_path=str(self.database_path))

    def write_archive_info(self, info: ArchiveDatabaseInfo) -> None:
        """Persist the manifest row of the current run.

        Raises:
            ArchiveStoreError: If the insert fails.
        """
        try:
            with self._engine.begin() as connection:
                connection.execute(insert(archive_database_info_table), [record_to_row(info)])
        except SQLAlchemyError as error:
            raise ArchiveStoreError(
                f"Failed to store archive manifest {info.id}: {error}. "
                "Recreate the store before importing the same bundle again."
            ) from error

    def open_sink(self) -> RecordSink:
        """Create a chunk-scoped record sink bound to this store."""
        return RecordSink(self._engine)

    def count_rows(self, kind: EntityKind) -> int:
        """Return the number of stored rows for an entity kind."""
        table = TABLE_BY_KIND[kind]
        return int(self._scalar(select(func.count()).select_from(table)))

    def count_all(self) -> dict[str, int]:
        """Return stored row counts keyed by entity kind value."""
        return {kind.value: self.count_rows(kind) for kind in EntityKind}

    def load_archive_info(self) -> list[ArchiveDatabaseInfo]:
        """Load stored manifest rows."""
        rows = self._rows(select(archive_database_info_table))
        return [record_from_row(ArchiveDatabaseInfo, row) for row in rows]

    def load_records(self, kind: EntityKind) -> list[Any]:
        """Load all stored records of one kind in primary-key order.

        Args:
            kind: Entity kind to load.

        Returns:
            Typed records rebuilt from their rows.
        """
        table = TABLE_BY_KIND[kind]
        statement = select(table).order_by(*table.primary_key.columns)
        record_type = RECORD_TYPE_BY_KIND[kind]
        return [record_from_row(record_type, row) for row in self._rows(statement)]

    def dispose(self) -> None:
        """Release pooled database connections."""
        self._engine.dispose()

    def _scalar(self, statement: Any) -> Any:
        try:
            with self._engine.connect() as connection:
                return connection.execute(statement).scalar_one()
        except SQLAlchemyError as error:
            raise ArchiveStoreError(
                f"Failed to query store at {self.database_path}: {error}."
            ) from error

    def _rows(self, statement: Any) -> list[Any]:
        try:
            with self._engine.connect() as connection:
                return [row._mapping for row in connection.execute(statement)]
        except SQLAlchemyError as error:
            raise ArchiveStoreError(
                f"Failed to query store at {self.database_path}: {error}."
            ) from error
