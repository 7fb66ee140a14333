"""Ingest orchestration for archive snapshot rebuilds.

This module coordinates manifest and bundle acquisition, extraction,
per-file ingestion, and scratch cleanup for one full re-ingestion run.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from acquire.archive_downloader import ArchiveDownloader
from acquire.bundle_extractor import extract_bundle
from core.config import ArchiveConfig
from core.errors import ArchiveError, ArchiveExtractionError
from core.logging_config import get_logger
from core.types import EntityKind, IngestOptions, IngestResult
from ingest.entity_dispatch import list_archive_files, resolve_entity_kind
from ingest.file_ingest import ingest_archive_file
from ingest.id_sequence import SubjectIdSequence
from ingest.scratch_workspace import ScratchWorkspace
from store.archive_store import ArchiveStore

_LOGGER = get_logger(__name__)


class RunStage(str, Enum):
    """Lifecycle stages of one ingestion run."""

    IDLE = "idle"
    ACQUIRING_MANIFEST = "acquiring_manifest"
    ACQUIRING_BUNDLE = "acquiring_bundle"
    EXTRACTING = "extracting"
    INGESTING_FILES = "ingesting_files"
    CLEANING_UP = "cleaning_up"
    DONE = "done"
    FAILED = "failed"


class ArchiveIngestRunner:
    """Stateful runner for a single archive ingestion."""

    def __init__(
        self,
        options: IngestOptions,
        config: ArchiveConfig,
        downloader: ArchiveDownloader | None = None,
        store: ArchiveStore | None = None,
    ) -> None:
        self._options = options
        self._config = config
        self._downloader = downloader or ArchiveDownloader(config)
        self._store = store or ArchiveStore(config.database_path)
        self._subject_ids = SubjectIdSequence()
        self._ingested_files: list[str] = []
        self._skipped_files: list[str] = []
        self._record_counts: dict[str, int] = {}
        self.stage = RunStage.IDLE

    def run(self) -> IngestResult:
        """Execute the run and report its outcome.

        Any archive error stops the run; the message is carried in the
        returned result rather than raised.
        """
        try:
            self._prepare_store()
            with ScratchWorkspace(self._config.scratch_dir, self._user_paths()) as workspace:
                source_dir = self._resolve_source_dir(workspace)
                self._ingest_files(source_dir)
                self.stage = RunStage.CLEANING_UP
        except ArchiveError as error:
            self.stage = RunStage.FAILED
            _LOGGER.error("ingest_failed", error=str(error), stage=self.stage.value)
            return self._result(success=False, error_message=str(error))
        self.stage = RunStage.DONE
        _LOGGER.info(
            "ingest_completed",
            database_path=str(self._store.database_path),
            ingested_files=self._ingested_files,
            skipped_files=self._skipped_files,
            record_counts=self._record_counts,
        )
        return self._result(success=True)

    def _prepare_store(self) -> None:
        if self._options.recreate:
            self._store.recreate_schema()
        else:
            self._store.ensure_schema()

    def _user_paths(self) -> list[Path]:
        """Caller-supplied inputs that scratch cleanup must never remove."""
        candidates = (self._options.bundle_path, self._options.source_dir)
        return [path for path in candidates if path is not None]

    def _resolve_source_dir(self, workspace: ScratchWorkspace) -> Path:
        """Produce the directory of JSON-lines files to ingest."""
        if self._options.source_dir is not None:
            return self._options.source_dir
        bundle_path = self._options.bundle_path
        if bundle_path is None:
            bundle_path = self._acquire_bundle(workspace)
        self.stage = RunStage.EXTRACTING
        return extract_bundle(bundle_path, workspace.extract_dir)

    def _acquire_bundle(self, workspace: ScratchWorkspace) -> Path:
        self.stage = RunStage.ACQUIRING_MANIFEST
        info = self._downloader.fetch_manifest(workspace.manifest_path)
        self._store.write_archive_info(info)
        self.stage = RunStage.ACQUIRING_BUNDLE
        self._downloader.download_bundle(info.url, workspace.bundle_path)
        return workspace.bundle_path

    def _ingest_files(self, source_dir: Path) -> None:
        self.stage = RunStage.INGESTING_FILES
        if not source_dir.is_dir():
            raise ArchiveExtractionError(
                f"Failed to read extracted json files: {source_dir} is not a directory."
            )
        try:
            archive_files = list_archive_files(source_dir)
        except OSError as error:
            raise ArchiveExtractionError(
                f"Failed to read extracted json files: {error}"
            ) from error
        if not archive_files:
            _LOGGER.warning("no_archive_files_found", source_dir=str(source_dir))
        sink = self._store.open_sink()
        for file_path in archive_files:
            kind = resolve_entity_kind(file_path)
            if kind is None:
                _LOGGER.warning("unknown_archive_file", file=str(file_path), action="skipped")
                self._skipped_files.append(file_path.name)
                continue
            _LOGGER.info("file_ingest_started", file=str(file_path), entity_kind=kind.value)
            id_sequence = self._subject_ids if kind is EntityKind.SUBJECT else None
            record_count = ingest_archive_file(file_path, kind, sink, self._config, id_sequence)
            self._ingested_files.append(file_path.name)
            self._record_counts[kind.value] = self._record_counts.get(kind.value, 0) + record_count
            _LOGGER.info(
                "file_ingested",
                file=str(file_path),
                entity_kind=kind.value,
                record_count=record_count,
            )

    def _result(self, success: bool, error_message: str | None = None) -> IngestResult:
        return IngestResult(
            success=success,
            database_path=self._store.database_path if success else None,
            error_message=error_message,
            ingested_files=tuple(self._ingested_files),
            skipped_files=tuple(self._skipped_files),
            record_counts=dict(self._record_counts),
        )


def ingest_archive(
    options: IngestOptions,
    config: ArchiveConfig,
    downloader: ArchiveDownloader | None = None,
) -> IngestResult:
    """Run a full archive ingestion and return its outcome.

    Args:
        options: Ingest request options.
        config: Runtime configuration.
        downloader: Optional preconfigured downloader.

    Returns:
        Structured success or failure result.
    """
    runner = ArchiveIngestRunner(options, config, downloader)
    return runner.run()
