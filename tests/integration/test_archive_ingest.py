"""Integration tests for end-to-end archive ingestion."""

from __future__ import annotations

from dataclasses import replace
import io
import json
from pathlib import Path
import shutil
import zipfile

import httpx

from acquire.archive_downloader import ArchiveDownloader
from core.config import ArchiveConfig
from core.types import EntityKind, IngestOptions
from ingest.pipeline import ArchiveIngestRunner, RunStage, ingest_archive
from store.archive_store import ArchiveStore

_ASSET_URL = "https://api.archive.test/assets/7"
_OBJECT_URL = "https://objects.archive.test/dump.zip"


def _write_subject_file(directory: Path, count: int) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    lines = [json.dumps({"id": 900 + index, "name": f"subject-{index}"}) for index in range(count)]
    (directory / "subject.jsonlines").write_text("\n".join(lines) + "\n", encoding="utf-8")


def _bundle_bytes(source_dir: Path) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for file_path in sorted(source_dir.iterdir()):
            archive.write(file_path, file_path.name)
    return buffer.getvalue()


def test_subject_file_yields_sequential_ids(archive_config: ArchiveConfig, tmp_path: Path) -> None:
    """Three valid subject lines should become subjects 1, 2, and 3."""
    source_dir = tmp_path / "extracted"
    _write_subject_file(source_dir, 3)

    result = ingest_archive(IngestOptions(source_dir=source_dir), archive_config)

    store = ArchiveStore(archive_config.database_path)
    assert result.success is True
    assert {subject.id for subject in store.load_records(EntityKind.SUBJECT)} == {1, 2, 3}


def test_unknown_file_is_skipped_and_run_succeeds(
    archive_config: ArchiveConfig,
    archive_fixture_dir: Path,
) -> None:
    """Unknown files should be skipped while known files ingest fully."""
    result = ingest_archive(IngestOptions(source_dir=archive_fixture_dir), archive_config)

    store = ArchiveStore(archive_config.database_path)
    assert result.success is True
    assert result.skipped_files == ("unknown-type.jsonlines",)
    assert len(result.ingested_files) == 8
    assert store.count_rows(EntityKind.SUBJECT) == 3
    assert store.count_rows(EntityKind.SUBJECT_RELATION) == 2
    assert result.record_counts[EntityKind.CHARACTER.value] == 2


def test_malformed_line_aborts_after_earlier_chunks_commit(
    archive_config: ArchiveConfig,
    tmp_path: Path,
) -> None:
    """A bad line in chunk two should leave exactly chunk one persisted."""
    source_dir = tmp_path / "extracted"
    source_dir.mkdir()
    lines = [json.dumps({"id": index, "name": f"c{index}"}) for index in range(1, 60001)]
    lines[50000] = '{"id": 50001, "name": "trunc'
    (source_dir / "character.jsonlines").write_text("\n".join(lines) + "\n", encoding="utf-8")
    config = replace(archive_config, chunk_size=50000, sub_batch_count=50)

    result = ingest_archive(IngestOptions(source_dir=source_dir), config)

    store = ArchiveStore(config.database_path)
    assert result.success is False
    assert "character.jsonlines" in (result.error_message or "")
    assert store.count_rows(EntityKind.CHARACTER) == 50000


def test_failure_in_one_file_stops_remaining_files(
    archive_config: ArchiveConfig,
    archive_fixture_dir: Path,
    tmp_path: Path,
) -> None:
    """Files after a failing file should not be ingested."""
    source_dir = tmp_path / "extracted"
    shutil.copytree(archive_fixture_dir, source_dir)
    (source_dir / "character.jsonlines").write_text('{"id": "bad"}\n', encoding="utf-8")

    runner = ArchiveIngestRunner(IngestOptions(source_dir=source_dir), archive_config)
    result = runner.run()

    assert result.success is False and runner.stage is RunStage.FAILED
    assert result.ingested_files == ()
    assert ArchiveStore(archive_config.database_path).count_rows(EntityKind.EPISODE) == 0


def test_download_with_redirect_ingests_bundle(
    archive_config: ArchiveConfig,
    archive_fixture_dir: Path,
) -> None:
    """The network flow should follow the bundle redirect and ingest the archive."""
    manifest = {"id": 7, "name": "dump.zip", "size": 1, "url": _ASSET_URL}
    routes = {
        archive_config.manifest_url: httpx.Response(200, json=manifest),
        _ASSET_URL: httpx.Response(302, headers={"Location": _OBJECT_URL}),
        _OBJECT_URL: httpx.Response(200, content=_bundle_bytes(archive_fixture_dir)),
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return routes.get(str(request.url), httpx.Response(404))

    downloader = ArchiveDownloader(archive_config, transport=httpx.MockTransport(handler))
    runner = ArchiveIngestRunner(IngestOptions(), archive_config, downloader=downloader)
    result = runner.run()

    store = ArchiveStore(archive_config.database_path)
    assert result.success is True and runner.stage is RunStage.DONE
    assert result.database_path == archive_config.database_path
    assert [info.id for info in store.load_archive_info()] == [7]
    assert store.count_rows(EntityKind.EPISODE) == 2
    assert not archive_config.scratch_dir.exists()


def test_download_failure_reports_status_and_cleans_scratch(archive_config: ArchiveConfig) -> None:
    """A failed bundle download should fail the run and leave no scratch files."""
    manifest = {"id": 7, "name": "dump.zip", "size": 1, "url": _ASSET_URL}
    routes = {
        archive_config.manifest_url: httpx.Response(200, json=manifest),
        _ASSET_URL: httpx.Response(404, text="asset gone"),
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return routes[str(request.url)]

    downloader = ArchiveDownloader(archive_config, transport=httpx.MockTransport(handler))
    result = ingest_archive(IngestOptions(), archive_config, downloader=downloader)

    assert result.success is False
    assert "404: asset gone" in (result.error_message or "")
    assert not archive_config.scratch_dir.exists()


def test_local_bundle_skips_download(
    archive_config: ArchiveConfig,
    archive_fixture_dir: Path,
    tmp_path: Path,
) -> None:
    """A local bundle should be extracted and ingested without network access."""
    bundle_path = tmp_path / "local.zip"
    bundle_path.write_bytes(_bundle_bytes(archive_fixture_dir))

    result = ingest_archive(IngestOptions(bundle_path=bundle_path, recreate=True), archive_config)

    assert result.success is True
    assert bundle_path.exists()
    assert ArchiveStore(archive_config.database_path).count_rows(EntityKind.PERSON) == 2


def test_corrupt_local_bundle_fails_extraction(archive_config: ArchiveConfig, tmp_path: Path) -> None:
    """A corrupt bundle should stop the run during extraction."""
    bundle_path = tmp_path / "local.zip"
    bundle_path.write_bytes(b"not a zip")

    runner = ArchiveIngestRunner(IngestOptions(bundle_path=bundle_path), archive_config)
    result = runner.run()

    assert result.success is False
    assert "Failed to extract zip file" in (result.error_message or "")


def test_rerun_without_recreate_duplicates_rows_of_keyless_tables(
    archive_config: ArchiveConfig,
    tmp_path: Path,
) -> None:
    """Re-ingesting store-keyed relations into a populated store appends duplicates."""
    source_dir = tmp_path / "extracted"
    source_dir.mkdir()
    (source_dir / "subject-relations.jsonlines").write_text(
        '{"subject_id": 1, "relation_type": 1, "related_subject_id": 2, "order": 0}\n',
        encoding="utf-8",
    )

    ingest_archive(IngestOptions(source_dir=source_dir), archive_config)
    ingest_archive(IngestOptions(source_dir=source_dir), archive_config)

    assert ArchiveStore(archive_config.database_path).count_rows(EntityKind.SUBJECT_RELATION) == 2


def test_missing_source_dir_fails_the_run(archive_config: ArchiveConfig, tmp_path: Path) -> None:
    """A source directory that does not exist should fail instead of ingesting nothing."""
    runner = ArchiveIngestRunner(IngestOptions(source_dir=tmp_path / "missing"), archive_config)

    result = runner.run()

    assert result.success is False and runner.stage is RunStage.FAILED
    assert "Failed to read extracted json files" in (result.error_message or "")


def test_deeply_nested_line_fails_the_run(archive_config: ArchiveConfig, tmp_path: Path) -> None:
    """A line too deeply nested to decode should become a failure result."""
    source_dir = tmp_path / "extracted"
    source_dir.mkdir()
    (source_dir / "character.jsonlines").write_text("[" * 200000 + "\n", encoding="utf-8")

    result = ingest_archive(IngestOptions(source_dir=source_dir), archive_config)

    assert result.success is False
    assert "character.jsonlines" in (result.error_message or "")


def test_bundle_inside_scratch_dir_survives_the_run(
    archive_config: ArchiveConfig,
    archive_fixture_dir: Path,
) -> None:
    """A local bundle stored at the scratch bundle path should not be deleted."""
    bundle_path = archive_config.scratch_dir / "archive.zip"
    bundle_path.parent.mkdir(parents=True)
    bundle_path.write_bytes(_bundle_bytes(archive_fixture_dir))

    result = ingest_archive(IngestOptions(bundle_path=bundle_path), archive_config)

    assert result.success is True
    assert bundle_path.exists()
    assert not (archive_config.scratch_dir / "extracted").exists()
