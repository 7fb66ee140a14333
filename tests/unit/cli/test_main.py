"""Unit tests for CLI command handling."""

from __future__ import annotations

from pathlib import Path

import pytest

from cli.main import main


def test_cli_ingest_source_dir_reports_success(tmp_path: Path, archive_fixture_dir: Path, capsys) -> None:
    """CLI ingest should print the store path and a success line."""
    database_path = tmp_path / "archive.db"
    args = [
        "--database",
        str(database_path),
        "--data-root",
        str(tmp_path / "data"),
        "ingest",
        "--source-dir",
        str(archive_fixture_dir),
        "--chunk-size",
        "2",
    ]

    exit_code = main(args)
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "success=true" in output and str(database_path) in output


def test_cli_ingest_reports_failure_exit_code(tmp_path: Path, capsys) -> None:
    """CLI ingest should exit non-zero and print the error on failure."""
    bundle_path = tmp_path / "broken.zip"
    bundle_path.write_bytes(b"not a zip")
    args = [
        "--database",
        str(tmp_path / "archive.db"),
        "--data-root",
        str(tmp_path / "data"),
        "ingest",
        "--bundle",
        str(bundle_path),
    ]

    exit_code = main(args)
    output = capsys.readouterr().out

    assert exit_code == 1 and "success=false" in output


def test_cli_counts_prints_each_kind(tmp_path: Path, archive_fixture_dir: Path, capsys) -> None:
    """Counts command should print one line per entity kind."""
    database_path = str(tmp_path / "archive.db")
    data_root = str(tmp_path / "data")
    main(
        [
            "--database",
            database_path,
            "--data-root",
            data_root,
            "ingest",
            "--source-dir",
            str(archive_fixture_dir),
        ]
    )
    capsys.readouterr()

    exit_code = main(["--database", database_path, "counts"])
    lines = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0
    assert "subject\t3" in lines and len(lines) == 8


def test_cli_rejects_conflicting_sources(tmp_path: Path) -> None:
    """Bundle and source directory should be mutually exclusive."""
    with pytest.raises(SystemExit):
        main(["ingest", "--bundle", "a.zip", "--source-dir", str(tmp_path)])


def test_cli_accepts_locations_after_subcommand(
    tmp_path: Path,
    archive_fixture_dir: Path,
    capsys,
) -> None:
    """Store and scratch locations should also be accepted after the subcommand."""
    database_path = str(tmp_path / "archive.db")
    ingest_exit_code = main(
        [
            "ingest",
            "--database",
            database_path,
            "--data-root",
            str(tmp_path / "data"),
            "--source-dir",
            str(archive_fixture_dir),
        ]
    )
    capsys.readouterr()

    counts_exit_code = main(["counts", "--database", database_path])
    lines = capsys.readouterr().out.strip().splitlines()

    assert ingest_exit_code == 0 and counts_exit_code == 0
    assert "subject\t3" in lines
