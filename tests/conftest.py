"""Pytest configuration for repository test runs."""

from __future__ import annotations

from dataclasses import replace
import sys
from pathlib import Path

import pytest

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_PATH = _PROJECT_ROOT / "src"
if str(_SRC_PATH) not in sys.path:
    sys.path.insert(0, str(_SRC_PATH))

from core.config import ArchiveConfig  # noqa: E402

TEST_MANIFEST_URL = "https://raw.archive.test/aux/latest.json"


@pytest.fixture
def archive_config(tmp_path: Path) -> ArchiveConfig:
    """Config isolated under a temporary directory."""
    return replace(
        ArchiveConfig.from_env(),
        data_root=tmp_path / "data",
        database_path=tmp_path / "archive.db",
        github_token=None,
        manifest_url=TEST_MANIFEST_URL,
    )


@pytest.fixture
def archive_fixture_dir() -> Path:
    """Directory holding one small file per entity kind plus an unknown file."""
    return _PROJECT_ROOT / "tests" / "fixtures" / "archive"
