"""Core constants used across archive modules.

This module centralizes defaults, file names, and upstream endpoints.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

TOOL_VERSION = "1.0.0"
USER_AGENT = f"Anitou_Database/{TOOL_VERSION}"
DEFAULT_MANIFEST_URL = (
    "https://raw.githubusercontent.com/bangumi/Archive/refs/heads/master/aux/latest.json"
)
BUNDLE_ACCEPT_HEADER = "application/octet-stream"
DEFAULT_DATA_ROOT = Path(".bangumi-archive")
DEFAULT_DATABASE_PATH = Path("BangumiArchive.db")
SCRATCH_DIR_NAME = "temp"
MANIFEST_FILE_NAME = "manifest.json"
BUNDLE_FILE_NAME = "archive.zip"
EXTRACT_DIR_NAME = "extracted"
ARCHIVE_FILE_EXTENSION = ".jsonlines"
DEFAULT_CHUNK_SIZE = 200_000
DEFAULT_SUB_BATCH_COUNT = 20_000
DEFAULT_MAX_WORKERS = 10
DEFAULT_DOWNLOAD_TIMEOUT_SECONDS = 600.0
DEFAULT_MANIFEST_TIMEOUT_SECONDS = 60.0
