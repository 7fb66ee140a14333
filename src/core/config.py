"""Runtime configuration model for archive ingestion.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_DATA_ROOT,
    DEFAULT_DATABASE_PATH,
    DEFAULT_DOWNLOAD_TIMEOUT_SECONDS,
    DEFAULT_MANIFEST_TIMEOUT_SECONDS,
    DEFAULT_MANIFEST_URL,
    DEFAULT_MAX_WORKERS,
    DEFAULT_SUB_BATCH_COUNT,
    SCRATCH_DIR_NAME,
)
from core.errors import ArchiveConfigError

_ENV_PREFIX = "BANGUMI_ARCHIVE_"


@dataclass(frozen=True)
class ArchiveConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory holding the scratch area.
        database_path: SQLite file receiving ingested records.
        github_token: Optional bearer token for upstream requests.
        manifest_url: Location of the upstream manifest document.
        chunk_size: Maximum lines read and committed per chunk.
        sub_batch_count: Target number of sub-batches per chunk.
        max_workers: Worker threads deserializing sub-batches.
        download_timeout: Bundle download timeout in seconds.
        manifest_timeout: Manifest request timeout in seconds.
    """

    data_root: Path
    database_path: Path
    github_token: str | None
    manifest_url: str
    chunk_size: int
    sub_batch_count: int
    max_workers: int
    download_timeout: float
    manifest_timeout: float

    @property
    def scratch_dir(self) -> Path:
        """Directory for the manifest, bundle, and extracted files."""
        return self.data_root / SCRATCH_DIR_NAME

    @classmethod
    def from_env(cls) -> "ArchiveConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            ArchiveConfigError: If environment values are invalid.
        """
        data_root_value = _env("DATA_ROOT") or str(DEFAULT_DATA_ROOT)
        database_value = _env("DATABASE_PATH") or str(DEFAULT_DATABASE_PATH)
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            database_path=Path(database_value).expanduser().resolve(),
            github_token=_env("GITHUB_TOKEN") or None,
            manifest_url=_env("MANIFEST_URL") or DEFAULT_MANIFEST_URL,
            chunk_size=_parse_positive_int("CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
            sub_batch_count=_parse_positive_int("SUB_BATCH_COUNT", DEFAULT_SUB_BATCH_COUNT),
            max_workers=_parse_positive_int("MAX_WORKERS", DEFAULT_MAX_WORKERS),
            download_timeout=_parse_positive_float(
                "DOWNLOAD_TIMEOUT", DEFAULT_DOWNLOAD_TIMEOUT_SECONDS
            ),
            manifest_timeout=_parse_positive_float(
                "MANIFEST_TIMEOUT", DEFAULT_MANIFEST_TIMEOUT_SECONDS
            ),
        )


def _env(suffix: str) -> str | None:
    return os.getenv(_ENV_PREFIX + suffix)


def _parse_positive_int(suffix: str, default: int) -> int:
    """Parse a positive integer environment value.

    Args:
        suffix: Variable name without prefix.
        default: Value used when the variable is unset.

    Returns:
        Parsed integer.

    Raises:
        ArchiveConfigError: If value is not a positive integer.
    """
    raw_value = _env(suffix)
    if raw_value is None:
        return default
    try:
        value = int(raw_value)
    except ValueError as error:
        raise ArchiveConfigError(
            f"Invalid {_ENV_PREFIX}{suffix} value: "
            f"expected integer, got '{raw_value}'. "
            f"Set {_ENV_PREFIX}{suffix} to a positive number."
        ) from error
    if value <= 0:
        raise ArchiveConfigError(
            f"Invalid {_ENV_PREFIX}{suffix} value: expected a positive integer, got {value}."
        )
    return value


def _parse_positive_float(suffix: str, default: float) -> float:
    """Parse a positive float environment value.

    Raises:
        ArchiveConfigError: If value is not a positive number.
    """
    raw_value = _env(suffix)
    if raw_value is None:
        return default
    try:
        value = float(raw_value)
    except ValueError as error:
        raise ArchiveConfigError(
            f"Invalid {_ENV_PREFIX}{suffix} value: "
            f"expected number of seconds, got '{raw_value}'."
        ) from error
    if value <= 0:
        raise ArchiveConfigError(
            f"Invalid {_ENV_PREFIX}{suffix} value: expected a positive number, got {value}."
        )
    return value
