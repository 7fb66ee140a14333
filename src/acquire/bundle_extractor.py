"""Zip bundle extraction."""

from __future__ import annotations

from pathlib import Path
import zipfile

from core.errors import ArchiveExtractionError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


def extract_bundle(bundle_path: Path, target_dir: Path) -> Path:
    """Unpack a zip bundle into a directory.

    Args:
        bundle_path: Downloaded or local zip file.
        target_dir: Extraction directory, created when missing.

    Returns:
        The extraction directory.

    Raises:
        ArchiveExtractionError: If the bundle is missing, corrupt, or unwritable.
    """
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(bundle_path) as archive:
            member_count = len(archive.infolist())
            archive.extractall(target_dir)
    except (zipfile.BadZipFile, OSError) as error:
        raise ArchiveExtractionError(f"Failed to extract zip file: {error}") from error
    _LOGGER.info(
        "bundle_extracted",
        bundle=str(bundle_path),
        target=str(target_dir),
        member_count=member_count,
    )
    return target_dir
