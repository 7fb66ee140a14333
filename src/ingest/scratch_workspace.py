"""Scoped scratch area for the manifest, bundle, and extracted files."""

from __future__ import annotations

from pathlib import Path
import shutil
from types import TracebackType
from typing import Iterable

from core.constants import BUNDLE_FILE_NAME, EXTRACT_DIR_NAME, MANIFEST_FILE_NAME
from core.errors import ArchiveExtractionError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class ScratchWorkspace:
    """Context manager owning the temporary files of one run.

    Release is best-effort: removal failures are logged as warnings and
    never replace the run's own outcome.
    """

    def __init__(self, root: Path, preserved: Iterable[Path] = ()) -> None:
        """Create a workspace.

        Args:
            root: Scratch directory owned by the run.
            preserved: Caller inputs that may live inside the scratch
                directory and must survive release.
        """
        self.root = root
        self._preserved = {path.resolve() for path in preserved}
        self.manifest_path = root / MANIFEST_FILE_NAME
        self.bundle_path = root / BUNDLE_FILE_NAME
        self.extract_dir = root / EXTRACT_DIR_NAME

    def __enter__(self) -> "ScratchWorkspace":
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            raise ArchiveExtractionError(
                f"Failed to create scratch directory {self.root}: {error}. "
                "Check permissions on the data root."
            ) from error
        if self._owned_paths_present():
            _LOGGER.warning("stale_scratch_found", root=str(self.root))
            self.release()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.release()

    def release(self) -> list[Path]:
        """Remove owned scratch paths.

        Returns:
            Paths that could not be removed.
        """
        failed_paths: list[Path] = []
        for path in self._owned_paths():
            try:
                _remove_path(path)
            except OSError as error:
                failed_paths.append(path)
                _LOGGER.warning(
                    "scratch_cleanup_failed",
                    path=str(path),
                    error=str(error),
                    hint="Delete the temporary files manually.",
                )
        if not failed_paths and self.root.is_dir() and not any(self.root.iterdir()):
            try:
                self.root.rmdir()
            except OSError as error:
                failed_paths.append(self.root)
                _LOGGER.warning("scratch_cleanup_failed", path=str(self.root), error=str(error))
        return failed_paths

    def _owned_paths(self) -> list[Path]:
        return [
            path
            for path in (self.manifest_path, self.bundle_path, self.extract_dir)
            if path.resolve() not in self._preserved
        ]

    def _owned_paths_present(self) -> bool:
        return any(path.exists() for path in self._owned_paths())


def _remove_path(path: Path) -> None:
    if path.is_dir():
        shutil.rmtree(path)
    elif path.exists():
        path.unlink()
