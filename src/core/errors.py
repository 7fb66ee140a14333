"""Archive tool exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class ArchiveError(Exception):
    """Base exception for all archive ingestion failures."""


class ArchiveConfigError(ArchiveError):
    """Raised for invalid runtime configuration."""


class ArchiveAcquisitionError(ArchiveError):
    """Raised when the manifest or bundle cannot be fetched."""


class ArchiveExtractionError(ArchiveError):
    """Raised when the downloaded bundle cannot be unpacked."""


class ArchiveParseError(ArchiveError):
    """Raised when a source line does not match its entity shape.

    Attributes:
        file_path: File the line was read from.
        line_position: One-based position of the line inside its chunk.
        raw_line: Offending line content.
    """

    def __init__(self, message: str, file_path: str, line_position: int, raw_line: str) -> None:
        super().__init__(message)
        self.file_path = file_path
        self.line_position = line_position
        self.raw_line = raw_line


class ArchiveStoreError(ArchiveError):
    """Raised for destination store schema and commit failures."""
