"""Bounded-memory line chunking for archive files.

Archive files hold hundreds of thousands of JSON lines, so they are
consumed as a lazy sequence of fixed-size chunks instead of whole.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from core.constants import DEFAULT_CHUNK_SIZE
from core.errors import ArchiveConfigError


def iter_line_chunks(
    source: Iterable[str],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Iterator[list[str]]:
    """Yield ordered chunks of non-blank lines from a text source.

    The source is consumed as the chunks are pulled, so the sequence is
    not restartable. Blank lines are dropped and never counted.

    Args:
        source: Open text file or any iterable of lines.
        chunk_size: Maximum number of lines per chunk.

    Returns:
        Iterator over chunks holding at most ``chunk_size`` lines each.

    Raises:
        ArchiveConfigError: If chunk size is not positive.
    """
    if chunk_size <= 0:
        raise ArchiveConfigError(
            f"Invalid chunk size {chunk_size}: expected a positive number of lines."
        )
    return _generate_chunks(source, chunk_size)


def _generate_chunks(source: Iterable[str], chunk_size: int) -> Iterator[list[str]]:
    chunk: list[str] = []
    for raw_line in source:
        line = raw_line.rstrip("\r\n")
        if not line.strip():
            continue
        chunk.append(line)
        if len(chunk) >= chunk_size:
            yield chunk
            chunk = []
    if chunk:
        yield chunk
