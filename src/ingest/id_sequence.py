"""Run-scoped identity sequence for subject records."""

from __future__ import annotations

import threading


class SubjectIdSequence:
    """Thread-safe dense counter shared by concurrent sub-batch workers.

    Ids are handed out one at a time under a lock, so every claimed
    value is unique and the claimed set is always ``1..issued``.
    """

    def __init__(self, start: int = 1) -> None:
        self._lock = threading.Lock()
        self._start = start
        self._next_value = start

    def claim(self) -> int:
        """Claim the next identity value."""
        with self._lock:
            value = self._next_value
            self._next_value += 1
            return value

    @property
    def issued(self) -> int:
        """Number of ids claimed so far."""
        with self._lock:
            return self._next_value - self._start
