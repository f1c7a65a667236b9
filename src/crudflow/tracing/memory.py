"""Bounded in-memory transition log."""

from __future__ import annotations

from collections import deque

from crudflow.tracing.models import TransitionRecord


class InMemoryTransitionLog:
    """Keeps the most recent records in a ring buffer.

    Args:
        max_records: Buffer size. 0 keeps nothing.
    """

    def __init__(self, max_records: int = 100) -> None:
        if max_records < 0:
            raise ValueError(f"max_records must be >= 0, got {max_records}")
        self._records: deque[TransitionRecord] = deque(maxlen=max_records)

    def record(self, record: TransitionRecord) -> None:
        self._records.append(record)

    def records(self) -> list[TransitionRecord]:
        return list(self._records)

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)
