"""Protocols for tracing infrastructure.

These protocols define the interface for transition log backends,
allowing different implementations (in-memory, file, database).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from crudflow.tracing.models import TransitionRecord


@runtime_checkable
class TransitionLog(Protocol):
    """Protocol for storing the lifecycle operations a controller ran.

    Usage:
        log = InMemoryTransitionLog(max_records=50)
        controller = CrudController(..., history=log)

        await controller.attach()
        [r.outcome for r in log.records()]
    """

    def record(self, record: TransitionRecord) -> None:
        """Store a record.

        Note:
            Implementations may be bounded; the oldest records are evicted first.
        """
        ...

    def records(self) -> list[TransitionRecord]:
        """All stored records, oldest first."""
        ...

    def clear(self) -> None:
        """Remove every stored record."""
        ...

    def __len__(self) -> int: ...
