"""Lifecycle models: states and controller errors."""

from __future__ import annotations

from enum import Enum, auto


class LifecycleState(Enum):
    """Phase of a controller. Exactly one is active at a time."""

    UNLOADED = auto()  # Initial and terminal
    CREATE = auto()
    READ = auto()
    UPDATE = auto()
    DELETE = auto()

    @property
    def is_editing(self) -> bool:
        """True for the states that own a working copy being edited."""
        return self in (LifecycleState.CREATE, LifecycleState.UPDATE)


class ControllerDisposedError(RuntimeError):
    """Raised when an operation is started on a disposed controller."""

    pass


class EntityNotFoundError(LookupError):
    """Raised when Read's predicate matches no entity."""

    pass
