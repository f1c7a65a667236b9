"""Edit session models: validation results and session events."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


@dataclass(slots=True, frozen=True)
class ValidationError:
    """Validation messages for one property of the working copy.

    Attributes:
        property: Dotted field path ("address.city"), empty for model-level errors.
        messages: Human readable messages for that property.
    """

    property: str
    messages: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class ValidationResult:
    """Outcome of one validation pass."""

    errors: tuple[ValidationError, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def messages_for(self, property: str) -> tuple[str, ...]:
        """All messages reported for a property."""
        found: list[str] = []
        for error in self.errors:
            if error.property == property:
                found.extend(error.messages)
        return tuple(found)


type Validator = Callable[[Any], list[ValidationError] | Awaitable[list[ValidationError]]]
"""Sync or async callable returning validation errors for a working copy."""


class SessionEventKind(Enum):
    """Events an edit session reports to its observers."""

    FIELD_CHANGED = auto()
    VALIDATION_REQUESTED = auto()
    VALIDATION_STATE_CHANGED = auto()


@dataclass(slots=True, frozen=True)
class SessionEvent:
    """Single notification from an edit session.

    Attributes:
        kind: What happened.
        field: Field name for FIELD_CHANGED, None otherwise.
        result: Validation result for VALIDATION_STATE_CHANGED, None otherwise.
    """

    kind: SessionEventKind
    field: str | None = None
    result: ValidationResult | None = None


type SessionObserver = Callable[[SessionEvent], None]


@dataclass(slots=True)
class FieldRecord:
    """Per-field "touched" flags for the current working copy."""

    touched: dict[str, bool] = field(default_factory=dict)

    def touch(self, name: str) -> None:
        self.touched[name] = True

    def is_touched(self, name: str) -> bool:
        return self.touched.get(name, False)

    def any_touched(self) -> bool:
        return any(self.touched.values())
