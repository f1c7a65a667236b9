"""Edit session: the working copy of an entity and its modification state.

Usage:
    session = EditSession(customer)
    unsubscribe = session.observe(lambda event: print(event.kind))

    session.set_field("name", "ACME Ltd")
    assert session.has_changes
    assert session.is_modified("name")

    result = await session.validate()
    if result.is_valid:
        await repository.update(session.working_copy, cancel)

    session.close()  # drops every observer
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar

from crudflow.core.entity import clone
from crudflow.core.types import Copy
from crudflow.session.models import (
    FieldRecord,
    SessionEvent,
    SessionEventKind,
    SessionObserver,
    ValidationError,
    ValidationResult,
    Validator,
)
from crudflow.session.validation import validate_model

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EditSession(Generic[T]):
    """Owns an independent working copy of an entity while it is being edited.

    Building a session clones the entity and starts with no unsaved changes.
    Any field notification flips `has_changes` to True; values are not diffed,
    so touching a field and reverting it still counts as a change.

    Args:
        entity: Entity to derive the working copy from.
        validators: Extra validators run after the default Pydantic validation.
        use_default_validation: Whether to run `validate_model` first.
    """

    def __init__(
        self,
        entity: T,
        validators: Sequence[Validator] = (),
        use_default_validation: bool = True,
    ) -> None:
        self._working_copy: Copy[T] = clone(entity)
        self._validators = tuple(validators)
        self._use_default_validation = use_default_validation
        self._fields = FieldRecord()
        self._is_validating = False
        self._last_result: ValidationResult | None = None
        self._observers: list[SessionObserver] = []
        self._closed = False

    @property
    def working_copy(self) -> Copy[T]:
        """The mutable clone. Changes reach the repository only through Save."""
        return self._working_copy

    @property
    def has_changes(self) -> bool:
        return self._fields.any_touched()

    @property
    def is_validating(self) -> bool:
        """True while a validation pass is in progress."""
        return self._is_validating

    @property
    def last_result(self) -> ValidationResult | None:
        """Result of the most recent completed validation pass."""
        return self._last_result

    @property
    def is_valid(self) -> bool | None:
        """Whether the last validation passed, None if never validated."""
        if self._last_result is None:
            return None
        return self._last_result.is_valid

    @property
    def closed(self) -> bool:
        return self._closed

    def is_modified(self, field: str) -> bool:
        """Check if a field was touched since the session was built."""
        return self._fields.is_touched(field)

    def modified_fields(self) -> frozenset[str]:
        return frozenset(name for name, touched in self._fields.touched.items() if touched)

    # Observer registration

    def observe(self, observer: SessionObserver) -> Callable[[], None]:
        """Register an observer for the lifetime of this session.

        Args:
            observer: Called with every SessionEvent.

        Returns:
            Callable that removes the observer. Safe to call more than once.
        """
        self._ensure_open()
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _emit(self, event: SessionEvent) -> None:
        for observer in list(self._observers):
            observer(event)

    # Field changes

    def mark_field_changed(self, field: str) -> None:
        """Record that the UI changed a field of the working copy.

        Args:
            field: Field identifier.

        Raises:
            RuntimeError: If the session was closed.
        """
        self._ensure_open()
        self._fields.touch(field)
        self._emit(SessionEvent(SessionEventKind.FIELD_CHANGED, field=field))

    def set_field(self, field: str, value: Any) -> None:
        """Assign a field on the working copy and mark it changed."""
        self._ensure_open()
        setattr(self._working_copy, field, value)
        self.mark_field_changed(field)

    # Validation

    async def validate(self) -> ValidationResult:
        """Run every validator against the working copy.

        Returns:
            The validation result, also kept as `last_result`.
        """
        self._ensure_open()
        self._is_validating = True
        self._emit(SessionEvent(SessionEventKind.VALIDATION_REQUESTED))
        try:
            errors: list[ValidationError] = []
            if self._use_default_validation:
                errors.extend(validate_model(self._working_copy))
            for validator in self._validators:
                found = validator(self._working_copy)
                if inspect.isawaitable(found):
                    found = await found
                errors.extend(found)
            result = ValidationResult(errors=tuple(errors))
        finally:
            self._is_validating = False

        self._last_result = result
        if not result.is_valid:
            logger.debug(
                "Validation failed for %s: %s",
                type(self._working_copy).__name__,
                [e.property for e in result.errors],
            )
        self._emit(SessionEvent(SessionEventKind.VALIDATION_STATE_CHANGED, result=result))
        return result

    # Lifetime

    def close(self) -> None:
        """End the session and unregister every observer."""
        self._observers.clear()
        self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Edit session is closed")
