"""Edit session: working copy, field modification tracking and validation."""

from crudflow.session.edit_session import EditSession
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

__all__ = [
    "EditSession",
    "FieldRecord",
    "SessionEvent",
    "SessionEventKind",
    "SessionObserver",
    "ValidationError",
    "ValidationResult",
    "Validator",
    "validate_model",
]
