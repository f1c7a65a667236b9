"""Data models for tracing infrastructure.

Records are plain values with JSON-friendly `to_dict` output so any log
backend can store them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Outcome(Enum):
    """How a lifecycle operation ended."""

    SUCCEEDED = "succeeded"
    RESTRICTED = "restricted"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    FAILED = "failed"
    DECLINED = "declined"  # User declined a confirmation
    REJECTED = "rejected"  # Invalid state, invalid submission or overlapping call
    CANCELLED = "cancelled"


@dataclass(slots=True, frozen=True)
class TransitionRecord:
    """Record of one lifecycle operation.

    Attributes:
        operation: Operation name ("create", "read", "save", "close", ...).
        from_state: Lifecycle state name before the operation.
        to_state: Lifecycle state name after the operation.
        outcome: How the operation ended.
        timestamp: Unix timestamp when the operation finished.
        detail: Optional message, e.g. the raw error text.

    Example:
        record = TransitionRecord(
            operation="update",
            from_state="READ",
            to_state="UPDATE",
            outcome=Outcome.SUCCEEDED,
            timestamp=1704067200.0,
        )
    """

    operation: str
    from_state: str
    to_state: str
    outcome: Outcome
    timestamp: float
    detail: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        result: dict[str, Any] = {
            "operation": self.operation,
            "from_state": self.from_state,
            "to_state": self.to_state,
            "outcome": self.outcome.value,
            "timestamp": self.timestamp,
        }
        if self.detail is not None:
            result["detail"] = self.detail
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TransitionRecord:
        """Create from dictionary (for deserialization)."""
        return cls(
            operation=data["operation"],
            from_state=data["from_state"],
            to_state=data["to_state"],
            outcome=Outcome(data["outcome"]),
            timestamp=data["timestamp"],
            detail=data.get("detail"),
        )
