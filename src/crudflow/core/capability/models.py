"""Capability models: operations, decisions, descriptors and policies."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum, Flag, auto
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from crudflow.lifecycle.models import LifecycleState


class Operation(Flag):
    """CRUD operations. Combine with | to declare a capability set."""

    NONE = 0
    CREATE = 1
    READ = 2
    UPDATE = 4
    DELETE = 8
    CRUD = CREATE | READ | UPDATE | DELETE

    @property
    def label(self) -> str:
        """Human readable name of a single operation ("Create", "Read", ...)."""
        if self.name is None:
            raise ValueError(f"{self!r} is not a single operation")
        return self.name.capitalize()


class CapabilityDecision(Enum):
    """Outcome of a capability check, computed fresh before every operation."""

    RESTRICTED = auto()  # Not supported by the entity type, or constraint failed
    UNAUTHORIZED = auto()  # Caller lacks permission
    ALLOWED = auto()

    @property
    def allowed(self) -> bool:
        return self is CapabilityDecision.ALLOWED


@dataclass(slots=True, frozen=True)
class EntityDescriptor:
    """Metadata attached to entity types by the @entity decorator."""

    type_name: str
    capabilities: Operation

    def supports(self, operation: Operation) -> bool:
        """Check whether every operation in `operation` is declared."""
        return operation is not Operation.NONE and operation in self.capabilities


@dataclass(slots=True, frozen=True)
class CapabilityContext:
    """What a constraint or authorization predicate gets to look at.

    Attributes:
        operation: The operation being gated.
        entity_type: Entity type the controller manages.
        entity: The currently loaded entity (None before Read/Create).
        state: Lifecycle state of the controller at evaluation time.
    """

    operation: Operation
    entity_type: type
    entity: Any = None
    state: LifecycleState | None = None


type CapabilityPredicate = Callable[[CapabilityContext], bool | Awaitable[bool]]
"""Sync or async predicate evaluated against a CapabilityContext."""


@dataclass(slots=True)
class CapabilityPolicy:
    """Injectable business constraint and authorization predicates.

    Missing predicates mean "always true". Predicates are keyed by single
    operations; a predicate registered under CRUD applies to all four.

    Example:
        policy = CapabilityPolicy(
            constraints={Operation.DELETE: lambda ctx: not ctx.entity.locked},
            authorizations={Operation.CRUD: lambda ctx: user.is_staff},
        )
    """

    constraints: dict[Operation, CapabilityPredicate] | None = None
    authorizations: dict[Operation, CapabilityPredicate] | None = None

    def constraint_for(self, operation: Operation) -> CapabilityPredicate | None:
        return _lookup(self.constraints, operation)

    def authorization_for(self, operation: Operation) -> CapabilityPredicate | None:
        return _lookup(self.authorizations, operation)


def _lookup(
    predicates: dict[Operation, CapabilityPredicate] | None, operation: Operation
) -> CapabilityPredicate | None:
    if not predicates:
        return None
    if operation in predicates:
        return predicates[operation]
    for declared, predicate in predicates.items():
        if operation in declared:
            return predicate
    return None
