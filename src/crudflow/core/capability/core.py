"""Entity capability registry, decorator, and the capability resolver.

Usage:
    @entity(Operation.READ | Operation.UPDATE)
    @dataclass
    class Customer:
        id: int | None = None
        name: str = ""

    supports(Customer, Operation.UPDATE)  # True
    supports(Customer, Operation.DELETE)  # False

    decision = await resolve_capability(Customer, Operation.UPDATE, policy, context)
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import overload

from crudflow.core.capability.models import (
    CapabilityContext,
    CapabilityDecision,
    CapabilityPolicy,
    CapabilityPredicate,
    EntityDescriptor,
    Operation,
)


class EntityRegistry:
    """Process-local registry mapping entity types to their descriptors."""

    def __init__(self) -> None:
        self._by_type: dict[type, EntityDescriptor] = {}

    def register(self, cls: type, capabilities: Operation) -> EntityDescriptor:
        """Register (or re-register) an entity type with its capability set.

        Args:
            cls: Entity class to register.
            capabilities: Operations the type structurally supports.

        Returns:
            The descriptor attached to the type.
        """
        descriptor = EntityDescriptor(
            type_name=f"{cls.__module__}.{cls.__qualname__}",
            capabilities=capabilities,
        )
        self._by_type[cls] = descriptor
        return descriptor

    def get_descriptor(self, cls: type) -> EntityDescriptor | None:
        """Get descriptor for a registered type, walking base classes.

        Args:
            cls: Entity class to look up.

        Returns:
            Descriptor of the class or its nearest registered base, None if none.
        """
        for base in cls.__mro__:
            descriptor = self._by_type.get(base)
            if descriptor is not None:
                return descriptor
        return None

    def is_registered(self, cls: type) -> bool:
        return self.get_descriptor(cls) is not None


# Module-level registry instance
_registry = EntityRegistry()


def get_registry() -> EntityRegistry:
    """Access the global entity registry."""
    return _registry


@overload
def entity(capabilities: type) -> type: ...


@overload
def entity(capabilities: Operation = Operation.CRUD) -> Callable[[type], type]: ...


def entity(
    capabilities: Operation | type = Operation.CRUD,
) -> type | Callable[[type], type]:
    """Declare which CRUD operations an entity type supports.

    Supports three forms:
        @entity                                   # all four operations
        @entity()                                 # same
        @entity(Operation.READ | Operation.UPDATE)

    Args:
        capabilities: Capability set, or the class itself when used bare.

    Returns:
        Decorated class or decorator function.
    """

    def decorator(c: type, caps: Operation) -> type:
        descriptor = _registry.register(c, caps)
        c.__crud_entity__ = descriptor  # type: ignore[attr-defined]
        return c

    if isinstance(capabilities, type):
        return decorator(capabilities, Operation.CRUD)

    def wrap(c: type) -> type:
        return decorator(c, capabilities)

    return wrap


def capabilities_of(entity_type: type) -> Operation:
    """Get the declared capability set of an entity type.

    Types never decorated with @entity support nothing.
    """
    descriptor = _registry.get_descriptor(entity_type)
    if descriptor is None:
        return Operation.NONE
    return descriptor.capabilities


def supports(entity_type: type, operation: Operation) -> bool:
    """Check whether an entity type structurally supports an operation."""
    descriptor = _registry.get_descriptor(entity_type)
    return descriptor is not None and descriptor.supports(operation)


async def _evaluate(predicate: CapabilityPredicate | None, context: CapabilityContext) -> bool:
    if predicate is None:
        return True
    result = predicate(context)
    if inspect.isawaitable(result):
        result = await result
    return bool(result)


async def resolve_capability(
    entity_type: type,
    operation: Operation,
    policy: CapabilityPolicy | None = None,
    context: CapabilityContext | None = None,
) -> CapabilityDecision:
    """Decide whether an operation may proceed.

    Checks short-circuit in this order:
    1. Structural support declared on the entity type -> RESTRICTED if missing.
    2. Business constraint predicate -> RESTRICTED if false.
    3. Authorization predicate -> UNAUTHORIZED if false.

    Args:
        entity_type: Entity type being operated on.
        operation: Single operation to gate.
        policy: Constraint and authorization predicates (defaults: always true).
        context: Context passed to predicates. Built from the arguments if omitted.

    Returns:
        The capability decision. Never raises for a denial.
    """
    if not supports(entity_type, operation):
        return CapabilityDecision.RESTRICTED

    policy = policy or CapabilityPolicy()
    if context is None:
        context = CapabilityContext(operation=operation, entity_type=entity_type)

    if not await _evaluate(policy.constraint_for(operation), context):
        return CapabilityDecision.RESTRICTED

    if not await _evaluate(policy.authorization_for(operation), context):
        return CapabilityDecision.UNAUTHORIZED

    return CapabilityDecision.ALLOWED
