"""Core functionalities: stateless protocols and primitives.

Architecture Note:
    core/ contains the building blocks with no lifecycle of their own: the
    capability resolver, entity capability declarations, the clone operation
    and the cancellation token. For stateful services, see session/ and
    lifecycle/.
"""

from crudflow.core.cancellation import (
    CancellationSource,
    CancellationToken,
    OperationCancelledError,
)
# Imported before capability so the `entity` decorator is not shadowed by the
# crudflow.core.entity subpackage attribute.
from crudflow.core.entity import Cloneable, clone
from crudflow.core.capability import (
    CapabilityContext,
    CapabilityDecision,
    CapabilityPolicy,
    CapabilityPredicate,
    EntityDescriptor,
    EntityRegistry,
    Operation,
    capabilities_of,
    entity,
    get_registry,
    resolve_capability,
    supports,
)
from crudflow.core.types import Copy

__all__ = [
    # Types
    "Copy",
    # Capability
    "Operation",
    "CapabilityDecision",
    "CapabilityContext",
    "CapabilityPolicy",
    "CapabilityPredicate",
    "EntityDescriptor",
    "EntityRegistry",
    "entity",
    "get_registry",
    "capabilities_of",
    "supports",
    "resolve_capability",
    # Entity
    "Cloneable",
    "clone",
    # Cancellation
    "CancellationSource",
    "CancellationToken",
    "OperationCancelledError",
]
