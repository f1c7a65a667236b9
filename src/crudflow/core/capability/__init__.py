"""Capability functionality: operations, registry, decorator and resolver."""

from crudflow.core.capability.core import (
    EntityRegistry,
    capabilities_of,
    entity,
    get_registry,
    resolve_capability,
    supports,
)
from crudflow.core.capability.models import (
    CapabilityContext,
    CapabilityDecision,
    CapabilityPolicy,
    CapabilityPredicate,
    EntityDescriptor,
    Operation,
)

__all__ = [
    # Models
    "Operation",
    "CapabilityDecision",
    "CapabilityContext",
    "CapabilityPolicy",
    "CapabilityPredicate",
    "EntityDescriptor",
    # Core
    "entity",
    "get_registry",
    "EntityRegistry",
    "capabilities_of",
    "supports",
    "resolve_capability",
]
