"""crudflow: lifecycle controller for single-entity CRUD forms.

Usage:
    from dataclasses import dataclass
    from crudflow import CrudController, InMemoryRepository, LifecycleState, Operation, entity

    @entity(Operation.READ | Operation.UPDATE)
    @dataclass
    class Customer:
        id: int | None = None
        name: str = ""

    repository = InMemoryRepository(Customer, [Customer(id=1, name="ACME")])
    controller = CrudController(
        Customer,
        repository,
        dialogs,
        notifier,
        initial_state=LifecycleState.UPDATE,
        key=1,
    )
    await controller.attach()
    controller.session.set_field("name", "ACME Ltd")
    await controller.submit()
    controller.dispose()
"""

__version__ = "0.1.0"

# Configuration
from crudflow.config import ControllerSettings

# Core primitives
from crudflow.core import (
    CancellationSource,
    CancellationToken,
    CapabilityContext,
    CapabilityDecision,
    CapabilityPolicy,
    Cloneable,
    Copy,
    Operation,
    OperationCancelledError,
    capabilities_of,
    clone,
    entity,
    resolve_capability,
    supports,
)

# Lifecycle
from crudflow.lifecycle import (
    ControllerDisposedError,
    CrudController,
    EntityNotFoundError,
    LifecycleState,
    NavigationGuard,
)

# Repositories
from crudflow.repository import (
    CreateRepository,
    DeleteRepository,
    InMemoryRepository,
    QueryRepository,
    QueryResult,
    ReadRepository,
    UpdateRepository,
)

# Edit session
from crudflow.session import EditSession, ValidationError, ValidationResult

# Tracing
from crudflow.tracing import InMemoryTransitionLog, Outcome, TransitionLog, TransitionRecord

# UI collaborators
from crudflow.ui import Dialogs, NavigationContext, NavigationSource, Notifier, Severity

__all__ = [
    # Version
    "__version__",
    # Core
    "Copy",
    "Operation",
    "CapabilityDecision",
    "CapabilityContext",
    "CapabilityPolicy",
    "entity",
    "capabilities_of",
    "supports",
    "resolve_capability",
    "Cloneable",
    "clone",
    "CancellationSource",
    "CancellationToken",
    "OperationCancelledError",
    # Lifecycle
    "CrudController",
    "LifecycleState",
    "NavigationGuard",
    "ControllerDisposedError",
    "EntityNotFoundError",
    # Session
    "EditSession",
    "ValidationError",
    "ValidationResult",
    # Repository
    "CreateRepository",
    "ReadRepository",
    "UpdateRepository",
    "DeleteRepository",
    "QueryRepository",
    "QueryResult",
    "InMemoryRepository",
    # UI
    "Dialogs",
    "Notifier",
    "NavigationSource",
    "NavigationContext",
    "Severity",
    # Config
    "ControllerSettings",
    # Tracing
    "TransitionLog",
    "TransitionRecord",
    "Outcome",
    "InMemoryTransitionLog",
]
