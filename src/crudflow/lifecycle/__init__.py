"""Lifecycle orchestration: the controller state machine and navigation guard.

Architecture Note:
    lifecycle/ is a stateful service layer. It coordinates the stateless
    capability resolver in core/, the edit session in session/ and the
    external collaborators declared in repository/ and ui/.
"""

from crudflow.lifecycle.controller import CrudController
from crudflow.lifecycle.models import (
    ControllerDisposedError,
    EntityNotFoundError,
    LifecycleState,
)
from crudflow.lifecycle.navigation import NavigationGuard

__all__ = [
    "CrudController",
    "LifecycleState",
    "NavigationGuard",
    "ControllerDisposedError",
    "EntityNotFoundError",
]
