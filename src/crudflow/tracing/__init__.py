"""Tracing infrastructure for recording the lifecycle operations of a controller.

Usage:
    from crudflow.tracing import InMemoryTransitionLog, TransitionLog

    log = InMemoryTransitionLog(max_records=100)
    controller = CrudController(..., history=log)
"""

from crudflow.tracing.memory import InMemoryTransitionLog
from crudflow.tracing.models import Outcome, TransitionRecord
from crudflow.tracing.protocol import TransitionLog

__all__ = [
    "TransitionLog",
    "TransitionRecord",
    "Outcome",
    "InMemoryTransitionLog",
]
