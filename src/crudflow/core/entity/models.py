"""Entity protocols.

Entities may implement Cloneable to control how working copies are made.
Anything else is cloned structurally (see crudflow.core.entity.operations).
"""

from __future__ import annotations

from typing import Protocol, Self, runtime_checkable


@runtime_checkable
class Cloneable(Protocol):
    """One instance -> an independent copy safe to mutate."""

    def __clone__(self) -> Self: ...
