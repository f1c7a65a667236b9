"""Pure functions for producing working copies of entities."""

from __future__ import annotations

import copy
from typing import Any

from crudflow.core.entity.models import Cloneable
from crudflow.core.types import Copy


def _is_pydantic(obj: Any) -> bool:
    """Check if an instance is a Pydantic model without importing pydantic."""
    for base in type(obj).__mro__:
        if base.__module__.startswith("pydantic") and base.__name__ == "BaseModel":
            return True
    return False


def clone[T](entity: T) -> Copy[T]:
    """Make an independent copy of an entity.

    Tries in order:
    1. The entity's own __clone__ if it implements Cloneable
    2. model_copy(deep=True) for Pydantic models
    3. copy.deepcopy

    Args:
        entity: Entity instance to copy.

    Returns:
        A copy that shares no mutable state with the original.

    Raises:
        TypeError: If __clone__ returns the same object.
    """
    if isinstance(entity, Cloneable):
        result = entity.__clone__()
        if result is entity:
            raise TypeError(f"{type(entity).__name__}.__clone__ returned the original instance")
        return result
    if _is_pydantic(entity):
        return entity.model_copy(deep=True)  # type: ignore[attr-defined]
    return copy.deepcopy(entity)
