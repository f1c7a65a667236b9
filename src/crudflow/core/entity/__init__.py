"""Entity functionality: clone protocol and working copy construction."""

from crudflow.core.entity.models import Cloneable
from crudflow.core.entity.operations import clone

__all__ = [
    "Cloneable",
    "clone",
]
