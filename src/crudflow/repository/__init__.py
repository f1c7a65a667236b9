"""Repository back ends."""

from crudflow.repository.local import InMemoryRepository
from crudflow.repository.models import Parameters, Predicate, QueryResult
from crudflow.repository.protocol import (
    CreateRepository,
    DeleteRepository,
    QueryRepository,
    ReadRepository,
    UpdateRepository,
)

__all__ = [
    "CreateRepository",
    "ReadRepository",
    "UpdateRepository",
    "DeleteRepository",
    "QueryRepository",
    "QueryResult",
    "Predicate",
    "Parameters",
    "InMemoryRepository",
]
