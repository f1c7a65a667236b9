"""Repository protocols for swappable persistence back ends.

Each CRUD operation has its own protocol so an entity type's repository only
implements what the type supports. Every call receives the controller's
cancellation token and should abort promptly once it fires.

Usage:
    repository = InMemoryRepository(Customer)
    controller = CrudController(Customer, repository, dialogs, notifier)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable

from crudflow.repository.models import Parameters, Predicate, QueryResult

if TYPE_CHECKING:
    from crudflow.core.cancellation import CancellationToken

T = TypeVar("T")


@runtime_checkable
class CreateRepository(Protocol[T]):
    """Instantiates and persists new entities."""

    async def instantiate(self, cancel: CancellationToken) -> T:
        """Produce a fresh in-memory entity for the Create flow."""
        ...

    async def create(self, entity: T, cancel: CancellationToken) -> None:
        """Persist a new entity. May assign generated fields on `entity`."""
        ...


@runtime_checkable
class ReadRepository(Protocol[T]):
    """Fetches a single entity."""

    async def read(
        self,
        predicate: Predicate[T],
        params: Parameters | None,
        cancel: CancellationToken,
    ) -> T | None:
        """Fetch the one entity matching `predicate`.

        Returns:
            The entity, or None when nothing matches.
        """
        ...


@runtime_checkable
class UpdateRepository(Protocol[T]):
    """Persists mutations to existing entities."""

    async def update(self, entity: T, cancel: CancellationToken) -> None: ...


@runtime_checkable
class DeleteRepository(Protocol[T]):
    """Removes existing entities."""

    async def delete(self, entity: T, cancel: CancellationToken) -> None: ...


@runtime_checkable
class QueryRepository(Protocol[T]):
    """Lists and paginates entities for listing UIs."""

    async def query(
        self,
        filter: Predicate[T] | None,
        order_by: str | None,
        skip: int | None,
        take: int | None,
        params: Parameters | None,
        cancel: CancellationToken,
    ) -> QueryResult[T]:
        """Filter, order and page entities.

        Args:
            filter: Selects matching entities, None for all.
            order_by: Comma separated attribute names, each optionally
                suffixed with " asc" or " desc".
            skip: Records to skip. Paging applies only when take is also given.
            take: Page size. Paging applies only when skip is also given.
            params: Repository specific mapping parameters.
            cancel: Cancellation token.
        """
        ...
