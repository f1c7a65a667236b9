"""Local in-memory repository implementation.

Dict-based storage suitable for single-process use, prototyping and testing.
Stores and hands out deep copies so callers can never alias stored records.

Usage:
    repository = InMemoryRepository(Customer, [Customer(id=1, name="ACME")])
    controller = CrudController(Customer, repository, dialogs, notifier, key=1)
"""

from __future__ import annotations

import copy as cp
import itertools
from collections.abc import Callable, Iterable
from typing import Any, Generic, TypeVar

from crudflow.core.cancellation import CancellationToken
from crudflow.repository.models import Parameters, Predicate, QueryResult

T = TypeVar("T")


def _parse_order_by(order_by: str) -> list[tuple[str, bool]]:
    """Parse "name, created desc" into [("name", False), ("created", True)]."""
    keys: list[tuple[str, bool]] = []
    for part in order_by.split(","):
        tokens = part.split()
        if not tokens:
            continue
        if len(tokens) > 2 or (len(tokens) == 2 and tokens[1].lower() not in ("asc", "desc")):
            raise ValueError(f"Invalid order_by clause: {part.strip()!r}")
        descending = len(tokens) == 2 and tokens[1].lower() == "desc"
        keys.append((tokens[0], descending))
    return keys


class InMemoryRepository(Generic[T]):
    """Simple repository keeping entities in a dict keyed by an id attribute.

    Implements CreateRepository, ReadRepository, UpdateRepository,
    DeleteRepository and QueryRepository.

    Args:
        entity_type: Type produced by `instantiate`.
        items: Initial records.
        id_field: Name of the identifying attribute.
        factory: Builds new entities for `instantiate` (defaults to entity_type()).
    """

    def __init__(
        self,
        entity_type: type[T],
        items: Iterable[T] = (),
        id_field: str = "id",
        factory: Callable[[], T] | None = None,
    ) -> None:
        self._entity_type = entity_type
        self._id_field = id_field
        self._factory = factory or entity_type
        self._records: dict[Any, T] = {}
        self._ids = itertools.count(1)
        for item in items:
            self._insert(cp.deepcopy(item))

    def _key(self, entity: T) -> Any:
        return getattr(entity, self._id_field)

    def _insert(self, entity: T) -> None:
        key = self._key(entity)
        if key is None:
            key = next(self._ids)
            while key in self._records:
                key = next(self._ids)
            setattr(entity, self._id_field, key)
        elif key in self._records:
            raise KeyError(f"Duplicate {self._entity_type.__name__} id {key!r}")
        self._records[key] = entity

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: Any) -> bool:
        return key in self._records

    def get(self, key: Any) -> T | None:
        """Get a copy of a stored record by id, for inspection."""
        record = self._records.get(key)
        return cp.deepcopy(record) if record is not None else None

    async def instantiate(self, cancel: CancellationToken) -> T:
        cancel.raise_if_cancelled()
        return self._factory()

    async def create(self, entity: T, cancel: CancellationToken) -> None:
        """Store a copy of `entity`, assigning the next id when it has none.

        The assigned id is written back onto `entity`.
        """
        cancel.raise_if_cancelled()
        stored = cp.deepcopy(entity)
        self._insert(stored)
        setattr(entity, self._id_field, self._key(stored))

    async def read(
        self,
        predicate: Predicate[T],
        params: Parameters | None,
        cancel: CancellationToken,
    ) -> T | None:
        """Return a copy of the single matching record.

        Raises:
            LookupError: If more than one record matches.
        """
        cancel.raise_if_cancelled()
        matches = [record for record in self._records.values() if predicate(record)]
        if len(matches) > 1:
            raise LookupError(
                f"Expected one {self._entity_type.__name__}, {len(matches)} matched"
            )
        return cp.deepcopy(matches[0]) if matches else None

    async def update(self, entity: T, cancel: CancellationToken) -> None:
        """Replace the stored record with a copy of `entity`.

        Raises:
            KeyError: If no record has the entity's id.
        """
        cancel.raise_if_cancelled()
        key = self._key(entity)
        if key not in self._records:
            raise KeyError(f"{self._entity_type.__name__} {key!r} does not exist")
        self._records[key] = cp.deepcopy(entity)

    async def delete(self, entity: T, cancel: CancellationToken) -> None:
        """Remove the record with the entity's id.

        Raises:
            KeyError: If no record has the entity's id.
        """
        cancel.raise_if_cancelled()
        key = self._key(entity)
        if key not in self._records:
            raise KeyError(f"{self._entity_type.__name__} {key!r} does not exist")
        del self._records[key]

    async def query(
        self,
        filter: Predicate[T] | None = None,
        order_by: str | None = None,
        skip: int | None = None,
        take: int | None = None,
        params: Parameters | None = None,
        cancel: CancellationToken | None = None,
    ) -> QueryResult[T]:
        """Filter, order and page records. See QueryRepository.query."""
        if cancel is not None:
            cancel.raise_if_cancelled()

        records = list(self._records.values())
        total_count = len(records)

        if filter is not None:
            records = [record for record in records if filter(record)]
        matched_count = len(records)

        if order_by:
            # Stable sorts applied from the last key to the first
            for name, descending in reversed(_parse_order_by(order_by)):
                records.sort(key=lambda record, n=name: getattr(record, n), reverse=descending)

        if skip is not None and take is not None:
            records = records[skip : skip + take]

        return QueryResult(
            total_count=total_count,
            matched_count=matched_count,
            items=[cp.deepcopy(record) for record in records],
        )
