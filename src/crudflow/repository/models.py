"""Repository data models."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")

type Predicate[E] = Callable[[E], bool]
"""Selects entities. Read expects exactly one match."""

type Parameters = Mapping[str, Any]
"""Extra values a repository may use when mapping or projecting results."""


@dataclass(slots=True)
class QueryResult(Generic[T]):
    """One page of a listing query.

    Attributes:
        total_count: Number of records before the filter was applied.
        matched_count: Number of records matching the filter, before paging.
        items: The records in the requested page, in order.
    """

    total_count: int
    matched_count: int
    items: list[T] = field(default_factory=list)
