"""Tests for InMemoryRepository.

Why these tests exist:
- The in-memory repository backs tests and prototypes of real forms
- Stored records must never alias the caller's objects
- Query counts and paging follow the listing contract
"""

from dataclasses import dataclass

import pytest

from crudflow import (
    CancellationSource,
    CreateRepository,
    DeleteRepository,
    InMemoryRepository,
    OperationCancelledError,
    QueryRepository,
    ReadRepository,
    UpdateRepository,
)


@dataclass
class City:
    id: int | None = None
    name: str = ""
    country: str = ""
    population: int = 0


CITIES = [
    City(1, "Berlin", "DE", 3_700_000),
    City(2, "Hamburg", "DE", 1_800_000),
    City(3, "Vienna", "AT", 1_900_000),
    City(4, "Graz", "AT", 290_000),
    City(5, "Zurich", "CH", 420_000),
]


@pytest.fixture
def cities() -> InMemoryRepository:
    return InMemoryRepository(City, CITIES)


@pytest.fixture
def token():
    return CancellationSource().token


def test_implements_every_repository_protocol(cities):
    for protocol in (
        CreateRepository,
        ReadRepository,
        UpdateRepository,
        DeleteRepository,
        QueryRepository,
    ):
        assert isinstance(cities, protocol)


def test_duplicate_ids_rejected():
    with pytest.raises(KeyError):
        InMemoryRepository(City, [City(1, "a"), City(1, "b")])


@pytest.mark.asyncio
async def test_instantiate_uses_factory(token):
    repository = InMemoryRepository(City, factory=lambda: City(country="DE"))

    created = await repository.instantiate(token)

    assert created == City(country="DE")
    assert len(repository) == 0


@pytest.mark.asyncio
async def test_create_assigns_next_free_id(cities, token):
    city = City(name="Linz", country="AT")

    await cities.create(city, token)

    assert city.id == 6
    assert cities.get(6).name == "Linz"


@pytest.mark.asyncio
async def test_create_stores_a_copy(cities, token):
    city = City(name="Linz")
    await cities.create(city, token)

    city.name = "changed"

    assert cities.get(city.id).name == "Linz"


@pytest.mark.asyncio
async def test_read_single_match(cities, token):
    found = await cities.read(lambda c: c.id == 3, None, token)

    assert found.name == "Vienna"
    found.name = "changed"
    assert cities.get(3).name == "Vienna"


@pytest.mark.asyncio
async def test_read_no_match_returns_none(cities, token):
    assert await cities.read(lambda c: c.id == 99, None, token) is None


@pytest.mark.asyncio
async def test_read_many_matches_raises(cities, token):
    with pytest.raises(LookupError, match="2 matched"):
        await cities.read(lambda c: c.country == "DE", None, token)


@pytest.mark.asyncio
async def test_update_and_delete(cities, token):
    await cities.update(City(2, "Hamburg", "DE", 1_900_000), token)
    assert cities.get(2).population == 1_900_000

    await cities.delete(City(2), token)
    assert 2 not in cities

    with pytest.raises(KeyError):
        await cities.update(City(2), token)
    with pytest.raises(KeyError):
        await cities.delete(City(2), token)


@pytest.mark.asyncio
async def test_cancelled_token_stops_every_call(cities):
    source = CancellationSource()
    source.cancel()
    token = source.token

    with pytest.raises(OperationCancelledError):
        await cities.instantiate(token)
    with pytest.raises(OperationCancelledError):
        await cities.read(lambda c: True, None, token)
    with pytest.raises(OperationCancelledError):
        await cities.create(City(name="x"), token)
    with pytest.raises(OperationCancelledError):
        await cities.query(cancel=token)
    assert len(cities) == 5


@pytest.mark.asyncio
async def test_query_counts_before_and_after_filter(cities):
    result = await cities.query(filter=lambda c: c.country == "AT")

    assert result.total_count == 5
    assert result.matched_count == 2
    assert [c.name for c in result.items] == ["Vienna", "Graz"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("order_by", "expected"),
    [
        ("name", ["Berlin", "Graz", "Hamburg", "Vienna", "Zurich"]),
        ("population desc", ["Berlin", "Vienna", "Hamburg", "Zurich", "Graz"]),
        ("country, name desc", ["Vienna", "Graz", "Zurich", "Hamburg", "Berlin"]),
        ("country asc, population", ["Graz", "Vienna", "Zurich", "Hamburg", "Berlin"]),
    ],
)
async def test_query_ordering(cities, order_by, expected):
    result = await cities.query(order_by=order_by)

    assert [c.name for c in result.items] == expected


@pytest.mark.asyncio
async def test_query_invalid_order_by(cities):
    with pytest.raises(ValueError, match="Invalid order_by"):
        await cities.query(order_by="name sideways")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("skip", "take", "expected"),
    [
        (1, 2, ["Graz", "Hamburg"]),
        (4, 10, ["Zurich"]),
        (None, 2, ["Berlin", "Graz", "Hamburg", "Vienna", "Zurich"]),
        (2, None, ["Berlin", "Graz", "Hamburg", "Vienna", "Zurich"]),
    ],
    ids=["page", "last-page", "take-only", "skip-only"],
)
async def test_query_paging_needs_skip_and_take(cities, skip, take, expected):
    result = await cities.query(order_by="name", skip=skip, take=take)

    assert [c.name for c in result.items] == expected
    assert result.matched_count == 5
