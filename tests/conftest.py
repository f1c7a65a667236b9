"""Shared test fixtures: fake UI collaborators and sample entity types."""

import asyncio
import sys
from collections import deque
from dataclasses import dataclass, field
from typing import Any

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from crudflow import (
    CancellationToken,
    CrudController,
    InMemoryRepository,
    NavigationContext,
    Operation,
    Severity,
    entity,
)


@entity(Operation.CRUD)
@dataclass
class FixtureCustomer:
    id: int | None = None
    name: str = ""
    email: str = ""
    tags: list[str] = field(default_factory=list)


@entity(Operation.READ)
@dataclass
class FixtureInvoice:
    id: int | None = None
    number: str = ""


class FakeDialogs:
    """Records dialogs and answers confirms from a queue (default: confirm)."""

    def __init__(self, *answers: bool | None, default: bool | None = True) -> None:
        self.answers: deque[bool | None] = deque(answers)
        self.default = default
        self.confirms: list[tuple[str, str, str | None]] = []
        self.alerts: list[tuple[str, str]] = []

    async def confirm(
        self,
        message: str,
        title: str,
        cancel: CancellationToken,
        *,
        ok_text: str | None = None,
    ) -> bool | None:
        cancel.raise_if_cancelled()
        self.confirms.append((message, title, ok_text))
        return self.answers.popleft() if self.answers else self.default

    async def alert(self, message: str, title: str, cancel: CancellationToken) -> None:
        cancel.raise_if_cancelled()
        self.alerts.append((message, title))


class FakeNotifier:
    """Records notifications."""

    def __init__(self) -> None:
        self.notifications: list[tuple[Severity, str, str]] = []

    def notify(self, severity: Severity, title: str, message: str) -> None:
        self.notifications.append((severity, title, message))

    @property
    def severities(self) -> list[Severity]:
        return [severity for severity, _, _ in self.notifications]


class FakeNavigation:
    """Navigation source that runs handlers like a router would."""

    def __init__(self) -> None:
        self.handlers: list[Any] = []

    def register_navigation_handler(self, handler: Any) -> Any:
        self.handlers.append(handler)

        def unregister() -> None:
            self.handlers.remove(handler)

        return unregister

    async def navigate(self, target: str) -> bool:
        """Run every handler. Returns True if navigation may proceed."""
        context = NavigationContext(target=target)
        for handler in list(self.handlers):
            await handler(context)
        return not context.prevented


class GatedRepository(InMemoryRepository):
    """In-memory repository whose reads wait until the gate is opened."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.gate = asyncio.Event()
        self.reads_started = 0

    async def read(self, predicate, params, cancel):
        self.reads_started += 1
        await self.gate.wait()
        return await super().read(predicate, params, cancel)


@pytest.fixture
def customer_cls():
    return FixtureCustomer


@pytest.fixture
def invoice_cls():
    return FixtureInvoice


@pytest.fixture
def dialogs() -> FakeDialogs:
    return FakeDialogs()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def navigation() -> FakeNavigation:
    return FakeNavigation()


@pytest.fixture
def customers() -> InMemoryRepository:
    """Repository holding two customers with ids 1 and 2."""
    return InMemoryRepository(
        FixtureCustomer,
        [
            FixtureCustomer(id=1, name="ACME", email="info@acme.test"),
            FixtureCustomer(id=2, name="Globex", email="hello@globex.test"),
        ],
    )


@pytest.fixture
def gated_customers() -> GatedRepository:
    """Like `customers`, but reads block until `gate.set()`."""
    return GatedRepository(
        FixtureCustomer,
        [FixtureCustomer(id=1, name="ACME", email="info@acme.test")],
    )


@pytest.fixture
def make_controller(customers, dialogs, notifier, navigation):
    """Build a controller for FixtureCustomer with the shared fakes."""

    def factory(**kwargs: Any) -> CrudController:
        entity_type = kwargs.pop("entity_type", FixtureCustomer)
        repository = kwargs.pop("repository", customers)
        kwargs.setdefault("navigation", navigation)
        return CrudController(entity_type, repository, dialogs, notifier, **kwargs)

    return factory
