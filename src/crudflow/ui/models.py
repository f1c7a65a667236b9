"""UI collaborator models."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    """Severity of a non-blocking notification."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(slots=True)
class NavigationContext:
    """An in-flight "about to navigate away" event.

    Attributes:
        target: Location the UI is navigating to.
        prevented: Set once any handler vetoes the navigation.
    """

    target: str
    prevented: bool = False

    def prevent_navigation(self) -> None:
        self.prevented = True


type NavigationHandler = Callable[[NavigationContext], Awaitable[None]]
