"""Protocols the controller requires from the UI layer.

The controller never renders anything itself. Dialogs, toasts and navigation
interception are provided by whatever toolkit hosts the form.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from crudflow.ui.models import NavigationHandler, Severity

if TYPE_CHECKING:
    from crudflow.core.cancellation import CancellationToken


@runtime_checkable
class Dialogs(Protocol):
    """Blocking dialogs."""

    async def confirm(
        self,
        message: str,
        title: str,
        cancel: CancellationToken,
        *,
        ok_text: str | None = None,
    ) -> bool | None:
        """Ask the user to confirm.

        Returns:
            True if confirmed. False or None (dialog dismissed) both decline.
        """
        ...

    async def alert(self, message: str, title: str, cancel: CancellationToken) -> None:
        """Show a message and wait until the user acknowledges it."""
        ...


@runtime_checkable
class Notifier(Protocol):
    """Non-blocking toast notifications."""

    def notify(self, severity: Severity, title: str, message: str) -> None: ...


@runtime_checkable
class NavigationSource(Protocol):
    """Registration point for navigation interception."""

    def register_navigation_handler(self, handler: NavigationHandler) -> Callable[[], None]:
        """Register a handler called before every navigation.

        Returns:
            Callable that unregisters the handler.
        """
        ...
