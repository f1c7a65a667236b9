"""Navigation guard: protects unsaved edits from navigate-away events.

Usage:
    guard = NavigationGuard(
        has_changes=lambda: controller.has_changes,
        confirm_discard=controller.confirm_discard,
    )
    guard.register(router)
    ...
    guard.unregister()
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from crudflow.ui.models import NavigationContext
from crudflow.ui.protocol import NavigationSource

logger = logging.getLogger(__name__)


class NavigationGuard:
    """Vetoes navigation while unsaved changes exist, unless the user confirms.

    Args:
        has_changes: Reports whether the edit session has unsaved changes.
        confirm_discard: Asks the user to discard changes, True to proceed.
    """

    def __init__(
        self,
        has_changes: Callable[[], bool],
        confirm_discard: Callable[[], Awaitable[bool]],
    ) -> None:
        self._has_changes = has_changes
        self._confirm_discard = confirm_discard
        self._unregister: Callable[[], None] | None = None

    @property
    def registered(self) -> bool:
        return self._unregister is not None

    def register(self, source: NavigationSource) -> None:
        """Start intercepting navigation events from `source`.

        Raises:
            RuntimeError: If the guard is already registered.
        """
        if self._unregister is not None:
            raise RuntimeError("Navigation guard is already registered")
        self._unregister = source.register_navigation_handler(self.on_navigating)

    def unregister(self) -> None:
        """Stop intercepting navigation events. Safe to call more than once."""
        if self._unregister is not None:
            unregister, self._unregister = self._unregister, None
            unregister()

    async def on_navigating(self, context: NavigationContext) -> None:
        """Handle an "about to navigate away" event."""
        if not self._has_changes():
            return
        if not await self._confirm_discard():
            logger.debug("Navigation to %s prevented: unsaved changes kept", context.target)
            context.prevent_navigation()
