"""Cooperative cancellation scoped to a controller's lifetime.

Usage:
    source = CancellationSource()
    token = source.token  # created on first access

    await repository.read(predicate, params, token)

    source.cancel()  # fires once, never resets
    token.raise_if_cancelled()  # -> OperationCancelledError
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class OperationCancelledError(Exception):
    """Raised by collaborators when the controller's token has fired."""

    pass


class CancellationToken:
    """Read side of a cancellation signal, passed into every collaborator call."""

    def __init__(self) -> None:
        self._cancelled = False
        self._event: asyncio.Event | None = None
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        """Raise OperationCancelledError if the signal has fired."""
        if self._cancelled:
            raise OperationCancelledError("Operation was cancelled")

    async def wait(self) -> None:
        """Suspend until the signal fires."""
        if self._cancelled:
            return
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run a callback when the signal fires (immediately if it already has).

        Returns:
            Callable that removes the callback.
        """
        if self._cancelled:
            callback()
            return lambda: None
        self._callbacks.append(callback)

        def unregister() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unregister

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._event is not None:
            self._event.set()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Cancellation callback %r failed", callback)


class CancellationSource:
    """Owns one CancellationToken, created lazily and fired at most once."""

    def __init__(self) -> None:
        self._token: CancellationToken | None = None
        self._cancelled = False

    @property
    def token(self) -> CancellationToken:
        if self._token is None:
            self._token = CancellationToken()
            if self._cancelled:
                self._token._fire()
        return self._token

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Fire the signal. Later calls are no-ops."""
        if self._cancelled:
            return
        self._cancelled = True
        if self._token is not None:
            self._token._fire()
