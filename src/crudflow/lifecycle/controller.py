"""CrudController: lifecycle state machine for a single editable entity.

Usage:
    @entity(Operation.CRUD)
    @dataclass
    class Customer:
        id: int | None = None
        name: str = ""

    controller = CrudController(
        Customer,
        InMemoryRepository(Customer),
        dialogs,
        notifier,
        initial_state=LifecycleState.UPDATE,
        key=42,
    )
    await controller.attach()  # Read, then Update

    controller.session.set_field("name", "ACME Ltd")
    await controller.submit()  # validate, save, fresh Read

    controller.dispose()

Subclasses customize behavior through the `after_*` hooks, the
`query_predicate` property, or an injected CapabilityPolicy.
"""

from __future__ import annotations

import functools
import inspect
import logging
import operator
import time
from collections.abc import Awaitable, Callable, Coroutine, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any, Concatenate, Generic, TypeVar

from crudflow.config import ControllerSettings
from crudflow.core.cancellation import (
    CancellationSource,
    CancellationToken,
    OperationCancelledError,
)
from crudflow.core.capability import (
    CapabilityContext,
    CapabilityDecision,
    CapabilityPolicy,
    Operation,
    resolve_capability,
)
from crudflow.core.types import Copy
from crudflow.lifecycle.models import (
    ControllerDisposedError,
    EntityNotFoundError,
    LifecycleState,
)
from crudflow.lifecycle.navigation import NavigationGuard
from crudflow.repository.models import Predicate
from crudflow.repository.protocol import (
    CreateRepository,
    DeleteRepository,
    ReadRepository,
    UpdateRepository,
)
from crudflow.session import EditSession, SessionEvent, Validator
from crudflow.tracing import InMemoryTransitionLog, Outcome, TransitionLog, TransitionRecord
from crudflow.ui.models import Severity
from crudflow.ui.protocol import Dialogs, NavigationSource, Notifier

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")
P = TypeVar("P")

type Callback[**A] = Callable[A, Awaitable[None] | None]

_ENTRY_SEQUENCES: dict[LifecycleState, tuple[Operation, ...]] = {
    LifecycleState.UNLOADED: (),
    LifecycleState.CREATE: (Operation.CREATE,),
    LifecycleState.READ: (Operation.READ,),
    LifecycleState.UPDATE: (Operation.READ, Operation.UPDATE),
    LifecycleState.DELETE: (Operation.READ, Operation.DELETE),
}

_GATED = (Operation.CREATE, Operation.READ, Operation.UPDATE, Operation.DELETE)

_DENIAL_OUTCOMES = {
    CapabilityDecision.RESTRICTED: Outcome.RESTRICTED,
    CapabilityDecision.UNAUTHORIZED: Outcome.UNAUTHORIZED,
}


async def _invoke(callback: Callable[..., Any] | None, *args: Any) -> None:
    """Call a sync or async callback, awaiting it if needed."""
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


def _exclusive(
    method: Callable[Concatenate[CrudController[Any], ...], Coroutine[Any, Any, R]],
) -> Callable[Concatenate[CrudController[Any], ...], Coroutine[Any, Any, R | None]]:
    """Reject a public operation while another one is still in flight."""

    @functools.wraps(method)
    async def wrapper(self: CrudController[Any], *args: Any, **kwargs: Any) -> R | None:
        self._ensure_alive()
        name = method.__name__
        if self._active_operation is not None:
            logger.warning(
                "%s.%s rejected: %s still in progress",
                type(self).__name__,
                name,
                self._active_operation,
            )
            self._notifier.notify(
                Severity.INFO,
                self._settings.title_operation_in_progress,
                self._settings.text_operation_in_progress,
            )
            self._trace(name, self._state, Outcome.REJECTED, f"{self._active_operation} in progress")
            return None
        self._active_operation = name
        try:
            return await method(self, *args, **kwargs)
        finally:
            self._active_operation = None

    return wrapper


class CrudController(Generic[T]):
    """Drives create/read/update/delete/close for one entity behind a form.

    Every operation resolves its capability right before acting, holds the busy
    flag while it runs, and converts every failure into a user-visible notice
    and a well-defined state. Only use-after-dispose raises to the caller.

    Args:
        entity_type: Entity class, decorated with @entity.
        repository: Object implementing the repository protocols the entity
            type supports (CreateRepository, ReadRepository, ...).
        dialogs: Confirm and alert dialogs.
        notifier: Non-blocking notifications.
        navigation: Navigation interception point for the discard guard.
        policy: Business constraint and authorization predicates.
        initial_state: Entry flow run by attach().
        key: Identity of the entity to read when none is loaded yet.
        identity: Extracts the identity from an entity (default: `.id`).
        entity: Pre-loaded entity; its identity drives the first Read.
        params: Mapping parameters passed through to the repository.
        validators: Extra validators for the working copy.
        default_validation: Whether working copies also get the default
            Pydantic validation (see crudflow.session.validate_model).
        settings: User-visible texts.
        history: Transition log (default: bounded in-memory log).
        on_saved: Called with the saved working copy after a successful save.
        on_deleted: Called with the deleted entity.
        on_closed: Called after the form was closed.
    """

    def __init__(
        self,
        entity_type: type[T],
        repository: Any,
        dialogs: Dialogs,
        notifier: Notifier,
        *,
        navigation: NavigationSource | None = None,
        policy: CapabilityPolicy | None = None,
        initial_state: LifecycleState = LifecycleState.READ,
        key: Any = None,
        identity: Callable[[T], Any] | None = None,
        entity: T | None = None,
        params: Mapping[str, Any] | None = None,
        validators: Sequence[Validator] = (),
        default_validation: bool = True,
        settings: ControllerSettings | None = None,
        history: TransitionLog | None = None,
        on_saved: Callback[[T]] | None = None,
        on_deleted: Callback[[T]] | None = None,
        on_closed: Callback[[]] | None = None,
    ) -> None:
        self._entity_type = entity_type
        self._repository = repository
        self._dialogs = dialogs
        self._notifier = notifier
        self._navigation = navigation
        self._policy = policy or CapabilityPolicy()
        self._initial_state = initial_state
        self._key = key
        self._identity: Callable[[T], Any] = identity or operator.attrgetter("id")
        self._params = params
        self._validators = tuple(validators)
        self._default_validation = default_validation
        self._settings = settings or ControllerSettings()
        self._history = (
            history if history is not None else InMemoryTransitionLog(self._settings.history_size)
        )
        self._on_saved = on_saved
        self._on_deleted = on_deleted
        self._on_closed = on_closed

        self._state = LifecycleState.UNLOADED
        self._entity: T | None = entity
        self._session: EditSession[T] | None = None
        self._session_unsubscribe: Callable[[], None] | None = None
        self._decisions = dict.fromkeys(_GATED, CapabilityDecision.RESTRICTED)
        self._busy_depth = 0
        self._active_operation: str | None = None
        self._cancel_source = CancellationSource()
        self._guard: NavigationGuard | None = None
        self._listeners: list[Callable[[], None]] = []
        self._disposed = False

    # State

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def entity(self) -> T | None:
        """The loaded entity. Edit the working copy instead of this object."""
        return self._entity

    @property
    def session(self) -> EditSession[T] | None:
        """Active edit session, present only in CREATE and UPDATE."""
        return self._session

    @property
    def working_copy(self) -> Copy[T] | None:
        return self._session.working_copy if self._session is not None else None

    @property
    def has_changes(self) -> bool:
        return self._session is not None and self._session.has_changes

    @property
    def is_busy(self) -> bool:
        return self._busy_depth > 0

    @property
    def is_validating(self) -> bool:
        return self._session is not None and self._session.is_validating

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def history(self) -> TransitionLog:
        return self._history

    @property
    def settings(self) -> ControllerSettings:
        return self._settings

    @property
    def cancel_token(self) -> CancellationToken:
        """Token passed into every collaborator call, fired on dispose."""
        return self._cancel_source.token

    def capability(self, operation: Operation) -> CapabilityDecision:
        """Decision computed by the most recent check of `operation`."""
        return self._decisions[operation]

    @property
    def query_predicate(self) -> Predicate[T]:
        """Predicate selecting the entity to read.

        Matches on identity: the loaded entity's when there is one, otherwise
        the `key` the controller was built with. Override for other lookups.
        """
        identity = self._identity
        key = identity(self._entity) if self._entity is not None else self._key
        return lambda candidate: identity(candidate) == key

    # UI affordances

    def show_button(self, operation: Operation) -> bool:
        return self._decisions[operation] is not CapabilityDecision.RESTRICTED

    def button_enabled(self, operation: Operation) -> bool:
        return self._decisions[operation] is CapabilityDecision.ALLOWED and not self.is_busy

    @property
    def show_submit_button(self) -> bool:
        return self._state.is_editing

    @property
    def show_cancel_button(self) -> bool:
        return self._state.is_editing

    def add_listener(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a re-render callback for state, busy and session changes.

        Returns:
            Callable that removes the listener.
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # Overridable hooks

    async def after_create(self) -> None:
        pass

    async def after_read(self) -> None:
        pass

    async def after_update(self) -> None:
        pass

    async def after_delete(self) -> None:
        pass

    async def after_save(self) -> None:
        pass

    async def after_cancel(self) -> None:
        pass

    # Public operations

    @_exclusive
    async def attach(self) -> None:
        """Register the navigation guard and run the initial entry flow.

        CREATE runs create; READ runs read; UPDATE runs read then update;
        DELETE runs read then delete. The second step only runs if the read
        succeeded.
        """
        if self._navigation is not None and self._guard is None:
            self._guard = NavigationGuard(lambda: self.has_changes, self.confirm_discard)
            self._guard.register(self._navigation)

        sequence = _ENTRY_SEQUENCES[self._initial_state]
        steps = {
            Operation.CREATE: self._create,
            Operation.READ: self._read,
            Operation.UPDATE: self._update,
            Operation.DELETE: self._delete,
        }
        for operation in sequence:
            if not await steps[operation]():
                break

    @_exclusive
    async def create(self) -> bool:
        """Instantiate a new entity and enter CREATE. Failure lands on UNLOADED."""
        return await self._create()

    @_exclusive
    async def read(self) -> bool:
        """Load the entity and enter READ. Failure lands on UNLOADED."""
        return await self._read()

    @_exclusive
    async def update(self) -> bool:
        """Enter UPDATE with a fresh working copy. Failure lands on READ.

        A no-op while already in UPDATE, so pending edits are kept.
        """
        return await self._update()

    @_exclusive
    async def delete(self) -> bool:
        """Confirm, delete the entity and enter DELETE. Failure lands on READ."""
        return await self._delete()

    @_exclusive
    async def save(self) -> bool:
        """Persist the working copy, then re-read. Failure keeps the state."""
        return await self._save()

    @_exclusive
    async def submit(self) -> bool:
        """Validate the working copy and save it when valid.

        A validator that raises is reported like any other failure and keeps
        the current state.
        """
        start = self._state
        if self._session is None or not start.is_editing:
            self._reject_invalid_save()
            return False

        with self._busy("submit"):
            try:
                result = await self._session.validate()
                self.cancel_token.raise_if_cancelled()
            except OperationCancelledError:
                self._cancelled("submit", start)
                return False
            except Exception as e:
                await self._fail("submit", e, start, None)
                return False

            if not result.is_valid:
                logger.debug("Submit rejected: %d invalid field(s)", len(result.errors))
                self._notifier.notify(
                    Severity.WARNING,
                    self._settings.title_invalid_submit,
                    self._settings.text_invalid_submit,
                )
                self._trace("submit", start, Outcome.REJECTED, "validation failed")
                return False
            return await self._save()

    @_exclusive
    async def cancel(self) -> bool:
        """Discard edits. CREATE closes the form, UPDATE returns to READ."""
        return await self._cancel()

    @_exclusive
    async def close(self) -> bool:
        """Close the form, asking first when there are unsaved changes."""
        return await self._close(confirm=True)

    async def click_create(self) -> None:
        if self.show_button(Operation.CREATE) and self.button_enabled(Operation.CREATE):
            await self.create()

    async def click_update(self) -> None:
        if self.show_button(Operation.UPDATE) and self.button_enabled(Operation.UPDATE):
            await self.update()

    async def click_delete(self) -> None:
        if self.show_button(Operation.DELETE) and self.button_enabled(Operation.DELETE):
            await self.delete()

    async def click_cancel(self) -> None:
        if self.show_cancel_button and not self.is_busy:
            await self.cancel()

    async def confirm_discard(self) -> bool:
        """Ask the user whether unsaved changes may be discarded."""
        try:
            return await self._confirm(
                self._settings.text_confirm_discard,
                self._settings.title_confirm_discard,
                self._settings.ok_text_discard,
            )
        except OperationCancelledError:
            return True

    # Teardown

    def dispose(self) -> None:
        """Cancel in-flight work, unregister handlers and drop the entity.

        Safe to call more than once. Every later operation raises
        ControllerDisposedError.
        """
        if self._disposed:
            return
        self._disposed = True
        self._cancel_source.cancel()
        if self._guard is not None:
            self._guard.unregister()
        self._end_session()
        self._entity = None
        self._state = LifecycleState.UNLOADED
        self._listeners.clear()
        logger.debug("Disposed %s", type(self).__name__)

    async def __aenter__(self) -> CrudController[T]:
        await self.attach()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.dispose()

    # Operation bodies

    async def _create(self) -> bool:
        self._ensure_alive()
        start = self._state
        with self._busy("create"):
            try:
                if not await self._discard_confirmed("create", start):
                    return False

                decision = await self._resolve(Operation.CREATE)
                if not decision.allowed:
                    await self._deny("create", Operation.CREATE, decision, start, LifecycleState.UNLOADED)
                    return False

                repository = self._repository_as(CreateRepository)
                created = await self._call(repository.instantiate(self.cancel_token))
                self._entity = created
                self._begin_session(created)
                self._set_state(LifecycleState.CREATE)

                await self._refresh_capabilities()
                await self.after_create()
            except OperationCancelledError:
                self._cancelled("create", start)
                return False
            except Exception as e:
                await self._fail("create", e, start, LifecycleState.UNLOADED)
                return False

        self._trace("create", start, Outcome.SUCCEEDED)
        return True

    async def _read(self) -> bool:
        self._ensure_alive()
        start = self._state
        with self._busy("read"):
            try:
                if not await self._discard_confirmed("read", start):
                    return False

                decision = await self._resolve(Operation.READ)
                if not decision.allowed:
                    await self._deny("read", Operation.READ, decision, start, LifecycleState.UNLOADED)
                    return False

                repository = self._repository_as(ReadRepository)
                found = await self._call(
                    repository.read(self.query_predicate, self._params, self.cancel_token)
                )
                if found is None:
                    raise EntityNotFoundError(f"No {self._entity_type.__name__} matched")

                self._entity = found
                self._end_session()
                self._set_state(LifecycleState.READ)

                await self._refresh_capabilities()
                await self.after_read()
            except OperationCancelledError:
                self._cancelled("read", start)
                return False
            except EntityNotFoundError as e:
                logger.info("Not found: %s.read: %s", type(self).__name__, e)
                self._unload()
                self._set_state(LifecycleState.UNLOADED)
                await self._alert(self._settings.text_not_found, self._settings.title_not_found)
                self._trace("read", start, Outcome.NOT_FOUND, str(e))
                return False
            except Exception as e:
                await self._fail("read", e, start, LifecycleState.UNLOADED)
                return False

        self._trace("read", start, Outcome.SUCCEEDED)
        return True

    async def _update(self) -> bool:
        self._ensure_alive()
        start = self._state
        if start is LifecycleState.UPDATE:
            logger.debug("Update ignored: already editing")
            return True
        if self._entity is None:
            self._reject_invalid_state("update", Operation.UPDATE)
            return False

        with self._busy("update"):
            try:
                if not await self._discard_confirmed("update", start):
                    return False

                decision = await self._resolve(Operation.UPDATE)
                if not decision.allowed:
                    await self._deny("update", Operation.UPDATE, decision, start, LifecycleState.READ)
                    return False

                self._begin_session(self._entity)
                self._set_state(LifecycleState.UPDATE)

                await self._refresh_capabilities()
                await self.after_update()
            except OperationCancelledError:
                self._cancelled("update", start)
                return False
            except Exception as e:
                await self._fail("update", e, start, LifecycleState.READ)
                return False

        self._trace("update", start, Outcome.SUCCEEDED)
        return True

    async def _delete(self) -> bool:
        self._ensure_alive()
        start = self._state
        if self._entity is None:
            self._reject_invalid_state("delete", Operation.DELETE)
            return False

        with self._busy("delete"):
            try:
                decision = await self._resolve(Operation.DELETE)
                if not decision.allowed:
                    await self._deny("delete", Operation.DELETE, decision, start, LifecycleState.READ)
                    return False

                confirmed = await self._confirm(
                    self._settings.text_confirm_delete,
                    self._settings.title_confirm_delete,
                    self._settings.ok_text_delete,
                )
                if not confirmed:
                    self._trace("delete", start, Outcome.DECLINED)
                    return False

                deleted = self._entity
                repository = self._repository_as(DeleteRepository)
                await self._call(repository.delete(deleted, self.cancel_token))
                self._end_session()
                self._set_state(LifecycleState.DELETE)

                await self._refresh_capabilities()
                await self.after_delete()
                await _invoke(self._on_deleted, deleted)
            except OperationCancelledError:
                self._cancelled("delete", start)
                return False
            except Exception as e:
                await self._fail("delete", e, start, LifecycleState.READ)
                return False

        self._trace("delete", start, Outcome.SUCCEEDED)
        return True

    async def _save(self) -> bool:
        self._ensure_alive()
        start = self._state
        if self._session is None or not self._state.is_editing:
            self._reject_invalid_save()
            return False

        operation = Operation.CREATE if start is LifecycleState.CREATE else Operation.UPDATE
        with self._busy("save"):
            try:
                decision = await self._resolve(operation)
                if not decision.allowed:
                    await self._deny("save", operation, decision, start, None)
                    return False

                saved = self._session.working_copy
                if operation is Operation.CREATE:
                    creator = self._repository_as(CreateRepository)
                    await self._call(creator.create(saved, self.cancel_token))
                else:
                    updater = self._repository_as(UpdateRepository)
                    await self._call(updater.update(saved, self.cancel_token))

                await self.after_save()
                await _invoke(self._on_saved, saved)

                self._end_session()
                self._entity = saved
            except OperationCancelledError:
                self._cancelled("save", start)
                return False
            except Exception as e:
                await self._fail("save", e, start, None)
                return False

            self._trace("save", start, Outcome.SUCCEEDED)
            # Resynchronize with the persisted record (server-side derived fields)
            return await self._read()

    async def _cancel(self) -> bool:
        self._ensure_alive()
        start = self._state
        if not start.is_editing:
            logger.debug("Cancel ignored in state %s", start.name)
            self._notifier.notify(
                Severity.INFO,
                self._settings.title_invalid_cancel_state,
                self._settings.text_invalid_cancel_state,
            )
            self._trace("cancel", start, Outcome.REJECTED, "not editing")
            return False

        with self._busy("cancel"):
            if start is LifecycleState.CREATE:
                # Cancelling a new record is itself the discard
                closed = await self._close(confirm=False)
                self._trace("cancel", start, Outcome.SUCCEEDED if closed else Outcome.FAILED)
                return closed

            try:
                if self._entity is None:
                    raise RuntimeError("No entity loaded to rebuild the working copy from")
                self._begin_session(self._entity)
                await self.after_cancel()
            except OperationCancelledError:
                self._cancelled("cancel", start)
                return False
            except Exception as e:
                await self._fail("cancel", e, start, None)
                return False

            self._trace("cancel", start, Outcome.SUCCEEDED)
            return await self._read()

    async def _close(self, confirm: bool) -> bool:
        self._ensure_alive()
        start = self._state
        with self._busy("close"):
            try:
                if confirm and self.has_changes:
                    if not await self.confirm_discard():
                        self._trace("close", start, Outcome.DECLINED)
                        return False
                    self.cancel_token.raise_if_cancelled()

                self._unload()
                await _invoke(self._on_closed)
                self._set_state(LifecycleState.UNLOADED)
            except OperationCancelledError:
                self._cancelled("close", start)
                return False
            except Exception as e:
                await self._fail("close", e, start, None)
                return False

        self._trace("close", start, Outcome.SUCCEEDED)
        return True

    # Helpers

    def _ensure_alive(self) -> None:
        if self._disposed:
            raise ControllerDisposedError(f"{type(self).__name__} has been disposed")

    @contextmanager
    def _busy(self, operation: str) -> Iterator[None]:
        self._busy_depth += 1
        logger.debug("Begin: %s.%s", type(self).__name__, operation)
        try:
            yield
        finally:
            self._busy_depth -= 1
            logger.debug("Complete: %s.%s", type(self).__name__, operation)
            self._changed()

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener()

    def _set_state(self, state: LifecycleState) -> None:
        if state is not self._state:
            logger.debug("%s: %s -> %s", type(self).__name__, self._state.name, state.name)
            self._state = state
            self._changed()

    def _context(self, operation: Operation) -> CapabilityContext:
        return CapabilityContext(
            operation=operation,
            entity_type=self._entity_type,
            entity=self._entity,
            state=self._state,
        )

    async def _resolve(self, operation: Operation) -> CapabilityDecision:
        decision = await resolve_capability(
            self._entity_type, operation, self._policy, self._context(operation)
        )
        self._decisions[operation] = decision
        return decision

    async def _refresh_capabilities(self) -> None:
        for operation in (Operation.CREATE, Operation.UPDATE, Operation.DELETE):
            await self._resolve(operation)

    def _repository_as(self, protocol: type[P]) -> P:
        if not isinstance(self._repository, protocol):
            raise TypeError(
                f"{type(self._repository).__name__} does not implement {protocol.__name__}"
            )
        return self._repository

    async def _call(self, awaitable: Awaitable[R]) -> R:
        """Await a collaborator call, then honor cancellation."""
        result = await awaitable
        self.cancel_token.raise_if_cancelled()
        return result

    async def _confirm(self, message: str, title: str, ok_text: str) -> bool:
        answer = await self._call(
            self._dialogs.confirm(message, title, self.cancel_token, ok_text=ok_text)
        )
        return bool(answer)

    async def _discard_confirmed(self, name: str, start: LifecycleState) -> bool:
        """Ask before an operation replaces a working copy with unsaved changes."""
        if not (start.is_editing and self.has_changes):
            return True
        if await self._confirm(
            self._settings.text_confirm_discard,
            self._settings.title_confirm_discard,
            self._settings.ok_text_discard,
        ):
            return True
        logger.debug("%s declined: unsaved changes kept", name)
        self._trace(name, start, Outcome.DECLINED)
        return False

    async def _alert(self, message: str, title: str) -> None:
        if self.cancel_token.cancelled:
            return
        try:
            await self._dialogs.alert(message, title, self.cancel_token)
        except OperationCancelledError:
            logger.debug("Alert %r dismissed by cancellation", title)
        except Exception:
            logger.exception("Alert %r could not be shown", title)

    def _begin_session(self, source: T) -> None:
        self._end_session()
        session = EditSession(
            source, self._validators, use_default_validation=self._default_validation
        )
        self._session_unsubscribe = session.observe(self._on_session_event)
        self._session = session

    def _end_session(self) -> None:
        if self._session_unsubscribe is not None:
            self._session_unsubscribe()
            self._session_unsubscribe = None
        if self._session is not None:
            self._session.close()
            self._session = None

    def _unload(self) -> None:
        self._end_session()
        self._entity = None

    def _on_session_event(self, event: SessionEvent) -> None:
        self._changed()

    async def _deny(
        self,
        name: str,
        operation: Operation,
        decision: CapabilityDecision,
        start: LifecycleState,
        failure_state: LifecycleState | None,
    ) -> None:
        logger.warning("%s: %s.%s", decision.name, type(self).__name__, name)
        self._land(failure_state)
        if decision is CapabilityDecision.UNAUTHORIZED:
            message = self._settings.unauthorized(operation.label)
            title = self._settings.title_unauthorized
        else:
            message = self._settings.restricted(operation.label)
            title = self._settings.title_restricted
        await self._alert(message, title)
        self._trace(name, start, _DENIAL_OUTCOMES[decision], message)

    async def _fail(
        self,
        name: str,
        error: Exception,
        start: LifecycleState,
        failure_state: LifecycleState | None,
    ) -> None:
        logger.exception("Exception: %s.%s", type(self).__name__, name)
        self._land(failure_state)
        message = str(error) or type(error).__name__
        await self._alert(message, self._settings.title_unexpected_error)
        self._trace(name, start, Outcome.FAILED, message)

    def _land(self, failure_state: LifecycleState | None) -> None:
        """Move to an operation's failure state, None meaning stay."""
        if failure_state is None:
            return
        if failure_state is LifecycleState.UNLOADED:
            self._unload()
        elif failure_state is LifecycleState.READ:
            self._end_session()
        self._set_state(failure_state)

    def _cancelled(self, name: str, start: LifecycleState) -> None:
        logger.debug("Cancelled: %s.%s", type(self).__name__, name)
        self._trace(name, start, Outcome.CANCELLED)

    def _reject_invalid_save(self) -> None:
        logger.debug("Save ignored in state %s", self._state.name)
        self._notifier.notify(
            Severity.INFO,
            self._settings.title_invalid_save_state,
            self._settings.text_invalid_save_state,
        )
        self._trace("save", self._state, Outcome.REJECTED, "not editing")

    def _reject_invalid_state(self, name: str, operation: Operation) -> None:
        logger.debug("%s ignored: no entity loaded", name)
        self._notifier.notify(
            Severity.INFO,
            self._settings.title_invalid_state,
            self._settings.invalid_state(operation.label),
        )
        self._trace(name, self._state, Outcome.REJECTED, "no entity loaded")

    def _trace(
        self,
        operation: str,
        start: LifecycleState,
        outcome: Outcome,
        detail: str | None = None,
    ) -> None:
        self._history.record(
            TransitionRecord(
                operation=operation,
                from_state=start.name,
                to_state=self._state.name,
                outcome=outcome,
                timestamp=time.time(),
                detail=detail,
            )
        )
