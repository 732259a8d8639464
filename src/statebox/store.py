"""Store — mutations, actions and listeners around one Reactive container.

The Reactive value can only change through a commit of a named mutation, and
mutations can only be committed from inside a dispatched action. Action
listeners run synchronously as soon as the action function returns, without
waiting for the work it returned to settle:

    def increment(ctx, payload):
        ctx.commit("increment")         # listeners will see this
        return later()                  # commits in here land after them

An async def action dispatched inside a running event loop is started
eagerly: its body runs up to the first await before the listeners fire, and
the rest continues on the loop whether or not the Completion is awaited.
Without a running loop the coroutine cannot start, so its whole body runs
only when the Completion is awaited and none of its commits are visible to
the listeners.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Callable, Generic, NamedTuple, TypeVar

from statebox._slots import SlotRegistry
from statebox.completion import Completion
from statebox.errors import InvalidArgument, ReadOnlyStateError, UnknownAction, UnknownMutation
from statebox.events import EmittedEvent, EventChannel
from statebox.reactive import Reactive

T = TypeVar("T")

Mutation = Callable[[Any, Any], Any]
Action = Callable[["DispatchContext[Any]", Any], Any]

logger = logging.getLogger("statebox.store")


class DispatchContext(NamedTuple, Generic[T]):
    """First argument of every action: a commit function and a state snapshot."""

    commit: Callable[..., Completion[None]]
    state: T


class ActionEvent(NamedTuple, Generic[T]):
    """Argument passed to an action listener."""

    state: T


class Store(Generic[T]):
    """Gates all state changes behind named mutations and actions.

    Usage:
        store = Store(
            {"counter": 0},
            mutations={"increment": lambda s, _: {**s, "counter": s["counter"] + 1}},
            actions={"increment": lambda ctx, _: ctx.commit("increment")},
            empty=["counter-viewed"],
        )
        store.dispatch("increment")
        store.snapshot["counter"]  # 1
    """

    def __init__(
        self,
        state: T,
        mutations: Mapping[str, Mutation] | None = None,
        actions: Mapping[str, Action] | None = None,
        empty: Iterable[str] = (),
    ) -> None:
        self._container: Reactive[T] = Reactive(state)
        self._mutations: Mapping[str, Mutation] = mutations if mutations is not None else {}
        self._actions: Mapping[str, Action] = actions if actions is not None else {}
        self._passive: frozenset[str] = self._check_passive(empty)
        self._events = EventChannel()
        self._tasks: set[asyncio.Task] = set()
        self._listeners: dict[str, SlotRegistry[Callable[[ActionEvent[T]], None]]] = {}
        for name in self._actions:
            self._listeners[name] = SlotRegistry()
        for name in self._passive:
            self._listeners[name] = SlotRegistry()

    def _check_passive(self, empty: Iterable[str]) -> frozenset[str]:
        names = []
        for name in empty:
            if not isinstance(name, str) or not name:
                raise InvalidArgument(f"Passive action name must be a non-empty string, got {name!r}")
            if name in self._actions:
                raise InvalidArgument(f"Passive action name {name!r} collides with an action")
            names.append(name)
        return frozenset(names)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> Store[Any]:
        """Build a store from {"state", "mutations", "actions", "empty"}."""
        if "state" not in config:
            raise InvalidArgument("Store configuration requires a 'state' entry")
        return cls(
            config["state"],
            mutations=config.get("mutations"),
            actions=config.get("actions"),
            empty=config.get("empty") or config.get("empty_action_names") or (),
        )

    # --- State access ---

    @property
    def state(self) -> Reactive[T]:
        """The underlying Reactive container (register observers on it)."""
        return self._container

    @state.setter
    def state(self, value: Any) -> None:
        self._reject_assignment()

    @property
    def snapshot(self) -> T:
        """Deep copy of the current state."""
        return self._container.snapshot()

    @snapshot.setter
    def snapshot(self, value: Any) -> None:
        self._reject_assignment()

    def _reject_assignment(self) -> None:
        logger.warning("Rejected direct state assignment; dispatch an action instead")
        raise ReadOnlyStateError(
            "Cannot set state. Instead, add an action to the store configuration "
            "and dispatch it with the data to update."
        )

    @property
    def events(self) -> EventChannel:
        return self._events

    @property
    def action_names(self) -> frozenset[str]:
        return frozenset(self._actions)

    @property
    def passive_action_names(self) -> frozenset[str]:
        return self._passive

    # --- Mutations and actions ---

    def _commit(self, name: str, payload: Any = None) -> Completion[None]:
        """Apply a mutation to a snapshot and store the state it returns.

        A mutation that returns None (edited its argument but forgot to
        return it) raises InvalidArgument and leaves the state untouched.
        """
        mutation = self._mutations.get(name)
        if mutation is None:
            raise UnknownMutation(name)
        logger.debug("Committing mutation %s", name)
        new_state = mutation(self._container.snapshot(), payload)
        if new_state is None:
            raise InvalidArgument(f"Mutation {name!r} returned None instead of the next state")
        self._container.set_state(new_state)
        return Completion.resolved()

    def _start(self, returned: Any) -> Any:
        """Start a coroutine eagerly on the running loop, if there is one."""
        if not asyncio.iscoroutine(returned):
            return returned
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; action coroutine starts when awaited")
            return returned
        task = asyncio.eager_task_factory(loop, returned)
        if not task.done():
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        return task

    def dispatch(self, name: str, payload: Any = None) -> Completion[Any]:
        """Run an action, then its listeners. Returns the action's Completion.

        Unknown names raise immediately. Errors raised by the action body
        reject the returned Completion instead; an unread rejection is logged
        when the Completion is discarded.
        """
        if name in self._passive:
            logger.debug("Dispatching passive action %s", name)
            self._run_action_listeners(name)
            return Completion.resolved()

        action = self._actions.get(name)
        if action is None:
            raise UnknownAction(name)

        logger.debug("Dispatching action %s", name)
        context = DispatchContext(self._commit, self._container.snapshot())
        try:
            returned = self._start(action(context, payload))
        except Exception as error:
            logger.debug("Action %s raised %r", name, error)
            return Completion.rejected(error)
        self._run_action_listeners(name)
        return Completion.of(returned)

    # --- Action listeners ---

    def add_action_listener(
        self,
        name: str,
        callback: Callable[[ActionEvent[T]], None],
        *,
        once: bool = False,
    ) -> Store[T]:
        """Call callback(ActionEvent) each time name is dispatched. Chainable."""
        registry = self._listeners.get(name)
        if registry is None:
            raise UnknownAction(name)
        if not callable(callback):
            raise InvalidArgument("Action listener callback must be callable.")

        slot_id: int

        def _listener(event: ActionEvent[T]) -> None:
            callback(event)
            if once:
                registry.tombstone(slot_id)

        slot_id = registry.add(_listener)
        return self

    def _run_action_listeners(self, name: str) -> None:
        registry = self._listeners.get(name)
        if registry is None:
            return
        for slot_id, _ in registry.live():
            listener = registry.get(slot_id)
            if listener is not None:
                listener(ActionEvent(self._container.snapshot()))

    # --- Event channel ---

    def emit(self, name: str, payload: Any = None) -> None:
        """Emit a named event to listen_action() callbacks."""
        self._events.emit(name, payload)

    def listen_action(self, name: str, callback: Callable[[EmittedEvent], None]) -> Store[T]:
        """Call callback on every future emit(name). Chainable."""
        self._events.listen(name, callback)
        return self

    def __repr__(self) -> str:
        return f"Store(actions={sorted(self._actions)}, passive={sorted(self._passive)})"
