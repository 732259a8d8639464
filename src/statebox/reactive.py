"""Reactive — a value holder that notifies observers on every update.

The container owns its value outright: the constructor argument is cloned on
the way in, and every value handed back out (snapshots, observer arguments,
reach_value_of results) is a fresh deep clone. Callers can never reach the
live value through a returned reference.

Updates are synchronous. set_state() and reset_state() replace the value and
call every live observer, in registration order, before returning.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, Generic, TypeVar

from statebox._clone import clone
from statebox._slots import SlotRegistry
from statebox.errors import InvalidArgument, PathUnreachable, ReadOnlyStateError

T = TypeVar("T")

Observer = Callable[[Any], None]

logger = logging.getLogger("statebox.reactive")


class Registration:
    """Handle returned by Reactive.register()."""

    __slots__ = ("_owner", "_slot_id", "_callback")

    def __init__(self, owner: Reactive, slot_id: int, callback: Observer) -> None:
        self._owner = owner
        self._slot_id = slot_id
        self._callback: Observer | None = callback

    @property
    def active(self) -> bool:
        return self._callback is not None and self._owner._observers.get(self._slot_id) is not None

    def unregister(self) -> None:
        """Stop receiving updates. Safe to call more than once."""
        observers = self._owner._observers
        observers.tombstone(self._slot_id)
        self._callback = None
        observers.compact()

    def call_handler(self) -> None:
        """Call the observer with the current snapshot, if still registered."""
        if not self.active:
            return
        self._callback(self._owner.snapshot())

    def __repr__(self) -> str:
        state = "active" if self.active else "unregistered"
        return f"Registration(slot={self._slot_id}, {state})"


class Reactive(Generic[T]):
    """A single value with snapshot reads and synchronous change observers.

    set_state() does a top-level merge when both the current value and the
    update are mappings; for any other T it replaces the value outright.
    """

    __slots__ = ("_initial", "_current", "_observers")

    def __init__(self, initial: T) -> None:
        self._initial: T = clone(initial)
        self._current: T = clone(initial)
        self._observers: SlotRegistry[Observer] = SlotRegistry()

    @property
    def state(self) -> T:
        return clone(self._current)

    @state.setter
    def state(self, value: T) -> None:
        logger.warning("Cannot set state directly; use set_state() instead")
        raise ReadOnlyStateError("Cannot set state. Instead, use set_state method.")

    def snapshot(self) -> T:
        """Deep copy of the current value."""
        return clone(self._current)

    def register(self, callback: Observer) -> Registration:
        """Call callback(snapshot) after every update. Returns a Registration."""
        if not callable(callback):
            raise InvalidArgument("Listen callback must be callable.")
        slot_id = self._observers.add(callback)
        return Registration(self, slot_id, callback)

    def set_state(self, partial: Any) -> None:
        """Merge partial into the current value (top level only) and notify.

        Keys present in partial replace the current keys wholesale; nested
        mappings are not merged. Non-mapping values replace the state.
        """
        if isinstance(self._current, Mapping) and isinstance(partial, Mapping):
            self._current = clone({**self._current, **partial})
        else:
            self._current = clone(partial)
        self._notify()

    def reset_state(self) -> None:
        """Restore the value given to the constructor and notify."""
        self._current = clone(self._initial)
        self._notify()

    def reach_value_of(self, path: str) -> Any:
        """Read a dotted path ("big.sub.town") out of the current value.

        A missing key under a valid mapping yields None. Descending into
        anything that is not a mapping or sequence raises PathUnreachable.
        """
        if not isinstance(path, str) or not path:
            raise InvalidArgument("parameter path must be a non-empty string.")

        value: Any = self._current
        for segment in path.split("."):
            value = _descend(value, segment, path)
        return clone(value)

    def _notify(self) -> None:
        """Call every live observer, each with its own snapshot."""
        for slot_id, _ in self._observers.live():
            callback = self._observers.get(slot_id)
            if callback is not None:
                callback(clone(self._current))

    def __repr__(self) -> str:
        return f"Reactive({self._current!r})"


def _descend(value: Any, segment: str, path: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(segment)
    if isinstance(value, (list, tuple)):
        if not segment.isdecimal():
            raise PathUnreachable(path, segment)
        index = int(segment)
        if index < len(value):
            return value[index]
        return None
    raise PathUnreachable(path, segment)
