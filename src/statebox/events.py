"""Event channel — fire-and-forget emit/listen on top of two Reactive containers.

One container maps event name -> last payload, the other holds the last
emitted name as {"value": name}. Listeners are observers of the second one,
so only emissions made after a listener registers are ever delivered.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, NamedTuple

from statebox.errors import InvalidArgument
from statebox.reactive import Reactive, Registration

logger = logging.getLogger("statebox.events")


class EmittedEvent(NamedTuple):
    """Argument passed to a listen() callback."""

    data: Any
    unregister: Callable[[], None]


def _is_name(name: object) -> bool:
    return isinstance(name, str) and len(name) > 0


class EventChannel:
    """Named events decoupled from the store's action table."""

    __slots__ = ("_payloads", "_emitted")

    def __init__(self) -> None:
        self._payloads: Reactive[dict[str, Any]] = Reactive({})
        self._emitted: Reactive[dict[str, str | None]] = Reactive({"value": None})

    @property
    def last_emitted(self) -> str | None:
        return self._emitted.snapshot()["value"]

    def payload_of(self, name: str) -> Any:
        """Last payload emitted under name, or None."""
        return self._payloads.snapshot().get(name)

    def emit(self, name: str, payload: Any = None) -> None:
        """Store payload under name, then notify listeners. Invalid names are ignored."""
        if not _is_name(name):
            logger.debug("Ignoring emit with invalid event name %r", name)
            return
        logger.debug("Emitting %s", name)
        self._payloads.set_state({name: payload})
        self._emitted.set_state({"value": name})

    def listen(self, name: str, callback: Callable[[EmittedEvent], None]) -> Registration:
        """Call callback on every future emit of exactly this name."""
        if not callable(callback) or not _is_name(name):
            raise InvalidArgument(
                "callback must be callable and event name must be a non-empty string."
            )

        def _on_emitted(emitted: dict[str, str | None]) -> None:
            if emitted["value"] == name:
                callback(EmittedEvent(self.payload_of(name), registration.unregister))

        registration = self._emitted.register(_on_emitted)
        return registration
