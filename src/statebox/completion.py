"""Completion — the awaitable signal returned by dispatch() and commit().

Store operations themselves are synchronous; only the work an action defers
(a coroutine, a future) is asynchronous. Settled completions can be read
synchronously with result()/exception() and awaited any number of times.

A rejected Completion whose error is never read (through result(),
exception() or await) logs it at ERROR when it is garbage collected, the way
asyncio reports "exception was never retrieved".

Usage:
    done = store.dispatch("increment")
    await done                  # waits for any deferred work of the action
    done.result()               # same outcome, read synchronously
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Generator, Generic, TypeVar

R = TypeVar("R")

logger = logging.getLogger("statebox.completion")


class Completion(Generic[R]):
    """Resolved, rejected, or pending on an awaitable."""

    __slots__ = ("_source", "_settled", "_value", "_error", "_retrieved")

    def __init__(self, source: Awaitable[R] | None = None) -> None:
        self._source = source
        self._settled = source is None
        self._value: Any = None
        self._error: BaseException | None = None
        self._retrieved = False

    @classmethod
    def resolved(cls, value: R = None) -> Completion[R]:
        completion: Completion[R] = cls()
        completion._value = value
        return completion

    @classmethod
    def rejected(cls, error: BaseException) -> Completion[Any]:
        completion: Completion[Any] = cls()
        completion._error = error
        return completion

    @classmethod
    def of(cls, value: Any) -> Completion[Any]:
        """Wrap whatever an action returned.

        Completions pass through, awaitables become pending, anything else
        resolves to itself.
        """
        if isinstance(value, Completion):
            return value
        if inspect.isawaitable(value):
            return cls(value)
        return cls.resolved(value)

    def done(self) -> bool:
        self._poll()
        return self._settled

    def result(self) -> R:
        """The settled value. Raises the rejection, or InvalidStateError while pending."""
        if not self.done():
            raise asyncio.InvalidStateError("Completion is still pending")
        self._retrieved = True
        if self._error is not None:
            raise self._error
        return self._value

    def exception(self) -> BaseException | None:
        if not self.done():
            raise asyncio.InvalidStateError("Completion is still pending")
        self._retrieved = True
        return self._error

    def _poll(self) -> None:
        """Settle from an underlying future that finished on its own."""
        source = self._source
        if self._settled or not isinstance(source, asyncio.Future) or not source.done():
            return
        if source.cancelled():
            self._settle(asyncio.CancelledError(), None)
            return
        error = source.exception()
        self._settle(error, source.result() if error is None else None)

    def _settle(self, error: BaseException | None, value: Any) -> None:
        self._settled = True
        self._error = error
        self._value = value
        self._source = None

    def __await__(self) -> Generator[Any, None, R]:
        self._poll()
        if not self._settled:
            # A Task can be awaited by several waiters; a bare coroutine cannot.
            if not isinstance(self._source, asyncio.Future):
                self._source = asyncio.ensure_future(self._source)
            try:
                value = yield from self._source.__await__()
            except Exception as error:
                if not self._settled:
                    self._settle(error, None)
                self._retrieved = True
                raise
            if not self._settled:
                self._settle(None, value)
        self._retrieved = True
        if self._error is not None:
            raise self._error
        return self._value

    def __del__(self) -> None:
        if self._error is not None and not self._retrieved:
            logger.error(
                "Completion exception was never retrieved: %r",
                self._error,
                exc_info=self._error,
            )

    def __repr__(self) -> str:
        if not self.done():
            return "Completion(pending)"
        if self._error is not None:
            return f"Completion(rejected={self._error!r})"
        return f"Completion(resolved={self._value!r})"
