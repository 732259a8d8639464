"""Exception taxonomy for statebox.

Every error is raised synchronously at the call that detects it. Errors raised
inside an action or mutation body are not wrapped: they reach the caller
through the action's Completion.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for every statebox error."""


class InvalidArgument(StoreError, ValueError):
    """A callback is not callable, or a name/path is not a non-empty string."""


class UnknownMutation(StoreError, LookupError):
    """commit() was called with a name absent from the mutation table."""

    def __init__(self, name: object) -> None:
        super().__init__(f"Cannot find mutation {name!r}")
        self.name = name


class UnknownAction(StoreError, LookupError):
    """dispatch() or add_action_listener() got a name with no registry."""

    def __init__(self, name: object) -> None:
        super().__init__(f"Cannot find action {name!r}")
        self.name = name


class PathUnreachable(StoreError, LookupError):
    """reach_value_of() descended into a value that has no fields."""

    def __init__(self, path: str, segment: str) -> None:
        super().__init__(f"Cannot read {segment!r} of path {path!r} in state")
        self.path = path
        self.segment = segment


class ReadOnlyStateError(StoreError, AttributeError):
    """State was assigned directly instead of going through set_state/dispatch."""
