"""statebox: a reactive state container with a mutation/action store on top."""

from importlib.metadata import version as _version

__version__ = _version("statebox")

from statebox.errors import (
    StoreError,
    InvalidArgument,
    UnknownMutation,
    UnknownAction,
    PathUnreachable,
    ReadOnlyStateError,
)
from statebox.completion import Completion
from statebox.reactive import Reactive, Registration
from statebox.events import EventChannel, EmittedEvent
from statebox.store import Store, DispatchContext, ActionEvent

__all__ = [
    "Reactive",
    "Registration",
    "Store",
    "DispatchContext",
    "ActionEvent",
    "EventChannel",
    "EmittedEvent",
    "Completion",
    "StoreError",
    "InvalidArgument",
    "UnknownMutation",
    "UnknownAction",
    "PathUnreachable",
    "ReadOnlyStateError",
]
