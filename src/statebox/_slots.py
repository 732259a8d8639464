"""Slot registry — ordered callbacks with stable ids and tombstones.

Ids come from a per-registry counter and are never reused, so a slot id stays
valid (live or dead) for the registry's lifetime even after compaction.
"""

from __future__ import annotations

import itertools
from typing import Callable, Generic, TypeVar

C = TypeVar("C", bound=Callable)


class SlotRegistry(Generic[C]):
    """Insertion-ordered mapping of slot id -> callback, None marks a tombstone."""

    __slots__ = ("_slots", "_ids")

    def __init__(self) -> None:
        self._slots: dict[int, C | None] = {}
        self._ids = itertools.count()

    def add(self, callback: C) -> int:
        slot_id = next(self._ids)
        self._slots[slot_id] = callback
        return slot_id

    def get(self, slot_id: int) -> C | None:
        return self._slots.get(slot_id)

    def tombstone(self, slot_id: int) -> None:
        if slot_id in self._slots:
            self._slots[slot_id] = None

    def compact(self) -> None:
        """Drop tombstoned slots."""
        for slot_id in [k for k, cb in self._slots.items() if cb is None]:
            del self._slots[slot_id]

    def live(self) -> list[tuple[int, C]]:
        """Live slots in ascending id order.

        Returns a copy: callers re-check get() before each call so a slot
        tombstoned mid-pass is skipped.
        """
        return [(k, cb) for k, cb in self._slots.items() if cb is not None]

    @property
    def live_count(self) -> int:
        return sum(1 for cb in self._slots.values() if cb is not None)

    def __len__(self) -> int:
        return len(self._slots)

    def __repr__(self) -> str:
        return f"SlotRegistry(live={self.live_count}, slots={len(self._slots)})"
