"""
Bounded, deduplicating history of serialized rule sets.

Entries live in ConfigStore slots ``history0 .. history{N-1}`` where N is the
runtime capacity ``history_max``. Slot 0 is the most recent entry. An empty
slot is unused. Entries are identified only by content; the stack never holds
the same string twice.

Push policy
-----------
1. A push equal to slot 0 is a no-op.
2. Every other copy of the pushed string is removed, and the survivors are
   compacted upward keeping their relative order.
3. The pushed string is inserted at slot 0.
4. The stack is truncated to history_max entries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final, Protocol

from .config_store import keys
from .config_store.api import ConfigStore
from .rules.combine import describe
from .rules.serialize import deserialize

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_MAX: Final[int] = 10


class SupportsApplySerialized(Protocol):
    """Anything that can replace its rule set from a serialized string."""

    def apply_serialized(self, serialized: str) -> None:
        ...


@dataclass(frozen=True, slots=True)
class HistoryItem:
    """One row of the history listing."""

    index: int
    serialized: str
    summary: str


def summarize(serialized: str) -> str:
    """Human-readable one-line summary of a serialized rule set."""
    return describe(rule.state() for rule in deserialize(serialized))


class HistoryStack:
    """
    MRU stack of serialized rule sets persisted in a ConfigStore.

    Parameters
    ----------
    store:
        Backing key/value store.
    """

    def __init__(self, store: ConfigStore) -> None:
        self._store = store

    @property
    def capacity(self) -> int:
        """Current history_max, never negative."""
        return max(0, self._store.get_int(keys.HISTORY_MAX, DEFAULT_HISTORY_MAX))

    def set_capacity(self, history_max: int) -> None:
        """
        Change history_max and truncate stored entries to fit.

        Slots beyond the new capacity are cleared.
        """
        old = self.capacity
        new = max(0, int(history_max))
        self._store.set_int(keys.HISTORY_MAX, new)
        for slot in range(new, old):
            self._store.set_string(keys.history_slot(slot), "")

    def entries(self) -> list[str]:
        """Return populated entries, most recent first."""
        out: list[str] = []
        for slot in range(self.capacity):
            value = self._store.get_string(keys.history_slot(slot))
            if value:
                out.append(value)
        return out

    def push(self, serialized: str) -> bool:
        """
        Record a serialized rule set as the most recent entry.

        Parameters
        ----------
        serialized:
            Output of RuleSetManager.serialize().

        Returns
        -------
        bool
            True if the stored history changed.
        """
        if not serialized:
            return False
        capacity = self.capacity
        if capacity == 0:
            return False

        if self._store.get_string(keys.history_slot(0)) == serialized:
            return False

        # Slot 0 may be empty with entries below it; the rewrite compacts them.
        current = self.entries()

        survivors = [entry for entry in current if entry != serialized]
        updated = ([serialized] + survivors)[:capacity]
        dropped = len(survivors) + 1 - len(updated)
        if dropped > 0:
            logger.debug("History full; evicted %d oldest entr%s", dropped, "y" if dropped == 1 else "ies")

        for slot in range(capacity):
            self._store.set_string(keys.history_slot(slot), updated[slot] if slot < len(updated) else "")
        return True

    def get(self, index: int) -> str | None:
        """Return the entry at index, or None if index is not populated."""
        current = self.entries()
        if 0 <= index < len(current):
            return current[index]
        return None

    def list(self) -> list[HistoryItem]:
        """Return (index, summary) rows for display, most recent first."""
        return [
            HistoryItem(index=i, serialized=entry, summary=summarize(entry))
            for i, entry in enumerate(self.entries())
        ]

    def clear(self) -> None:
        """Remove every entry."""
        for slot in range(self.capacity):
            self._store.set_string(keys.history_slot(slot), "")

    def apply_entry(self, index: int, target: SupportsApplySerialized) -> bool:
        """
        Replace target's rule set with the entry at index.

        Out-of-range indices are ignored silently.

        Returns
        -------
        bool
            True if an entry was applied.
        """
        entry = self.get(index)
        if entry is None:
            logger.debug("Ignoring history apply for unpopulated index %d", index)
            return False
        logger.info("Applying history entry %d", index)
        target.apply_serialized(entry)
        return True
