"""
Global sort order collaborator.

The catalog's sort order lives outside the filtering engine. The engine only
needs to read it (to snapshot it) and to request that a snapshot be restored,
which happens when rule 0 switches into or out of the tag property.

The order is packed into one int: the sort field in the low bits and
ORDER_DESCENDING_FLAG when the order is descending.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final, Protocol

ORDER_DESCENDING_FLAG: Final[int] = 0x40000000


def pack_order(sort_field: int, descending: bool) -> int:
    """Pack a sort field and direction into the persisted int form."""
    return (sort_field & ~ORDER_DESCENDING_FLAG) | (ORDER_DESCENDING_FLAG if descending else 0)


def unpack_order(order: int) -> tuple[int, bool]:
    """Split a packed order into (sort_field, descending)."""
    return order & ~ORDER_DESCENDING_FLAG, bool(order & ORDER_DESCENDING_FLAG)


class SortOrderSource(Protocol):
    """Read and restore the catalog's global sort order."""

    def current_order(self) -> int:
        """Return the current global order, packed with pack_order()."""
        ...

    def restore_order(self, order: int) -> None:
        """Request that the global order become order (packed)."""
        ...


@dataclass(slots=True)
class StaticSortOrder:
    """
    SortOrderSource holding the order in memory.

    Used by the CLI and by tests. restored records every restore request in
    call order.
    """

    order: int = 0
    restored: list[int] = field(default_factory=list)

    def current_order(self) -> int:
        """See SortOrderSource.current_order."""
        return self.order

    def restore_order(self, order: int) -> None:
        """See SortOrderSource.restore_order."""
        self.order = order
        self.restored.append(order)
