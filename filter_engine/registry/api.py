"""
Property adapter contract.

The rule set treats a rule's text as opaque. Meaning is given to it only by
the adapter registered for the rule's property kind. An adapter can:

- decode raw text into a value the UI layer can present,
- encode a UI-level value back into raw text,
- optionally summarize the value domain (distinct values and counts) from the
  catalog, for histograms and pickers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Sequence


@dataclass(frozen=True, slots=True)
class DomainEntry:
    """One distinct catalog value and how many items carry it."""

    value: str
    count: int


@dataclass(frozen=True, slots=True)
class ValueDomain:
    """
    Summary of the values a property takes in the catalog.

    Attributes
    ----------
    property:
        Property id the summary describes.
    entries:
        Distinct values with counts, in the order the catalog returned them.
    minimum:
        Smallest value, or None when the domain is empty or unordered.
    maximum:
        Largest value, or None when the domain is empty or unordered.
    """

    property: int
    entries: tuple[DomainEntry, ...]
    minimum: str | None = None
    maximum: str | None = None

    @property
    def total(self) -> int:
        """Total number of items across all entries."""
        return sum(e.count for e in self.entries)


class CatalogSource(Protocol):
    """Read-only access to the catalog's value distribution for a property."""

    def value_counts(self, property_id: int) -> Sequence[tuple[str, int]]:
        """Return (value, count) pairs for property_id."""
        ...


class PropertyAdapter(Protocol):
    """Per-property-kind handling of a rule's raw text."""

    specialized: bool

    def decode(self, raw_text: str) -> Any:
        """Build a UI-level value from raw text. Never raises on odd input."""
        ...

    def encode(self, value: Any) -> str:
        """Convert a UI-level value back into raw text."""
        ...

    def domain(self, catalog: CatalogSource) -> ValueDomain | None:
        """Summarize the property's values, or None if not supported."""
        ...
