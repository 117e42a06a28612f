"""
Property registry: dispatch from property id to adapter.

The registry is the only place that branches on property kind. Ids without a
specialized adapter, including ids unknown to this version, get a
FallbackAdapter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping

from ..properties import PropertyKind
from .adapters import FallbackAdapter, FilenameAdapter, RangeAdapter
from .api import PropertyAdapter

AdapterFactory = Callable[[int], PropertyAdapter]

RANGE_KINDS: frozenset[PropertyKind] = frozenset(
    {
        PropertyKind.RATING,
        PropertyKind.ASPECT_RATIO,
        PropertyKind.FOCAL_LENGTH,
        PropertyKind.APERTURE,
        PropertyKind.ISO,
        PropertyKind.EXPOSURE,
        PropertyKind.TIME,
    }
)


def _default_factories() -> dict[int, AdapterFactory]:
    factories: dict[int, AdapterFactory] = {kind: RangeAdapter for kind in RANGE_KINDS}
    factories[PropertyKind.FILENAME] = FilenameAdapter
    return factories


@dataclass(slots=True)
class PropertyRegistry:
    """
    Lookup table of adapter factories keyed by property id.

    Parameters
    ----------
    factories:
        Overrides or additions on top of the built-in table.
    """

    factories: Mapping[int, AdapterFactory] = field(default_factory=dict)
    _table: dict[int, AdapterFactory] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._table = _default_factories()
        self._table.update({int(k): v for k, v in self.factories.items()})

    def register(self, property_id: int, factory: AdapterFactory) -> None:
        """Register or replace the adapter factory for property_id."""
        self._table[int(property_id)] = factory

    def adapter_for(self, property_id: int) -> PropertyAdapter:
        """Return a fresh adapter for property_id (fallback if unregistered)."""
        factory = self._table.get(int(property_id), FallbackAdapter)
        return factory(property_id)

    def has_specialized(self, property_id: int) -> bool:
        """True if property_id has an adapter other than the fallback."""
        return int(property_id) in self._table
