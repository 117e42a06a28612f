"""
Built-in property adapters.

Range-valued properties (rating, exposure, ISO, ...) share one adapter that
understands the range expressions produced by range pickers. Filenames have a
name/extension pair. Everything else uses the free-text fallback.

Range syntax
------------
- ``""`` or ``"%"``: no constraint
- ``"[a;b]"``: a <= value <= b
- ``">=a"``: value >= a
- ``"<=b"``: value <= b
- ``"a"`` or ``"=a"``: value == a

Bounds are kept as strings; numeric parsing belongs to the query engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..rules.models import clip_text
from .api import CatalogSource, DomainEntry, ValueDomain


@dataclass(frozen=True, slots=True)
class RangeValue:
    """
    Inclusive range; a None bound is open.

    Attributes
    ----------
    lower:
        Lower bound text, or None.
    upper:
        Upper bound text, or None.
    """

    lower: str | None = None
    upper: str | None = None

    @property
    def is_unbounded(self) -> bool:
        return self.lower is None and self.upper is None


@dataclass(frozen=True, slots=True)
class FilenameValue:
    """Filename pattern split into name and extension parts."""

    name: str = ""
    extension: str = ""


def _blank_to_none(text: str) -> str | None:
    stripped = text.strip()
    return stripped or None


def _sort_key(value: str) -> tuple[int, float, str]:
    try:
        return (0, float(value), value)
    except ValueError:
        return (1, 0.0, value)


def _collect(catalog: CatalogSource, property_id: int) -> tuple[DomainEntry, ...]:
    return tuple(
        DomainEntry(value=str(v), count=int(c)) for v, c in catalog.value_counts(property_id)
    )


@dataclass(frozen=True, slots=True)
class RangeAdapter:
    """Adapter for range-valued properties."""

    property: int
    specialized: bool = True

    def decode(self, raw_text: str) -> RangeValue:
        text = raw_text.strip()
        if text in {"", "%"}:
            return RangeValue()
        if text.startswith("[") and text.endswith("]") and ";" in text:
            low, _, high = text[1:-1].partition(";")
            return RangeValue(lower=_blank_to_none(low), upper=_blank_to_none(high))
        if text.startswith(">="):
            return RangeValue(lower=_blank_to_none(text[2:]))
        if text.startswith("<="):
            return RangeValue(upper=_blank_to_none(text[2:]))
        if text.startswith("="):
            text = text[1:].strip()
        return RangeValue(lower=text or None, upper=text or None)

    def encode(self, value: Any) -> str:
        if not isinstance(value, RangeValue):
            raise TypeError(f"RangeAdapter expects RangeValue, got {type(value).__name__}")
        if value.is_unbounded:
            return ""
        if value.upper is None:
            return clip_text(f">={value.lower}")
        if value.lower is None:
            return clip_text(f"<={value.upper}")
        if value.lower == value.upper:
            return clip_text(value.lower)
        return clip_text(f"[{value.lower};{value.upper}]")

    def domain(self, catalog: CatalogSource) -> ValueDomain:
        entries = _collect(catalog, self.property)
        if not entries:
            return ValueDomain(property=self.property, entries=())
        ordered = sorted((e.value for e in entries), key=_sort_key)
        return ValueDomain(
            property=self.property, entries=entries, minimum=ordered[0], maximum=ordered[-1]
        )


@dataclass(frozen=True, slots=True)
class FilenameAdapter:
    """Adapter for the filename property (``name/extension``)."""

    property: int
    specialized: bool = True

    def decode(self, raw_text: str) -> FilenameValue:
        parts = raw_text.split("/")
        if len(parts) != 2:
            return FilenameValue()
        return FilenameValue(name=parts[0], extension=parts[1])

    def encode(self, value: Any) -> str:
        if not isinstance(value, FilenameValue):
            raise TypeError(f"FilenameAdapter expects FilenameValue, got {type(value).__name__}")
        if not value.name and not value.extension:
            return ""
        return clip_text(f"{value.name}/{value.extension}")

    def domain(self, catalog: CatalogSource) -> ValueDomain:
        return ValueDomain(property=self.property, entries=_collect(catalog, self.property))


@dataclass(frozen=True, slots=True)
class FallbackAdapter:
    """Free-text adapter used for every property without a specialized one."""

    property: int
    specialized: bool = False

    def decode(self, raw_text: str) -> str:
        return raw_text

    def encode(self, value: Any) -> str:
        return clip_text(str(value))

    def domain(self, catalog: CatalogSource) -> None:
        return None
