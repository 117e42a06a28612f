from __future__ import annotations

from typing import Sequence

import pytest

from filter_engine.properties import PropertyKind, coerce_property_id, property_name
from filter_engine.registry.adapters import (
    FallbackAdapter,
    FilenameAdapter,
    FilenameValue,
    RangeAdapter,
    RangeValue,
)
from filter_engine.registry.registry import PropertyRegistry


class _Catalog:
    def __init__(self, counts: dict[int, list[tuple[str, int]]]) -> None:
        self._counts = counts

    def value_counts(self, property_id: int) -> Sequence[tuple[str, int]]:
        return self._counts.get(property_id, [])


def test_registry_dispatch() -> None:
    registry = PropertyRegistry()

    assert isinstance(registry.adapter_for(PropertyKind.RATING), RangeAdapter)
    assert isinstance(registry.adapter_for(PropertyKind.FILENAME), FilenameAdapter)
    assert isinstance(registry.adapter_for(PropertyKind.TAG), FallbackAdapter)
    assert isinstance(registry.adapter_for(99), FallbackAdapter)
    assert registry.has_specialized(PropertyKind.ISO)
    assert not registry.has_specialized(PropertyKind.TAG)


def test_registry_overrides() -> None:
    registry = PropertyRegistry(factories={PropertyKind.TAG: RangeAdapter})
    assert isinstance(registry.adapter_for(PropertyKind.TAG), RangeAdapter)

    registry.register(PropertyKind.RATING, FallbackAdapter)
    assert isinstance(registry.adapter_for(PropertyKind.RATING), FallbackAdapter)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("", RangeValue()),
        ("%", RangeValue()),
        ("[1;3]", RangeValue("1", "3")),
        ("[;3]", RangeValue(None, "3")),
        (">=2", RangeValue("2", None)),
        ("<=4", RangeValue(None, "4")),
        ("=5", RangeValue("5", "5")),
        ("5", RangeValue("5", "5")),
    ],
)
def test_range_adapter_decode(raw: str, expected: RangeValue) -> None:
    assert RangeAdapter(PropertyKind.RATING).decode(raw) == expected


def test_range_adapter_encode() -> None:
    adapter = RangeAdapter(PropertyKind.ISO)
    assert adapter.encode(RangeValue()) == ""
    assert adapter.encode(RangeValue("100", "800")) == "[100;800]"
    assert adapter.encode(RangeValue("100", None)) == ">=100"
    assert adapter.encode(RangeValue(None, "800")) == "<=800"
    assert adapter.encode(RangeValue("400", "400")) == "400"
    with pytest.raises(TypeError):
        adapter.encode("400")


def test_range_adapter_domain_orders_numerically() -> None:
    catalog = _Catalog({PropertyKind.ISO: [("800", 2), ("1600", 1), ("100", 4)]})

    domain = RangeAdapter(PropertyKind.ISO).domain(catalog)

    assert domain.minimum == "100"
    assert domain.maximum == "1600"
    assert domain.total == 7
    assert RangeAdapter(PropertyKind.RATING).domain(catalog).entries == ()


def test_filename_adapter() -> None:
    adapter = FilenameAdapter(PropertyKind.FILENAME)
    assert adapter.decode("IMG_%/CR2") == FilenameValue("IMG_%", "CR2")
    assert adapter.decode("no-extension") == FilenameValue()
    assert adapter.encode(FilenameValue("IMG_%", "CR2")) == "IMG_%/CR2"
    assert adapter.encode(FilenameValue()) == ""


def test_fallback_adapter_is_opaque_text() -> None:
    adapter = FallbackAdapter(PropertyKind.TAG)
    assert adapter.decode("a|b") == "a|b"
    assert adapter.encode("x$y") == "xy"
    assert adapter.domain(_Catalog({})) is None
    assert not adapter.specialized


def test_property_ids() -> None:
    assert coerce_property_id("24") is PropertyKind.RATING
    assert coerce_property_id(-5) is PropertyKind.FILMROLL
    assert coerce_property_id(None) is PropertyKind.FILMROLL
    assert coerce_property_id(120) == 120
    assert coerce_property_id(0xFFFF) == 0xFFFF
    assert coerce_property_id(0x10000) is PropertyKind.FILMROLL
    assert property_name(PropertyKind.COLORLABEL) == "color label"
    assert property_name(120) == "???"
