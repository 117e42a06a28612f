from __future__ import annotations

from filter_engine.config_store import keys
from filter_engine.config_store.memory_store import MemoryConfigStore
from filter_engine.history import DEFAULT_HISTORY_MAX, HistoryStack, summarize
from filter_engine.properties import PropertyKind
from filter_engine.rules.manager import RuleSetManager


class _RecordingTarget:
    def __init__(self) -> None:
        self.applied: list[str] = []

    def apply_serialized(self, serialized: str) -> None:
        self.applied.append(serialized)


def _stack(capacity: int | None = None) -> HistoryStack:
    store = MemoryConfigStore()
    if capacity is not None:
        store.set_int(keys.HISTORY_MAX, capacity)
    return HistoryStack(store)


def test_default_capacity() -> None:
    assert _stack().capacity == DEFAULT_HISTORY_MAX


def test_push_moves_duplicate_to_front() -> None:
    history = _stack()
    for entry in ("A", "B", "A"):
        history.push(entry)
    assert history.entries() == ["A", "B"]


def test_push_truncates_to_capacity() -> None:
    history = _stack(3)
    for entry in ("A", "B", "C", "D"):
        history.push(entry)
    assert history.entries() == ["D", "C", "B"]


def test_push_equal_to_top_is_a_no_op() -> None:
    history = _stack()
    assert history.push("A") is True
    assert history.push("A") is False
    assert history.entries() == ["A"]


def test_push_ignores_empty_and_zero_capacity() -> None:
    history = _stack(0)
    assert history.push("A") is False
    assert history.entries() == []
    assert _stack().push("") is False


def test_set_capacity_clears_slots_beyond_new_capacity() -> None:
    store = MemoryConfigStore()
    history = HistoryStack(store)
    for entry in ("A", "B", "C", "D", "E"):
        history.push(entry)

    history.set_capacity(2)

    assert history.entries() == ["E", "D"]
    assert store.get_string(keys.history_slot(2)) == ""
    history.set_capacity(5)
    assert history.entries() == ["E", "D"]


def test_apply_entry_out_of_range_is_ignored() -> None:
    history = _stack()
    history.push("1:0:24:0:$")
    target = _RecordingTarget()

    assert history.apply_entry(4, target) is False
    assert history.apply_entry(-1, target) is False
    assert target.applied == []
    assert history.apply_entry(0, target) is True
    assert target.applied == ["1:0:24:0:$"]


def test_list_and_clear() -> None:
    history = _stack()
    history.push("1:0:24:0:>=2$")
    history.push("2:0:24:0:>=2$1:16:1:beach$")

    items = history.list()

    assert [i.index for i in items] == [0, 1]
    assert items[0].summary == "rating >=2 or tag(off) beach"
    assert items[1].summary == "rating >=2"
    history.clear()
    assert history.entries() == []


def test_summarize_handles_garbage() -> None:
    assert summarize("not a rule set") == ""
    assert summarize("1:0:99:0:foo$") == "??? foo"


def test_applying_an_entry_moves_it_to_front() -> None:
    store = MemoryConfigStore()
    history = HistoryStack(store)
    manager = RuleSetManager(store, history=history)
    manager.load()
    manager.append(PropertyKind.RATING)
    manager.set_raw_text(0, ">=2")
    first, second = history.entries()

    assert history.apply_entry(1, manager) is True

    assert manager.rule(0).raw_text == ""
    assert history.entries() == [second, first]


def test_push_fills_an_empty_top_slot() -> None:
    store = MemoryConfigStore({keys.history_slot(0): "", keys.history_slot(1): "A"})
    history = HistoryStack(store)

    assert history.push("A") is True

    assert store.get_string(keys.history_slot(0)) == "A"
    assert store.get_string(keys.history_slot(1)) == ""
    assert history.entries() == ["A"]
