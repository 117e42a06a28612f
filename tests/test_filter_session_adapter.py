from __future__ import annotations

from typing import Iterator

import pytest
from PySide6.QtCore import QCoreApplication

from filter_engine.properties import PropertyKind
from filter_engine.session import memory_session
from gui.adapters.filter_session_adapter import FilterSessionAdapter


@pytest.fixture(scope="module")
def qapp() -> Iterator[QCoreApplication]:
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


def test_mutations_collapse_into_one_rebuild(qapp: QCoreApplication) -> None:
    adapter = FilterSessionAdapter(memory_session())
    rebuilds: list[int] = []
    states: list[object] = []
    adapter.query_rebuild_requested.connect(lambda: rebuilds.append(1))
    adapter.rules_changed.connect(states.append)

    adapter.append_rule(int(PropertyKind.RATING))
    adapter.set_raw_text(0, ">=1")
    adapter.set_operator(0, 1)
    assert rebuilds == []

    qapp.processEvents()

    assert rebuilds == [1]
    (state,) = states[-1]
    assert state.raw_text == ">=1"
    adapter.shutdown()


def test_engine_errors_are_emitted(qapp: QCoreApplication) -> None:
    adapter = FilterSessionAdapter(memory_session())
    errors: list[str] = []
    adapter.error.connect(errors.append)

    for _ in range(11):
        adapter.append_rule(int(PropertyKind.TAG))
    adapter.remove_rule(20)
    adapter.apply_preset("missing")
    qapp.processEvents()

    assert len(errors) == 3
    assert "more than 10 rules" in errors[0]
    assert adapter.session.rules.count == 10
    adapter.shutdown()


def test_shutdown_detaches_from_session(qapp: QCoreApplication) -> None:
    session = memory_session()
    adapter = FilterSessionAdapter(session)
    rebuilds: list[int] = []
    adapter.query_rebuild_requested.connect(lambda: rebuilds.append(1))

    adapter.shutdown()
    session.rules.append(PropertyKind.RATING)
    qapp.processEvents()

    assert rebuilds == []
