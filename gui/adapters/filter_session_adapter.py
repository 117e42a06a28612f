"""Qt adapter for a FilterSession.

Widgets call the adapter's slots; the adapter calls into the engine and relays
the engine's rebuild signal as Qt signals.

Delivery model
--------------
- The engine notifier fires synchronously at the end of a mutation.
- The adapter's listener only emits an internal signal wired with a queued
  connection, so query rebuilds and widget refreshes run from the event loop,
  never from inside the engine call that caused them.
- Several mutations before the event loop runs collapse into one rebuild.
"""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QObject, Qt, Signal, Slot

from filter_engine.errors import FilterEngineError
from filter_engine.session import FilterSession


class FilterSessionAdapter(QObject):
    """Qt-facing wrapper over a FilterSession."""

    query_rebuild_requested = Signal()
    rules_changed = Signal(object)  # tuple[RuleState, ...]
    history_changed = Signal(object)  # list[HistoryItem]
    error = Signal(str)  # message

    _engine_changed = Signal()

    def __init__(self, session: FilterSession, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._session = session
        self._queued = False
        self._engine_changed.connect(
            self._relay_change, type=Qt.ConnectionType.QueuedConnection
        )
        self._unsubscribe = session.subscribe(self._on_engine_change)

    @property
    def session(self) -> FilterSession:
        return self._session

    def _on_engine_change(self) -> None:
        if self._queued:
            return
        self._queued = True
        self._engine_changed.emit()

    @Slot()
    def _relay_change(self) -> None:
        self._queued = False
        self.rules_changed.emit(self._session.combined_state())
        self.history_changed.emit(self._session.list_history())
        self.query_rebuild_requested.emit()

    def _run(self, action: Callable[..., object], *args: object) -> None:
        try:
            action(*args)
        except (FilterEngineError, ValueError) as e:
            self.error.emit(str(e))

    @Slot(int)
    def append_rule(self, property_id: int) -> None:
        """Append a rule for property_id; capacity errors go to error."""
        self._run(self._session.rules.append, property_id)

    @Slot(int)
    def remove_rule(self, index: int) -> None:
        self._run(self._session.rules.remove, index)

    @Slot(int, int)
    def set_property(self, index: int, property_id: int) -> None:
        self._run(self._session.rules.set_property, index, property_id)

    @Slot(int, int)
    def set_operator(self, index: int, operator: int) -> None:
        self._run(self._session.rules.set_operator, index, operator)

    @Slot(int, bool)
    def set_enabled(self, index: int, enabled: bool) -> None:
        self._run(self._session.rules.set_enabled, index, enabled)

    @Slot(int, str)
    def set_raw_text(self, index: int, text: str) -> None:
        self._run(self._session.rules.set_raw_text, index, text)

    @Slot(int)
    def apply_history(self, index: int) -> None:
        """Restore history entry index; unpopulated indices are ignored."""
        self._run(self._session.apply_history, index)

    @Slot(str)
    def apply_preset(self, name: str) -> None:
        """Apply a built-in or stored preset by name."""
        self._run(self._session.apply_named_preset, name)

    def shutdown(self) -> None:
        """Detach from the session's notifier."""
        self._unsubscribe()
