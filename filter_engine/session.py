"""
FilterSession: the explicit, long-lived filtering context.

There is no process-wide active collection. A session bundles the ConfigStore,
the rule set, its history and the notifier, and is handed to whichever layer
needs it (UI adapter, query engine, CLI).
"""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable

from .config_store import keys
from .config_store.api import ConfigStore
from .config_store.memory_store import MemoryConfigStore
from .config_store.sqlite_store import open_config_store
from .history import HistoryItem, HistoryStack
from .notifier import ChangeNotifier
from .errors import FilterEngineError, UnknownPresetError
from .paths import EnginePaths, resolve_engine_paths
from .presets import BUILTIN_PRESETS, PresetRecord, PresetStore, apply_preset, capture_preset
from .registry.api import CatalogSource, ValueDomain
from .registry.registry import PropertyRegistry
from .rules.manager import RuleSetManager
from .rules.models import RuleState
from .settings import EngineSettings, load_engine_settings, save_engine_settings
from .sort_order import SortOrderSource, StaticSortOrder, unpack_order

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FilterSession:
    """
    Wiring of one filtering context.

    Attributes
    ----------
    store:
        Backing ConfigStore.
    notifier:
        Rebuild signal source shared by rules and history application.
    history:
        History of serialized rule sets.
    registry:
        Property adapter registry.
    rules:
        The rule set manager.
    sort_order:
        Global sort order collaborator.
    presets:
        Named preset storage, when the session has a data root.
    paths:
        Resolved data root paths, when the session has a data root.
    """

    store: ConfigStore
    notifier: ChangeNotifier
    history: HistoryStack
    registry: PropertyRegistry
    rules: RuleSetManager
    sort_order: SortOrderSource
    presets: PresetStore | None = None
    paths: EnginePaths | None = None

    @classmethod
    def create(
        cls,
        store: ConfigStore,
        *,
        sort_order: SortOrderSource | None = None,
        registry: PropertyRegistry | None = None,
        presets: PresetStore | None = None,
        settings: EngineSettings | None = None,
    ) -> "FilterSession":
        """
        Build a session over store and load its rule set.

        settings seeds history_max when the store does not have one yet.
        """
        seed = settings or EngineSettings.defaults()
        if not store.has(keys.HISTORY_MAX):
            store.set_int(keys.HISTORY_MAX, seed.history_max)

        notifier = ChangeNotifier()
        history = HistoryStack(store)
        reg = registry or PropertyRegistry()
        order = sort_order or StaticSortOrder()
        manager = RuleSetManager(
            store, notifier=notifier, history=history, registry=reg, sort_order=order
        )
        manager.load()
        logger.debug("Session loaded with %d rule(s)", manager.count)
        return cls(
            store=store,
            notifier=notifier,
            history=history,
            registry=reg,
            rules=manager,
            sort_order=order,
            presets=presets,
        )

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a rebuild listener; returns an unsubscribe callable."""
        return self.notifier.subscribe(listener)

    def batch(self) -> AbstractContextManager[None]:
        """Coalesce the rebuild signals of several mutations into one."""
        return self.notifier.batch()

    def combined_state(self) -> tuple[RuleState, ...]:
        return self.rules.combined_state()

    def list_history(self) -> list[HistoryItem]:
        return self.history.list()

    def apply_history(self, index: int) -> bool:
        """Replace the rule set with history entry index; ignored if out of range."""
        return self.history.apply_entry(index, self.rules)

    def capture_preset(self) -> PresetRecord:
        return capture_preset(self.rules)

    def apply_preset(self, record: PresetRecord) -> None:
        apply_preset(self.rules, record)

    def apply_named_preset(self, name: str) -> None:
        """
        Apply a built-in preset, or a stored one when no built-in matches.

        Raises
        ------
        UnknownPresetError
            If name is neither built in nor stored.
        """
        record = BUILTIN_PRESETS.get(name)
        if record is None:
            if self.presets is None:
                raise UnknownPresetError(f"Unknown preset: {name}")
            record = self.presets.load(name)
        self.apply_preset(record)

    def value_domain(self, index: int, catalog: CatalogSource) -> ValueDomain | None:
        """Value-domain summary for the rule at index, via its adapter."""
        return self.rules.adapter(index).domain(catalog)

    def stored_values(self) -> list[tuple[str, str]]:
        """Return (key, raw value) pairs of every persisted filtering key, sorted."""
        return [(key, self.store.get_string(key)) for key in self.store.keys(keys.PREFIX)]

    def saved_sort_order(self) -> tuple[int, bool] | None:
        """Return the snapshotted (sort_field, descending) order, if one was taken."""
        if not self.store.has(keys.SORT_ORDER_SNAPSHOT):
            return None
        return unpack_order(self.store.get_int(keys.SORT_ORDER_SNAPSHOT))

    def update_engine_settings(
        self,
        *,
        history_max: int | None = None,
        compress_presets: bool | None = None,
    ) -> EngineSettings:
        """
        Change and persist engine settings, applying them to this session.

        Parameters
        ----------
        history_max:
            New history capacity. Stored entries beyond it are dropped.
        compress_presets:
            Whether newly saved presets are zstandard-compressed.

        Returns
        -------
        EngineSettings
            The settings now on disk.

        Raises
        ------
        FilterEngineError
            If the session has no data root to persist settings under.
        """
        if self.paths is None:
            raise FilterEngineError("This session has no data root for engine settings.")
        settings = load_engine_settings(self.paths.settings_path)
        if history_max is not None:
            settings = replace(settings, history_max=max(0, int(history_max)))
            self.history.set_capacity(settings.history_max)
        if compress_presets is not None:
            settings = replace(settings, compress_presets=bool(compress_presets))
            if self.presets is not None:
                self.presets = replace(self.presets, compress=settings.compress_presets)
        save_engine_settings(self.paths.settings_path, settings)
        return settings


def open_session(
    data_root: Path | None = None,
    *,
    sort_order: SortOrderSource | None = None,
    registry: PropertyRegistry | None = None,
) -> FilterSession:
    """
    Open a persistent session under a data root.

    Parameters
    ----------
    data_root:
        Optional override for the engine data root.
    sort_order:
        Global sort order collaborator.
    registry:
        Property adapter registry.

    Returns
    -------
    FilterSession
        Session backed by the SQLite ConfigStore, with a preset store.
    """
    paths = resolve_engine_paths(data_root)
    settings = load_engine_settings(paths.settings_path)
    store = open_config_store(paths.data_root)
    presets = PresetStore(root=paths.presets_root, compress=settings.compress_presets)
    session = FilterSession.create(
        store, sort_order=sort_order, registry=registry, presets=presets, settings=settings
    )
    session.paths = paths
    return session


def memory_session(
    values: dict[str, object] | None = None,
    *,
    sort_order: SortOrderSource | None = None,
) -> FilterSession:
    """Open a throwaway session backed by a MemoryConfigStore."""
    store = MemoryConfigStore.from_mapping(values or {})
    return FilterSession.create(store, sort_order=sort_order)
