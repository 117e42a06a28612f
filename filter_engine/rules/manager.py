"""
RuleSetManager: owner of the ordered, bounded rule array.

Every committed mutation follows the same path:

1. replace the affected Rule value(s) in the owned list,
2. write the affected slots to the ConfigStore,
3. push the new serialized form onto the HistoryStack,
4. mark the ChangeNotifier dirty.

Steps 1-4 run inside a notifier batch, so listeners only ever see a complete,
consistent rule set and receive a single signal per mutation (or per explicit
outer batch).

Rules are never free-standing objects with a parent pointer: a Rule is a value
addressed by its index in this manager's list.
"""

from __future__ import annotations

import logging
from typing import Sequence

from ..config_store import keys
from ..config_store.api import ConfigStore
from ..errors import CapacityExceededError, RuleIndexError
from ..history import HistoryStack
from ..notifier import ChangeNotifier
from ..properties import PropertyKind, coerce_property_id
from ..registry.api import PropertyAdapter
from ..registry.registry import PropertyRegistry
from ..sort_order import SortOrderSource
from .models import MAX_RULES, Rule, RuleOperator, RuleState, clip_text
from .serialize import deserialize, serialize

logger = logging.getLogger(__name__)


class RuleSetManager:
    """
    Mutable, persisted rule set.

    Parameters
    ----------
    store:
        ConfigStore that holds rule slots and counters.
    notifier:
        Receives one change mark per committed mutation. A private notifier is
        created when omitted.
    history:
        History to push serialized states onto. Omit to disable history.
    registry:
        Property adapter registry. The built-in registry is used when omitted.
    sort_order:
        Global sort order collaborator for the tag-order case on rule 0. When
        omitted, the order snapshot is neither taken nor restored.
    """

    def __init__(
        self,
        store: ConfigStore,
        *,
        notifier: ChangeNotifier | None = None,
        history: HistoryStack | None = None,
        registry: PropertyRegistry | None = None,
        sort_order: SortOrderSource | None = None,
    ) -> None:
        self._store = store
        self._notifier = notifier if notifier is not None else ChangeNotifier()
        self._history = history
        self._registry = registry if registry is not None else PropertyRegistry()
        self._sort_order = sort_order
        self._rules: list[Rule] = []
        self._adapters: list[PropertyAdapter] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    @property
    def rules(self) -> tuple[Rule, ...]:
        """Active rules in index order."""
        return tuple(self._rules)

    @property
    def count(self) -> int:
        return len(self._rules)

    def rule(self, index: int) -> Rule:
        """Return the active rule at index."""
        self._check_index(index)
        return self._rules[index]

    def adapter(self, index: int) -> PropertyAdapter:
        """Return the adapter currently dispatched for the rule at index."""
        self._check_index(index)
        return self._adapters[index]

    def serialize(self) -> str:
        """Canonical serialized form of the current rule set."""
        return serialize(self._rules)

    def combined_state(self) -> tuple[RuleState, ...]:
        """Ordered (property, operator, enabled, text) sequence for the query engine."""
        return tuple(rule.state() for rule in self._rules)

    def usage_count(self, property_id: int) -> int:
        """How often property_id was picked for a rule (popup ordering)."""
        return self._store.get_int(keys.usage_count(property_id))

    def prefers_raw_entry(self, property_id: int) -> bool:
        """Stored UI preference: raw text entry instead of a specialized widget."""
        return self._store.get_bool(keys.prefer_raw_entry(property_id))

    def set_prefers_raw_entry(self, property_id: int, prefer: bool) -> None:
        """Persist the raw-entry preference for property_id unchanged."""
        self._store.set_bool(keys.prefer_raw_entry(property_id), prefer)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """
        Read the rule set from the ConfigStore.

        Missing or malformed fields fall back to property kind 0, operator AND,
        enabled, empty text. The rule count is clamped to [0, MAX_RULES].
        Loading is not a mutation: nothing is written and no signal fires.
        """
        stored = self._store.get_int(keys.NUM_RULES)
        count = max(0, min(stored, MAX_RULES))
        if count != stored:
            logger.debug("Clamped persisted rule count %d to %d", stored, count)

        rules: list[Rule] = []
        for index in range(count):
            rules.append(
                Rule(
                    index=index,
                    property=coerce_property_id(self._store.get_int(keys.rule_item(index))),
                    operator=RuleOperator.coerce(self._store.get_int(keys.rule_mode(index))),
                    enabled=self._store.get_int(keys.rule_off(index)) == 0,
                    raw_text=self._store.get_string(keys.rule_string(index)),
                )
            )
        self._set_rules(rules)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def append(self, property_id: int) -> Rule:
        """
        Append an enabled AND rule with empty text.

        Raises
        ------
        CapacityExceededError
            If the rule set already holds MAX_RULES rules. State is unchanged.
        """
        if len(self._rules) >= MAX_RULES:
            logger.warning("Rejected append: rule set already has %d rules", MAX_RULES)
            raise CapacityExceededError(f"You can't have more than {MAX_RULES} rules")

        rule = Rule(index=len(self._rules), property=property_id)
        with self._notifier.batch():
            self._rules.append(rule)
            self._adapters.append(self._registry.adapter_for(rule.property))
            self._write_rule(rule)
            self._write_count()
            self._bump_usage(rule.property)
            self._commit()
        return rule

    def remove(self, index: int) -> None:
        """
        Remove the rule at index and shift later rules down by one.

        No-op on an empty rule set.
        """
        if not self._rules:
            return
        self._check_index(index)

        with self._notifier.batch():
            del self._rules[index]
            del self._adapters[index]
            for position in range(index, len(self._rules)):
                self._rules[position] = self._rules[position].moved_to(position)
                self._write_rule(self._rules[position])
            self._clear_slot(len(self._rules))
            self._write_count()
            self._commit()

    def set_property(self, index: int, property_id: int) -> None:
        """
        Change the property of the rule at index.

        The rule's text is reset and a fresh adapter is dispatched. For rule 0,
        switching into the tag property snapshots the global sort order, and
        switching out of it restores that snapshot.
        """
        self._check_index(index)
        old = self._rules[index]
        new_property = coerce_property_id(property_id)
        if new_property == old.property:
            return

        restore_order: int | None = None
        try:
            with self._notifier.batch():
                rule = Rule(
                    index=index,
                    property=new_property,
                    operator=old.operator,
                    enabled=old.enabled,
                    raw_text="",
                )
                self._rules[index] = rule
                self._adapters[index] = self._registry.adapter_for(rule.property)
                self._bump_usage(rule.property)
                self._write_rule(rule)
                if index == 0:
                    restore_order = self._handle_tag_order(old.property, rule.property)
                self._commit()
        finally:
            # The rule has already left the tag property even if a listener failed.
            if restore_order is not None and self._sort_order is not None:
                logger.debug("Restoring global sort order %#x", restore_order)
                self._sort_order.restore_order(restore_order)

    def set_operator(self, index: int, operator: RuleOperator | int) -> None:
        """Change how the rule at index combines with the rules before it."""
        self._check_index(index)
        self._update(index, operator=RuleOperator.coerce(operator))

    def set_enabled(self, index: int, enabled: bool) -> None:
        """Enable or disable the rule at index."""
        self._check_index(index)
        self._update(index, enabled=bool(enabled))

    def set_raw_text(self, index: int, text: str) -> None:
        """Replace the raw text of the rule at index (sanitized and clipped)."""
        self._check_index(index)
        self._update(index, raw_text=clip_text(text))

    def apply_serialized(self, serialized: str) -> None:
        """
        Replace the whole rule set from a serialized string.

        Parsing is best-effort; rules after the first unparsable one are
        dropped. Exactly one signal fires.
        """
        self.apply_rules(deserialize(serialized))

    def apply_rules(self, rules: Sequence[Rule]) -> None:
        """Replace the whole rule set with rules (re-indexed from 0)."""
        replacement = [rule.moved_to(i) for i, rule in enumerate(rules[:MAX_RULES])]
        with self._notifier.batch():
            previous = len(self._rules)
            self._set_rules(replacement)
            for rule in self._rules:
                self._write_rule(rule)
            for slot in range(len(self._rules), previous):
                self._clear_slot(slot)
            self._write_count()
            self._commit()

    def clear(self) -> None:
        """Remove every rule."""
        self.apply_rules([])

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._rules):
            raise RuleIndexError(f"No active rule at index {index} (count={len(self._rules)})")

    def _set_rules(self, rules: list[Rule]) -> None:
        self._rules = rules
        self._adapters = [self._registry.adapter_for(rule.property) for rule in rules]

    def _update(self, index: int, **changes: object) -> None:
        old = self._rules[index]
        fields = {
            "property": old.property,
            "operator": old.operator,
            "enabled": old.enabled,
            "raw_text": old.raw_text,
        }
        fields.update(changes)
        rule = Rule(index=index, **fields)  # type: ignore[arg-type]
        if rule == old:
            return
        with self._notifier.batch():
            self._rules[index] = rule
            self._write_rule(rule)
            self._commit()

    def _handle_tag_order(self, old_property: int, new_property: int) -> int | None:
        if self._sort_order is None:
            return None
        if old_property != PropertyKind.TAG and new_property == PropertyKind.TAG:
            snapshot = self._sort_order.current_order()
            logger.debug("Snapshotting global sort order %#x before tag ordering", snapshot)
            self._store.set_int(keys.SORT_ORDER_SNAPSHOT, snapshot)
            return None
        if old_property == PropertyKind.TAG and new_property != PropertyKind.TAG:
            return self._store.get_int(keys.SORT_ORDER_SNAPSHOT)
        return None

    def _write_rule(self, rule: Rule) -> None:
        i = rule.index
        self._store.set_int(keys.rule_item(i), int(rule.property))
        self._store.set_int(keys.rule_mode(i), int(rule.operator))
        self._store.set_int(keys.rule_off(i), 0 if rule.enabled else 1)
        self._store.set_string(keys.rule_string(i), rule.raw_text)

    def _clear_slot(self, index: int) -> None:
        if index >= MAX_RULES:
            return
        self._store.set_int(keys.rule_item(index), 0)
        self._store.set_int(keys.rule_mode(index), int(RuleOperator.AND))
        self._store.set_int(keys.rule_off(index), 0)
        self._store.set_string(keys.rule_string(index), "")

    def _write_count(self) -> None:
        self._store.set_int(keys.NUM_RULES, len(self._rules))

    def _bump_usage(self, property_id: int) -> None:
        key = keys.usage_count(property_id)
        self._store.set_int(key, self._store.get_int(key) + 1)

    def _commit(self) -> None:
        if self._history is not None:
            self._history.push(self.serialize())
        self._notifier.mark_changed()
