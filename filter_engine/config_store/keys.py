"""ConfigStore key names used by the filtering engine."""

from __future__ import annotations

from typing import Final

PREFIX: Final[str] = "plugins/lighttable/filtering"

NUM_RULES: Final[str] = f"{PREFIX}/num_rules"
HISTORY_MAX: Final[str] = f"{PREFIX}/history_max"
SORT_ORDER_SNAPSHOT: Final[str] = f"{PREFIX}/order"


def rule_item(index: int) -> str:
    return f"{PREFIX}/item{index}"


def rule_mode(index: int) -> str:
    return f"{PREFIX}/mode{index}"


def rule_off(index: int) -> str:
    return f"{PREFIX}/off{index}"


def rule_string(index: int) -> str:
    return f"{PREFIX}/string{index}"


def history_slot(index: int) -> str:
    return f"{PREFIX}/history{index}"


def usage_count(property_id: int) -> str:
    return f"{PREFIX}/nb_use_{property_id}"


def prefer_raw_entry(property_id: int) -> str:
    return f"{PREFIX}/raw_{property_id}"
