"""
Canonical textual form of a rule set.

Format
------
``{count}:`` followed by one ``{mode}:{item}:{off}:{text}$`` group per rule,
in index order. ``off`` is 1 for a disabled rule and 0 otherwise.

The same string is written to the ConfigStore history slots and compared by
HistoryStack, so serialize() must be a pure function of the rule values.
Deserialization is best-effort: it stops at the first rule it cannot parse and
keeps the rules parsed before it.
"""

from __future__ import annotations

import logging
import re
from typing import Final, Sequence

from .models import MAX_RULES, RULE_DELIMITER, Rule

logger = logging.getLogger(__name__)

_INTEGER: Final[re.Pattern[str]] = re.compile(r"-?[0-9]+")


def serialize(rules: Sequence[Rule]) -> str:
    """
    Serialize rules in index order.

    Parameters
    ----------
    rules:
        Active rules, ordered by index.

    Returns
    -------
    str
        Canonical serialized form. Never fails for valid Rule objects.
    """
    parts = [f"{len(rules)}:"]
    for rule in rules:
        off = 0 if rule.enabled else 1
        parts.append(
            f"{int(rule.operator)}:{int(rule.property)}:{off}:{rule.raw_text}{RULE_DELIMITER}"
        )
    return "".join(parts)


def deserialize(text: str | None) -> list[Rule]:
    """
    Parse a serialized rule set.

    Parameters
    ----------
    text:
        Serialized form, possibly truncated or corrupted.

    Returns
    -------
    list[Rule]
        Successfully parsed rules, re-indexed from 0. Empty when the header is
        unusable.
    """
    if not text:
        return []

    head, _, body = text.partition(":")
    count = _parse_int(head)
    if count is None:
        logger.debug("Ignoring serialized rule set with bad header: %r", text[:40])
        return []
    count = max(0, min(count, MAX_RULES))

    chunks = body.split(RULE_DELIMITER)
    rules: list[Rule] = []
    for index in range(min(count, len(chunks))):
        rule = _parse_rule(chunks[index], index)
        if rule is None:
            logger.debug("Stopped parsing rule set at rule %d of %d", index, count)
            break
        rules.append(rule)
    return rules


def _parse_rule(chunk: str, index: int) -> Rule | None:
    fields = chunk.split(":", 3)
    if len(fields) != 4:
        return None
    mode, item, off = (_parse_int(f) for f in fields[:3])
    if mode is None or item is None or off is None:
        return None
    return Rule(index=index, property=item, operator=mode, enabled=off == 0, raw_text=fields[3])


def _parse_int(field: str) -> int | None:
    """Parse an optionally negative run of ASCII digits, or return None."""
    if _INTEGER.fullmatch(field) is None:
        return None
    return int(field)
