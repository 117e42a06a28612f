"""
Rule data model.

A rule set is an ordered sequence of at most MAX_RULES rules. Position in the
sequence is the rule's index: it defines the storage slot and the combination
order. Rules are immutable value objects owned by RuleSetManager; mutation
replaces the rule at an index rather than editing it in place.

Invariants
----------
- Active indices are contiguous: 0 .. count-1.
- raw_text is at most TEXT_MAX_BYTES bytes of UTF-8 and never contains
  RULE_DELIMITER.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Final

from ..properties import PropertyKind, coerce_property_id

MAX_RULES: Final[int] = 10
TEXT_MAX_BYTES: Final[int] = 255
RULE_DELIMITER: Final[str] = "$"


class RuleOperator(int, Enum):
    """How a rule combines with the rules before it."""

    AND = 0
    OR = 1
    AND_NOT = 2

    @classmethod
    def coerce(cls, raw: object) -> "RuleOperator":
        """Map a persisted value to an operator, defaulting to AND."""
        try:
            return cls(int(raw))  # type: ignore[call-overload]
        except (TypeError, ValueError):
            return cls.AND


def clip_text(text: str) -> str:
    """
    Sanitize free text before it enters a rule.

    The rule delimiter is removed and the result is clipped to TEXT_MAX_BYTES
    bytes of UTF-8 without splitting a character.

    Parameters
    ----------
    text:
        Raw text from a caller or from storage.

    Returns
    -------
    str
        Text that is safe to store and serialize.
    """
    cleaned = str(text).replace(RULE_DELIMITER, "").replace("\x00", "")
    encoded = cleaned.encode("utf-8")
    if len(encoded) <= TEXT_MAX_BYTES:
        return cleaned
    return encoded[:TEXT_MAX_BYTES].decode("utf-8", errors="ignore")


@dataclass(frozen=True, slots=True)
class RuleState:
    """
    The part of a rule the query engine consumes.

    Attributes
    ----------
    property:
        Property id (a PropertyKind member when known).
    operator:
        Combination operator; ignored for the first rule.
    enabled:
        Disabled rules are skipped when combining.
    raw_text:
        Opaque, property-specific encoded value.
    """

    property: int
    operator: RuleOperator
    enabled: bool
    raw_text: str


@dataclass(frozen=True, slots=True)
class Rule:
    """
    One constraint entry in a rule set.

    Attributes
    ----------
    index:
        Position in the owning rule set, 0 <= index < MAX_RULES.
    property:
        Property id the rule constrains.
    operator:
        How the rule combines with rules 0 .. index-1.
    enabled:
        Whether the rule takes part in the combined predicate.
    raw_text:
        Property-specific encoded value, stored opaquely.
    """

    index: int
    property: int = PropertyKind.FILMROLL
    operator: RuleOperator = RuleOperator.AND
    enabled: bool = True
    raw_text: str = ""

    def __post_init__(self) -> None:
        if not 0 <= self.index < MAX_RULES:
            raise ValueError(f"Rule index out of range: {self.index}")
        object.__setattr__(self, "property", coerce_property_id(self.property))
        object.__setattr__(self, "operator", RuleOperator.coerce(self.operator))
        object.__setattr__(self, "enabled", bool(self.enabled))
        object.__setattr__(self, "raw_text", clip_text(self.raw_text))

    def state(self) -> RuleState:
        """Return the index-free view of this rule."""
        return RuleState(
            property=self.property,
            operator=self.operator,
            enabled=self.enabled,
            raw_text=self.raw_text,
        )

    def moved_to(self, index: int) -> "Rule":
        """Return a copy of this rule placed at another slot."""
        return replace(self, index=index)
