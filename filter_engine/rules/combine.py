"""
Combination policy for an ordered rule sequence.

The query engine owns predicate construction, but the evaluation order is
fixed here so every consumer agrees on it:

- disabled rules are skipped as if absent,
- the first enabled rule seeds the result; its operator is ignored,
- each later enabled rule folds into the running result with its own operator,
  strictly left to right, with no precedence between operators,
- an empty (or all-disabled) sequence matches everything.
"""

from __future__ import annotations

from typing import Callable, Iterable, TypeVar

from ..properties import property_name
from .models import RuleOperator, RuleState

T = TypeVar("T")
Predicate = Callable[[T], bool]

_JOINERS = {
    RuleOperator.AND: " and ",
    RuleOperator.OR: " or ",
    RuleOperator.AND_NOT: " but not ",
}


def combine(
    states: Iterable[RuleState], predicate_for: Callable[[RuleState], Predicate[T]]
) -> Predicate[T]:
    """
    Fold rule states into a single predicate.

    Parameters
    ----------
    states:
        Output of RuleSetManager.combined_state().
    predicate_for:
        Builds the per-rule predicate. Called once per enabled rule.

    Returns
    -------
    Callable[[T], bool]
        Predicate over catalog items.
    """
    steps = [(s.operator, predicate_for(s)) for s in states if s.enabled]
    if not steps:
        return lambda _item: True

    def _evaluate(item: T) -> bool:
        result = steps[0][1](item)
        for operator, predicate in steps[1:]:
            if operator is RuleOperator.OR:
                result = result or predicate(item)
            elif operator is RuleOperator.AND_NOT:
                result = result and not predicate(item)
            else:
                result = result and predicate(item)
        return result

    return _evaluate


def describe(states: Iterable[RuleState]) -> str:
    """
    Render rule states as one human-readable line.

    Disabled rules are included and marked ``(off)``. Unknown property ids
    render as ``???``.
    """
    out: list[str] = []
    for position, state in enumerate(states):
        if position > 0:
            out.append(_JOINERS.get(state.operator, " and "))
        name = property_name(state.property)
        marker = "(off)" if not state.enabled else ""
        out.append(f"{name}{marker} {state.raw_text}".rstrip())
    return "".join(out)
