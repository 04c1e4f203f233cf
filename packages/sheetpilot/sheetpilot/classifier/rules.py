"""Classifier layer — keyword rules.

Rules are evaluated in priority order; the first match wins.  Matching is
case-insensitive substring containment, so "sorting" matches "sort" and
"profitability" matches "profit".

Sort and scatter are checked before the broad profit rule: its
``sales + costs + insert`` clause would otherwise capture requests such as
"insert a scatter of sales and costs".
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable

from sheetpilot.classifier.base import IntentClassifier
from sheetpilot.logging import get_logger
from sheetpilot.protocol.actions import (
    Action,
    InsertComputedColumn,
    ScatterPlot,
    SortBySales,
    Unsupported,
)

log = get_logger(__name__)


@dataclass(frozen=True)
class KeywordRule:
    """One classification rule: a predicate over lower-cased text."""

    id: str
    matches: Callable[[str], bool]
    action: Callable[[], Action]


def _has(text: str, *words: str) -> bool:
    return all(word in text for word in words)


DEFAULT_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        id="sort_sales",
        matches=lambda t: _has(t, "sort", "sales"),
        action=SortBySales,
    ),
    KeywordRule(
        id="scatter_sales_costs",
        matches=lambda t: "scatter" in t and ("sales" in t or "costs" in t),
        action=ScatterPlot,
    ),
    KeywordRule(
        id="insert_profits",
        matches=lambda t: (
            "profit" in t
            or _has(t, "profits", "insert")
            or _has(t, "sales", "costs", "insert")
        ),
        action=InsertComputedColumn,
    ),
)


def classify_text(text: str, rules: tuple[KeywordRule, ...] = DEFAULT_RULES) -> Action:
    """Pure, total classification of *text*.

    Never raises; anything that matches no rule is ``Unsupported``.
    """
    lowered = (text or "").lower()
    for rule in rules:
        if rule.matches(lowered):
            return rule.action()
    return Unsupported()


class RuleBasedClassifier(IntentClassifier):
    """In-process classifier over :data:`DEFAULT_RULES`.

    Args:
        latency: Seconds to sleep before answering.  Lets the UI be
                 exercised against a slow classifier without a network.
        rules:   Override the rule table (first match wins).
    """

    name = "rules"

    def __init__(
        self,
        latency: float = 0.0,
        rules: tuple[KeywordRule, ...] = DEFAULT_RULES,
    ) -> None:
        self._latency = latency
        self._rules = rules

    async def classify(self, text: str) -> Action:
        if self._latency > 0:
            await asyncio.sleep(self._latency)
        action = classify_text(text, self._rules)
        log.debug("text_classified", classifier=self.name, kind=action.kind.value)
        return action
