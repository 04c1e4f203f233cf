"""Unit tests — keyword rule classifier and action descriptions."""

from __future__ import annotations

import pytest

from sheetpilot.classifier import RuleBasedClassifier, classify_text, describe
from sheetpilot.classifier.rules import KeywordRule
from sheetpilot.protocol.actions import (
    ActionKind,
    InsertComputedColumn,
    ScatterPlot,
    SortBySales,
    Unsupported,
)


@pytest.mark.unit
class TestClassifyText:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("please SORT the Sales column", SortBySales),
            ("scatter sales vs costs", ScatterPlot),
            ("insert profits", InsertComputedColumn),
            ("hello", Unsupported),
        ],
    )
    def test_sample_requests(self, text: str, expected: type) -> None:
        assert isinstance(classify_text(text), expected)

    def test_sort_precedes_scatter_and_profit(self) -> None:
        assert isinstance(classify_text("sort sales, then scatter costs and profit"), SortBySales)

    def test_scatter_precedes_insert(self) -> None:
        action = classify_text("insert a scatter of sales and costs")
        assert isinstance(action, ScatterPlot)

    def test_scatter_needs_a_known_column(self) -> None:
        assert isinstance(classify_text("scatter plot please"), Unsupported)

    def test_scatter_with_costs_only(self) -> None:
        assert isinstance(classify_text("Scatter the COSTS"), ScatterPlot)

    def test_profit_substring_matches(self) -> None:
        assert isinstance(classify_text("what is the profitability"), InsertComputedColumn)

    def test_sales_costs_insert_clause(self) -> None:
        assert isinstance(classify_text("insert sales minus costs"), InsertComputedColumn)

    def test_sales_and_costs_without_insert_is_unsupported(self) -> None:
        assert isinstance(classify_text("sales and costs"), Unsupported)

    @pytest.mark.parametrize("text", ["", "   ", "🙂", "排序", "x" * 10_000])
    def test_total_on_odd_input(self, text: str) -> None:
        action = classify_text(text)
        assert action.kind in set(ActionKind)

    def test_custom_rule_table(self) -> None:
        rules = (KeywordRule(id="any", matches=lambda t: True, action=ScatterPlot),)
        assert isinstance(classify_text("hello", rules), ScatterPlot)


@pytest.mark.unit
class TestRuleBasedClassifier:
    @pytest.mark.asyncio
    async def test_classify_matches_pure_function(self) -> None:
        classifier = RuleBasedClassifier()
        action = await classifier.classify("sort by sales")
        assert action == classify_text("sort by sales")

    @pytest.mark.asyncio
    async def test_latency_is_applied(self) -> None:
        import time

        classifier = RuleBasedClassifier(latency=0.05)
        start = time.monotonic()
        await classifier.classify("hello")
        assert time.monotonic() - start >= 0.04


@pytest.mark.unit
class TestDescribe:
    def test_every_kind_has_english_and_chinese_text(self) -> None:
        for kind in ActionKind:
            assert describe(kind, "en")
            assert describe(kind, "zh")

    def test_chinese_unsupported_text(self) -> None:
        assert describe(Unsupported(), "zh") == "目前暂不支持，请重新输入"

    def test_unknown_locale_falls_back_to_english(self) -> None:
        assert describe(SortBySales(), "fr") == describe(SortBySales(), "en")

    def test_profit_description_mentions_formula(self) -> None:
        assert "Profits = Sales - Costs" in describe(InsertComputedColumn())
