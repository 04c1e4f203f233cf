"""Unit tests — ActionExecutor over the in-memory document."""

from __future__ import annotations

from typing import Any

import pytest

from sheetpilot.config import DocumentConfig
from sheetpilot.document.memory import InMemoryDocument
from sheetpilot.exceptions import (
    EmptyTableError,
    ExecutionFailedError,
    InconsistentColumnLengthError,
    MissingColumnError,
    UnsupportedActionError,
)
from sheetpilot.pipeline.executor import ActionExecutor
from sheetpilot.protocol.actions import (
    InsertComputedColumn,
    ScatterPlot,
    SortBySales,
    Unsupported,
)

SCRATCH = "__chart_data_temp"


class _SeriesFailingDocument(InMemoryDocument):
    async def add_chart_series(self, *args: Any, **kwargs: Any) -> int:
        raise RuntimeError("chart service unavailable")


class _RaggedDocument(InMemoryDocument):
    async def read_column(self, name: str) -> list[Any]:
        values = await super().read_column(name)
        return values[:-1] if name.lower() == "costs" else values


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestDispatch:
    @pytest.mark.asyncio
    async def test_unsupported_is_rejected(
        self, executor: ActionExecutor, memory_document: InMemoryDocument
    ) -> None:
        with pytest.raises(UnsupportedActionError):
            await executor.execute(Unsupported(), memory_document)

    def test_from_config(self) -> None:
        cfg = DocumentConfig(scratch_sheet="_tmp", chart_title="T", chart_top_left="A10")
        executor = ActionExecutor.from_config(cfg)
        assert executor.scratch_sheet == "_tmp"
        assert executor.chart_title == "T"
        assert executor.chart_top_left == "A10"
        assert executor.chart_bottom_right == "M25"


# ---------------------------------------------------------------------------
# Sort
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestSort:
    @pytest.mark.asyncio
    async def test_sorts_descending_and_syncs(self, executor: ActionExecutor) -> None:
        doc = InMemoryDocument(
            header=["Region", "Sales"],
            rows=[["a", 10], ["b", 30], ["c", 20], ["d", 30]],
        )
        result = await executor.execute(SortBySales(), doc)
        assert [r[0] for r in doc.rows] == ["b", "d", "c", "a"]
        assert result["sorted_by"] == "Sales"
        assert doc.sync_count == 1

    @pytest.mark.asyncio
    async def test_idempotent(self, executor: ActionExecutor) -> None:
        doc = InMemoryDocument(header=["Sales"], rows=[[1], [3], [2]])
        await executor.execute(SortBySales(), doc)
        once = [list(r) for r in doc.rows]
        await executor.execute(SortBySales(), doc)
        assert doc.rows == once

    @pytest.mark.asyncio
    async def test_missing_column_leaves_document_untouched(
        self, executor: ActionExecutor
    ) -> None:
        doc = InMemoryDocument(header=["Region", "sales"], rows=[["a", 1], ["b", 2]])
        with pytest.raises(MissingColumnError):
            await executor.execute(SortBySales(), doc)
        assert doc.rows == [["a", 1], ["b", 2]]
        assert doc.sync_count == 0


# ---------------------------------------------------------------------------
# Scatter
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestScatter:
    @pytest.mark.asyncio
    async def test_builds_chart_from_scratch_data(
        self, executor: ActionExecutor, memory_document: InMemoryDocument
    ) -> None:
        result = await executor.execute(ScatterPlot(), memory_document)

        assert result["points"] == 4
        assert memory_document.range_values(SCRATCH, "A1:B5") == [
            ["Sales", "Costs"],
            [1200.0, 800.0],
            [950.0, 700.0],
            [1430.5, 910.25],
            [610.0, 0.0],
        ]
        assert memory_document.sheets[SCRATCH].visible is False

        chart = memory_document.charts[result["chart_id"]]
        assert chart.chart_type == "scatter"
        assert len(chart.series) == 1
        series = chart.series[0]
        assert series.name == "Sales vs Costs"
        assert (series.x_range, series.y_range) == ("A2:A5", "B2:B5")
        assert chart.title == "Sales (X) vs Costs (Y)"
        assert chart.legend == "right"
        assert chart.position == ("H5", "M25")
        assert memory_document.sync_count == 1

    @pytest.mark.asyncio
    async def test_repeated_runs_keep_one_scratch_sheet(
        self, executor: ActionExecutor, memory_document: InMemoryDocument
    ) -> None:
        await executor.execute(ScatterPlot(), memory_document)
        await executor.execute(ScatterPlot(), memory_document)
        names = await memory_document.sheet_names()
        assert names.count(SCRATCH) == 1

    @pytest.mark.asyncio
    async def test_column_lookup_is_case_insensitive(self, executor: ActionExecutor) -> None:
        doc = InMemoryDocument(header=["sales", "COSTS"], rows=[[1, 2]])
        result = await executor.execute(ScatterPlot(), doc)
        assert result["points"] == 1

    @pytest.mark.asyncio
    async def test_missing_columns(self, executor: ActionExecutor) -> None:
        doc = InMemoryDocument(header=["Region"], rows=[["a"]])
        with pytest.raises(MissingColumnError) as exc_info:
            await executor.execute(ScatterPlot(), doc)
        assert exc_info.value.columns == ["Sales", "Costs"]
        assert SCRATCH not in doc.sheets

    @pytest.mark.asyncio
    async def test_empty_table(self, executor: ActionExecutor) -> None:
        doc = InMemoryDocument(header=["Sales", "Costs"], rows=[])
        with pytest.raises(EmptyTableError):
            await executor.execute(ScatterPlot(), doc)
        assert SCRATCH not in doc.sheets

    @pytest.mark.asyncio
    async def test_inconsistent_lengths(self, executor: ActionExecutor) -> None:
        doc = _RaggedDocument(header=["Sales", "Costs"], rows=[[1, 2], [3, 4]])
        with pytest.raises(InconsistentColumnLengthError) as exc_info:
            await executor.execute(ScatterPlot(), doc)
        assert exc_info.value.lengths == {"Sales": 2, "Costs": 1}

    @pytest.mark.asyncio
    async def test_failure_before_binding_removes_scratch_and_chart(
        self, executor: ActionExecutor
    ) -> None:
        doc = _SeriesFailingDocument(header=["Sales", "Costs"], rows=[[1, 2]])
        with pytest.raises(ExecutionFailedError) as exc_info:
            await executor.execute(ScatterPlot(), doc)
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert SCRATCH not in doc.sheets
        assert doc.charts == {}
        assert doc.sync_count == 0

    @pytest.mark.asyncio
    async def test_stale_scratch_sheet_is_replaced(self, executor: ActionExecutor) -> None:
        doc = InMemoryDocument(header=["Sales", "Costs"], rows=[[1, 2]])
        await doc.create_sheet(SCRATCH)
        await doc.write_range(SCRATCH, "A1", [["old"], ["junk"], ["rows"]])
        await executor.execute(ScatterPlot(), doc)
        assert doc.range_values(SCRATCH, "A1:A3") == [["Sales"], [1.0], [None]]


# ---------------------------------------------------------------------------
# Insert computed column
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestInsertProfits:
    @pytest.mark.asyncio
    async def test_appends_formula_column(
        self, executor: ActionExecutor, memory_document: InMemoryDocument
    ) -> None:
        result = await executor.execute(InsertComputedColumn(), memory_document)
        assert result["created"] is True
        assert memory_document.header == ["Region", "Sales", "Costs", "Profits"]
        assert memory_document.column_formulas["Profits"] == "=[@Sales]-[@Costs]"
        assert memory_document.sync_count == 1

    @pytest.mark.asyncio
    async def test_idempotent(
        self, executor: ActionExecutor, memory_document: InMemoryDocument
    ) -> None:
        await executor.execute(InsertComputedColumn(), memory_document)
        result = await executor.execute(InsertComputedColumn(), memory_document)
        assert result == {"column": "Profits", "created": False}
        assert memory_document.header.count("Profits") == 1

    @pytest.mark.asyncio
    async def test_existing_column_matched_after_trimming(self, executor: ActionExecutor) -> None:
        doc = InMemoryDocument(header=["Sales", "Costs", " Profits "], rows=[[1, 2, 3]])
        result = await executor.execute(InsertComputedColumn(), doc)
        assert result["created"] is False
        assert doc.header == ["Sales", "Costs", " Profits "]
