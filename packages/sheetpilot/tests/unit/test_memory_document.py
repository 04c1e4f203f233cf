"""Unit tests — shared sort helper and the in-memory document."""

from __future__ import annotations

import pytest

from sheetpilot.document.base import sort_rows
from sheetpilot.document.memory import InMemoryDocument
from sheetpilot.exceptions import MissingColumnError, SheetNotFoundError


@pytest.mark.unit
class TestSortRows:
    def test_descending_is_stable(self) -> None:
        rows = [["a", 1], ["b", 3], ["c", 1], ["d", 3]]
        assert [r[0] for r in sort_rows(rows, 1)] == ["b", "d", "a", "c"]

    def test_ascending(self) -> None:
        rows = [["a", 2], ["b", 1]]
        assert sort_rows(rows, 1, descending=False) == [["b", 1], ["a", 2]]

    def test_blanks_sink_in_both_directions(self) -> None:
        rows = [["a", None], ["b", 5], ["c", ""], ["d", 7]]
        assert [r[0] for r in sort_rows(rows, 1)] == ["d", "b", "a", "c"]
        assert [r[0] for r in sort_rows(rows, 1, descending=False)] == ["b", "d", "a", "c"]

    def test_numbers_before_text_ascending(self) -> None:
        rows = [["a", "zeta"], ["b", 10], ["c", "Alpha"]]
        assert [r[0] for r in sort_rows(rows, 1, descending=False)] == ["b", "c", "a"]

    def test_does_not_mutate_input(self) -> None:
        rows = [["a", 1], ["b", 2]]
        sort_rows(rows, 1)
        assert rows == [["a", 1], ["b", 2]]


@pytest.mark.unit
class TestInMemoryDocument:
    @pytest.mark.asyncio
    async def test_read_table_is_a_copy(self, memory_document: InMemoryDocument) -> None:
        snapshot = await memory_document.read_table()
        snapshot.rows[0][0] = "changed"
        assert memory_document.rows[0][0] == "North"

    @pytest.mark.asyncio
    async def test_read_column_case_insensitive(self, memory_document: InMemoryDocument) -> None:
        assert await memory_document.read_column("sales") == [1200, 950, "$1,430.50", 610]

    @pytest.mark.asyncio
    async def test_read_missing_column(self, memory_document: InMemoryDocument) -> None:
        with pytest.raises(MissingColumnError):
            await memory_document.read_column("Profit")

    @pytest.mark.asyncio
    async def test_sheet_lifecycle(self, memory_document: InMemoryDocument) -> None:
        await memory_document.create_sheet("tmp")
        ref = await memory_document.write_range("tmp", "A1", [["x", "y"], [1, 2], [3, 4]])
        assert ref == "A1:B3"
        assert memory_document.range_values("tmp", "A2:B3") == [[1, 2], [3, 4]]
        await memory_document.hide_sheet("tmp")
        assert memory_document.sheets["tmp"].visible is False
        await memory_document.delete_sheet("tmp")
        assert await memory_document.sheet_names() == ["Sheet1"]

    @pytest.mark.asyncio
    async def test_delete_unknown_sheet(self, memory_document: InMemoryDocument) -> None:
        with pytest.raises(SheetNotFoundError):
            await memory_document.delete_sheet("nope")

    @pytest.mark.asyncio
    async def test_chart_series_bookkeeping(self, memory_document: InMemoryDocument) -> None:
        await memory_document.create_sheet("data")
        chart_id = await memory_document.add_chart("scatter", "data", "A1:A2")
        idx = await memory_document.add_chart_series(chart_id, "s", "data", "A2:A3", "B2:B3")
        assert idx == 1
        await memory_document.delete_chart_series(chart_id, 0)
        chart = memory_document.charts[chart_id]
        assert [s.name for s in chart.series] == ["s"]
        with pytest.raises(IndexError):
            await memory_document.delete_chart_series(chart_id, 5)
        await memory_document.delete_chart(chart_id)
        assert memory_document.charts == {}

    @pytest.mark.asyncio
    async def test_unknown_legend_position(self, memory_document: InMemoryDocument) -> None:
        chart_id = await memory_document.add_chart("scatter", "Sheet1", "A1:A2")
        with pytest.raises(ValueError):
            await memory_document.set_chart_legend(chart_id, "middle")

    @pytest.mark.asyncio
    async def test_add_column_with_formula(self, memory_document: InMemoryDocument) -> None:
        await memory_document.add_table_column("Profits")
        await memory_document.set_column_formula("Profits", "=[@Sales]-[@Costs]")
        assert memory_document.header[-1] == "Profits"
        assert all(row[-1] == "=[@Sales]-[@Costs]" for row in memory_document.rows)
        assert memory_document.column_formulas == {"Profits": "=[@Sales]-[@Costs]"}
