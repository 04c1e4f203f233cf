"""Integration tests — WorkbookDocument and the executor against real .xlsx files."""

from __future__ import annotations

from pathlib import Path

import openpyxl
import pytest

from sheetpilot.document.workbook import (
    WorkbookDocument,
    expand_structured_refs,
    write_sample_workbook,
)
from sheetpilot.exceptions import MissingColumnError, SheetNotFoundError, TableNotFoundError
from sheetpilot.pipeline.executor import ActionExecutor
from sheetpilot.protocol.actions import InsertComputedColumn, ScatterPlot, SortBySales

SCRATCH = "__chart_data_temp"


@pytest.mark.unit
class TestExpandStructuredRefs:
    def test_simple_refs(self) -> None:
        assert (
            expand_structured_refs("=[@Sales]-[@Costs]", "T")
            == "=T[[#This Row],[Sales]]-T[[#This Row],[Costs]]"
        )

    def test_bracketed_names(self) -> None:
        assert expand_structured_refs("=[@[Unit Price]]*2", "T") == "=T[[#This Row],[Unit Price]]*2"


@pytest.mark.integration
class TestWorkbookReads:
    @pytest.mark.asyncio
    async def test_read_table(self, sales_workbook: Path) -> None:
        doc = WorkbookDocument(sales_workbook)
        snapshot = await doc.read_table()
        assert snapshot.header == ["Region", "Sales", "Costs"]
        assert snapshot.rows[0] == ["North", 1200, 800]
        assert snapshot.row_count == 4

    @pytest.mark.asyncio
    async def test_read_column(self, sales_workbook: Path) -> None:
        doc = WorkbookDocument(sales_workbook)
        assert await doc.read_column("COSTS") == [800, 700, 910.25, 540]
        with pytest.raises(MissingColumnError):
            await doc.read_column("Profits")

    @pytest.mark.asyncio
    async def test_sheet_without_table(self, tmp_path: Path) -> None:
        path = tmp_path / "plain.xlsx"
        wb = openpyxl.Workbook()
        wb.active.append(["Sales", "Costs"])
        wb.save(path)
        with pytest.raises(TableNotFoundError):
            await WorkbookDocument(path).read_table()

    @pytest.mark.asyncio
    async def test_unknown_configured_sheet(self, sales_workbook: Path) -> None:
        with pytest.raises(SheetNotFoundError):
            await WorkbookDocument(sales_workbook, sheet="Missing").read_table()


@pytest.mark.integration
class TestWorkbookActions:
    @pytest.mark.asyncio
    async def test_sort_persists(self, sales_workbook: Path) -> None:
        doc = WorkbookDocument(sales_workbook)
        await ActionExecutor().execute(SortBySales(), doc)

        ws = openpyxl.load_workbook(sales_workbook)["Sheet1"]
        sales = [ws.cell(row=r, column=2).value for r in range(2, 6)]
        assert sales == [1430.5, 1200, 950, 610]
        assert ws["A2"].value == "East"

    @pytest.mark.asyncio
    async def test_sort_moves_number_formats_with_rows(self, sales_workbook: Path) -> None:
        wb = openpyxl.load_workbook(sales_workbook)
        wb["Sheet1"]["B4"].number_format = '"$"#,##0.00'
        wb.save(sales_workbook)

        doc = WorkbookDocument(sales_workbook)
        await ActionExecutor().execute(SortBySales(), doc)

        ws = openpyxl.load_workbook(sales_workbook)["Sheet1"]
        assert ws["A2"].value == "East"
        assert ws["B2"].number_format == '"$"#,##0.00'
        assert ws["B4"].number_format == "General"

    @pytest.mark.asyncio
    async def test_insert_profits_persists(self, sales_workbook: Path) -> None:
        doc = WorkbookDocument(sales_workbook)
        result = await ActionExecutor().execute(InsertComputedColumn(), doc)
        assert result["created"] is True

        wb = openpyxl.load_workbook(sales_workbook)
        ws = wb["Sheet1"]
        table = ws.tables["SalesTable"]
        assert table.ref == "A1:D5"
        assert [c.name for c in table.tableColumns] == ["Region", "Sales", "Costs", "Profits"]
        assert ws["D1"].value == "Profits"
        assert ws["D2"].value == "=SalesTable[[#This Row],[Sales]]-SalesTable[[#This Row],[Costs]]"
        assert ws["D5"].value == ws["D2"].value

    @pytest.mark.asyncio
    async def test_insert_profits_twice_is_noop(self, sales_workbook: Path) -> None:
        doc = WorkbookDocument(sales_workbook)
        executor = ActionExecutor()
        await executor.execute(InsertComputedColumn(), doc)
        result = await executor.execute(InsertComputedColumn(), doc)
        assert result["created"] is False
        assert (await doc.column_names()).count("Profits") == 1

    @pytest.mark.asyncio
    async def test_scatter_chart_and_hidden_data_sheet(self, sales_workbook: Path) -> None:
        doc = WorkbookDocument(sales_workbook)
        result = await ActionExecutor().execute(ScatterPlot(), doc)
        assert result["points"] == 4

        wb = doc.workbook
        assert SCRATCH in wb.sheetnames
        data = wb[SCRATCH]
        assert data.sheet_state == "hidden"
        assert [data.cell(row=r, column=1).value for r in range(1, 6)] == [
            "Sales", 1200.0, 950.0, 1430.5, 610.0,
        ]
        charts = wb["Sheet1"]._charts
        assert len(charts) == 1
        assert len(charts[0].series) == 1

        reloaded = openpyxl.load_workbook(sales_workbook)
        assert reloaded[SCRATCH].sheet_state == "hidden"

    @pytest.mark.asyncio
    async def test_scatter_twice_keeps_one_scratch_sheet(self, sales_workbook: Path) -> None:
        doc = WorkbookDocument(sales_workbook)
        executor = ActionExecutor()
        await executor.execute(ScatterPlot(), doc)
        await executor.execute(ScatterPlot(), doc)
        assert (await doc.sheet_names()).count(SCRATCH) == 1


@pytest.mark.integration
class TestSampleWorkbook:
    def test_custom_rows(self, tmp_path: Path) -> None:
        path = write_sample_workbook(tmp_path / "nested" / "x.xlsx", rows=[["A", 1, 2]])
        ws = openpyxl.load_workbook(path)["Sheet1"]
        assert ws.tables["SalesTable"].ref == "A1:C2"
