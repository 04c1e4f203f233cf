"""Document layer — in-memory spreadsheet.

A dependency-light document used for the ``memory`` backend (demo / dev
mode) and as the substitutable fake in tests.  It models exactly the
surface the pipeline needs: one primary table, named sheets holding loose
cells, and charts made of series.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Sequence

from openpyxl.utils import get_column_letter, range_boundaries
from openpyxl.utils.cell import column_index_from_string, coordinate_from_string

from sheetpilot.document.base import LEGEND_POSITIONS, SpreadsheetDocument, sort_rows
from sheetpilot.exceptions import MissingColumnError, SheetNotFoundError
from sheetpilot.protocol.models import TableSnapshot, find_column


@dataclass
class SheetState:
    cells: dict[tuple[int, int], Any] = field(default_factory=dict)
    visible: bool = True


@dataclass
class SeriesState:
    name: str | None
    sheet: str
    y_range: str
    x_range: str | None = None


@dataclass
class ChartState:
    chart_type: str
    series: list[SeriesState] = field(default_factory=list)
    title: str | None = None
    legend: str | None = None
    position: tuple[str, str] | None = None


class InMemoryDocument(SpreadsheetDocument):
    """Spreadsheet held entirely in Python objects.

    Args:
        header: Column names of the primary table.
        rows:   Data rows of the primary table.
        sheet:  Name of the worksheet holding the primary table.
    """

    backend = "memory"

    def __init__(
        self,
        header: Sequence[str],
        rows: Sequence[Sequence[Any]] = (),
        sheet: str = "Sheet1",
    ) -> None:
        self.primary_sheet = sheet
        self.header: list[str] = list(header)
        self.rows: list[list[Any]] = [list(r) for r in rows]
        self.sheets: dict[str, SheetState] = {sheet: SheetState()}
        self.charts: dict[str, ChartState] = {}
        self.column_formulas: dict[str, str] = {}
        self.sync_count = 0
        self._chart_seq = 0

    @classmethod
    def sample(cls) -> "InMemoryDocument":
        """A small sales table to play with."""
        return cls(
            header=["Region", "Sales", "Costs"],
            rows=[
                ["North", 1200, 800],
                ["South", 950, 700],
                ["East", "$1,430.50", "$910.25"],
                ["West", 610, 540],
            ],
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def read_table(self) -> TableSnapshot:
        return TableSnapshot(header=list(self.header), rows=copy.deepcopy(self.rows))

    async def read_column(self, name: str) -> list[Any]:
        idx = find_column(self.header, name, case_sensitive=False)
        if idx is None:
            raise MissingColumnError([name])
        return [row[idx] if idx < len(row) else None for row in self.rows]

    # ------------------------------------------------------------------
    # Sort
    # ------------------------------------------------------------------

    async def sort_table(self, column_index: int, descending: bool = True) -> None:
        self.rows = sort_rows(self.rows, column_index, descending=descending)

    # ------------------------------------------------------------------
    # Sheets & ranges
    # ------------------------------------------------------------------

    def _sheet(self, name: str) -> SheetState:
        try:
            return self.sheets[name]
        except KeyError:
            raise SheetNotFoundError(name) from None

    async def sheet_names(self) -> list[str]:
        return list(self.sheets)

    async def delete_sheet(self, name: str) -> None:
        self._sheet(name)
        if name == self.primary_sheet:
            raise ValueError(f"Cannot delete the primary sheet '{name}'")
        del self.sheets[name]

    async def create_sheet(self, name: str) -> None:
        if name in self.sheets:
            raise ValueError(f"Sheet '{name}' already exists")
        self.sheets[name] = SheetState()

    async def hide_sheet(self, name: str) -> None:
        self._sheet(name).visible = False

    async def write_range(self, sheet: str, start_cell: str, rows: Sequence[Sequence[Any]]) -> str:
        target = self._sheet(sheet)
        col_letter, start_row = coordinate_from_string(start_cell)
        start_col = column_index_from_string(col_letter)
        width = max((len(r) for r in rows), default=0)
        for r_idx, row in enumerate(rows):
            for c_idx, value in enumerate(row):
                target.cells[(start_row + r_idx, start_col + c_idx)] = value
        end_cell = f"{get_column_letter(start_col + max(width, 1) - 1)}{start_row + max(len(rows), 1) - 1}"
        return f"{start_cell}:{end_cell}"

    def range_values(self, sheet: str, ref: str) -> list[list[Any]]:
        """Return the cell values of *ref* on *sheet* as a 2-D list."""
        cells = self._sheet(sheet).cells
        min_col, min_row, max_col, max_row = range_boundaries(ref)
        return [
            [cells.get((r, c)) for c in range(min_col, max_col + 1)]
            for r in range(min_row, max_row + 1)
        ]

    # ------------------------------------------------------------------
    # Charts
    # ------------------------------------------------------------------

    def _chart(self, chart_id: str) -> ChartState:
        try:
            return self.charts[chart_id]
        except KeyError:
            raise KeyError(f"Chart '{chart_id}' not found") from None

    async def add_chart(self, chart_type: str, source_sheet: str, source_range: str) -> str:
        self._sheet(source_sheet)
        self._chart_seq += 1
        chart_id = f"chart-{self._chart_seq}"
        self.charts[chart_id] = ChartState(
            chart_type=chart_type,
            series=[SeriesState(name=None, sheet=source_sheet, y_range=source_range)],
        )
        return chart_id

    async def delete_chart(self, chart_id: str) -> None:
        self._chart(chart_id)
        del self.charts[chart_id]

    async def add_chart_series(
        self, chart_id: str, name: str, sheet: str, x_range: str, y_range: str
    ) -> int:
        self._sheet(sheet)
        chart = self._chart(chart_id)
        chart.series.append(SeriesState(name=name, sheet=sheet, x_range=x_range, y_range=y_range))
        return len(chart.series) - 1

    async def delete_chart_series(self, chart_id: str, index: int) -> None:
        self._chart(chart_id).series.pop(index)

    async def set_chart_title(self, chart_id: str, title: str) -> None:
        self._chart(chart_id).title = title

    async def set_chart_legend(self, chart_id: str, position: str) -> None:
        if position not in LEGEND_POSITIONS:
            raise ValueError(f"Unknown legend position: {position!r}")
        self._chart(chart_id).legend = position

    async def set_chart_position(self, chart_id: str, top_left: str, bottom_right: str) -> None:
        self._chart(chart_id).position = (top_left, bottom_right)

    # ------------------------------------------------------------------
    # Table columns
    # ------------------------------------------------------------------

    async def add_table_column(self, name: str) -> None:
        self.header.append(name)
        for row in self.rows:
            row.append(None)

    async def set_column_formula(self, name: str, formula: str) -> None:
        idx = find_column(self.header, name, case_sensitive=False)
        if idx is None:
            raise MissingColumnError([name])
        for row in self.rows:
            while len(row) <= idx:
                row.append(None)
            row[idx] = formula
        self.column_formulas[self.header[idx]] = formula

    async def sync(self) -> None:
        self.sync_count += 1
