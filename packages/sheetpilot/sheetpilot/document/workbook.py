"""Document layer — openpyxl-backed workbook.

Operates on the first table (``ws.tables``) of the configured worksheet,
or of the active worksheet when none is configured.  The workbook is
loaded once and kept open; ``sync()`` saves it back to disk.

All blocking openpyxl work is offloaded to a thread via
``asyncio.to_thread`` and serialised by a per-document lock.

Structured references such as ``[@Sales]`` are not valid in the stored
file format, so formulas are expanded to ``Table1[[#This Row],[Sales]]``
before they are written and recorded as the column's calculated formula.
"""

from __future__ import annotations

import asyncio
import datetime
from copy import copy
import re
import threading
from pathlib import Path
from typing import Any, Callable, Sequence, TypeVar

from openpyxl.utils import get_column_letter, range_boundaries
from openpyxl.utils.cell import column_index_from_string, coordinate_from_string, coordinate_to_tuple

from sheetpilot.document.base import LEGEND_POSITIONS, SpreadsheetDocument, sort_rows
from sheetpilot.exceptions import MissingColumnError, SheetNotFoundError, TableNotFoundError
from sheetpilot.logging import get_logger
from sheetpilot.protocol.models import TableSnapshot, find_column

log = get_logger(__name__)

T = TypeVar("T")

_STRUCTURED_REF_RE = re.compile(r"\[@(?:\[([^\]]+)\]|([^\[\]]+))\]")
_LEGEND_CODES = {"right": "r", "left": "l", "top": "t", "bottom": "b"}


def expand_structured_refs(formula: str, table_name: str) -> str:
    """Rewrite ``[@Col]`` / ``[@[Col Name]]`` to the file-format form."""

    def _replace(match: re.Match[str]) -> str:
        column = match.group(1) or match.group(2)
        return f"{table_name}[[#This Row],[{column}]]"

    return _STRUCTURED_REF_RE.sub(_replace, formula)


def _cell_to_value(value: Any) -> Any:
    """Convert a raw cell value to a JSON-safe Python type."""
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, (int, float, bool, str)) or value is None:
        return value
    return str(value)


class WorkbookDocument(SpreadsheetDocument):
    """A ``.xlsx`` workbook on disk.

    Args:
        path:  Path to an existing workbook.
        sheet: Worksheet holding the primary table.  None = active sheet.
    """

    backend = "workbook"

    def __init__(self, path: str | Path, sheet: str | None = None) -> None:
        self._path = Path(path).expanduser().resolve()
        self._sheet_name = sheet
        self._wb: Any = None
        self._lock = threading.Lock()
        self._charts: dict[str, Any] = {}
        self._chart_seq = 0

    @property
    def path(self) -> Path:
        return self._path

    @property
    def workbook(self) -> Any:
        """The underlying openpyxl Workbook (loaded on first access)."""
        return self._get_wb()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _run(self, fn: Callable[[], T]) -> T:
        def _locked() -> T:
            with self._lock:
                return fn()

        return await asyncio.to_thread(_locked)

    def _get_wb(self) -> Any:
        import openpyxl

        if self._wb is None:
            self._wb = openpyxl.load_workbook(str(self._path), data_only=False)
            log.debug("workbook_loaded", path=str(self._path), sheets=self._wb.sheetnames)
        return self._wb

    def _ws(self, name: str) -> Any:
        wb = self._get_wb()
        if name not in wb.sheetnames:
            raise SheetNotFoundError(name)
        return wb[name]

    def _primary_ws(self) -> Any:
        if self._sheet_name:
            return self._ws(self._sheet_name)
        return self._get_wb().active

    def _primary_table(self) -> tuple[Any, Any]:
        ws = self._primary_ws()
        if not ws.tables:
            raise TableNotFoundError(ws.title)
        table = next(iter(ws.tables.values()))
        return ws, table

    @staticmethod
    def _bounds(table: Any) -> tuple[int, int, int, int]:
        """Return ``(min_col, max_col, first_data_row, last_data_row)``.

        The header row is ``first_data_row - 1``.
        """
        min_col, min_row, max_col, max_row = range_boundaries(table.ref)
        header_rows = table.headerRowCount if table.headerRowCount is not None else 1
        totals = table.totalsRowCount or 0
        return min_col, max_col, min_row + header_rows, max_row - totals

    def _header(self, ws: Any, table: Any) -> list[str]:
        min_col, max_col, first_data, _ = self._bounds(table)
        header_row = first_data - 1
        return [
            "" if ws.cell(row=header_row, column=c).value is None
            else str(ws.cell(row=header_row, column=c).value)
            for c in range(min_col, max_col + 1)
        ]

    def _raw_rows(self, ws: Any, table: Any) -> list[list[Any]]:
        min_col, max_col, first_data, last_data = self._bounds(table)
        return [
            [ws.cell(row=r, column=c).value for c in range(min_col, max_col + 1)]
            for r in range(first_data, last_data + 1)
        ]

    def _ensure_table_columns(self, ws: Any, table: Any) -> None:
        """Populate ``tableColumns`` from the header row if the table has none yet."""
        if table.tableColumns:
            return
        from openpyxl.worksheet.table import TableColumn

        for idx, name in enumerate(self._header(ws, table), start=1):
            table.tableColumns.append(TableColumn(id=idx, name=name or f"Column{idx}"))

    def _chart(self, chart_id: str) -> Any:
        try:
            return self._charts[chart_id]
        except KeyError:
            raise KeyError(f"Chart '{chart_id}' not found") from None

    def _reference(self, sheet: str, ref: str) -> Any:
        from openpyxl.chart import Reference

        min_col, min_row, max_col, max_row = range_boundaries(ref)
        return Reference(
            self._ws(sheet),
            min_col=min_col,
            min_row=min_row,
            max_col=max_col,
            max_row=max_row,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def read_table(self) -> TableSnapshot:
        def _read() -> TableSnapshot:
            ws, table = self._primary_table()
            rows = [[_cell_to_value(v) for v in row] for row in self._raw_rows(ws, table)]
            return TableSnapshot(header=self._header(ws, table), rows=rows)

        return await self._run(_read)

    async def read_column(self, name: str) -> list[Any]:
        def _read() -> list[Any]:
            ws, table = self._primary_table()
            idx = find_column(self._header(ws, table), name, case_sensitive=False)
            if idx is None:
                raise MissingColumnError([name])
            return [_cell_to_value(row[idx]) for row in self._raw_rows(ws, table)]

        return await self._run(_read)

    # ------------------------------------------------------------------
    # Sort
    # ------------------------------------------------------------------

    async def sort_table(self, column_index: int, descending: bool = True) -> None:
        def _sort() -> None:
            ws, table = self._primary_table()
            min_col, max_col, first_data, last_data = self._bounds(table)
            cells = [
                [ws.cell(row=r, column=c) for c in range(min_col, max_col + 1)]
                for r in range(first_data, last_data + 1)
            ]
            # Number formats and fonts travel with their row.
            saved = [[(cell.value, copy(cell._style)) for cell in row] for row in cells]
            keyed = [[value for value, _ in row] + [i] for i, row in enumerate(saved)]
            ordered = sort_rows(keyed, column_index, descending=descending)
            for target, source in zip(cells, ordered):
                for cell, (value, style) in zip(target, saved[source[-1]]):
                    cell.value = value
                    cell._style = copy(style)

        await self._run(_sort)

    # ------------------------------------------------------------------
    # Sheets & ranges
    # ------------------------------------------------------------------

    async def sheet_names(self) -> list[str]:
        return await self._run(lambda: list(self._get_wb().sheetnames))

    async def delete_sheet(self, name: str) -> None:
        def _delete() -> None:
            wb = self._get_wb()
            del wb[self._ws(name).title]

        await self._run(_delete)

    async def create_sheet(self, name: str) -> None:
        def _create() -> None:
            wb = self._get_wb()
            if name in wb.sheetnames:
                raise ValueError(f"Sheet '{name}' already exists")
            wb.create_sheet(title=name)

        await self._run(_create)

    async def hide_sheet(self, name: str) -> None:
        def _hide() -> None:
            self._ws(name).sheet_state = "hidden"

        await self._run(_hide)

    async def write_range(self, sheet: str, start_cell: str, rows: Sequence[Sequence[Any]]) -> str:
        def _write() -> str:
            ws = self._ws(sheet)
            col_str, start_row = coordinate_from_string(start_cell)
            start_col = column_index_from_string(col_str)
            for r_idx, row_data in enumerate(rows):
                for c_idx, value in enumerate(row_data):
                    ws.cell(row=start_row + r_idx, column=start_col + c_idx, value=value)
            width = max((len(r) for r in rows), default=1) or 1
            end_col = get_column_letter(start_col + width - 1)
            end_row = start_row + max(len(rows), 1) - 1
            # Autofit is not available; widen enough for the numbers.
            for c in range(start_col, start_col + width):
                ws.column_dimensions[get_column_letter(c)].width = 14
            return f"{start_cell}:{end_col}{end_row}"

        return await self._run(_write)

    # ------------------------------------------------------------------
    # Charts
    # ------------------------------------------------------------------

    async def add_chart(self, chart_type: str, source_sheet: str, source_range: str) -> str:
        def _add() -> str:
            from openpyxl.chart import ScatterChart, Series

            if chart_type not in ("scatter", "xyscatter"):
                raise ValueError(f"Unsupported chart type: {chart_type!r}")
            chart = ScatterChart()
            chart.style = 13
            chart.series.append(Series(self._reference(source_sheet, source_range)))
            self._primary_ws().add_chart(chart)
            self._chart_seq += 1
            chart_id = f"chart-{self._chart_seq}"
            self._charts[chart_id] = chart
            return chart_id

        return await self._run(_add)

    async def delete_chart(self, chart_id: str) -> None:
        def _delete() -> None:
            chart = self._chart(chart_id)
            ws = self._primary_ws()
            if chart in ws._charts:
                ws._charts.remove(chart)
            del self._charts[chart_id]

        await self._run(_delete)

    async def add_chart_series(
        self, chart_id: str, name: str, sheet: str, x_range: str, y_range: str
    ) -> int:
        def _add_series() -> int:
            from openpyxl.chart import Series
            from openpyxl.chart.marker import Marker
            from openpyxl.chart.shapes import GraphicalProperties
            from openpyxl.drawing.line import LineProperties

            chart = self._chart(chart_id)
            series = Series(
                self._reference(sheet, y_range),
                xvalues=self._reference(sheet, x_range),
                title=name,
            )
            # Markers only: a scatter of unordered points must not be joined.
            series.marker = Marker(symbol="circle")
            series.graphicalProperties = GraphicalProperties(ln=LineProperties(noFill=True))
            chart.series.append(series)
            return len(chart.series) - 1

        return await self._run(_add_series)

    async def delete_chart_series(self, chart_id: str, index: int) -> None:
        await self._run(lambda: self._chart(chart_id).series.pop(index))

    async def set_chart_title(self, chart_id: str, title: str) -> None:
        def _title() -> None:
            self._chart(chart_id).title = title

        await self._run(_title)

    async def set_chart_legend(self, chart_id: str, position: str) -> None:
        def _legend() -> None:
            from openpyxl.chart.legend import Legend

            if position not in LEGEND_POSITIONS:
                raise ValueError(f"Unknown legend position: {position!r}")
            chart = self._chart(chart_id)
            if chart.legend is None:
                chart.legend = Legend()
            chart.legend.position = _LEGEND_CODES[position]

        await self._run(_legend)

    async def set_chart_position(self, chart_id: str, top_left: str, bottom_right: str) -> None:
        def _position() -> None:
            from openpyxl.drawing.spreadsheet_drawing import AnchorMarker, TwoCellAnchor

            top_row, left_col = coordinate_to_tuple(top_left)
            bottom_row, right_col = coordinate_to_tuple(bottom_right)
            # Markers are 0-based; the "to" marker is the far edge of bottom_right.
            self._chart(chart_id).anchor = TwoCellAnchor(
                _from=AnchorMarker(col=left_col - 1, row=top_row - 1),
                to=AnchorMarker(col=right_col, row=bottom_row),
            )

        await self._run(_position)

    # ------------------------------------------------------------------
    # Table columns
    # ------------------------------------------------------------------

    async def add_table_column(self, name: str) -> None:
        def _add_column() -> None:
            from openpyxl.worksheet.table import TableColumn

            ws, table = self._primary_table()
            self._ensure_table_columns(ws, table)
            min_col, min_row, max_col, max_row = range_boundaries(table.ref)
            new_col = max_col + 1
            ws.cell(row=min_row, column=new_col, value=name)
            new_ref = f"{get_column_letter(min_col)}{min_row}:{get_column_letter(new_col)}{max_row}"
            table.ref = new_ref
            if table.autoFilter is not None:
                table.autoFilter.ref = new_ref
            next_id = max((c.id for c in table.tableColumns), default=0) + 1
            table.tableColumns.append(TableColumn(id=next_id, name=name))

        await self._run(_add_column)

    async def set_column_formula(self, name: str, formula: str) -> None:
        def _set_formula() -> None:
            from openpyxl.worksheet.table import TableFormula

            ws, table = self._primary_table()
            self._ensure_table_columns(ws, table)
            idx = find_column(self._header(ws, table), name, case_sensitive=False)
            if idx is None:
                raise MissingColumnError([name])
            min_col, _, first_data, last_data = self._bounds(table)
            expanded = expand_structured_refs(formula, table.displayName)
            # The host fills a calculated column down; here every row is written.
            for row in range(first_data, last_data + 1):
                ws.cell(row=row, column=min_col + idx, value=expanded)
            table.tableColumns[idx].calculatedColumnFormula = TableFormula(
                attr_text=expanded.lstrip("=")
            )

        await self._run(_set_formula)

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    async def sync(self) -> None:
        def _save() -> None:
            if self._wb is None:
                return
            self._wb.save(str(self._path))

        await self._run(_save)
        log.debug("workbook_saved", path=str(self._path))

    async def close(self) -> None:
        self._wb = None
        self._charts.clear()


def write_sample_workbook(
    path: str | Path,
    rows: Sequence[Sequence[Any]] | None = None,
    header: Sequence[str] = ("Region", "Sales", "Costs"),
    table_name: str = "SalesTable",
) -> Path:
    """Create a workbook with one sales table (used by ``sheetpilot sample`` and tests)."""
    import openpyxl
    from openpyxl.worksheet.table import Table, TableStyleInfo

    data = rows if rows is not None else [
        ["North", 1200, 800],
        ["South", 950, 700],
        ["East", 1430.5, 910.25],
        ["West", 610, 540],
    ]
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Sheet1"
    ws.append(list(header))
    for row in data:
        ws.append(list(row))
    last_row = max(len(data), 1) + 1
    ref = f"A1:{get_column_letter(len(header))}{last_row}"
    table = Table(displayName=table_name, ref=ref)
    table.tableStyleInfo = TableStyleInfo(name="TableStyleMedium9", showRowStripes=True)
    ws.add_table(table)

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(target))
    return target
