"""Pipeline — Action executor.

Turns a confirmed Action into document mutations.  Each action kind has an
``_execute_<kind>`` handler that reads what it needs from the document,
validates it, mutates, and finishes with ``sync()``.

Error contract:
  - Typed domain errors (``SheetPilotError`` subclasses) propagate as-is so
    callers can tell a missing column from a broken document.
  - Anything else raised by the document is wrapped in
    ``ExecutionFailedError`` with the original exception as ``cause``.
  - ``Unsupported`` (or any kind without a handler) raises
    ``UnsupportedActionError``.

The computed-column insert is not transactional: if ``set_column_formula``
fails after ``add_table_column`` succeeded, the empty column stays.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from sheetpilot.config import DocumentConfig
from sheetpilot.document.base import SpreadsheetDocument
from sheetpilot.exceptions import (
    EmptyTableError,
    ExecutionFailedError,
    InconsistentColumnLengthError,
    MissingColumnError,
    SheetPilotError,
    UnsupportedActionError,
)
from sheetpilot.logging import get_logger
from sheetpilot.pipeline.numbers import coerce_number
from sheetpilot.pipeline.scratch import ScratchSheet
from sheetpilot.protocol.actions import (
    Action,
    InsertComputedColumn,
    ScatterPlot,
    SortBySales,
    SortDirection,
)
from sheetpilot.protocol.constants import CHART_PLACEHOLDER_RANGE
from sheetpilot.protocol.models import find_column

log = get_logger(__name__)

_Handler = Callable[[Any, SpreadsheetDocument], Awaitable[dict[str, Any]]]


class ActionExecutor:
    """Applies confirmed actions to a SpreadsheetDocument.

    The executor is stateless between calls; the document handle is passed
    to every ``execute()``.

    Args:
        scratch_sheet:       Name of the hidden chart-data worksheet.
        chart_top_left:      Anchor cell of the chart's top-left corner.
        chart_bottom_right:  Anchor cell of the chart's bottom-right corner.
        chart_title:         Title given to the scatter chart.
        chart_series_name:   Name of the scatter chart's data series.
    """

    def __init__(
        self,
        scratch_sheet: str = "__chart_data_temp",
        chart_top_left: str = "H5",
        chart_bottom_right: str = "M25",
        chart_title: str = "Sales (X) vs Costs (Y)",
        chart_series_name: str = "Sales vs Costs",
    ) -> None:
        self.scratch_sheet = scratch_sheet
        self.chart_top_left = chart_top_left
        self.chart_bottom_right = chart_bottom_right
        self.chart_title = chart_title
        self.chart_series_name = chart_series_name

    @classmethod
    def from_config(cls, cfg: DocumentConfig) -> "ActionExecutor":
        return cls(
            scratch_sheet=cfg.scratch_sheet,
            chart_top_left=cfg.chart_top_left,
            chart_bottom_right=cfg.chart_bottom_right,
            chart_title=cfg.chart_title,
            chart_series_name=cfg.chart_series_name,
        )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _get_handler(self, action: Action) -> _Handler:
        handler = getattr(self, f"_execute_{action.kind.value}", None)
        if handler is None:
            raise UnsupportedActionError(action.kind.value)
        return handler  # type: ignore[no-any-return]

    async def execute(self, action: Action, document: SpreadsheetDocument) -> dict[str, Any]:
        """Apply *action* to *document* and return a JSON-serialisable result.

        Raises:
            UnsupportedActionError: No handler exists for ``action.kind``.
            DocumentError:          The document lacks what the action needs.
            ExecutionFailedError:   The document API failed unexpectedly.
        """
        handler = self._get_handler(action)
        log.info("action_executing", backend=document.backend)
        try:
            result = await handler(action, document)
        except SheetPilotError:
            raise
        except Exception as exc:
            raise ExecutionFailedError(action=action.kind.value, cause=exc) from exc
        log.info("action_executed", result=result)
        return result

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _execute_sort_sales_desc(
        self, action: SortBySales, document: SpreadsheetDocument
    ) -> dict[str, Any]:
        header = await document.column_names()
        idx = find_column(header, action.column, case_sensitive=True)
        if idx is None:
            raise MissingColumnError([action.column])

        descending = action.direction == SortDirection.DESCENDING
        await document.sort_table(idx, descending=descending)
        await document.sync()
        return {
            "sorted_by": header[idx],
            "column_index": idx,
            "direction": action.direction.value,
        }

    async def _execute_scatter_sales_costs(
        self, action: ScatterPlot, document: SpreadsheetDocument
    ) -> dict[str, Any]:
        header = await document.column_names()
        missing = [
            name
            for name in (action.x_column, action.y_column)
            if find_column(header, name, case_sensitive=False) is None
        ]
        if missing:
            raise MissingColumnError(missing)

        x_raw = await document.read_column(action.x_column)
        y_raw = await document.read_column(action.y_column)
        if len(x_raw) != len(y_raw):
            raise InconsistentColumnLengthError(
                {action.x_column: len(x_raw), action.y_column: len(y_raw)}
            )
        if not x_raw:
            raise EmptyTableError()

        points = [[coerce_number(x), coerce_number(y)] for x, y in zip(x_raw, y_raw)]
        n = len(points)
        rows: list[list[Any]] = [[action.x_column, action.y_column], *points]

        async with ScratchSheet(document, self.scratch_sheet) as scratch:
            await document.write_range(scratch.name, "A1", rows)

            # A chart cannot be created without a source range; bind a
            # placeholder, add the real series, then drop the placeholder.
            chart_id = await document.add_chart("scatter", scratch.name, CHART_PLACEHOLDER_RANGE)
            scratch.track_chart(chart_id)
            await document.add_chart_series(
                chart_id,
                self.chart_series_name,
                scratch.name,
                x_range=f"A2:A{n + 1}",
                y_range=f"B2:B{n + 1}",
            )
            try:
                await document.delete_chart_series(chart_id, 0)
            except IndexError:
                log.debug("placeholder_series_missing", chart_id=chart_id)

            await document.set_chart_title(chart_id, self.chart_title)
            await document.set_chart_legend(chart_id, "right")
            await document.set_chart_position(
                chart_id, self.chart_top_left, self.chart_bottom_right
            )
            await scratch.transfer()

        await document.sync()
        return {
            "chart_id": chart_id,
            "points": n,
            "data_sheet": self.scratch_sheet,
            "title": self.chart_title,
        }

    async def _execute_insert_profits(
        self, action: InsertComputedColumn, document: SpreadsheetDocument
    ) -> dict[str, Any]:
        header = await document.column_names()
        if find_column(header, action.name, case_sensitive=True) is not None:
            log.info("computed_column_exists", column=action.name)
            return {"column": action.name, "created": False}

        await document.add_table_column(action.name)
        await document.set_column_formula(action.name, action.formula)
        await document.sync()
        return {"column": action.name, "created": True, "formula": action.formula}
