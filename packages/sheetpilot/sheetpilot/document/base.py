"""Document layer — SpreadsheetDocument interface.

The live spreadsheet is an external collaborator.  Every backend — the
openpyxl workbook, the in-memory table, or a future bridge to a hosted
spreadsheet — subclasses ``SpreadsheetDocument``.

Design principles:
  - One handle is passed explicitly to the preview builder and executor;
    nothing holds the document as ambient state.
  - Every method is a coroutine.  Reads, writes and ``sync()`` are the
    pipeline's suspension points.
  - Operations target the *primary table*: the first table on the
    configured (or active) worksheet.
  - Mutations may be buffered until ``sync()``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from sheetpilot.protocol.models import TableSnapshot

LEGEND_POSITIONS = ("right", "left", "top", "bottom")


class SpreadsheetDocument(ABC):
    """Abstract handle on one live spreadsheet document."""

    backend: str = ""

    # ------------------------------------------------------------------
    # (a) Reads
    # ------------------------------------------------------------------

    @abstractmethod
    async def read_table(self) -> TableSnapshot:
        """Return the primary table's header and data rows."""
        ...

    async def column_names(self) -> list[str]:
        """Return the primary table's column names, in order."""
        snapshot = await self.read_table()
        return list(snapshot.header)

    @abstractmethod
    async def read_column(self, name: str) -> list[Any]:
        """Return the data-body cells of column *name* (case-insensitive).

        Raises:
            MissingColumnError: If no column has that name.
        """
        ...

    # ------------------------------------------------------------------
    # (b) Sort
    # ------------------------------------------------------------------

    @abstractmethod
    async def sort_table(self, column_index: int, descending: bool = True) -> None:
        """Stable in-place sort of the primary table's rows on one column."""
        ...

    # ------------------------------------------------------------------
    # (c) Sheets & ranges
    # ------------------------------------------------------------------

    @abstractmethod
    async def sheet_names(self) -> list[str]:
        ...

    @abstractmethod
    async def delete_sheet(self, name: str) -> None:
        """Raises SheetNotFoundError if *name* does not exist."""
        ...

    @abstractmethod
    async def create_sheet(self, name: str) -> None:
        ...

    @abstractmethod
    async def hide_sheet(self, name: str) -> None:
        ...

    @abstractmethod
    async def write_range(self, sheet: str, start_cell: str, rows: Sequence[Sequence[Any]]) -> str:
        """Write *rows* starting at *start_cell*; return the A1 range written."""
        ...

    # ------------------------------------------------------------------
    # (d) Charts
    # ------------------------------------------------------------------

    @abstractmethod
    async def add_chart(self, chart_type: str, source_sheet: str, source_range: str) -> str:
        """Create a chart on the primary sheet bound to *source_range*.

        The new chart carries one series built from the source range.
        Returns an opaque chart id.
        """
        ...

    @abstractmethod
    async def delete_chart(self, chart_id: str) -> None:
        """Remove a chart created by :meth:`add_chart`."""
        ...

    @abstractmethod
    async def add_chart_series(
        self, chart_id: str, name: str, sheet: str, x_range: str, y_range: str
    ) -> int:
        """Append a series with explicit X and Y ranges; return its index."""
        ...

    @abstractmethod
    async def delete_chart_series(self, chart_id: str, index: int) -> None:
        """Raises IndexError when the chart has no series at *index*."""
        ...

    @abstractmethod
    async def set_chart_title(self, chart_id: str, title: str) -> None:
        ...

    @abstractmethod
    async def set_chart_legend(self, chart_id: str, position: str) -> None:
        """*position* is one of :data:`LEGEND_POSITIONS`."""
        ...

    @abstractmethod
    async def set_chart_position(self, chart_id: str, top_left: str, bottom_right: str) -> None:
        ...

    # ------------------------------------------------------------------
    # (e) Table columns
    # ------------------------------------------------------------------

    @abstractmethod
    async def add_table_column(self, name: str) -> None:
        """Append an empty named column to the primary table."""
        ...

    @abstractmethod
    async def set_column_formula(self, name: str, formula: str) -> None:
        """Assign one structured formula to the whole data body of *name*."""
        ...

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    async def sync(self) -> None:
        """Flush buffered mutations to the underlying store."""

    async def close(self) -> None:
        """Release any held resources."""


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _sort_rank(value: Any) -> tuple[int, Any]:
    # Spreadsheet ordering: numbers < text < booleans.
    if isinstance(value, bool):
        return (2, value)
    if isinstance(value, (int, float)):
        return (0, value)
    return (1, str(value).lower())


def sort_rows(
    rows: Sequence[Sequence[Any]], column_index: int, descending: bool = True
) -> list[list[Any]]:
    """Stable sort of *rows* on *column_index*.

    Blank cells sink to the bottom in both directions, as in spreadsheet
    hosts.  Rows with equal keys keep their relative order.
    """
    def key_of(row: Sequence[Any]) -> Any:
        return row[column_index] if column_index < len(row) else None

    filled = [list(r) for r in rows if not _is_blank(key_of(r))]
    blanks = [list(r) for r in rows if _is_blank(key_of(r))]
    filled.sort(key=lambda r: _sort_rank(key_of(r)), reverse=descending)
    return filled + blanks
