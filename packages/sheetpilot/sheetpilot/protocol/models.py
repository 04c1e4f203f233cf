"""Protocol — Table snapshots and preview payloads.

Data shapes only.  Snapshots are rebuilt from the live document on every
request; previews are discarded on the next submission or after apply.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from sheetpilot.protocol.actions import SortDirection


class TableSnapshot(BaseModel):
    """Read-only projection of the document's primary table."""

    model_config = ConfigDict(frozen=True)

    header: list[str] = Field(default_factory=list)
    rows: list[list[Any]] = Field(default_factory=list)

    def column_index(self, name: str, case_sensitive: bool = True) -> int | None:
        """Return the 0-based index of column *name*, or None when absent."""
        return find_column(self.header, name, case_sensitive=case_sensitive)

    def column(self, index: int) -> list[Any]:
        """Return the cells of column *index*; short rows yield None."""
        return [row[index] if index < len(row) else None for row in self.rows]

    @property
    def row_count(self) -> int:
        return len(self.rows)


def find_column(header: list[str], name: str, case_sensitive: bool = True) -> int | None:
    """Locate *name* in *header*.

    Header cells are compared after trimming.  Case-insensitive matching
    mirrors how the host resolves ``columns.getItem(name)``.
    """
    wanted = name.strip() if case_sensitive else name.strip().lower()
    for idx, raw in enumerate(header):
        candidate = str(raw).strip() if raw is not None else ""
        if not case_sensitive:
            candidate = candidate.lower()
        if candidate == wanted:
            return idx
    return None


# ---------------------------------------------------------------------------
# Preview payloads
# ---------------------------------------------------------------------------


class TablePreview(BaseModel):
    """Current table contents shown before a sort is applied."""

    kind: Literal["table"] = "table"
    header: list[str]
    rows: list[list[Any]]
    sort_column: str
    direction: SortDirection


class ScatterPoint(BaseModel):
    x: float
    y: float


class ScatterPreview(BaseModel):
    kind: Literal["scatter"] = "scatter"
    x_label: str
    y_label: str
    points: list[ScatterPoint]


class FormulaPreview(BaseModel):
    """Static description of the computed column about to be inserted."""

    kind: Literal["formula"] = "formula"
    target: str
    expression: str
    formula: str


PreviewPayload = Annotated[
    Union[TablePreview, ScatterPreview, FormulaPreview],
    Field(discriminator="kind"),
]
