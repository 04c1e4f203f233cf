"""Pipeline — Preview builder.

One pure function per action kind.  Each consumes a fresh ``TableSnapshot``
and returns a preview payload; none of them touch the document.

The sort preview deliberately shows the table in its *current* order: the
description tells the user what will happen, the preview shows what they
are about to change.
"""

from __future__ import annotations

from typing import Callable

from sheetpilot.exceptions import MissingColumnError, UnsupportedActionError
from sheetpilot.pipeline.numbers import coerce_number
from sheetpilot.protocol.actions import (
    Action,
    ActionKind,
    InsertComputedColumn,
    ScatterPlot,
    SortBySales,
)
from sheetpilot.protocol.models import (
    FormulaPreview,
    PreviewPayload,
    ScatterPoint,
    ScatterPreview,
    TablePreview,
    TableSnapshot,
)


def require_columns(
    snapshot: TableSnapshot, names: list[str], case_sensitive: bool = True
) -> list[int]:
    """Return the indices of *names*, or raise naming every missing column."""
    indices: list[int] = []
    missing: list[str] = []
    for name in names:
        idx = snapshot.column_index(name, case_sensitive=case_sensitive)
        if idx is None:
            missing.append(name)
        else:
            indices.append(idx)
    if missing:
        raise MissingColumnError(missing)
    return indices


def build_sort_preview(action: SortBySales, snapshot: TableSnapshot) -> TablePreview:
    # Exact match, like the sort executor.
    require_columns(snapshot, [action.column], case_sensitive=True)
    return TablePreview(
        header=list(snapshot.header),
        rows=[list(row) for row in snapshot.rows],
        sort_column=action.column,
        direction=action.direction,
    )


def build_scatter_preview(action: ScatterPlot, snapshot: TableSnapshot) -> ScatterPreview:
    x_idx, y_idx = require_columns(
        snapshot, [action.x_column, action.y_column], case_sensitive=False
    )
    points = [
        ScatterPoint(x=coerce_number(x), y=coerce_number(y))
        for x, y in zip(snapshot.column(x_idx), snapshot.column(y_idx))
    ]
    return ScatterPreview(x_label=action.x_column, y_label=action.y_column, points=points)


def build_formula_preview(
    action: InsertComputedColumn, snapshot: TableSnapshot | None = None
) -> FormulaPreview:
    return FormulaPreview(
        target=action.name,
        expression=f"{action.name} = {action.formula_expression}",
        formula=action.formula,
    )


_BUILDERS: dict[ActionKind, Callable[..., PreviewPayload]] = {
    ActionKind.SORT_SALES_DESC: build_sort_preview,
    ActionKind.SCATTER_SALES_COSTS: build_scatter_preview,
    ActionKind.INSERT_PROFITS: build_formula_preview,
}


def needs_snapshot(action: Action) -> bool:
    """Whether building the preview for *action* requires reading the document."""
    return action.kind in (ActionKind.SORT_SALES_DESC, ActionKind.SCATTER_SALES_COSTS)


def build_preview(action: Action, snapshot: TableSnapshot | None) -> PreviewPayload:
    """Dispatch to the builder for *action*'s kind.

    Raises:
        MissingColumnError:     A required column is absent from *snapshot*.
        UnsupportedActionError: *action* has no preview (``Unsupported``).
    """
    builder = _BUILDERS.get(action.kind)
    if builder is None:
        raise UnsupportedActionError(action.kind.value)
    if needs_snapshot(action) and snapshot is None:
        raise ValueError(f"A table snapshot is required to preview '{action.kind.value}'")
    return builder(action, snapshot)
