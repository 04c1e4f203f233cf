"""Protocol layer — action vocabulary, table snapshots, preview payloads."""

from sheetpilot.protocol.actions import (
    Action,
    ActionKind,
    InsertComputedColumn,
    ScatterPlot,
    SortBySales,
    SortDirection,
    Unsupported,
    action_for_kind,
    parse_action,
)
from sheetpilot.protocol.models import (
    FormulaPreview,
    PreviewPayload,
    ScatterPoint,
    ScatterPreview,
    TablePreview,
    TableSnapshot,
)

__all__ = [
    # Actions
    "Action",
    "ActionKind",
    "SortDirection",
    "SortBySales",
    "ScatterPlot",
    "InsertComputedColumn",
    "Unsupported",
    "action_for_kind",
    "parse_action",
    # Snapshots & previews
    "TableSnapshot",
    "PreviewPayload",
    "TablePreview",
    "ScatterPoint",
    "ScatterPreview",
    "FormulaPreview",
]
