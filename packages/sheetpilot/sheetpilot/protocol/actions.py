"""Protocol — Action vocabulary.

The closed set of spreadsheet operations SheetPilot understands.  Every
classification yields exactly one of these models; ``Unsupported`` is the
terminal "nothing to do" variant.

The ``kind`` values double as the wire identifiers of the classifier
transport (``POST /analyze`` → ``{"action": kind, ...}``).
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from sheetpilot.protocol.constants import (
    COSTS_COLUMN,
    PROFITS_COLUMN,
    PROFITS_EXPRESSION,
    PROFITS_FORMULA,
    SALES_COLUMN,
)


class ActionKind(str, Enum):
    """Wire identifiers of the supported actions."""

    SORT_SALES_DESC = "sort_sales_desc"
    SCATTER_SALES_COSTS = "scatter_sales_costs"
    INSERT_PROFITS = "insert_profits"
    UNSUPPORTED = "unsupported"


class SortDirection(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


class _ActionBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class SortBySales(_ActionBase):
    """Sort the primary table by the Sales column, largest first."""

    kind: Literal[ActionKind.SORT_SALES_DESC] = ActionKind.SORT_SALES_DESC
    column: str = SALES_COLUMN
    direction: SortDirection = SortDirection.DESCENDING


class ScatterPlot(_ActionBase):
    """Insert a scatter chart with Sales on X and Costs on Y."""

    kind: Literal[ActionKind.SCATTER_SALES_COSTS] = ActionKind.SCATTER_SALES_COSTS
    x_column: str = SALES_COLUMN
    y_column: str = COSTS_COLUMN


class InsertComputedColumn(_ActionBase):
    """Append a Profits column computed as Sales - Costs."""

    kind: Literal[ActionKind.INSERT_PROFITS] = ActionKind.INSERT_PROFITS
    name: str = PROFITS_COLUMN
    formula_expression: str = PROFITS_EXPRESSION
    formula: str = PROFITS_FORMULA
    depends_on: tuple[str, ...] = (SALES_COLUMN, COSTS_COLUMN)


class Unsupported(_ActionBase):
    kind: Literal[ActionKind.UNSUPPORTED] = ActionKind.UNSUPPORTED


Action = Annotated[
    Union[SortBySales, ScatterPlot, InsertComputedColumn, Unsupported],
    Field(discriminator="kind"),
]

_ACTION_ADAPTER: TypeAdapter[Action] = TypeAdapter(Action)

_BY_KIND: dict[ActionKind, type[_ActionBase]] = {
    ActionKind.SORT_SALES_DESC: SortBySales,
    ActionKind.SCATTER_SALES_COSTS: ScatterPlot,
    ActionKind.INSERT_PROFITS: InsertComputedColumn,
    ActionKind.UNSUPPORTED: Unsupported,
}


def action_for_kind(kind: ActionKind) -> Action:
    """Return the default-valued action for *kind*."""
    return _BY_KIND[kind]()  # type: ignore[return-value]


def parse_action(value: str | dict[str, object]) -> Action:
    """Build an Action from a wire identifier or a serialised action dict.

    Unknown identifiers map to ``Unsupported`` so that a newer classifier
    speaking a larger vocabulary never breaks an older pipeline.
    """
    if isinstance(value, dict):
        return _ACTION_ADAPTER.validate_python(value)
    try:
        kind = ActionKind(value.strip().lower())
    except ValueError:
        return Unsupported()
    return action_for_kind(kind)
