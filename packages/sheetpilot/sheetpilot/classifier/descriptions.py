"""User-facing descriptions of each action, per display locale."""

from __future__ import annotations

from sheetpilot.protocol.actions import Action, ActionKind

DEFAULT_LOCALE = "en"

_DESCRIPTIONS: dict[str, dict[ActionKind, str]] = {
    "en": {
        ActionKind.SORT_SALES_DESC: (
            "Review the preview, then click “Apply” to sort the table "
            "by Sales in descending order."
        ),
        ActionKind.SCATTER_SALES_COSTS: (
            "Review the scatter preview, then click “Insert” to add the "
            "chart to the workbook."
        ),
        ActionKind.INSERT_PROFITS: (
            "A Profits column will be inserted with the formula "
            "Profits = Sales - Costs. Click “Insert formula” to finish."
        ),
        ActionKind.UNSUPPORTED: "This request is not supported yet, please try again.",
    },
    "zh": {
        ActionKind.SORT_SALES_DESC: (
            "请预览并确认排序，点击“应用操作”即可将销售额降序排序应用到Excel表。"
        ),
        ActionKind.SCATTER_SALES_COSTS: (
            "请预览散点图，点击“插入”即可将散点图插入到Excel表中。"
        ),
        ActionKind.INSERT_PROFITS: (
            "即将插入利润列，公式为 Profits = Sales - Costs。点击“插入公式”即可完成。"
        ),
        ActionKind.UNSUPPORTED: "目前暂不支持，请重新输入",
    },
}


def describe(action: Action | ActionKind, locale: str = DEFAULT_LOCALE) -> str:
    """Return the description of *action* in *locale* (falls back to English)."""
    kind = action if isinstance(action, ActionKind) else action.kind
    table = _DESCRIPTIONS.get(locale, _DESCRIPTIONS[DEFAULT_LOCALE])
    return table[kind]
