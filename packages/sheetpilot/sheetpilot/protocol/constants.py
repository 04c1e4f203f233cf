"""Protocol constants shared by the classifier, preview builder and executor."""

from __future__ import annotations

SALES_COLUMN = "Sales"
COSTS_COLUMN = "Costs"
PROFITS_COLUMN = "Profits"

# Structured reference formula; the host fills it down every body row.
PROFITS_FORMULA = "=[@Sales]-[@Costs]"
PROFITS_EXPRESSION = "Sales - Costs"

# Placeholder range the chart is created against before its real series exist.
CHART_PLACEHOLDER_RANGE = "A1:A2"
