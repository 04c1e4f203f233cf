"""Tolerant numeric coercion for chart data."""

from __future__ import annotations

import math
import re
from typing import Any

_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]+")
_LEADING_NUMBER_RE = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)")


def coerce_number(value: Any) -> float:
    """Coerce a cell value to a float, defaulting to 0.

    Everything except digits, ``.`` and ``-`` is stripped first, so
    currency-formatted cells such as ``"$1,200.50"`` parse to ``1200.5``.
    The longest leading numeric prefix of what remains is used; anything
    unparseable (``"n/a"``, ``None``, ``""``) becomes 0.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = float(value)
        return number if math.isfinite(number) else 0.0
    if value is None or isinstance(value, bool):
        return 0.0
    cleaned = _NON_NUMERIC_RE.sub("", str(value))
    match = _LEADING_NUMBER_RE.match(cleaned)
    if match is None:
        return 0.0
    return float(match.group(0)) + 0.0
