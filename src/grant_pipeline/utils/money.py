from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any


def coerce_amount(value: Any) -> float:
    """Return ``value`` as a non-negative finite float, or 0.0.

    Backend numeric columns arrive as numbers or numeric strings; anything
    else (``None``, booleans, free text, NaN, negatives) counts as zero.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float, Decimal)):
        amount = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return 0.0
        try:
            amount = float(Decimal(text))
        except (InvalidOperation, ValueError):
            return 0.0
    else:
        return 0.0

    if not math.isfinite(amount) or amount < 0:
        return 0.0
    return amount


def format_amount(value: float) -> str:
    return f"{value:,.2f}"
