"""Lenient conversions for values coming out of the document store."""

from __future__ import annotations

import math
import numbers
from decimal import Decimal
from typing import Any, Optional


def coerce_price(value: Any) -> float:
    """Return a finite price, mapping anything unusable to ``0.0``.

    Real numbers (including ``Decimal`` and ``Fraction``) are used as-is,
    strings are parsed as floats. Booleans, ``None``, unparseable strings and
    values that are non-finite or too large for a float all count as zero.
    """

    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, str):
        value = value.strip()
    elif not isinstance(value, (numbers.Real, Decimal)):
        return 0.0
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def coerce_label(value: Any) -> Optional[str]:
    """Normalize a grouping label; empty or non-scalar values become ``None``."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        value = str(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None
