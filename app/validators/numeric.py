"""
app/validators/numeric.py

Lenient integer parsing for count and amount columns, plus the half-up
rounding used for percentage rates.

Source files transmit every numeric field as text. A value is read by its
leading integer (optional sign, then digits); anything unparsable counts
as ``0`` so that aggregation never drops a row.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_count(value: Any) -> int:
    """
    Parse *value* as an integer with "unparsable -> 0" semantics.

    ``"12"`` -> 12, ``" 7 "`` -> 7, ``"12abc"`` -> 12, ``"1.9"`` -> 1,
    ``""`` / ``"abc"`` / ``None`` -> 0. Real ints pass through; floats are
    truncated toward zero.
    """

    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return 0
        return int(value)

    match = _LEADING_INT.match(str(value))
    if match is None:
        return 0
    return int(match.group(1))


def month_key(year: Any, month: Any) -> str:
    """
    Build the ``YYYY-MM`` composite key; the month is left-padded to 2 digits.

    Keys built this way sort lexicographically in chronological order.
    """

    return f"{str(year).strip()}-{str(month).strip().rjust(2, '0')}"


def round_half_up(value: float, ndigits: int = 2) -> float:
    """
    Round *value* to *ndigits* decimals with halves rounded away from zero.

    ``round_half_up(0.125)`` -> 0.13, where built-in ``round`` gives 0.12.
    """

    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
