"""Market share arithmetic.

Two independent pure steps: :func:`normalize_to_total` rescales a set of
shares proportionally, and :func:`round_shares` rounds to a fixed number
of decimals without changing the rounded total.
"""

import math
from typing import List, Sequence


def normalize_to_total(shares: Sequence[float], total: float = 100.0) -> List[float]:
    """Rescale *shares* proportionally so they sum to *total*.

    A set whose sum is zero is split evenly.
    """
    if not shares:
        return []

    current = sum(shares)
    if current <= 0:
        return [total / len(shares)] * len(shares)
    return [share / current * total for share in shares]


def round_shares(shares: Sequence[float], ndigits: int = 1) -> List[float]:
    """Round *shares* to *ndigits* decimals, preserving their rounded sum.

    Uses the largest-remainder method: every share is floored to the unit
    ``10 ** -ndigits`` and the units lost are handed back to the shares with
    the largest remainders. Input that sums to 100 therefore rounds to a
    set summing to exactly 100.
    """
    scale = 10**ndigits
    scaled = [share * scale for share in shares]
    # Guard against float noise such as 234.99999999 flooring to 234.
    floors = [math.floor(value + 1e-9) for value in scaled]
    missing_units = round(sum(scaled)) - sum(floors)

    by_remainder = sorted(
        range(len(scaled)),
        key=lambda i: scaled[i] - floors[i],
        reverse=True,
    )
    for index in by_remainder[: max(0, missing_units)]:
        floors[index] += 1

    return [round(units / scale, ndigits) for units in floors]


def total_share(shares: Sequence[float]) -> float:
    """Sum of *shares* rounded to one decimal, for logging and checks."""
    return round(sum(shares), 1)
