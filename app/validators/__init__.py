"""
app/validators package marker.
"""

from app.validators.numeric import month_key, parse_count, round_half_up

__all__ = [
    "month_key",
    "parse_count",
    "round_half_up",
]
