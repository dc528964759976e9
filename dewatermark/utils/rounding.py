"""Rounding helper.

Python's built-in ``round`` rounds halves to even (``round(500.5) == 500``).
Computed pixel sizes and expiry timestamps round halves away from zero instead.
"""
from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)
