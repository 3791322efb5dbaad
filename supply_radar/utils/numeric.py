"""
Numeric helpers shared by the scoring functions and the feed clients.

The dashboard's band boundaries were tuned against half-up rounding, so
every score uses ``round_half_up`` rather than Python's banker's ``round``.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward +infinity (2.5 → 3, -2.5 → -2)."""
    return math.floor(value + 0.5)


def round_decimals(value: float, ndigits: int) -> float:
    """Round to ``ndigits`` places, ties away from zero on the exact binary value.

    ``round_decimals(2.675, 2)`` is ``2.67`` because 2.675 is stored just
    below the tie; ``round_decimals(0.125, 2)`` is ``0.13``.
    """
    exponent = Decimal(1).scaleb(-ndigits)
    return float(Decimal(value).quantize(exponent, rounding=ROUND_HALF_UP))


def sigmoid(z: float) -> float:
    return 1.0 / (1.0 + math.exp(-z))


def format_number(value: Optional[float]) -> str:
    """en-US display format with grouping and at most two decimals.

    ``2354.1`` → ``"2,354.1"``, ``19032.8`` → ``"19,032.8"``, ``None`` → ``"—"``.
    """
    if value is None or math.isnan(value):
        return "—"
    text = f"{value:,.2f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_change(change_pct: float) -> str:
    """Signed percentage with two decimals, e.g. ``"+1.23%"`` / ``"-0.45%"``.

    The sign always follows the sign of ``change_pct`` (``-0.001`` → ``"-0.00%"``).
    """
    return f"{round_decimals(change_pct, 2):+.2f}%"
