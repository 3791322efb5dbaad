"""
Market quote model: one instrument's latest price and daily change.

A ``Quote`` is produced once per fetch cycle by ``QuoteClient`` (live or
fallback path) and never mutated.  The display strings are computed at
construction via ``Quote.build`` so the sign of ``formatted_change`` can
never drift from ``change_pct``.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator

from supply_radar.models.base import WireModel
from supply_radar.taxonomy.source_status import SourceStatus
from supply_radar.utils.numeric import format_change, format_number


class Quote(WireModel):
    """Latest quote for one ticker.

    Attributes:
        symbol: Upstream ticker symbol (e.g. ``"^GSPC"``).
        name: Display name.
        price: Latest price, or ``None`` if unavailable.
        formatted_price: en-US display string, ``"—"`` when price is ``None``.
        change_pct: Percent change vs the previous close (or synthetic).
        formatted_change: Signed display string, e.g. ``"+0.42%"``.
        source_status: ``LIVE`` or ``SIMULATED``.
    """

    symbol: str
    name: str
    price: Optional[float] = None
    formatted_price: str
    change_pct: float
    formatted_change: str
    source_status: SourceStatus = Field(alias="dataSourceStatus")

    @field_validator("price")
    @classmethod
    def validate_price_non_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError("Quote price must be non-negative.")
        return v

    @classmethod
    def build(
        cls,
        symbol: str,
        name: str,
        price: Optional[float],
        change_pct: float,
        source_status: SourceStatus,
    ) -> "Quote":
        """Construct a quote with its display strings derived from the numbers."""
        return cls(
            symbol=symbol,
            name=name,
            price=price,
            formatted_price=format_number(price) if price else "—",
            change_pct=change_pct,
            formatted_change=format_change(change_pct),
            source_status=source_status,
        )
