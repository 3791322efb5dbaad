"""
Registry feed statistics and coverage summaries.

``FeedStat``        windowed count over a registry feed (disasters, KEVs).
``CoverageSummary`` live/simulated accounting over a list of records.

Both are derived per request and never persisted.
"""

from __future__ import annotations

from pydantic import Field, field_validator, model_validator

from supply_radar.models.base import WireModel
from supply_radar.taxonomy.source_status import SourceStatus


class FeedStat(WireModel):
    """Windowed count over a registry feed.

    Attributes:
        recent_count: Entries created within the last ``window_days``.
        total: Entries returned by the registry query.
        window_days: Size of the recency window (7 for disasters, 30 for KEVs).
        source_status: ``LIVE`` or ``SIMULATED``.
    """

    recent_count: int
    total: int
    window_days: int
    source_status: SourceStatus = Field(alias="dataSourceStatus")

    @field_validator("recent_count", "total")
    @classmethod
    def validate_counts_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Feed counts must be non-negative.")
        return v


class CoverageSummary(WireModel):
    """How much of a record list came from live sources.

    Invariants: ``live + simulated == total`` and
    ``0 <= realtime_coverage_pct <= 100``.
    """

    live: int
    total: int
    simulated: int
    realtime_coverage_pct: int

    @model_validator(mode="after")
    def validate_consistency(self) -> "CoverageSummary":
        if self.live + self.simulated != self.total:
            raise ValueError("live + simulated must equal total.")
        if not 0 <= self.realtime_coverage_pct <= 100:
            raise ValueError("realtime_coverage_pct must be within 0-100.")
        return self

    @property
    def all_live(self) -> bool:
        return self.live == self.total
