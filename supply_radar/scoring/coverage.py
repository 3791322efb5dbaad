"""Live/simulated coverage accounting over a list of fetched records."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from supply_radar.models.feed import CoverageSummary
from supply_radar.taxonomy.source_status import SourceStatus
from supply_radar.utils.numeric import round_half_up


class HasSourceStatus(Protocol):
    @property
    def source_status(self) -> SourceStatus: ...


def summarize_sources(items: Iterable[HasSourceStatus]) -> CoverageSummary:
    """Count live vs simulated records.

    ``realtime_coverage_pct`` is ``round(live / total * 100)`` (half-up), and
    0 for an empty list.
    """
    total = 0
    live = 0
    for item in items:
        total += 1
        if item.source_status == SourceStatus.LIVE:
            live += 1

    return CoverageSummary(
        live=live,
        total=total,
        simulated=total - live,
        realtime_coverage_pct=round_half_up(live / total * 100) if total else 0,
    )
