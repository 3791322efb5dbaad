"""
Provenance taxonomy for every record shown on the dashboard.

``SourceStatus`` tags where a value came from:

  - ``LIVE``      fetched from the upstream API on this request.
  - ``SIMULATED`` upstream unavailable; fallback or synthetic value.
  - ``DERIVED``   accepted on the wire for values computed without any
                  feed input.  No record in the current payload carries it;
                  risk indicator and KPI rows have no status field.
  - ``HYBRID``    derived quantity whose inputs mix live and simulated data.

Combination policy (``combine_statuses``): a derived value is only as live
as its least-live input.  All-live inputs stay ``LIVE``; no live input at
all is ``SIMULATED``; anything in between is ``HYBRID``.

This module has NO imports from any other ``supply_radar`` package.
"""

from collections.abc import Iterable
from enum import StrEnum


class SourceStatus(StrEnum):
    """Provenance tag carried by every externally sourced record."""

    LIVE = "live"
    SIMULATED = "simulated"
    DERIVED = "derived"
    HYBRID = "live/hybrid"


class SourceMode(StrEnum):
    """Whole-payload provenance: ``live`` only when every input is live."""

    LIVE = "live"
    HYBRID = "hybrid"


def combine_statuses(statuses: Iterable[SourceStatus]) -> SourceStatus:
    """Collapse input statuses into the status of a value derived from them.

    Args:
        statuses: Statuses of every record that fed the derived value.

    Returns:
        ``LIVE`` if all inputs are live, ``SIMULATED`` if none are (or there
        are no inputs), ``HYBRID`` otherwise.
    """
    seen = list(statuses)
    live = sum(1 for s in seen if s == SourceStatus.LIVE)
    if not seen or live == 0:
        return SourceStatus.SIMULATED
    if live == len(seen):
        return SourceStatus.LIVE
    return SourceStatus.HYBRID
