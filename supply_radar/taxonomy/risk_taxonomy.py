"""
Categorical labels produced by the scoring layer.

The dashboard colour-codes on these exact strings; renaming a member value
is a breaking change for the UI.

  - ``RiskLevel``      nowcast probability class (HIGH / ELEVATED / MODERATE).
  - ``IndicatorBand``  class of the 0–100 aggregated disruption indicator.
  - ``IndicatorLevel`` level/status labels on risk indicator and KPI rows.

This module has NO imports from any other ``supply_radar`` package.
"""

from enum import StrEnum


class RiskLevel(StrEnum):
    """Disruption-probability class for the 24h nowcast."""

    HIGH = "HIGH"
    """Adjusted probability >= 0.75."""

    ELEVATED = "ELEVATED"
    """Adjusted probability >= 0.50."""

    MODERATE = "MODERATE"


class IndicatorBand(StrEnum):
    """Legend band for the final aggregated disruption indicator."""

    CRITICAL = "CRITICAL"
    """75 – 100: fulfilment at risk now; immediate contingency action."""

    ELEVATED = "ELEVATED"
    """55 – 74: delays likely; escalate mitigation."""

    WATCH = "WATCH"
    """35 – 54: localized risk; proactive planning."""

    STABLE = "STABLE"
    """0 – 34: routine monitoring."""


class IndicatorLevel(StrEnum):
    """Labels used in the ``level`` / ``status`` columns of derived rows."""

    HIGH = "HIGH"
    ELEVATED = "ELEVATED"
    MODERATE = "MODERATE"
    WATCH = "WATCH"
    DISRUPTED = "DISRUPTED"
    STABLE = "STABLE"
    NORMAL = "NORMAL"
    LOW = "LOW"
    CLEAR = "CLEAR"
