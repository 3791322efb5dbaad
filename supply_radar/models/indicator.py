"""
Presentation records produced by the scoring layer.

Risk indicator rows, supply-chain KPI rows, and the blocks that make up the
disruption predictor section of the payload.  Values are pre-formatted
strings where the dashboard renders them verbatim.
"""

from __future__ import annotations

from typing import Union

from supply_radar.models.base import WireModel
from supply_radar.taxonomy.risk_taxonomy import IndicatorBand, IndicatorLevel, RiskLevel
from supply_radar.taxonomy.source_status import SourceStatus


class RiskIndicator(WireModel):
    name: str
    value: str
    level: IndicatorLevel


class SupplyChainMetric(WireModel):
    name: str
    value: str
    status: IndicatorLevel


# ── Predictor blocks ──────────────────────────────────────────────────────────


class SelectedModel(WireModel):
    """Static description of the production model the nowcast stands in for."""

    name: str
    reason: str
    justification: list[str]


class LiveProxyNowcast(WireModel):
    label: str
    probability_pct: int
    confidence_pct: int
    risk_level: RiskLevel
    method: str


class IndicatorComponent(WireModel):
    name: str
    weight: str


class DisruptionIndicator(WireModel):
    final_aggregated_score: int
    band: IndicatorBand
    label: str
    explanation: str
    components: list[IndicatorComponent]


class ReferenceDatum(WireModel):
    """One raw input the predictor used, tagged with its provenance."""

    name: str
    value: Union[int, float, str]
    source: SourceStatus


class PredictorOutput(WireModel):
    selected_model: SelectedModel
    live_proxy_nowcast: LiveProxyNowcast
    disruption_indicator: DisruptionIndicator
    reference_data: list[ReferenceDatum]
