"""
The complete dashboard response document.

``DashboardPayload.to_wire()`` yields exactly the JSON shape the browser UI
consumes.  Any field rename here is a breaking change for that collaborator.
"""

from __future__ import annotations

from supply_radar.models.base import WireModel
from supply_radar.models.feed import CoverageSummary
from supply_radar.models.indicator import PredictorOutput, RiskIndicator, SupplyChainMetric
from supply_radar.models.market import Quote
from supply_radar.models.news import NewsItem
from supply_radar.taxonomy.source_status import SourceMode, SourceStatus


class RealtimeAnswer(WireModel):
    prices_all_realtime: bool
    disruption_news_all_realtime: bool


class CoverageBlock(WireModel):
    markets: CoverageSummary
    disruption_news: CoverageSummary


class DataSources(WireModel):
    markets: SourceStatus
    disruptions_news: SourceStatus
    climate_events: SourceStatus
    cyber_feed: SourceStatus


class DashboardPayload(WireModel):
    """Everything ``GET /api/dashboard`` returns."""

    updated_at: str
    source_mode: SourceMode
    realtime_answer: RealtimeAnswer
    coverage: CoverageBlock
    data_sources: DataSources
    predictor: PredictorOutput
    vix: Quote
    metals: list[Quote]
    us: list[Quote]
    apac: list[Quote]
    eu: list[Quote]
    news: list[NewsItem]
    overall_risk_score: int
    market_volatility: int
    active_disruptions: int
    risk_indicators: list[RiskIndicator]
    supply_chain_metrics: list[SupplyChainMetric]
