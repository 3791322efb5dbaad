"""
Headline dashboard metrics: volatility, active disruptions, overall risk.

Formulas (all rounding is half-up)
----------------------------------
    us_move     = mean(change_pct over US indices)      # signed
    metals_move = mean(change_pct over metals)          # signed

    volatility         = clamp(round(|us_move|*8 + |metals_move|*6 + 35), 10, 100)
    active_disruptions = min(99, disaster_recent + kev_recent + floor(news_count / 2))
    overall_risk       = min(100, round(volatility*0.45 + active_disruptions*0.55))

The +35 floor keeps volatility in a readable 10–100 range even on flat days.

Threshold rules
---------------
Risk indicators:
    Geopolitical Tension : HIGH if news_count > 5        else MODERATE
    Cyber Threat Level   : ELEVATED if kev_recent > 15   else MODERATE
    Climate Events       : ELEVATED if disaster_recent > 10 else MODERATE
    Supply Bottlenecks   : always WATCH

Supply-chain KPIs:
    Lead Time Increase   : always DISRUPTED
    Freight Rate Impact  : ELEVATED/ELEVATED if volatility > 55 else STABLE/NORMAL
    Port Congestion      : MODERATE/WATCH if disaster_recent > 8 else LOW/CLEAR
    Cyber Incidents      : HIGH if kev_recent > 15 else MODERATE

The dashboard colour-codes on these exact cut points.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from supply_radar.models.feed import FeedStat
from supply_radar.models.indicator import RiskIndicator, SupplyChainMetric
from supply_radar.models.market import Quote
from supply_radar.models.news import NewsItem
from supply_radar.taxonomy.risk_taxonomy import IndicatorLevel
from supply_radar.utils.numeric import clamp, round_half_up

_FREIGHT_VOLATILITY_CUTOFF = 55
_PORT_CONGESTION_CUTOFF    = 8
_CLIMATE_ELEVATED_CUTOFF   = 10
_CYBER_ELEVATED_CUTOFF     = 15
_GEOPOLITICAL_NEWS_CUTOFF  = 5


@dataclass(frozen=True)
class DashboardMetrics:
    """Headline numbers and derived rows for the summary cards.

    Attributes:
        overall_risk_score:   0–100 blend of volatility and disruption count.
        market_volatility:    10–100 market stress proxy.
        active_disruptions:   0–99 count of live disruption signals.
        risk_indicators:      Four categorical risk rows.
        supply_chain_metrics: Four KPI rows.
    """

    overall_risk_score:   int
    market_volatility:    int
    active_disruptions:   int
    risk_indicators:      list[RiskIndicator]
    supply_chain_metrics: list[SupplyChainMetric]


def avg_move(series: Sequence[Quote]) -> float:
    """Mean signed ``change_pct``; 0.0 for an empty series."""
    return sum(q.change_pct for q in series) / max(len(series), 1)


def avg_abs_move(series: Sequence[Quote]) -> float:
    """Mean of ``|change_pct|``; 0.0 for an empty series."""
    return sum(abs(q.change_pct) for q in series) / max(len(series), 1)


def compute_volatility(us: Sequence[Quote], metals: Sequence[Quote]) -> int:
    raw = abs(avg_move(us)) * 8 + abs(avg_move(metals)) * 6 + 35
    return int(clamp(round_half_up(raw), 10, 100))


def compute_active_disruptions(
    news_count: int,
    disasters: FeedStat,
    vulnerabilities: FeedStat,
) -> int:
    return min(99, disasters.recent_count + vulnerabilities.recent_count + news_count // 2)


def compute_dashboard_metrics(
    metals: Sequence[Quote],
    us: Sequence[Quote],
    news: Sequence[NewsItem],
    disasters: FeedStat,
    vulnerabilities: FeedStat,
) -> DashboardMetrics:
    """Derive the summary metrics and categorical rows.

    Pure function: identical inputs always produce identical output.

    Args:
        metals:          Precious-metal quotes.
        us:              US index quotes.
        news:            Disruption news items (only the count is used).
        disasters:       Disaster registry stat (7-day window).
        vulnerabilities: KEV stat (30-day window).

    Returns:
        ``DashboardMetrics`` with all fields populated.
    """
    us_move    = avg_move(us)
    news_count = len(news)
    disaster_recent = disasters.recent_count
    kev_recent      = vulnerabilities.recent_count

    volatility = compute_volatility(us, metals)
    active     = compute_active_disruptions(news_count, disasters, vulnerabilities)
    risk_score = min(100, round_half_up(volatility * 0.45 + active * 0.55))

    bottleneck_pct = round_half_up(max(15, abs(us_move) * 10 + news_count * 3))

    risk_indicators = [
        RiskIndicator(
            name="Geopolitical Tension",
            value=f"{min(100, news_count * 8 + 20)} / 100",
            level=(
                IndicatorLevel.HIGH if news_count > _GEOPOLITICAL_NEWS_CUTOFF
                else IndicatorLevel.MODERATE
            ),
        ),
        RiskIndicator(
            name="Cyber Threat Level",
            value=f"+{kev_recent} recent KEVs",
            level=(
                IndicatorLevel.ELEVATED if kev_recent > _CYBER_ELEVATED_CUTOFF
                else IndicatorLevel.MODERATE
            ),
        ),
        RiskIndicator(
            name="Climate Events",
            value=f"{disaster_recent} in 7 days",
            level=(
                IndicatorLevel.ELEVATED if disaster_recent > _CLIMATE_ELEVATED_CUTOFF
                else IndicatorLevel.MODERATE
            ),
        ),
        RiskIndicator(
            name="Supply Bottlenecks",
            value=f"{bottleneck_pct}% of firms",
            level=IndicatorLevel.WATCH,
        ),
    ]

    freight_elevated = volatility > _FREIGHT_VOLATILITY_CUTOFF
    port_congested   = disaster_recent > _PORT_CONGESTION_CUTOFF

    supply_chain_metrics = [
        SupplyChainMetric(
            name="Lead Time Increase",
            value=f"+{round_half_up(max(8, active * 0.6))}%",
            status=IndicatorLevel.DISRUPTED,
        ),
        SupplyChainMetric(
            name="Freight Rate Impact",
            value="ELEVATED" if freight_elevated else "STABLE",
            status=IndicatorLevel.ELEVATED if freight_elevated else IndicatorLevel.NORMAL,
        ),
        SupplyChainMetric(
            name="Port Congestion",
            value="MODERATE" if port_congested else "LOW",
            status=IndicatorLevel.WATCH if port_congested else IndicatorLevel.CLEAR,
        ),
        SupplyChainMetric(
            name="Cyber Incidents",
            value=f"{kev_recent} flagged",
            status=(
                IndicatorLevel.HIGH if kev_recent > _CYBER_ELEVATED_CUTOFF
                else IndicatorLevel.MODERATE
            ),
        ),
    ]

    return DashboardMetrics(
        overall_risk_score=risk_score,
        market_volatility=volatility,
        active_disruptions=active,
        risk_indicators=risk_indicators,
        supply_chain_metrics=supply_chain_metrics,
    )
