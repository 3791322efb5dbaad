"""
Disruption predictor: a hand-tuned logistic nowcast plus a 0–100 indicator.

This is a fixed-formula stand-in for a trained Temporal Fusion Transformer;
nothing here is fitted to data.

Nowcast (probability of disruption in the next 24h)
----------------------------------------------------
    neg_ratio = share of news with tone < -2   (None tone → not negative)
    z = -2.15
        + 0.09  * clamp(vix or 16, 10, 80)
        + 1.35  * neg_ratio
        + 0.045 * disaster_recent
        + 0.018 * kev_recent
        + 0.18  * us_abs_move          # mean |change_pct|
        + 0.10  * metals_abs_move
    raw_probability = clamp(sigmoid(z), 0.01, 0.99)

Confidence
----------
    live_coverage = (market_coverage_pct + news_coverage_pct) / 2
    confidence    = clamp(0.88 - (1 - live_coverage/100) * 0.45, 0.35, 0.92)
    adjusted      = clamp(raw_probability * (0.82 + confidence * 0.28), 0.01, 0.99)

Confidence scales the estimate between 0.918x and 1.078x; it never zeroes it.

    risk_level: HIGH (>= 0.75), ELEVATED (>= 0.50), MODERATE

Aggregated indicator (0–100)
----------------------------
    score = round(clamp(
          adjusted * 100            * 0.55
        + confidence * 100          * 0.20
        + clamp(neg_ratio*100, 0, 100) * 0.15
        + clamp(vix or 0, 0, 100)   * 0.10, 0, 100))

    band: CRITICAL (>= 75), ELEVATED (>= 55), WATCH (>= 35), STABLE

Band lower bounds are inclusive and match the legend shown to users.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from supply_radar.models.feed import CoverageSummary, FeedStat
from supply_radar.models.indicator import (
    DisruptionIndicator,
    IndicatorComponent,
    LiveProxyNowcast,
    PredictorOutput,
    ReferenceDatum,
    SelectedModel,
)
from supply_radar.models.market import Quote
from supply_radar.models.news import NewsItem
from supply_radar.scoring.metrics import avg_abs_move
from supply_radar.taxonomy.risk_taxonomy import IndicatorBand, RiskLevel
from supply_radar.taxonomy.source_status import combine_statuses
from supply_radar.utils.numeric import clamp, round_decimals, round_half_up, sigmoid

# Logistic coefficients
_INTERCEPT        = -2.15
_W_VIX            = 0.09
_W_NEG_NEWS       = 1.35
_W_DISASTERS      = 0.045
_W_KEVS           = 0.018
_W_US_MOVE        = 0.18
_W_METALS_MOVE    = 0.10
_DEFAULT_VIX      = 16.0

_SELECTED_MODEL = SelectedModel(
    name="Temporal Fusion Transformer (TFT)",
    reason=(
        "Best fit for realtime disruption prediction because it handles multivariate "
        "time-series + event covariates while preserving interpretability."
    ),
    justification=[
        "Combines static context (supplier/lane attributes) with temporal signals "
        "(markets, incidents, logistics KPIs).",
        "Attention layers expose which inputs/time windows drove a forecast, "
        "supporting risk review and audit.",
        "Supports multi-horizon forecasting (e.g., 24h/72h/7d), useful for tactical "
        "and planning workflows.",
    ],
)

_INDICATOR_COMPONENTS = [
    IndicatorComponent(name="Predicted disruption probability", weight="55%"),
    IndicatorComponent(name="Model confidence", weight="20%"),
    IndicatorComponent(name="Negative disruption-news intensity", weight="15%"),
    IndicatorComponent(name="Market stress proxy (VIX)", weight="10%"),
]


@dataclass(frozen=True)
class NowcastComponents:
    """Every intermediate quantity of the nowcast, for display and testing.

    Attributes:
        z:                    Linear score before the sigmoid.
        raw_probability:      clamp(sigmoid(z), 0.01, 0.99).
        confidence:           Coverage-driven confidence, 0.35–0.92.
        adjusted_probability: Confidence-modulated probability, 0.01–0.99.
        negative_news_ratio:  Share of news items with tone < -2.
        indicator_score:      Final aggregated indicator, 0–100.
        risk_level:           Nowcast class from ``adjusted_probability``.
        band:                 Indicator class from ``indicator_score``.
    """

    z:                    float
    raw_probability:      float
    confidence:           float
    adjusted_probability: float
    negative_news_ratio:  float
    indicator_score:      int
    risk_level:           RiskLevel
    band:                 IndicatorBand


def negative_news_ratio(news: Sequence[NewsItem]) -> float:
    if not news:
        return 0.0
    return sum(1 for item in news if item.is_negative) / len(news)


def classify_risk_level(adjusted_probability: float) -> RiskLevel:
    if adjusted_probability >= 0.75:
        return RiskLevel.HIGH
    if adjusted_probability >= 0.5:
        return RiskLevel.ELEVATED
    return RiskLevel.MODERATE


def classify_band(indicator_score: float) -> IndicatorBand:
    """Map a 0–100 indicator score to its legend band (inclusive lower bounds)."""
    if indicator_score >= 75:
        return IndicatorBand.CRITICAL
    if indicator_score >= 55:
        return IndicatorBand.ELEVATED
    if indicator_score >= 35:
        return IndicatorBand.WATCH
    return IndicatorBand.STABLE


def compute_nowcast(
    vix_price:            Optional[float],
    neg_ratio:            float,
    disaster_recent:      int,
    kev_recent:           int,
    us_abs_move:          float,
    metals_abs_move:      float,
    market_coverage_pct:  float,
    news_coverage_pct:    float,
) -> NowcastComponents:
    """Evaluate the logistic nowcast and aggregated indicator.

    Pure function of its arguments.

    Args:
        vix_price:           Latest VIX level; ``None``/0 uses 16 in the
                             logistic term and 0 in the indicator term.
        neg_ratio:           Negative-news ratio, 0–1.
        disaster_recent:     Disasters in the last 7 days.
        kev_recent:          KEV additions in the last 30 days.
        us_abs_move:         Mean |change_pct| over US indices.
        metals_abs_move:     Mean |change_pct| over metals.
        market_coverage_pct: Realtime coverage of market quotes, 0–100.
        news_coverage_pct:   Realtime coverage of news items, 0–100.

    Returns:
        ``NowcastComponents`` with all fields populated.
    """
    z = (
        _INTERCEPT
        + _W_VIX         * clamp(vix_price or _DEFAULT_VIX, 10, 80)
        + _W_NEG_NEWS    * neg_ratio
        + _W_DISASTERS   * disaster_recent
        + _W_KEVS        * kev_recent
        + _W_US_MOVE     * us_abs_move
        + _W_METALS_MOVE * metals_abs_move
    )
    raw_probability = clamp(sigmoid(z), 0.01, 0.99)

    live_coverage = (market_coverage_pct + news_coverage_pct) / 2
    confidence_penalty = 1 - live_coverage / 100
    confidence = clamp(0.88 - confidence_penalty * 0.45, 0.35, 0.92)
    adjusted = clamp(raw_probability * (0.82 + confidence * 0.28), 0.01, 0.99)

    indicator_score = round_half_up(clamp(
        adjusted * 100 * 0.55
        + confidence * 100 * 0.20
        + clamp(neg_ratio * 100, 0, 100) * 0.15
        + clamp(vix_price or 0, 0, 100) * 0.10,
        0,
        100,
    ))

    return NowcastComponents(
        z=z,
        raw_probability=raw_probability,
        confidence=confidence,
        adjusted_probability=adjusted,
        negative_news_ratio=neg_ratio,
        indicator_score=indicator_score,
        risk_level=classify_risk_level(adjusted),
        band=classify_band(indicator_score),
    )


def build_disruption_predictor(
    us:              Sequence[Quote],
    metals:          Sequence[Quote],
    vix:             Quote,
    news:            Sequence[NewsItem],
    disasters:       FeedStat,
    vulnerabilities: FeedStat,
    market_coverage: CoverageSummary,
    news_coverage:   CoverageSummary,
) -> PredictorOutput:
    """Assemble the predictor block of the dashboard payload.

    Reference rows repeat each raw input with its provenance.  Rows derived
    from several records use ``combine_statuses`` over those records.
    """
    us_abs     = avg_abs_move(us)
    metals_abs = avg_abs_move(metals)
    neg_ratio  = negative_news_ratio(news)

    nowcast = compute_nowcast(
        vix_price=vix.price,
        neg_ratio=neg_ratio,
        disaster_recent=disasters.recent_count,
        kev_recent=vulnerabilities.recent_count,
        us_abs_move=us_abs,
        metals_abs_move=metals_abs,
        market_coverage_pct=market_coverage.realtime_coverage_pct,
        news_coverage_pct=news_coverage.realtime_coverage_pct,
    )

    reference_data = [
        ReferenceDatum(
            name="VIX (market stress)",
            value=round_decimals(vix.price or 0, 2),
            source=vix.source_status,
        ),
        ReferenceDatum(
            name="Negative disruption-news ratio",
            value=f"{round_half_up(neg_ratio * 100)}%",
            source=combine_statuses(n.source_status for n in news),
        ),
        ReferenceDatum(
            name="ReliefWeb disasters (last 7d)",
            value=disasters.recent_count,
            source=disasters.source_status,
        ),
        ReferenceDatum(
            name="CISA KEV additions (last 30d)",
            value=vulnerabilities.recent_count,
            source=vulnerabilities.source_status,
        ),
        ReferenceDatum(
            name="US index avg abs move",
            value=f"{round_decimals(us_abs, 2):.2f}%",
            source=combine_statuses(q.source_status for q in us),
        ),
        ReferenceDatum(
            name="Metals avg abs move",
            value=f"{round_decimals(metals_abs, 2):.2f}%",
            source=combine_statuses(q.source_status for q in metals),
        ),
    ]

    return PredictorOutput(
        selected_model=_SELECTED_MODEL,
        live_proxy_nowcast=LiveProxyNowcast(
            label="Realtime disruption probability (next 24h)",
            probability_pct=round_half_up(nowcast.adjusted_probability * 100),
            confidence_pct=round_half_up(nowcast.confidence * 100),
            risk_level=nowcast.risk_level,
            method=(
                "Streaming logistic nowcast calibrated from current reference signals "
                "(used as online proxy until a trained TFT is deployed)."
            ),
        ),
        disruption_indicator=DisruptionIndicator(
            final_aggregated_score=nowcast.indicator_score,
            band=nowcast.band,
            label="Final Aggregated Disruption Indicator",
            explanation=(
                "Composite score (0-100) blending predicted probability, model confidence, "
                "negative-news intensity, and market stress proxy (VIX)."
            ),
            components=_INDICATOR_COMPONENTS,
        ),
        reference_data=reference_data,
    )
