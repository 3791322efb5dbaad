"""
Dashboard assembly: fan out every feed, then score and shape the payload.

``DashboardAssembler.build()`` runs in two phases:

  Phase 1, fetch:     All 17 quotes, the news query, the disaster query and
                      the KEV query run concurrently on one shared
                      ``httpx.AsyncClient``.  Each fetch is a
                      ``ResilientSource`` so no upstream failure escapes.
  Phase 2, aggregate: coverage → metrics → predictor → payload, in order.
                      Each step runs inside ``_stage()``, which re-raises any
                      error as ``AggregationError`` naming the stage and the
                      feeds it consumed.

Nothing is cached between builds; every call re-fetches every feed.

Usage::

    assembler = DashboardAssembler(config)
    payload = await assembler.build()       # inside an event loop
    payload = assembler.build_sync()        # from the CLI
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime
from typing import Optional

import httpx

from supply_radar.config import AppConfig, TickerSpec
from supply_radar.ingestion.disaster_client import DisasterClient
from supply_radar.ingestion.news_client import NewsClient
from supply_radar.ingestion.oscillator import SyntheticOscillator
from supply_radar.ingestion.quote_client import QuoteClient
from supply_radar.ingestion.vulnerability_client import VulnerabilityClient
from supply_radar.models.dashboard import (
    CoverageBlock,
    DashboardPayload,
    DataSources,
    RealtimeAnswer,
)
from supply_radar.models.feed import FeedStat
from supply_radar.models.market import Quote
from supply_radar.models.news import NewsItem
from supply_radar.scoring.coverage import summarize_sources
from supply_radar.scoring.metrics import compute_dashboard_metrics
from supply_radar.scoring.predictor import build_disruption_predictor
from supply_radar.taxonomy.source_status import SourceMode, SourceStatus, combine_statuses
from supply_radar.utils.time_utils import to_iso, utcnow

logger = logging.getLogger(__name__)


class AggregationError(RuntimeError):
    """Raised when a post-fetch aggregation step fails.

    The original exception is chained as ``__cause__``.

    Attributes:
        stage: Aggregation step that failed (``coverage``, ``metrics``, ...).
        feed:  Feeds whose records the step was processing.
    """

    def __init__(self, stage: str, feed: str, detail: str) -> None:
        self.stage = stage
        self.feed = feed
        super().__init__(f"Aggregation stage '{stage}' failed on feed '{feed}': {detail}")


@contextmanager
def _stage(stage: str, feed: str) -> Iterator[None]:
    try:
        yield
    except AggregationError:
        raise
    except Exception as exc:
        raise AggregationError(stage, feed, f"{type(exc).__name__}: {exc}") from exc


class DashboardAssembler:
    """Builds one ``DashboardPayload`` per call from live or fallback data.

    Args:
        config:     Application config; the ticker universe, endpoints and
                    fallback constants all come from here.
        transport:  Optional ``httpx`` transport (tests pass a
                    ``MockTransport``).  ``None`` uses the real network.
        oscillator: Synthetic change generator.  Default: wall-clock driven.
        clock:      Returns the current aware UTC datetime.  Default ``utcnow``.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        oscillator: Optional[SyntheticOscillator] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.config = config
        self._transport = transport
        self._clock = clock or utcnow
        self.quotes = QuoteClient(config, oscillator or SyntheticOscillator())
        self.news = NewsClient(config, clock=self._clock)
        self.disasters = DisasterClient(config, clock=self._clock)
        self.vulnerabilities = VulnerabilityClient(config, clock=self._clock)

    def build_sync(self) -> DashboardPayload:
        """Run ``build()`` on a fresh event loop."""
        return asyncio.run(self.build())

    async def build(self) -> DashboardPayload:
        """Fetch every feed concurrently and assemble the dashboard payload.

        Returns:
            A fully populated ``DashboardPayload``.

        Raises:
            AggregationError: If a post-fetch aggregation step fails.  Upstream
                failures never raise; they surface as SIMULATED records.
        """
        tickers = self.config.tickers
        groups: list[list[TickerSpec]] = [tickers.metals, tickers.us, tickers.apac, tickers.eu]
        all_tickers = [spec for group in groups for spec in group] + [tickers.vix]

        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self.config.http.timeout_seconds,
            follow_redirects=True,
        ) as client:
            results = await asyncio.gather(
                *(self.quotes.fetch(client, spec) for spec in all_tickers),
                self.news.fetch(client),
                self.disasters.fetch(client),
                self.vulnerabilities.fetch(client),
            )

        quotes: list[Quote] = list(results[: len(all_tickers)])
        news: list[NewsItem] = results[len(all_tickers)]
        disasters: FeedStat = results[len(all_tickers) + 1]
        vulnerabilities: FeedStat = results[len(all_tickers) + 2]

        bounds = _group_bounds([len(g) for g in groups])
        metals, us, apac, eu = (quotes[start:end] for start, end in bounds)
        vix = quotes[-1]

        return self.assemble(
            metals=metals,
            us=us,
            apac=apac,
            eu=eu,
            vix=vix,
            news=news,
            disasters=disasters,
            vulnerabilities=vulnerabilities,
        )

    def assemble(
        self,
        metals:          Sequence[Quote],
        us:              Sequence[Quote],
        apac:            Sequence[Quote],
        eu:              Sequence[Quote],
        vix:             Quote,
        news:            Sequence[NewsItem],
        disasters:       FeedStat,
        vulnerabilities: FeedStat,
    ) -> DashboardPayload:
        """Phase 2: aggregate already-fetched records into the payload."""
        market_quotes = [*metals, *us, *apac, *eu, vix]

        with _stage("coverage", "markets"):
            market_coverage = summarize_sources(market_quotes)
        with _stage("coverage", "news"):
            news_coverage = summarize_sources(news)

        with _stage("metrics", "markets+news+disasters+vulnerabilities"):
            metrics = compute_dashboard_metrics(metals, us, news, disasters, vulnerabilities)

        with _stage("predictor", "markets+news+disasters+vulnerabilities"):
            predictor = build_disruption_predictor(
                us=us,
                metals=metals,
                vix=vix,
                news=news,
                disasters=disasters,
                vulnerabilities=vulnerabilities,
                market_coverage=market_coverage,
                news_coverage=news_coverage,
            )

        with _stage("payload", "all"):
            all_live = (
                market_coverage.all_live
                and news_coverage.all_live
                and disasters.source_status == SourceStatus.LIVE
                and vulnerabilities.source_status == SourceStatus.LIVE
            )
            payload = DashboardPayload(
                updated_at=to_iso(self._clock()),
                source_mode=SourceMode.LIVE if all_live else SourceMode.HYBRID,
                realtime_answer=RealtimeAnswer(
                    prices_all_realtime=market_coverage.all_live,
                    disruption_news_all_realtime=news_coverage.all_live,
                ),
                coverage=CoverageBlock(
                    markets=market_coverage,
                    disruption_news=news_coverage,
                ),
                data_sources=DataSources(
                    markets=combine_statuses(q.source_status for q in market_quotes),
                    disruptions_news=combine_statuses(n.source_status for n in news),
                    climate_events=disasters.source_status,
                    cyber_feed=vulnerabilities.source_status,
                ),
                predictor=predictor,
                vix=vix,
                metals=list(metals),
                us=list(us),
                apac=list(apac),
                eu=list(eu),
                news=list(news),
                overall_risk_score=metrics.overall_risk_score,
                market_volatility=metrics.market_volatility,
                active_disruptions=metrics.active_disruptions,
                risk_indicators=metrics.risk_indicators,
                supply_chain_metrics=metrics.supply_chain_metrics,
            )

        logger.info(
            "Dashboard built | source_mode=%s | markets=%d/%d live | news=%d/%d live | "
            "disasters=%s | kev=%s",
            payload.source_mode,
            market_coverage.live, market_coverage.total,
            news_coverage.live, news_coverage.total,
            disasters.source_status, vulnerabilities.source_status,
        )
        return payload


def _group_bounds(sizes: list[int]) -> list[tuple[int, int]]:
    """Turn group sizes ``[4, 4, 4, 4]`` into slice bounds ``[(0, 4), (4, 8), ...]``."""
    bounds: list[tuple[int, int]] = []
    start = 0
    for size in sizes:
        bounds.append((start, start + size))
        start += size
    return bounds
