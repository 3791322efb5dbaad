"""
Tests for supply_radar/pipeline/assembler.py.

What we test
------------
DashboardAssembler.build():
  - Every upstream healthy → sourceMode "live", all realtime flags true.
  - News upstream down → sourceMode "hybrid", disruptionNews 0 live / 4 total.
  - Everything down → still a full payload, all SIMULATED.
  - Fan-out issues exactly 17 quote requests + 1 of each registry feed.
  - Wire document carries every top-level key the dashboard reads.

Aggregation errors:
  - A failing scoring step surfaces as AggregationError with stage and feed,
    chained to the original exception.
"""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import httpx
import pytest

from supply_radar.pipeline.assembler import AggregationError, DashboardAssembler
from supply_radar.taxonomy.source_status import SourceMode, SourceStatus

_WIRE_KEYS = {
    "updatedAt", "sourceMode", "realtimeAnswer", "coverage", "dataSources",
    "predictor", "vix", "metals", "us", "apac", "eu", "news",
    "overallRiskScore", "marketVolatility", "activeDisruptions",
    "riskIndicators", "supplyChainMetrics",
}


def _assembler(config, transport, oscillator, clock) -> DashboardAssembler:
    return DashboardAssembler(config, transport=transport, oscillator=oscillator, clock=clock)


# ── Scenarios ─────────────────────────────────────────────────────────────────

class TestBuildScenarios:
    def test_all_live(self, app_config, upstream, oscillator, fixed_clock):
        payload = _assembler(app_config, upstream(), oscillator, fixed_clock).build_sync()

        assert payload.source_mode == SourceMode.LIVE
        assert payload.realtime_answer.prices_all_realtime is True
        assert payload.realtime_answer.disruption_news_all_realtime is True
        assert payload.coverage.markets.total == 17
        assert payload.coverage.markets.realtime_coverage_pct == 100
        assert payload.coverage.disruption_news.total == 3
        assert payload.data_sources.markets == SourceStatus.LIVE
        assert payload.data_sources.climate_events == SourceStatus.LIVE
        assert payload.updated_at == "2026-02-24T15:00:00.000Z"

    def test_news_down_is_hybrid(self, app_config, upstream, oscillator, fixed_clock):
        transport = upstream(failing={"news"})
        payload = _assembler(app_config, transport, oscillator, fixed_clock).build_sync()

        assert payload.source_mode == SourceMode.HYBRID
        assert payload.coverage.disruption_news.live == 0
        assert payload.coverage.disruption_news.total == 4
        assert payload.realtime_answer.prices_all_realtime is True
        assert payload.realtime_answer.disruption_news_all_realtime is False
        assert payload.data_sources.disruptions_news == SourceStatus.SIMULATED
        assert [n.id for n in payload.news][0] == "fallback-1"

    def test_everything_down_still_builds(self, app_config, upstream, oscillator, fixed_clock):
        transport = upstream(failing={"quotes", "news", "disasters", "vulnerabilities"})
        payload = _assembler(app_config, transport, oscillator, fixed_clock).build_sync()

        assert payload.source_mode == SourceMode.HYBRID
        assert payload.coverage.markets.live == 0
        assert payload.data_sources.markets == SourceStatus.SIMULATED
        assert payload.data_sources.cyber_feed == SourceStatus.SIMULATED
        assert payload.vix.source_status == SourceStatus.SIMULATED
        assert payload.predictor.live_proxy_nowcast.confidence_pct == 43
        assert all(q.price > 0 for q in [*payload.metals, *payload.us, *payload.apac, *payload.eu])

    def test_partial_markets_are_hybrid(self, app_config, oscillator, fixed_clock):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "query1.finance.yahoo.com" and "GSPC" in str(request.url):
                return httpx.Response(500)
            if request.url.host == "query1.finance.yahoo.com":
                return httpx.Response(200, json={"chart": {"result": [
                    {"meta": {"regularMarketPrice": 50.0}, "indicators": {"quote": [{"close": [49.0, 50.0]}]}}
                ]}})
            if request.url.host == "api.gdeltproject.org":
                return httpx.Response(200, json={"articles": []})
            if request.url.host == "api.reliefweb.int":
                return httpx.Response(200, json={"data": []})
            return httpx.Response(200, json={"vulnerabilities": []})

        payload = _assembler(
            app_config, httpx.MockTransport(handler), oscillator, fixed_clock
        ).build_sync()

        assert payload.coverage.markets.live == 16
        assert payload.coverage.markets.simulated == 1
        assert payload.data_sources.markets == SourceStatus.HYBRID
        assert payload.source_mode == SourceMode.HYBRID

    def test_groups_keep_config_order(self, app_config, upstream, oscillator, fixed_clock):
        payload = _assembler(app_config, upstream(), oscillator, fixed_clock).build_sync()
        tickers = app_config.tickers
        assert [q.symbol for q in payload.metals] == [t.symbol for t in tickers.metals]
        assert [q.symbol for q in payload.eu] == [t.symbol for t in tickers.eu]
        assert payload.vix.symbol == "^VIX"


class TestFanOut:
    def test_one_request_per_feed(self, app_config, upstream, oscillator, fixed_clock):
        seen: list[httpx.Request] = []
        transport = upstream(requests=seen)
        _assembler(app_config, transport, oscillator, fixed_clock).build_sync()

        hosts = [r.url.host for r in seen]
        assert hosts.count("query1.finance.yahoo.com") == 17
        assert hosts.count("api.gdeltproject.org") == 1
        assert hosts.count("api.reliefweb.int") == 1
        assert hosts.count("www.cisa.gov") == 1

    def test_build_awaitable(self, app_config, upstream, oscillator, fixed_clock):
        assembler = _assembler(app_config, upstream(), oscillator, fixed_clock)
        payload = asyncio.run(assembler.build())
        assert payload.source_mode == SourceMode.LIVE


class TestWireDocument:
    def test_top_level_keys(self, app_config, upstream, oscillator, fixed_clock):
        wire = _assembler(app_config, upstream(), oscillator, fixed_clock).build_sync().to_wire()
        assert set(wire) == _WIRE_KEYS
        assert wire["sourceMode"] == "live"
        assert wire["vix"]["dataSourceStatus"] == "live"
        assert set(wire["dataSources"]) == {"markets", "disruptionsNews", "climateEvents", "cyberFeed"}
        assert set(wire["coverage"]) == {"markets", "disruptionNews"}
        assert len(wire["predictor"]["referenceData"]) == 6


# ── Aggregation errors ────────────────────────────────────────────────────────

class TestAggregationError:
    def test_metrics_failure_is_wrapped(self, app_config, upstream, oscillator, fixed_clock):
        assembler = _assembler(app_config, upstream(), oscillator, fixed_clock)
        with patch(
            "supply_radar.pipeline.assembler.compute_dashboard_metrics",
            side_effect=ZeroDivisionError("bad divisor"),
        ):
            with pytest.raises(AggregationError) as excinfo:
                assembler.build_sync()

        err = excinfo.value
        assert err.stage == "metrics"
        assert "news" in err.feed
        assert isinstance(err.__cause__, ZeroDivisionError)
        assert "bad divisor" in str(err)

    def test_predictor_failure_is_wrapped(self, app_config, upstream, oscillator, fixed_clock):
        assembler = _assembler(app_config, upstream(), oscillator, fixed_clock)
        with patch(
            "supply_radar.pipeline.assembler.build_disruption_predictor",
            side_effect=ValueError("nan"),
        ):
            with pytest.raises(AggregationError) as excinfo:
                assembler.build_sync()
        assert excinfo.value.stage == "predictor"
