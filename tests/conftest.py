"""
Shared pytest fixtures for the Supply Radar test suite.

Provides:
  - ``app_config``: the default ``AppConfig`` with a short HTTP timeout.
  - ``fixed_now`` / ``fixed_clock``: a pinned aware UTC datetime.
  - ``oscillator``: a ``SyntheticOscillator`` with pinned clock and seed.
  - ``upstream``: factory for an ``httpx.MockTransport`` that imitates every
    feed; named feeds can be made to fail with HTTP 500.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional
from urllib.parse import unquote

import httpx
import pytest

from supply_radar.config import AppConfig, HttpConfig
from supply_radar.ingestion.oscillator import SyntheticOscillator

FIXED_NOW = datetime(2026, 2, 24, 15, 0, 0, tzinfo=timezone.utc)


# ── Config and clocks ─────────────────────────────────────────────────────────

@pytest.fixture
def app_config() -> AppConfig:
    """Default config with a 2s timeout so a hung mock cannot stall a test."""
    return AppConfig(http=HttpConfig(timeout_seconds=2.0))


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def oscillator() -> SyntheticOscillator:
    """Oscillator pinned to epoch 0 with a seeded jitter source."""
    return SyntheticOscillator(clock=lambda: 0.0, rng=random.Random(7))


# ── Upstream payloads ─────────────────────────────────────────────────────────

def chart_payload(
    price: Optional[float] = 101.0,
    closes: Optional[list] = None,
) -> dict:
    """Quote chart API response with one result."""
    return {
        "chart": {
            "result": [
                {
                    "meta": {"regularMarketPrice": price},
                    "indicators": {
                        "quote": [{"close": closes if closes is not None else [99.0, None, 100.0, 101.0]}]
                    },
                }
            ]
        }
    }


def gdelt_payload(count: int = 3, tone: float = -3.0) -> dict:
    return {
        "articles": [
            {
                "url": f"https://news.example.com/story-{i}",
                "title": f"Port strike day {i}",
                "sourceCommonName": "Example Wire",
                "domain": "news.example.com",
                "seendate": "20260224T120000Z",
                "tone": tone,
                "snippet": "Container backlog grows.",
            }
            for i in range(count)
        ]
    }


def reliefweb_payload() -> dict:
    return {
        "data": [
            {"fields": {"date": {"created": "2026-02-22T08:00:00+00:00"}}},
            {"fields": {"date": {"created": "2026-02-20T08:00:00+00:00"}}},
            {"fields": {"date": {"created": "2026-01-01T00:00:00+00:00"}}},
            {"fields": {}},
        ]
    }


def kev_payload() -> dict:
    return {
        "vulnerabilities": [
            {"cveID": "CVE-2026-0001", "dateAdded": "2026-02-20"},
            {"cveID": "CVE-2026-0002", "dateAdded": "2026-02-01"},
            {"cveID": "CVE-2025-9999", "dateAdded": "2025-11-15"},
            {"cveID": "CVE-2025-9998", "dateAdded": "not-a-date"},
        ]
    }


FEED_HOSTS = {
    "query1.finance.yahoo.com": "quotes",
    "api.gdeltproject.org": "news",
    "api.reliefweb.int": "disasters",
    "www.cisa.gov": "vulnerabilities",
}


def make_upstream(
    failing: Iterable[str] = (),
    quote_prices: Optional[dict[str, float]] = None,
    requests: Optional[list[httpx.Request]] = None,
) -> httpx.MockTransport:
    """Build a transport answering every feed host.

    Args:
        failing:      Feed names (``quotes``, ``news``, ``disasters``,
                      ``vulnerabilities``) that answer HTTP 500.
        quote_prices: Per-symbol ``regularMarketPrice`` overrides.
        requests:     If given, every request is appended here.
    """
    failing = set(failing)
    quote_prices = quote_prices or {}

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        feed = FEED_HOSTS.get(request.url.host)
        if feed is None or feed in failing:
            return httpx.Response(500, json={"error": "upstream down"})
        if feed == "quotes":
            symbol = unquote(request.url.path.rsplit("/", 1)[-1])
            return httpx.Response(200, json=chart_payload(price=quote_prices.get(symbol, 101.0)))
        if feed == "news":
            return httpx.Response(200, json=gdelt_payload())
        if feed == "disasters":
            return httpx.Response(200, json=reliefweb_payload())
        return httpx.Response(200, json=kev_payload())

    return httpx.MockTransport(handler)


@pytest.fixture
def upstream() -> Callable[..., httpx.MockTransport]:
    """Factory fixture: ``upstream(failing={"news"})``."""
    return make_upstream
