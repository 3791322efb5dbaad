"""
GDELT DOC API client: disruption news with sentiment tone.

API:   https://api.gdeltproject.org/api/v2/doc/doc
Query: (supply chain OR logistics OR shipping), artlist mode, newest first,
       capped at ``feeds.news_max_records`` articles.

No API key required.

Fallback:
  When GDELT is unreachable or returns something other than a JSON object,
  four pre-written SIMULATED items are returned.  They cover the four
  disruption categories the scoring layer cares about (geopolitical,
  shipping, cyber, climate) and three of them carry tone < -2, so the
  negative-news ratio stays meaningful in degraded mode.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, ClassVar

import httpx

from supply_radar.config import AppConfig
from supply_radar.ingestion.resilient import ResilientSource, expect_mapping, get_json
from supply_radar.models.news import NewsItem
from supply_radar.taxonomy.source_status import SourceStatus
from supply_radar.utils.time_utils import to_iso, utcnow

logger = logging.getLogger(__name__)

SOURCE_NAME = "news:gdelt"


class NewsClient:
    """Fetch disruption news from GDELT with a fixed fallback set.

    Args:
        config: Application config (endpoint, query, record cap, timeout).
        clock:  Returns the current aware UTC datetime; fallback items are
                timestamped relative to it.
    """

    FALLBACK_ITEMS: ClassVar[list[dict]] = [
        {
            "id": "fallback-1",
            "title": "Geopolitical Tensions Drive Trade Disruptions",
            "source": "Global Logistics Desk",
            "minutes_ago": 20,
            "tone": -4.2,
            "summary": (
                "Cross-border tariff negotiations and sanctions continue to increase "
                "uncertainty in manufacturing and ocean freight lanes."
            ),
        },
        {
            "id": "fallback-2",
            "title": "Red Sea Security Issues Affect Shipping Routes",
            "source": "Maritime Watch",
            "minutes_ago": 90,
            "tone": -3.6,
            "summary": (
                "Shipping operators are rerouting vessels, increasing average transit "
                "times and spot container rates."
            ),
        },
        {
            "id": "fallback-3",
            "title": "Cyber Alerts Up for ERP and Warehouse Platforms",
            "source": "Cyber Threat Bulletin",
            "minutes_ago": 180,
            "tone": -2.2,
            "summary": (
                "Recent advisories flag vulnerabilities in supply-chain software used "
                "for planning, inventory, and procurement."
            ),
        },
        {
            "id": "fallback-4",
            "title": "Flooding Events Pressure Regional Transport Hubs",
            "source": "Climate Risk Monitor",
            "minutes_ago": 240,
            "tone": -1.8,
            "summary": (
                "Heavy rainfall disruptions continue to impact rail throughput and "
                "first-mile trucking in multiple regions."
            ),
        },
    ]

    def __init__(self, config: AppConfig, clock=utcnow) -> None:
        self.config = config
        self._clock = clock

    def source(self) -> ResilientSource[list[NewsItem]]:
        return ResilientSource(
            name=SOURCE_NAME,
            fetch_remote=self._fetch_articles,
            parse=self.parse_articles,
            fallback=self.fallback_items,
            timeout_seconds=self.config.http.timeout_seconds,
        )

    async def fetch(self, client: httpx.AsyncClient) -> list[NewsItem]:
        return await self.source().fetch(client)

    # ── Internal ──────────────────────────────────────────────────────────────

    async def _fetch_articles(self, client: httpx.AsyncClient) -> Any:
        feeds = self.config.feeds
        return await get_json(
            client,
            feeds.news_url,
            params={
                "query": feeds.news_query,
                "mode": "artlist",
                "format": "json",
                "maxrecords": feeds.news_max_records,
                "sort": "datedesc",
            },
            headers={"User-Agent": self.config.http.user_agent},
        )

    def parse_articles(self, payload: Any) -> list[NewsItem]:
        """Map a GDELT ``artlist`` payload to LIVE news items.

        A payload without an ``articles`` list is a valid, empty result.
        """
        body = expect_mapping(SOURCE_NAME, payload, "response")
        articles = body.get("articles")
        if not isinstance(articles, list):
            return []

        now_iso = to_iso(self._clock())
        items: list[NewsItem] = []
        for index, article in enumerate(articles):
            if not isinstance(article, dict):
                article = {}
            tone = article.get("tone")
            items.append(
                NewsItem(
                    id=str(article.get("url") or index),
                    title=article.get("title") or "Untitled event",
                    source=article.get("sourceCommonName") or "Unknown source",
                    domain=article.get("domain") or "",
                    published_at=article.get("seendate") or now_iso,
                    tone=tone if isinstance(tone, (int, float)) and not isinstance(tone, bool) else None,
                    url=article.get("url") or "#",
                    summary=article.get("snippet") or "No summary available.",
                    source_status=SourceStatus.LIVE,
                )
            )
        return items

    def fallback_items(self) -> list[NewsItem]:
        now: datetime = self._clock()
        return [
            NewsItem(
                id=item["id"],
                title=item["title"],
                source=item["source"],
                published_at=to_iso(now - timedelta(minutes=item["minutes_ago"])),
                tone=item["tone"],
                url="#",
                summary=item["summary"],
                source_status=SourceStatus.SIMULATED,
            )
            for item in self.FALLBACK_ITEMS
        ]
