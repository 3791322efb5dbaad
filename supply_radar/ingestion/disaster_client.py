"""
ReliefWeb disasters client: count of recently declared disasters.

API:   POST https://api.reliefweb.int/v1/disasters
Body:  {"appname": ..., "limit": 20, "profile": "full", "sort": ["date:desc"],
        "query": {"value": "disaster OR cyclone OR flood OR drought OR wildfire"}}

No API key required; ``appname`` identifies the caller.

Result:
  ``recent_count`` = entries whose ``fields.date.created`` is within the last
  ``feeds.disaster_window_days`` days; ``total`` = entries returned.
  Missing or unparseable dates are not recent.

Fallback: ``fallbacks.disaster_recent`` / ``fallbacks.disaster_total``
(9 / 20 by default), tagged SIMULATED.
"""

from __future__ import annotations

from typing import Any

import httpx

from supply_radar.config import AppConfig
from supply_radar.ingestion.resilient import ResilientSource, dig, expect_mapping, post_json
from supply_radar.models.feed import FeedStat
from supply_radar.taxonomy.source_status import SourceStatus
from supply_radar.utils.time_utils import is_within_days, utcnow

SOURCE_NAME = "disasters:reliefweb"


class DisasterClient:
    """Windowed disaster count from the ReliefWeb registry."""

    def __init__(self, config: AppConfig, clock=utcnow) -> None:
        self.config = config
        self._clock = clock

    def source(self) -> ResilientSource[FeedStat]:
        return ResilientSource(
            name=SOURCE_NAME,
            fetch_remote=self._query_disasters,
            parse=self.parse_disasters,
            fallback=self.fallback_stat,
            timeout_seconds=self.config.http.timeout_seconds,
        )

    async def fetch(self, client: httpx.AsyncClient) -> FeedStat:
        return await self.source().fetch(client)

    async def _query_disasters(self, client: httpx.AsyncClient) -> Any:
        feeds = self.config.feeds
        body = {
            "appname": feeds.disaster_appname,
            "limit": feeds.disaster_limit,
            "profile": "full",
            "sort": ["date:desc"],
            "query": {"value": feeds.disaster_query},
        }
        return await post_json(client, feeds.disaster_url, body)

    def parse_disasters(self, payload: Any) -> FeedStat:
        body = expect_mapping(SOURCE_NAME, payload, "response")
        data = body.get("data")
        entries = data if isinstance(data, list) else []
        now = self._clock()
        window = self.config.feeds.disaster_window_days
        recent = sum(
            1 for entry in entries
            if is_within_days(dig(entry, "fields", "date", "created"), now, window)
        )
        return FeedStat(
            recent_count=recent,
            total=len(entries),
            window_days=window,
            source_status=SourceStatus.LIVE,
        )

    def fallback_stat(self) -> FeedStat:
        fallbacks = self.config.fallbacks
        return FeedStat(
            recent_count=fallbacks.disaster_recent,
            total=fallbacks.disaster_total,
            window_days=self.config.feeds.disaster_window_days,
            source_status=SourceStatus.SIMULATED,
        )
