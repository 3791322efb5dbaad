"""
CISA Known Exploited Vulnerabilities (KEV) client.

Feed: https://www.cisa.gov/sites/default/files/feeds/known_exploited_vulnerabilities.json

A flat JSON document; ``vulnerabilities`` is a list of entries with a
``dateAdded`` (``YYYY-MM-DD``) field.

Result:
  ``recent_count`` = entries added within ``feeds.vulnerability_window_days``
  (30 by default); ``total`` = catalogue size.

Fallback: ``fallbacks.vulnerability_recent`` / ``fallbacks.vulnerability_total``
(23 / 1210 by default), tagged SIMULATED.
"""

from __future__ import annotations

from typing import Any

import httpx

from supply_radar.config import AppConfig
from supply_radar.ingestion.resilient import ResilientSource, dig, expect_mapping, get_json
from supply_radar.models.feed import FeedStat
from supply_radar.taxonomy.source_status import SourceStatus
from supply_radar.utils.time_utils import is_within_days, utcnow

SOURCE_NAME = "vulnerabilities:cisa_kev"


class VulnerabilityClient:
    """Windowed KEV addition count."""

    def __init__(self, config: AppConfig, clock=utcnow) -> None:
        self.config = config
        self._clock = clock

    def source(self) -> ResilientSource[FeedStat]:
        return ResilientSource(
            name=SOURCE_NAME,
            fetch_remote=self._fetch_catalogue,
            parse=self.parse_catalogue,
            fallback=self.fallback_stat,
            timeout_seconds=self.config.http.timeout_seconds,
        )

    async def fetch(self, client: httpx.AsyncClient) -> FeedStat:
        return await self.source().fetch(client)

    async def _fetch_catalogue(self, client: httpx.AsyncClient) -> Any:
        return await get_json(client, self.config.feeds.vulnerability_url)

    def parse_catalogue(self, payload: Any) -> FeedStat:
        body = expect_mapping(SOURCE_NAME, payload, "response")
        vulns = body.get("vulnerabilities")
        entries = vulns if isinstance(vulns, list) else []
        now = self._clock()
        window = self.config.feeds.vulnerability_window_days
        recent = sum(
            1 for entry in entries
            if is_within_days(dig(entry, "dateAdded"), now, window)
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
            recent_count=fallbacks.vulnerability_recent,
            total=fallbacks.vulnerability_total,
            window_days=self.config.feeds.vulnerability_window_days,
            source_status=SourceStatus.SIMULATED,
        )
