"""
Quote chart client: latest price and daily change for one ticker.

API:   https://query1.finance.yahoo.com/v8/finance/chart/{symbol}?range=5d&interval=1d

No API key required.  One bounded attempt per request, no retry.

Response fields used (all access guarded)::

    chart.result[0].meta.regularMarketPrice   → latest price (preferred)
    chart.result[0].indicators.quote[0].close → daily closes (nulls skipped)

Change computation:
  - latest = regularMarketPrice if numeric, else last numeric close.
  - prev   = second-to-last numeric close.
  - change_pct = (latest - prev) / prev * 100.
  - No usable prev, or a latest of 0 → synthetic oscillator value, record
    stays LIVE.  A 0 price is shown as ``"—"``.
  - No usable latest → shape error → SIMULATED fallback:
        change_pct = oscillator(fallback_base)
        price      = fallback_base * (1 + change_pct / 100)
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote as url_quote

import httpx

from supply_radar.config import AppConfig, TickerSpec
from supply_radar.ingestion.oscillator import SyntheticOscillator
from supply_radar.ingestion.resilient import FeedShapeError, ResilientSource, dig, get_json
from supply_radar.models.market import Quote
from supply_radar.taxonomy.source_status import SourceStatus


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class QuoteClient:
    """Builds a ``ResilientSource[Quote]`` per ticker.

    Usage::

        client = QuoteClient(config, oscillator)
        quote = await client.source_for(config.tickers.vix).fetch(http)

    Attributes:
        config: Application config (URL template, timeout, user agent).
        oscillator: Source of synthetic percent changes.
    """

    def __init__(self, config: AppConfig, oscillator: SyntheticOscillator) -> None:
        self.config = config
        self.oscillator = oscillator

    def source_for(self, ticker: TickerSpec) -> ResilientSource[Quote]:
        return ResilientSource(
            name=f"quote:{ticker.symbol}",
            fetch_remote=lambda client: self._fetch_chart(client, ticker.symbol),
            parse=lambda payload: self.parse_chart(payload, ticker),
            fallback=lambda: self.simulated_quote(ticker),
            timeout_seconds=self.config.http.timeout_seconds,
        )

    async def fetch(self, client: httpx.AsyncClient, ticker: TickerSpec) -> Quote:
        return await self.source_for(ticker).fetch(client)

    # ── Internal ──────────────────────────────────────────────────────────────

    async def _fetch_chart(self, client: httpx.AsyncClient, symbol: str) -> Any:
        url = self.config.feeds.quote_url_template.format(symbol=url_quote(symbol, safe=""))
        return await get_json(client, url, headers={"User-Agent": self.config.http.user_agent})

    def parse_chart(self, payload: Any, ticker: TickerSpec) -> Quote:
        """Map a chart API payload to a LIVE ``Quote``.

        Raises:
            FeedShapeError: If no latest price can be found in the payload.
        """
        result = dig(payload, "chart", "result", 0)
        if not isinstance(result, dict):
            raise FeedShapeError(f"quote:{ticker.symbol}", "missing chart.result[0]")

        closes = dig(result, "indicators", "quote", 0, "close")
        valid_closes = [c for c in closes if _is_number(c)] if isinstance(closes, list) else []

        meta_price = dig(result, "meta", "regularMarketPrice")
        latest: Optional[float] = meta_price if _is_number(meta_price) else (
            valid_closes[-1] if valid_closes else None
        )
        if latest is None:
            raise FeedShapeError(f"quote:{ticker.symbol}", "no latest price")

        prev = valid_closes[-2] if len(valid_closes) > 1 else None
        if latest and prev:
            change_pct = (latest - prev) / prev * 100.0
        else:
            change_pct = self.oscillator.shift(ticker.fallback)

        return Quote.build(
            symbol=ticker.symbol,
            name=ticker.name,
            price=float(latest),
            change_pct=change_pct,
            source_status=SourceStatus.LIVE,
        )

    def simulated_quote(self, ticker: TickerSpec) -> Quote:
        change_pct = self.oscillator.shift(ticker.fallback)
        return Quote.build(
            symbol=ticker.symbol,
            name=ticker.name,
            price=ticker.fallback * (1 + change_pct / 100.0),
            change_pct=change_pct,
            source_status=SourceStatus.SIMULATED,
        )
