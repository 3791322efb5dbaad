"""
Tests for supply_radar/ingestion/resilient.py and oscillator.py.

Covers:
  - ResilientSource: live path, parse failure, timeout → fallback
  - dig(): nested access that never raises
  - expect_mapping(): FeedShapeError carries the source name
  - get_json(): non-2xx raises HTTPStatusError
  - SyntheticOscillator: output stays within [MIN_SHIFT, MAX_SHIFT]
"""

from __future__ import annotations

import asyncio
import random

import httpx
import pytest

from supply_radar.ingestion.oscillator import MAX_SHIFT, MIN_SHIFT, SyntheticOscillator
from supply_radar.ingestion.resilient import (
    FeedShapeError,
    ResilientSource,
    dig,
    expect_mapping,
    get_json,
)


def _source(fetch_remote, parse=lambda p: p["value"], timeout=1.0) -> ResilientSource:
    return ResilientSource(
        name="test:feed",
        fetch_remote=fetch_remote,
        parse=parse,
        fallback=lambda: "fallback",
        timeout_seconds=timeout,
    )


def _fetch(source: ResilientSource):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200))) as c:
            return await source.fetch(c)

    return asyncio.run(run())


# ── ResilientSource ───────────────────────────────────────────────────────────

class TestResilientSource:
    def test_live_path_returns_parsed(self):
        async def remote(client):
            return {"value": "live"}

        assert _fetch(_source(remote)) == "live"

    def test_parse_error_falls_back(self):
        async def remote(client):
            return {"unexpected": True}

        assert _fetch(_source(remote)) == "fallback"

    def test_remote_exception_falls_back(self):
        async def remote(client):
            raise httpx.ReadTimeout("slow")

        assert _fetch(_source(remote)) == "fallback"

    def test_hard_timeout_falls_back(self):
        async def remote(client):
            await asyncio.sleep(5)
            return {"value": "too late"}

        assert _fetch(_source(remote, timeout=0.05)) == "fallback"

    def test_fallback_logged_as_warning(self, caplog):
        async def remote(client):
            raise RuntimeError("boom")

        with caplog.at_level("WARNING", logger="supply_radar.ingestion.resilient"):
            _fetch(_source(remote))
        assert "test:feed" in caplog.text
        assert "simulated fallback" in caplog.text
        assert caplog.records[-1].feed == "test:feed"


# ── Shape helpers ─────────────────────────────────────────────────────────────

class TestDig:
    def test_nested_path(self):
        payload = {"chart": {"result": [{"meta": {"price": 3}}]}}
        assert dig(payload, "chart", "result", 0, "meta", "price") == 3

    def test_missing_key_is_none(self):
        assert dig({"a": {}}, "a", "b", "c") is None

    def test_index_out_of_range_is_none(self):
        assert dig({"a": []}, "a", 0) is None

    def test_type_mismatch_is_none(self):
        assert dig({"a": "text"}, "a", 0) is None
        assert dig(["x"], "key") is None


class TestExpectMapping:
    def test_dict_passes_through(self):
        assert expect_mapping("src", {"k": 1}, "body") == {"k": 1}

    def test_non_dict_raises_with_source(self):
        with pytest.raises(FeedShapeError) as excinfo:
            expect_mapping("news:gdelt", [1], "response")
        assert excinfo.value.source == "news:gdelt"
        assert "list" in str(excinfo.value)


class TestGetJson:
    def test_non_2xx_raises(self):
        async def run():
            transport = httpx.MockTransport(lambda r: httpx.Response(404))
            async with httpx.AsyncClient(transport=transport) as client:
                await get_json(client, "https://example.com/x")

        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(run())


# ── SyntheticOscillator ───────────────────────────────────────────────────────

class TestSyntheticOscillator:
    def test_bounds(self):
        rng = random.Random(42)
        for step in range(500):
            osc = SyntheticOscillator(clock=lambda s=step: s * 13.7, rng=rng)
            value = osc.shift(phase=step * 0.37)
            assert MIN_SHIFT <= value <= MAX_SHIFT

    def test_deterministic_with_pinned_clock_and_seed(self):
        a = SyntheticOscillator(clock=lambda: 1_000.0, rng=random.Random(3)).shift(16.4)
        b = SyntheticOscillator(clock=lambda: 1_000.0, rng=random.Random(3)).shift(16.4)
        assert a == b
