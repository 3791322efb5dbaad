"""
Resilient fetch: the one failure-isolation wrapper every feed client uses.

A ``ResilientSource`` is parameterized by three callables:

  1. ``fetch_remote(client)``  async upstream call; returns the decoded JSON
     payload.  Raises on transport errors and non-2xx statuses.
  2. ``parse(payload)``       validates the shape and builds the record.
     Raises ``FeedShapeError`` (or any ``KeyError``/``TypeError``/
     ``ValueError``) when the payload is not what we expect.
  3. ``fallback()``           produces the SIMULATED substitute record.

``fetch()`` never raises for upstream problems: unreachable hosts, non-2xx
responses, timeouts and malformed JSON all collapse into the same fallback
path.  The only distinction the caller sees is the record's source status.
Task cancellation is propagated untouched.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FeedShapeError(ValueError):
    """Raised when an upstream payload does not have the expected structure.

    Attributes:
        source: Name of the feed whose payload was rejected.
    """

    def __init__(self, source: str, detail: str) -> None:
        self.source = source
        super().__init__(f"Unexpected payload shape from '{source}': {detail}")


def expect_mapping(source: str, value: Any, field: str) -> dict:
    """Return ``value`` if it is a dict, else raise ``FeedShapeError``."""
    if not isinstance(value, dict):
        raise FeedShapeError(source, f"'{field}' is {type(value).__name__}, expected object")
    return value


def dig(value: Any, *path: str | int) -> Any:
    """Walk nested dicts/lists along ``path``; return ``None`` on any miss.

    ``dig(payload, "chart", "result", 0, "meta")`` never raises, whatever
    the upstream actually returned.
    """
    current = value
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
            current = current[key]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(key)
    return current


class ResilientSource(Generic[T]):
    """Fetch-with-fallback wrapper around one upstream call.

    Args:
        name:            Feed identifier used in logs (e.g. ``"quote:^GSPC"``).
        fetch_remote:    Async callable performing the upstream request.
        parse:           Payload → record; raises on unexpected shape.
        fallback:        Zero-arg callable producing the SIMULATED record.
        timeout_seconds: Hard cap on remote call + parse.
    """

    def __init__(
        self,
        name: str,
        fetch_remote: Callable[[httpx.AsyncClient], Awaitable[Any]],
        parse: Callable[[Any], T],
        fallback: Callable[[], T],
        timeout_seconds: float,
    ) -> None:
        self.name = name
        self._fetch_remote = fetch_remote
        self._parse = parse
        self._fallback = fallback
        self.timeout_seconds = timeout_seconds

    async def fetch(self, client: httpx.AsyncClient) -> T:
        """Return the live record, or the fallback record on any upstream failure."""
        try:
            return await asyncio.wait_for(self._fetch_and_parse(client), self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                "Feed [%s] timed out after %.1fs; using simulated fallback",
                self.name, self.timeout_seconds,
                extra={"feed": self.name, "status": "simulated"},
            )
        except Exception as exc:
            logger.warning(
                "Feed [%s] failed (%s: %s); using simulated fallback",
                self.name, type(exc).__name__, exc,
                extra={"feed": self.name, "status": "simulated"},
            )
        return self._fallback()

    async def _fetch_and_parse(self, client: httpx.AsyncClient) -> T:
        payload = await self._fetch_remote(client)
        record = self._parse(payload)
        logger.debug("Feed [%s] fetched live", self.name)
        return record


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict | None = None,
    headers: dict | None = None,
) -> Any:
    """GET ``url`` and decode JSON; raises ``httpx.HTTPStatusError`` on non-2xx."""
    resp = await client.get(url, params=params, headers=headers)
    resp.raise_for_status()
    return resp.json()


async def post_json(
    client: httpx.AsyncClient,
    url: str,
    body: dict,
    *,
    headers: dict | None = None,
) -> Any:
    """POST a JSON body and decode the JSON response; raises on non-2xx."""
    resp = await client.post(url, json=body, headers=headers)
    resp.raise_for_status()
    return resp.json()
