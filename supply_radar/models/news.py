"""
Disruption news model.

``tone`` is the upstream sentiment score: negative means bad news.  A
``None`` tone is treated as neutral by every downstream consumer (it never
counts towards the negative-news ratio).
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from supply_radar.models.base import WireModel
from supply_radar.taxonomy.source_status import SourceStatus


class NewsItem(WireModel):
    """A single disruption-related news article.

    Attributes:
        id: Stable identifier (article URL when available).
        title: Headline.
        source: Publisher name.
        domain: Publisher domain, empty for fallback items.
        published_at: ISO-8601 or upstream-native timestamp string.
        tone: Sentiment score, or ``None`` if not provided.
        url: Article link (``"#"`` when unknown).
        summary: Short description.
        source_status: ``LIVE`` or ``SIMULATED``.
    """

    id: str
    title: str
    source: str
    domain: str = ""
    published_at: str
    tone: Optional[float] = None
    url: str = "#"
    summary: str = ""
    source_status: SourceStatus = Field(alias="dataSourceStatus")

    @property
    def is_negative(self) -> bool:
        """True when tone is known and below the -2 bad-news threshold."""
        return self.tone is not None and self.tone < -2
