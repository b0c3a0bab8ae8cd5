"""The four context sources: news search, market, economy and framing."""

from __future__ import annotations

from aperio.context import register_source
from aperio.context.base import BaseContextSource
from aperio.models import EnhancedContext, Indicator, MarketSnapshot, NewsSummary

NEWS_SEARCH_TYPES = {
    "breakingNews": "breakingNews",
    "educationalContent": "economicData",
    "weeklyWrap": "weeklyWrap",
}

HOURLY_TYPES = ("marketPulse", "breakingNews")


def search_type_for(content_type: str) -> str:
    return NEWS_SEARCH_TYPES.get(content_type, "marketContext")


def recency_for(content_type: str) -> str:
    return "hour" if content_type in HOURLY_TYPES else "day"


@register_source("news")
class NewsSource(BaseContextSource):

    @property
    def name(self) -> str:
        return "news"

    async def fetch(self, topic: str, content_type: str, complexity: str) -> NewsSummary:
        return await self.services.news.search_financial_news(
            topic, search_type_for(content_type), recency=recency_for(content_type),
        )


@register_source("market")
class MarketSource(BaseContextSource):

    @property
    def name(self) -> str:
        return "market"

    async def fetch(self, topic: str, content_type: str, complexity: str) -> MarketSnapshot:
        return await self.services.market.get_market_overview()


@register_source("economic")
class EconomicSource(BaseContextSource):

    @property
    def name(self) -> str:
        return "economic"

    async def fetch(
        self, topic: str, content_type: str, complexity: str,
    ) -> dict[str, Indicator]:
        return await self.services.economic.get_economic_indicators()


@register_source("enhanced")
class EnhancedSource(BaseContextSource):

    @property
    def name(self) -> str:
        return "enhanced"

    async def fetch(self, topic: str, content_type: str, complexity: str) -> EnhancedContext:
        return await self.services.news.generate_content_context(
            content_type, topic, complexity,
        )
