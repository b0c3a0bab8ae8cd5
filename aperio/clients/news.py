"""News search and context generation on top of a search-capable LLM."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from urllib.parse import urlparse

from aperio.llm.base import BaseLLMProvider
from aperio.llm.prompts import (
    CONTEXT_PROMPTS,
    CONTEXT_WRAPPER,
    SEARCH_TEMPLATES,
    SYSTEM_JOURNALIST,
    SYSTEM_RESEARCH,
)
from aperio.models import EnhancedContext, NewsSummary, SourceLink
from aperio.parsing import (
    analyze_sentiment,
    calculate_relevance,
    detect_breaking,
    extract_json,
    extract_key_points,
    extract_sources,
)
from aperio.templating import build_prompt, select_template

logger = logging.getLogger(__name__)

DEFAULT_WATCHLIST = ["SPY", "QQQ", "TSLA", "AAPL", "MSFT"]

CONTENT_FOCUS = {
    "dailyBrief": "concise daily summary",
    "deepDive": "comprehensive analysis",
    "marketPulse": "real-time market impact",
    "economicLens": "educational explanation",
}

AUDIENCE_BY_TYPE = {
    "dailyBrief": "general",
    "deepDive": "advanced",
    "marketPulse": "intermediate",
    "economicLens": "beginner",
}

AUDIENCE_BY_COMPLEXITY = {
    "beginner": "newcomers to finance",
    "intermediate": "general educated audience",
    "advanced": "experienced investors and professionals",
}

SOURCE_SEARCH_TYPES = {
    "general": "marketContext",
    "market": "marketContext",
    "analysis": "sectorAnalysis",
    "company": "companyNews",
    "breaking": "breakingNews",
}


def overall_sentiment(sentiments: list[str]) -> str:
    positive = sentiments.count("positive")
    negative = sentiments.count("negative")
    if positive > negative:
        return "positive"
    if negative > positive:
        return "negative"
    return "neutral"


class NewsClient:
    """Financial news search and content framing.

    ``search_provider`` answers web-grounded search prompts; ``chat_provider``
    turns news into structured context. Both may be the same provider.
    """

    def __init__(
        self,
        search_provider: BaseLLMProvider,
        chat_provider: BaseLLMProvider,
        domain_filter: list[str] | None = None,
    ):
        self.search_provider = search_provider
        self.chat_provider = chat_provider
        self.domain_filter = domain_filter or []

    def build_search_query(
        self, query: str, search_type: str = "marketContext", **options: str,
    ) -> str:
        template = select_template(SEARCH_TEMPLATES, search_type, "marketContext")
        return build_prompt(template, {
            "topic": query,
            "symbol": options.get("symbol", ""),
            "company": options.get("company", ""),
            "sector": options.get("sector", query),
            "indicator": options.get("indicator", query),
            "theme": options.get("theme", query),
        })

    async def search_financial_news(
        self,
        query: str,
        search_type: str = "marketContext",
        recency: str = "day",
        max_tokens: int = 1000,
        temperature: float = 0.2,
        top_p: float = 0.9,
        **options: str,
    ) -> NewsSummary:
        """Search recent coverage and summarize it. Raises on provider failure."""
        prompt = self.build_search_query(query, search_type, **options)
        response = await self.search_provider.complete(
            prompt,
            system=SYSTEM_RESEARCH,
            temperature=temperature,
            max_tokens=max_tokens,
            extra={
                "top_p": top_p,
                "search_domain_filter": self.domain_filter or None,
                "search_recency_filter": recency,
            },
        )
        summary = self.process_search_results(response.text)
        if not summary.sources and response.citations:
            summary.sources = [
                SourceLink(title=url, url=url, domain=_domain(url))
                for url in response.citations
            ]
        return summary

    @staticmethod
    def process_search_results(content: str) -> NewsSummary:
        return NewsSummary(
            summary=content,
            sources=extract_sources(content),
            key_points=extract_key_points(content),
            is_breaking=detect_breaking(content),
            sentiment=analyze_sentiment(content),
            relevance_score=calculate_relevance(content),
        )

    async def generate_content_context(
        self,
        content_type: str,
        topic: str,
        complexity: str = "intermediate",
    ) -> EnhancedContext:
        """Search for the topic, then ask for key points and framing."""
        recency = "hour" if content_type in ("breakingNews", "marketPulse") else "day"
        news = await self.search_financial_news(topic, "marketContext", recency=recency)

        instruction = build_prompt(
            select_template(CONTEXT_PROMPTS, content_type, "dailyBrief"),
            {"topic": topic},
        )
        prompt = build_prompt(CONTEXT_WRAPPER, {
            "instruction": instruction,
            "audience": AUDIENCE_BY_COMPLEXITY.get(
                complexity, AUDIENCE_BY_COMPLEXITY["intermediate"],
            ),
            "focus": CONTENT_FOCUS.get(content_type, "general financial news"),
            "news": news.summary,
        })
        response = await self.chat_provider.complete(prompt, system=SYSTEM_JOURNALIST)

        data = extract_json(response.text)
        if data is None:
            logger.warning("Context response for '%s' was not JSON, using raw text", topic)
            data = {"keyPoints": extract_key_points(response.text) or news.key_points}

        return EnhancedContext(
            topic=topic,
            content_type=content_type,
            news_context=news.summary,
            key_points=list(data.get("keyPoints") or news.key_points),
            sources=news.sources,
            market_impact=data.get("marketImpact", "moderate"),
            audience_level=AUDIENCE_BY_TYPE.get(content_type, "intermediate"),
            suggested_narrative=data.get("narrative", ""),
            related_topics=list(data.get("relatedTopics") or [topic]),
        )

    async def enhance_with_multiple_sources(
        self, topic: str, sources: tuple[str, ...] = ("general", "market", "analysis"),
    ) -> dict:
        """Run one search per source flavour and merge whatever succeeded."""
        results = await asyncio.gather(
            *[
                self.search_financial_news(
                    topic, SOURCE_SEARCH_TYPES.get(source, "marketContext"),
                    max_tokens=500,
                )
                for source in sources
            ],
            return_exceptions=True,
        )
        successful = []
        for source, result in zip(sources, results):
            if isinstance(result, Exception):
                logger.warning("Search flavour '%s' failed: %s", source, result)
            else:
                successful.append(result)

        return {
            "topic": topic,
            "combined_summary": " ".join(r.summary for r in successful),
            "sources": [s for r in successful for s in r.sources],
            "consensus_points": [p for r in successful for p in r.key_points][:3],
            "sentiment": overall_sentiment([r.sentiment for r in successful]),
            "confidence": len(successful) / len(sources) if sources else 0.0,
        }

    async def detect_breaking_news(self, watchlist: list[str] | None = None) -> dict:
        watchlist = watchlist or DEFAULT_WATCHLIST
        results = await asyncio.gather(
            *[
                self.search_financial_news(
                    symbol, "breakingNews", recency="hour", max_tokens=300,
                )
                for symbol in watchlist
            ],
            return_exceptions=True,
        )
        items = []
        for symbol, result in zip(watchlist, results):
            if isinstance(result, Exception):
                logger.warning("Breaking-news check for %s failed: %s", symbol, result)
            elif result.is_breaking:
                items.append({"symbol": symbol, "news": result})

        return {
            "has_breaking": bool(items),
            "breaking_count": len(items),
            "items": items,
            "timestamp": datetime.utcnow(),
        }

    async def get_company_news_context(self, symbol: str, company_name: str) -> dict:
        query = f"{company_name} {symbol}"
        recent, analyst, earnings = await asyncio.gather(
            self.search_financial_news(
                query, "companyNews", symbol=symbol, company=company_name,
            ),
            self.search_financial_news(
                f"{query} analyst rating upgrade downgrade", "marketContext",
            ),
            self.search_financial_news(f"{query} earnings guidance", "marketContext"),
            return_exceptions=True,
        )

        def _ok(result):
            return None if isinstance(result, Exception) else result

        settled = [r for r in (_ok(recent), _ok(analyst), _ok(earnings)) if r]
        return {
            "symbol": symbol,
            "company_name": company_name,
            "recent_news": _ok(recent),
            "analyst_sentiment": _ok(analyst),
            "earnings_context": _ok(earnings),
            "overall_sentiment": overall_sentiment([r.sentiment for r in settled]),
            "last_updated": datetime.utcnow(),
        }


def _domain(url: str) -> str:
    return urlparse(url).hostname or ""
