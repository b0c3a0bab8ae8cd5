"""Long-form articles with embedded charts, SEO and publishing metadata."""

from __future__ import annotations

import asyncio
import logging
import math
import re
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from aperio.config import get_llm_task_config
from aperio.context.aggregate import aggregate
from aperio.generate.charts import build_charts
from aperio.generate.fallback import fallback_article
from aperio.llm.prompts import ARTICLE_PROMPT, SYSTEM_JOURNALIST
from aperio.models import (
    WORDS_PER_MINUTE_READ,
    AggregatedContext,
    Article,
    ArticleMetadata,
    ContentRequest,
    ProviderError,
)
from aperio.parsing import extract_headlines, parse_sections, word_count
from aperio.templating import build_prompt, select_template

if TYPE_CHECKING:
    from aperio.services import Services

logger = logging.getLogger(__name__)

CONTENT_TEMPLATES = {
    "featuredArticle": {
        "structure": [
            "headline", "lead", "context", "analysis", "data_visualization",
            "expert_quotes", "implications", "conclusion",
        ],
        "target_length": "1200-1500 words",
        "chart_types": ["market_performance", "economic_indicators"],
        "tone": "authoritative yet accessible financial journalism",
    },
    "marketAnalysis": {
        "structure": [
            "headline", "executive_summary", "market_overview", "key_movers",
            "data_deep_dive", "sector_analysis", "outlook",
        ],
        "target_length": "800-1000 words",
        "chart_types": ["market_performance", "sector_performance", "risk_return"],
        "tone": "analytical and data-driven",
    },
    "educationalContent": {
        "structure": [
            "headline", "introduction", "concept_explanation", "real_world_examples",
            "interactive_examples", "key_takeaways", "further_reading",
        ],
        "target_length": "1000-1200 words",
        "chart_types": ["economic_indicators", "concept_illustration"],
        "tone": "educational and explanatory for general audience",
    },
    "breakingNews": {
        "structure": [
            "headline", "breaking_lead", "immediate_context", "market_impact",
            "quick_analysis", "what_to_watch",
        ],
        "target_length": "400-600 words",
        "chart_types": ["market_performance", "breaking_impact"],
        "tone": "urgent but measured breaking news style",
    },
    "weeklyWrap": {
        "structure": [
            "headline", "week_overview", "major_events", "market_movements",
            "economic_data", "looking_ahead",
        ],
        "target_length": "1000-1300 words",
        "chart_types": ["market_performance", "economic_indicators", "sector_performance"],
        "tone": "comprehensive weekly summary",
    },
}

CATEGORIES = {
    "featuredArticle": "featured",
    "marketAnalysis": "markets",
    "educationalContent": "education",
    "breakingNews": "news",
    "weeklyWrap": "analysis",
}

FINANCIAL_TERMS = (
    "market", "stock", "economy", "inflation", "gdp", "fed", "investment",
    "earnings", "revenue", "growth", "analysis", "forecast", "trend",
)

META_DESCRIPTION_LIMIT = 160


def category_for(content_type: str) -> str:
    return CATEGORIES.get(content_type, "general")


def article_slug(headline: str) -> str:
    slug = re.sub(r"[^\w\s-]", "", headline.lower())
    return re.sub(r"\s+", "-", slug.strip())[:50]


def meta_description(body: str) -> str:
    first = body.strip().split(".")[0].strip() + "."
    if len(first) > META_DESCRIPTION_LIMIT:
        return first[:META_DESCRIPTION_LIMIT - 3] + "..."
    return first


def extract_keywords(topic: str, content: str, limit: int = 10) -> list[str]:
    words = set(re.findall(r"[a-z]+", content.lower()))
    keywords = [topic.lower()]
    for term in FINANCIAL_TERMS:
        if term in words and term not in keywords:
            keywords.append(term)
    return keywords[:limit]


def _body(text: str, headline: str, subheadline: str) -> str:
    """Article text without its headline and subheadline lines."""
    lines = text.split("\n")
    dropped = 0
    while lines and dropped < 2:
        stripped = re.sub(r"^#+\s*", "", lines[0].strip())
        if not stripped:
            lines.pop(0)
            continue
        if stripped not in (headline, subheadline):
            break
        lines.pop(0)
        dropped += 1
    return "\n".join(lines).strip()


def _market_summary(context: AggregatedContext) -> str:
    market = context.market
    if market is None:
        return "Standard market metrics"
    quotes = ", ".join(
        f"{q.symbol} {q.price:.2f} ({q.change_percent:+.2f}%)"
        for q in market.indices.values() if q is not None
    )
    return f"Trend {market.trend}, volatility {market.volatility}; {quotes}"


def build_article_prompt(request: ContentRequest, template: dict, context: AggregatedContext) -> str:
    structure = "\n".join(
        f"{i}. {name.replace('_', ' ').upper()}"
        for i, name in enumerate(template["structure"], 1)
    )
    return build_prompt(ARTICLE_PROMPT, {
        "topic": request.topic,
        "content_type": request.content_type,
        "target_length": template["target_length"],
        "tone": template["tone"],
        "complexity": request.complexity,
        "structure": structure,
        "recent_news": context.news.summary if context.news else "General market conditions",
        "market_data": _market_summary(context),
        "economic_context": (
            context.enhanced.news_context if context.enhanced
            else "Current economic environment"
        ),
    })


async def generate_article(services: Services, request: ContentRequest) -> Article:
    """Aggregate context, write the article and attach charts.

    Any failure, a rejected text-generation call included, yields the
    fallback article, which never carries charts.
    """
    try:
        context = await aggregate(
            services, request.topic, request.content_type, request.complexity,
        )
        template = select_template(CONTENT_TEMPLATES, request.content_type, "featuredArticle")
        task_cfg = get_llm_task_config(services.config, "article")

        response = await services.article_provider.complete(
            build_article_prompt(request, template, context),
            system=SYSTEM_JOURNALIST,
            temperature=task_cfg["temperature"],
            max_tokens=task_cfg["max_tokens"],
        )
        text = response.text.strip()
        if not text:
            raise ProviderError(services.article_provider.provider_name, "empty article")

        headline, subheadline = extract_headlines(text)
        sections = parse_sections(text, template["structure"])

        charts = []
        if request.include_visuals:
            charts = build_charts(template["chart_types"], request.topic, context)

        words = word_count(text)
        body = _body(text, headline, subheadline)
        slug = article_slug(headline)
        now = datetime.utcnow()

        article = Article(
            id=f"article-{uuid.uuid4().hex[:12]}",
            headline=headline,
            subheadline=subheadline,
            content=text,
            sections=sections,
            charts=charts,
            metadata=ArticleMetadata(
                content_type=request.content_type,
                topic=request.topic,
                complexity=request.complexity,
                word_count=words,
                read_time=math.ceil(words / WORDS_PER_MINUTE_READ),
                generated_at=now,
                target_length=template["target_length"],
                sources=context.news.sources if context.news else [],
                has_charts=bool(charts),
                chart_count=len(charts),
            ),
            seo={
                "meta_description": meta_description(body or text),
                "keywords": extract_keywords(request.topic, text),
                "canonical_url": f"/articles/{slug}",
            },
            publishing={
                "status": "draft",
                "published_at": None,
                "updated_at": now.isoformat(),
                "featured": request.content_type == "featuredArticle",
                "category": category_for(request.content_type),
            },
        )
    except Exception:
        logger.exception("Article generation failed for '%s'", request.topic)
        return fallback_article(request)

    # Outside the try: a failed image degrades to a placeholder only
    if request.include_visuals:
        article.images = [await services.images.generate_story_image(headline, text)]

    logger.info(
        "Article '%s' (%s): %d words, %d charts",
        headline, request.content_type, words, len(charts),
    )
    return article


async def generate_article_series(
    services: Services, topics: list[str], content_type: str = "featuredArticle",
) -> list[Article]:
    return list(await asyncio.gather(*[
        generate_article(services, ContentRequest(topic=t, content_type=content_type))
        for t in topics
    ]))
