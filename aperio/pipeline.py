"""Content package orchestration: script, visuals and market snapshot."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from aperio.generate.script import generate_script
from aperio.models import COMPLEXITIES, ContentPackage, ContentRequest, ValidationError

if TYPE_CHECKING:
    from aperio.services import Services

logger = logging.getLogger(__name__)

# Audio formats that get podcast cover art
PODCAST_TYPES = ("dailyBrief", "deepDive", "economicLens")


def validate_request(request: ContentRequest) -> None:
    if not request.topic.strip():
        raise ValidationError("Please enter a topic for your content")
    if request.complexity not in COMPLEXITIES:
        raise ValidationError(
            f"Unknown complexity '{request.complexity}' "
            f"(expected one of: {', '.join(COMPLEXITIES)})"
        )


async def generate_content(services: Services, request: ContentRequest) -> ContentPackage:
    """Build a full content package for one request.

    Raises ValidationError before any provider call; everything after that
    degrades to fallback content or missing snapshots instead of raising.
    """
    validate_request(request)
    logger.info("Generating %s content for '%s'", request.content_type, request.topic)

    script = await generate_script(services, request)
    package = ContentPackage(request=request, script=script)

    if request.include_visuals:
        context = script.context
        story_text = (
            context.enhanced.news_context
            if context and context.enhanced else request.topic
        )
        package.story_image = await services.images.generate_story_image(
            request.topic, story_text,
        )
        if request.content_type in PODCAST_TYPES:
            package.podcast_cover = await services.images.generate_podcast_cover(
                request.topic, "financial analysis",
            )

    if request.include_market_data:
        market, economic = await asyncio.gather(
            services.market.get_market_overview(),
            services.economic.get_economic_indicators(),
            return_exceptions=True,
        )
        if isinstance(market, Exception):
            logger.warning("Market snapshot unavailable: %s", market)
        else:
            package.market = market
        if isinstance(economic, Exception):
            logger.warning("Economic snapshot unavailable: %s", economic)
        else:
            package.economic = economic

    return package
