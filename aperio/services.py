"""Client wiring: every provider is built once and passed explicitly."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from aperio.clients.economic import EconomicClient
from aperio.clients.images import ImageClient
from aperio.clients.market import MarketClient
from aperio.clients.news import NewsClient
from aperio.config import get_news_domain_filter, get_service_config
from aperio.db import SupabaseClient
from aperio.llm import build_provider
from aperio.llm.base import BaseLLMProvider, UsageTracker

logger = logging.getLogger(__name__)


@dataclass
class Services:
    config: dict
    news: NewsClient
    market: MarketClient
    economic: EconomicClient
    images: ImageClient
    dialogue_provider: BaseLLMProvider
    article_provider: BaseLLMProvider
    tracker: UsageTracker
    db: SupabaseClient | None = None


def build_services(config: dict) -> Services:
    tracker = UsageTracker()

    news = NewsClient(
        search_provider=build_provider(config, "search", tracker),
        chat_provider=build_provider(config, "context", tracker),
        domain_filter=get_news_domain_filter(config),
    )

    market_cfg = get_service_config(config, "market")
    economic_cfg = get_service_config(config, "economic")
    images_cfg = get_service_config(config, "images")
    db_cfg = get_service_config(config, "database")

    db = None
    if db_cfg["url"] and db_cfg["anon_key"]:
        db = SupabaseClient(db_cfg["url"], db_cfg["anon_key"], timeout=db_cfg["timeout"])
    else:
        logger.debug("No database configured")

    services = Services(
        config=config,
        news=news,
        market=MarketClient(
            market_cfg["api_key"], market_cfg["base_url"],
            timeout=market_cfg["timeout"], max_retries=market_cfg["max_retries"],
        ),
        economic=EconomicClient(
            economic_cfg["api_key"], economic_cfg["base_url"],
            timeout=economic_cfg["timeout"], max_retries=economic_cfg["max_retries"],
        ),
        images=ImageClient(
            images_cfg["api_key"], images_cfg["base_url"], images_cfg["model"],
            timeout=images_cfg["timeout"], max_retries=images_cfg["max_retries"],
        ),
        dialogue_provider=build_provider(config, "dialogue", tracker),
        article_provider=build_provider(config, "article", tracker),
        tracker=tracker,
        db=db,
    )
    logger.debug(
        "Services ready (search=%s, dialogue=%s, article=%s)",
        news.search_provider.provider_name,
        services.dialogue_provider.provider_name,
        services.article_provider.provider_name,
    )
    return services
