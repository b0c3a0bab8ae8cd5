"""Market dashboard: live data where available, canned data otherwise."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from aperio.clients.economic import mock_indicators
from aperio.clients.market import (
    INDEX_PROXIES,
    MOCK_CRYPTO,
    MOCK_NEWS,
    mock_quote,
    mock_search,
)
from aperio.models import (
    CryptoQuote,
    Indicator,
    NewsItem,
    Quote,
    SymbolMatch,
    ValidationError,
)

if TYPE_CHECKING:
    from aperio.services import Services

logger = logging.getLogger(__name__)

WATCHLIST = ["AAPL", "GOOGL", "MSFT", "TSLA", "AMZN"]
CRYPTO_SYMBOLS = ["BTC", "ETH", "ADA"]
NEWS_LIMIT = 5


@dataclass
class Dashboard:
    indices: dict[str, Quote | None]
    stocks: list[Quote]
    crypto: list[CryptoQuote]
    news: list[NewsItem]
    economic: dict[str, Indicator]
    # panels that are showing canned data
    fallbacks: list[str] = field(default_factory=list)
    loaded_at: datetime = field(default_factory=datetime.utcnow)


async def _with_fallback(
    panel: str,
    fetch: Callable[[], Awaitable[Any]],
    mock: Callable[[], Any],
    fallbacks: list[str],
) -> Any:
    try:
        return await fetch()
    except Exception as exc:
        logger.warning("Dashboard panel '%s' using canned data: %s", panel, exc)
        fallbacks.append(panel)
        return mock()


async def _stocks(services: Services, fallbacks: list[str]) -> list[Quote]:
    results = await services.market.get_multiple_stock_prices(WATCHLIST)
    quotes = []
    for result in results:
        if result.data is None:
            logger.warning("Quote for %s unavailable: %s", result.symbol, result.error)
            if "stocks" not in fallbacks:
                fallbacks.append("stocks")
            quotes.append(mock_quote(result.symbol))
        else:
            quotes.append(result.data)
    return quotes


async def _crypto(services: Services) -> list[CryptoQuote]:
    return list(await asyncio.gather(*[
        services.market.get_crypto_price(symbol) for symbol in CRYPTO_SYMBOLS
    ]))


async def load_dashboard(services: Services) -> Dashboard:
    """Fetch every panel concurrently; a failed panel shows canned data."""
    fallbacks: list[str] = []
    market = services.market

    indices, stocks, crypto, news, economic = await asyncio.gather(
        _with_fallback(
            "indices", market.get_market_indices,
            lambda: {name: mock_quote(sym) for name, sym in INDEX_PROXIES.items()},
            fallbacks,
        ),
        _stocks(services, fallbacks),
        _with_fallback(
            "crypto", lambda: _crypto(services),
            lambda: [MOCK_CRYPTO[s] for s in CRYPTO_SYMBOLS],
            fallbacks,
        ),
        _with_fallback(
            "news", lambda: market.get_financial_news("financial_markets", NEWS_LIMIT),
            lambda: MOCK_NEWS[:NEWS_LIMIT],
            fallbacks,
        ),
        _with_fallback(
            "economic", services.economic.get_economic_indicators,
            mock_indicators,
            fallbacks,
        ),
    )

    return Dashboard(
        indices=indices,
        stocks=stocks,
        crypto=crypto,
        news=news,
        economic=economic,
        fallbacks=sorted(fallbacks),
    )


async def search_symbols(services: Services, query: str) -> list[SymbolMatch]:
    query = query.strip()
    if not query:
        raise ValidationError("Search query is required")
    try:
        return await services.market.search_stocks(query)
    except Exception as exc:
        logger.warning("Symbol search for '%s' using canned data: %s", query, exc)
        return mock_search(query)
