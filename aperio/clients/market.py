"""Alpha Vantage market data client with deterministic demo data."""

from __future__ import annotations

import asyncio
import logging
import random
from datetime import date

import httpx

from aperio.config import is_demo_key
from aperio.models import (
    CompanyInfo,
    CryptoQuote,
    MarketSnapshot,
    NewsItem,
    ProviderError,
    Quote,
    QuoteResult,
    SymbolMatch,
)
from aperio.retry import retry_async

logger = logging.getLogger(__name__)

# ETFs standing in for the major indices
INDEX_PROXIES = {"sp500": "SPY", "nasdaq": "QQQ", "dow": "DIA", "total": "VTI"}

MOCK_QUOTES = {
    "AAPL": Quote("AAPL", 175.43, 2.34, 1.35),
    "GOOGL": Quote("GOOGL", 138.21, -1.23, -0.88),
    "MSFT": Quote("MSFT", 378.85, 4.12, 1.10),
    "TSLA": Quote("TSLA", 248.50, -3.25, -1.29),
    "AMZN": Quote("AMZN", 145.86, 0.95, 0.66),
    "SPY": Quote("SPY", 442.58, 5.23, 1.20),
    "QQQ": Quote("QQQ", 378.91, 7.45, 2.00),
    "DIA": Quote("DIA", 347.22, 2.18, 0.63),
    "VTI": Quote("VTI", 234.67, 3.12, 1.35),
}

MOCK_SYMBOLS = [
    SymbolMatch("AAPL", "Apple Inc."),
    SymbolMatch("GOOGL", "Alphabet Inc."),
    SymbolMatch("MSFT", "Microsoft Corporation"),
    SymbolMatch("TSLA", "Tesla Inc."),
    SymbolMatch("AMZN", "Amazon.com Inc."),
]

MOCK_NEWS = [
    NewsItem(
        title="Tech Stocks Rally Amid AI Optimism",
        summary="Technology stocks surged today as investors showed renewed "
        "confidence in AI developments.",
        source="Financial News Network",
        sentiment="Bullish",
        sentiment_score=0.7,
    ),
    NewsItem(
        title="Federal Reserve Hints at Rate Stability",
        summary="Central bank officials suggest interest rates may remain "
        "stable through next quarter.",
        source="Economic Times",
        sentiment="Neutral",
        sentiment_score=0.1,
    ),
]

MOCK_CRYPTO = {
    "BTC": CryptoQuote("BTC", "Bitcoin", 43250.00),
    "ETH": CryptoQuote("ETH", "Ethereum", 2650.00),
    "ADA": CryptoQuote("ADA", "Cardano", 0.45),
}


def _float(value, default: float = 0.0) -> float:
    try:
        return float(str(value).replace("%", ""))
    except (TypeError, ValueError):
        return default


def mock_quote(symbol: str) -> Quote:
    """Known symbols get fixed values; others a stable pseudo-random quote."""
    if symbol in MOCK_QUOTES:
        return MOCK_QUOTES[symbol]
    rng = random.Random(symbol)
    price = round(100 + rng.random() * 200, 2)
    change = round((rng.random() - 0.5) * 10, 2)
    return Quote(
        symbol=symbol,
        price=price,
        change=change,
        change_percent=round(change / price * 100, 2),
        high=round(price * 1.02, 2),
        low=round(price * 0.98, 2),
        volume=rng.randint(100_000, 10_000_000),
        previous_close=round(price - change, 2),
        trading_day=date.today().isoformat(),
    )


def mock_search(query: str) -> list[SymbolMatch]:
    q = query.lower()
    return [
        m for m in MOCK_SYMBOLS
        if query.upper() in m.symbol or q in m.name.lower()
    ]


def summarize_indices(indices: dict[str, Quote | None]) -> tuple[str, str]:
    """Coarse (trend, volatility) read from index moves."""
    moves = [q.change_percent for q in indices.values() if q is not None]
    if not moves:
        return "mixed", "moderate"
    if all(m > 0 for m in moves):
        trend = "up"
    elif all(m < 0 for m in moves):
        trend = "down"
    else:
        trend = "mixed"
    largest = max(abs(m) for m in moves)
    if largest >= 2.5:
        volatility = "high"
    elif largest >= 1.0:
        volatility = "moderate"
    else:
        volatility = "low"
    return trend, volatility


class MarketClient:
    """Quotes, symbol search, company facts, news sentiment and crypto rates."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://www.alphavantage.co/query",
        timeout: int = 30,
        max_retries: int = 0,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max_retries

    @property
    def is_demo(self) -> bool:
        return is_demo_key(self.api_key)

    async def _fetch_api(self, params: dict) -> dict:
        """GET one Alpha Vantage function. Raises ProviderError on failure."""
        params = {**params, "apikey": self.api_key}

        async def _get() -> dict:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(self.base_url, params=params)
                resp.raise_for_status()
                return resp.json()

        try:
            data = await retry_async(
                _get, max_retries=self.max_retries, label="alphavantage",
            )
        except (httpx.HTTPError, ValueError) as exc:
            raise ProviderError("alphavantage", str(exc)) from exc
        if not isinstance(data, dict):
            raise ProviderError("alphavantage", "unexpected response shape")

        # Rate limiting and bad keys come back as 200 with a message body
        for key in ("Note", "Information", "Error Message"):
            if key in data:
                raise ProviderError("alphavantage", str(data[key]))
        return data

    async def get_stock_price(self, symbol: str) -> Quote:
        if self.is_demo:
            return mock_quote(symbol)

        data = await self._fetch_api({"function": "GLOBAL_QUOTE", "symbol": symbol})
        quote = data.get("Global Quote")
        if not quote:
            raise ProviderError("alphavantage", f"no quote for {symbol}")
        return Quote(
            symbol=quote.get("01. symbol", symbol),
            price=_float(quote.get("05. price")),
            change=_float(quote.get("09. change")),
            change_percent=_float(quote.get("10. change percent")),
            high=_float(quote.get("03. high")),
            low=_float(quote.get("04. low")),
            volume=int(_float(quote.get("06. volume"))),
            previous_close=_float(quote.get("08. previous close")),
            trading_day=quote.get("07. latest trading day"),
        )

    async def get_multiple_stock_prices(self, symbols: list[str]) -> list[QuoteResult]:
        results = await asyncio.gather(
            *[self.get_stock_price(s) for s in symbols],
            return_exceptions=True,
        )
        out = []
        for symbol, result in zip(symbols, results):
            if isinstance(result, Exception):
                out.append(QuoteResult(symbol=symbol, error=str(result)))
            else:
                out.append(QuoteResult(symbol=symbol, data=result))
        return out

    async def get_market_indices(self) -> dict[str, Quote | None]:
        """Index proxies by name; raises if none of them could be fetched."""
        results = await self.get_multiple_stock_prices(list(INDEX_PROXIES.values()))
        by_symbol = {r.symbol: r.data for r in results}
        indices = {name: by_symbol.get(sym) for name, sym in INDEX_PROXIES.items()}
        if all(q is None for q in indices.values()):
            errors = "; ".join(r.error or "" for r in results)
            raise ProviderError("alphavantage", f"no index data ({errors})")
        return indices

    async def get_market_overview(self) -> MarketSnapshot:
        indices = await self.get_market_indices()
        trend, volatility = summarize_indices(indices)
        return MarketSnapshot(indices=indices, trend=trend, volatility=volatility)

    async def get_company_info(self, symbol: str) -> CompanyInfo:
        if self.is_demo:
            return CompanyInfo(
                symbol=symbol,
                name=f"{symbol} Corporation",
                description=f"{symbol} is a leading technology company focused "
                "on innovation and growth.",
                sector="Technology",
                industry="Software",
                market_cap="2.5T",
                pe="28.5",
                dividend="0.75%",
                beta="1.2",
            )

        data = await self._fetch_api({"function": "OVERVIEW", "symbol": symbol})
        if not data.get("Symbol"):
            raise ProviderError("alphavantage", f"no company overview for {symbol}")
        return CompanyInfo(
            symbol=data["Symbol"],
            name=data.get("Name", ""),
            description=data.get("Description", ""),
            sector=data.get("Sector", ""),
            industry=data.get("Industry", ""),
            market_cap=data.get("MarketCapitalization", ""),
            pe=data.get("PERatio", ""),
            dividend=data.get("DividendYield", ""),
            beta=data.get("Beta", ""),
        )

    async def get_financial_news(
        self, category: str = "financial_markets", limit: int = 10,
    ) -> list[NewsItem]:
        if self.is_demo:
            return MOCK_NEWS[:limit]

        data = await self._fetch_api({
            "function": "NEWS_SENTIMENT", "topics": category, "limit": str(limit),
        })
        feed = data.get("feed")
        if feed is None:
            raise ProviderError("alphavantage", "news feed missing")
        return [
            NewsItem(
                title=item.get("title", ""),
                summary=item.get("summary", ""),
                source=item.get("source", ""),
                url=item.get("url", ""),
                published_at=item.get("time_published", ""),
                sentiment=item.get("overall_sentiment_label", "Neutral"),
                sentiment_score=_float(item.get("overall_sentiment_score")),
            )
            for item in feed[:limit]
        ]

    async def get_crypto_price(self, symbol: str = "BTC") -> CryptoQuote:
        if self.is_demo:
            return MOCK_CRYPTO.get(symbol, CryptoQuote(symbol, symbol, 0.0))

        data = await self._fetch_api({
            "function": "CURRENCY_EXCHANGE_RATE",
            "from_currency": symbol,
            "to_currency": "USD",
        })
        rate = data.get("Realtime Currency Exchange Rate")
        if not rate:
            raise ProviderError("alphavantage", f"no exchange rate for {symbol}")
        return CryptoQuote(
            symbol=rate.get("1. From_Currency Code", symbol),
            name=rate.get("2. From_Currency Name", symbol),
            price=_float(rate.get("5. Exchange Rate")),
            refreshed_at=rate.get("6. Last Refreshed"),
        )

    async def search_stocks(self, query: str) -> list[SymbolMatch]:
        if self.is_demo:
            return mock_search(query)

        data = await self._fetch_api({"function": "SYMBOL_SEARCH", "keywords": query})
        matches = data.get("bestMatches")
        if matches is None:
            raise ProviderError("alphavantage", "symbol search returned no matches field")
        return [
            SymbolMatch(
                symbol=m.get("1. symbol", ""),
                name=m.get("2. name", ""),
                type=m.get("3. type", ""),
                region=m.get("4. region", ""),
                currency=m.get("8. currency", ""),
                match_score=_float(m.get("9. matchScore")),
            )
            for m in matches
        ]
