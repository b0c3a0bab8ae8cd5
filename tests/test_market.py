"""Tests for the market data client."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from aperio.clients.market import (
    MOCK_QUOTES,
    MarketClient,
    mock_quote,
    mock_search,
    summarize_indices,
)
from aperio.models import ProviderError, Quote

GLOBAL_QUOTE = {
    "Global Quote": {
        "01. symbol": "IBM",
        "03. high": "190.10",
        "04. low": "186.00",
        "05. price": "188.50",
        "06. volume": "3200000",
        "07. latest trading day": "2024-05-01",
        "08. previous close": "187.00",
        "09. change": "1.50",
        "10. change percent": "0.8021%",
    }
}


@pytest.fixture
def live_client():
    return MarketClient(api_key="av-test")


@pytest.mark.asyncio
async def test_get_stock_price_parses_global_quote(live_client):
    with patch.object(live_client, "_fetch_api", AsyncMock(return_value=GLOBAL_QUOTE)) as fetch:
        quote = await live_client.get_stock_price("IBM")

    assert quote.symbol == "IBM"
    assert quote.price == 188.5
    assert quote.change_percent == pytest.approx(0.8021)
    assert quote.volume == 3_200_000
    assert quote.trading_day == "2024-05-01"
    fetch.assert_awaited_once_with({"function": "GLOBAL_QUOTE", "symbol": "IBM"})


@pytest.mark.asyncio
async def test_get_stock_price_missing_quote(live_client):
    with patch.object(live_client, "_fetch_api", AsyncMock(return_value={"Global Quote": {}})):
        with pytest.raises(ProviderError, match="no quote for IBM"):
            await live_client.get_stock_price("IBM")


@pytest.mark.asyncio
@patch("aperio.clients.market.httpx.AsyncClient")
async def test_fetch_api_rate_limit_note(mock_client_cls, live_client):
    mock_resp = MagicMock()
    mock_resp.json.return_value = {"Note": "Thank you for using Alpha Vantage! 5 calls per minute."}
    mock_resp.raise_for_status = MagicMock()
    mock_client = AsyncMock()
    mock_client.get.return_value = mock_resp
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_client

    with pytest.raises(ProviderError, match="5 calls per minute"):
        await live_client._fetch_api({"function": "GLOBAL_QUOTE", "symbol": "IBM"})

    params = mock_client.get.call_args.kwargs["params"]
    assert params["apikey"] == "av-test"


@pytest.mark.asyncio
@patch("aperio.clients.market.httpx.AsyncClient")
async def test_fetch_api_network_error(mock_client_cls, live_client):
    mock_client = AsyncMock()
    mock_client.get.side_effect = httpx.ConnectError("no route")
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_client

    with pytest.raises(ProviderError) as excinfo:
        await live_client._fetch_api({"function": "OVERVIEW"})
    assert excinfo.value.provider == "alphavantage"


@pytest.mark.asyncio
async def test_multiple_prices_keep_per_symbol_errors(live_client):
    async def fake_price(symbol):
        if symbol == "BAD":
            raise ProviderError("alphavantage", "no quote for BAD")
        return Quote(symbol, 10.0, 0.1, 1.0)

    with patch.object(live_client, "get_stock_price", side_effect=fake_price):
        results = await live_client.get_multiple_stock_prices(["AAA", "BAD"])

    assert results[0].data.symbol == "AAA"
    assert results[1].data is None
    assert "no quote for BAD" in results[1].error


@pytest.mark.asyncio
async def test_market_indices_partial_and_total_failure(live_client):
    async def only_spy(symbol):
        if symbol == "SPY":
            return Quote("SPY", 500.0, 5.0, 1.0)
        raise ProviderError("alphavantage", "limit")

    with patch.object(live_client, "get_stock_price", side_effect=only_spy):
        indices = await live_client.get_market_indices()
    assert indices["sp500"].price == 500.0
    assert indices["nasdaq"] is None

    with patch.object(live_client, "get_stock_price", side_effect=ProviderError("alphavantage", "down")):
        with pytest.raises(ProviderError, match="no index data"):
            await live_client.get_market_indices()


@pytest.mark.asyncio
async def test_demo_mode_returns_mock_data():
    client = MarketClient(api_key="demo")
    assert client.is_demo

    assert await client.get_stock_price("AAPL") == MOCK_QUOTES["AAPL"]
    overview = await client.get_market_overview()
    assert overview.trend == "up"
    assert overview.volatility == "moderate"
    assert (await client.get_crypto_price("ETH")).name == "Ethereum"
    assert len(await client.get_financial_news(limit=1)) == 1
    assert (await client.get_company_info("XYZ")).name == "XYZ Corporation"
    assert [m.symbol for m in await client.search_stocks("micro")] == ["MSFT"]


@pytest.mark.asyncio
async def test_search_stocks_parses_best_matches(live_client):
    payload = {"bestMatches": [{
        "1. symbol": "TSCO.LON", "2. name": "Tesco PLC", "3. type": "Equity",
        "4. region": "United Kingdom", "8. currency": "GBX", "9. matchScore": "0.7273",
    }]}
    with patch.object(live_client, "_fetch_api", AsyncMock(return_value=payload)):
        matches = await live_client.search_stocks("tesco")
    assert matches[0].symbol == "TSCO.LON"
    assert matches[0].match_score == pytest.approx(0.7273)

    with patch.object(live_client, "_fetch_api", AsyncMock(return_value={})):
        with pytest.raises(ProviderError):
            await live_client.search_stocks("tesco")


@pytest.mark.asyncio
async def test_crypto_and_news_parsing(live_client):
    rate = {"Realtime Currency Exchange Rate": {
        "1. From_Currency Code": "BTC", "2. From_Currency Name": "Bitcoin",
        "5. Exchange Rate": "64000.5", "6. Last Refreshed": "2024-05-01 10:00:00",
    }}
    with patch.object(live_client, "_fetch_api", AsyncMock(return_value=rate)):
        crypto = await live_client.get_crypto_price("BTC")
    assert crypto.price == 64000.5

    feed = {"feed": [
        {"title": "A", "summary": "s", "source": "X", "overall_sentiment_score": "0.3",
         "overall_sentiment_label": "Somewhat-Bullish"},
        {"title": "B", "summary": "s", "source": "Y"},
    ]}
    with patch.object(live_client, "_fetch_api", AsyncMock(return_value=feed)):
        news = await live_client.get_financial_news(limit=1)
    assert [n.title for n in news] == ["A"]
    assert news[0].sentiment_score == 0.3


def test_mock_quote_is_stable_for_unknown_symbols():
    assert mock_quote("ZZZZ") == mock_quote("ZZZZ")
    assert 100 <= mock_quote("ZZZZ").price <= 300


def test_mock_search_matches_symbol_or_name():
    assert [m.symbol for m in mock_search("aap")] == ["AAPL"]
    assert [m.symbol for m in mock_search("tesla")] == ["TSLA"]
    assert mock_search("nothing-matches") == []


def test_summarize_indices():
    up = {"a": Quote("A", 1, 1, 0.5), "b": Quote("B", 1, 1, 0.2)}
    down = {"a": Quote("A", 1, -1, -3.0), "b": None}
    mixed = {"a": Quote("A", 1, 1, 1.2), "b": Quote("B", 1, -1, -0.4)}
    assert summarize_indices(up) == ("up", "low")
    assert summarize_indices(down) == ("down", "high")
    assert summarize_indices(mixed) == ("mixed", "moderate")
    assert summarize_indices({"a": None}) == ("mixed", "moderate")


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["not json", [GLOBAL_QUOTE]])
@patch("aperio.clients.market.httpx.AsyncClient")
async def test_malformed_body_raises_provider_error(mock_client_cls, live_client, body):
    mock_resp = MagicMock()
    if body == "not json":
        mock_resp.json.side_effect = json.JSONDecodeError("Expecting value", body, 0)
    else:
        mock_resp.json.return_value = body
    mock_resp.raise_for_status = MagicMock()
    mock_client = AsyncMock()
    mock_client.get.return_value = mock_resp
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_client

    with pytest.raises(ProviderError) as excinfo:
        await live_client.get_stock_price("IBM")
    assert excinfo.value.provider == "alphavantage"
