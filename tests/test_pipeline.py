"""Tests for content packages and the market dashboard."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from aperio.clients.images import ImageClient
from aperio.clients.market import MOCK_CRYPTO
from aperio.dashboard import WATCHLIST, load_dashboard, search_symbols
from aperio.models import ContentRequest, ProviderError, Quote, QuoteResult, ValidationError
from aperio.pipeline import generate_content, validate_request


def test_validate_request():
    validate_request(ContentRequest("Gold"))
    with pytest.raises(ValidationError, match="topic"):
        validate_request(ContentRequest("   "))
    with pytest.raises(ValidationError, match="complexity"):
        validate_request(ContentRequest("Gold", complexity="expert"))


@pytest.mark.asyncio
async def test_invalid_request_makes_no_calls(demo_services, make_provider):
    provider = make_provider("unused")
    demo_services.dialogue_provider = provider
    with pytest.raises(ValidationError):
        await generate_content(demo_services, ContentRequest(""))
    assert provider.calls == []


@pytest.mark.asyncio
async def test_generate_content_podcast_package(demo_services):
    package = await generate_content(demo_services, ContentRequest("Rates", "dailyBrief"))

    assert not package.script.is_fallback
    assert package.story_image is not None
    assert package.podcast_cover is not None
    assert package.market.trend == "up"
    assert package.economic["gdp"].value == 2.3
    expected = -(-package.script.production_notes["total_word_count"] // 200)
    assert package.estimated_read_time == expected


@pytest.mark.asyncio
async def test_market_pulse_has_no_cover_and_optional_parts(demo_services):
    request = ContentRequest(
        "Rates", "marketPulse", include_visuals=False, include_market_data=False,
    )
    package = await generate_content(demo_services, request)

    assert package.story_image is None
    assert package.podcast_cover is None
    assert package.market is None
    assert package.economic is None


@pytest.mark.asyncio
async def test_snapshot_failures_are_soft(demo_services):
    demo_services.market.get_market_overview = AsyncMock(side_effect=ProviderError("alphavantage", "down"))
    demo_services.economic.get_economic_indicators = AsyncMock(side_effect=ProviderError("fred", "down"))

    package = await generate_content(demo_services, ContentRequest("Rates", "marketPulse"))

    assert package.market is None
    assert package.economic is None
    assert package.story_image is not None


@pytest.mark.asyncio
async def test_dashboard_demo_has_no_fallbacks(demo_services):
    dashboard = await load_dashboard(demo_services)

    assert dashboard.fallbacks == []
    assert [q.symbol for q in dashboard.stocks] == WATCHLIST
    assert set(dashboard.indices) == {"sp500", "nasdaq", "dow", "total"}
    assert [c.symbol for c in dashboard.crypto] == ["BTC", "ETH", "ADA"]
    assert len(dashboard.news) == 2


@pytest.mark.asyncio
async def test_dashboard_panels_fall_back(demo_services):
    market = demo_services.market
    market.get_market_indices = AsyncMock(side_effect=ProviderError("alphavantage", "limit"))
    market.get_crypto_price = AsyncMock(side_effect=ProviderError("alphavantage", "limit"))
    market.get_multiple_stock_prices = AsyncMock(return_value=[
        QuoteResult("AAPL", data=Quote("AAPL", 1.0, 0.0, 0.0)),
        QuoteResult("GOOGL", error="limit"),
    ])
    demo_services.economic.get_economic_indicators = AsyncMock(side_effect=ProviderError("fred", "down"))

    dashboard = await load_dashboard(demo_services)

    assert dashboard.fallbacks == ["crypto", "economic", "indices", "stocks"]
    assert dashboard.stocks[0].price == 1.0
    assert dashboard.stocks[1].price == 138.21
    assert dashboard.crypto == [MOCK_CRYPTO[s] for s in ("BTC", "ETH", "ADA")]
    assert dashboard.economic["inflation"].value == 3.2


@pytest.mark.asyncio
async def test_search_symbols(demo_services):
    with pytest.raises(ValidationError):
        await search_symbols(demo_services, "  ")

    assert [m.symbol for m in await search_symbols(demo_services, "apple")] == ["AAPL"]

    demo_services.market.search_stocks = AsyncMock(side_effect=ProviderError("alphavantage", "down"))
    assert [m.symbol for m in await search_symbols(demo_services, "tsla")] == ["TSLA"]


@pytest.mark.asyncio
@patch("aperio.clients.images.httpx.AsyncClient")
async def test_non_json_image_reply_keeps_package(mock_client_cls, demo_services):
    mock_resp = MagicMock()
    mock_resp.json.side_effect = json.JSONDecodeError("Expecting value", "<html>", 0)
    mock_resp.raise_for_status = MagicMock()
    mock_client = AsyncMock()
    mock_client.post.return_value = mock_resp
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_client
    demo_services.images = ImageClient(api_key="g-key")

    package = await generate_content(demo_services, ContentRequest("Gold"))

    assert not package.script.is_fallback
    assert package.story_image.is_fallback
    assert package.podcast_cover.is_fallback
    assert mock_client.post.await_count == 2
