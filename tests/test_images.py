"""Tests for illustration generation."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from aperio.clients.images import (
    PLACEHOLDERS,
    ImageClient,
    extract_visual_concept,
    size_for,
)
from aperio.models import ProviderError


def _gemini_reply(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _mock_post(mock_client_cls, payload=None, side_effect=None):
    mock_resp = MagicMock()
    mock_resp.json.return_value = payload
    mock_resp.raise_for_status = MagicMock()
    mock_client = AsyncMock()
    if side_effect is not None:
        mock_client.post.side_effect = side_effect
    else:
        mock_client.post.return_value = mock_resp
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_client
    return mock_client


@pytest.mark.asyncio
async def test_demo_key_returns_placeholder():
    client = ImageClient(api_key="demo")
    image = await client.generate_story_image("Rates", "Inflation trends dominate the week")

    assert image.is_fallback
    assert image.image_url == PLACEHOLDERS["story"]
    assert image.alt_text == "Illustration for: Rates"
    assert "inflation trends" in image.prompt
    assert image.caption.startswith("Visual representation")


@pytest.mark.asyncio
@patch("aperio.clients.images.httpx.AsyncClient")
async def test_live_generation_extracts_url(mock_client_cls):
    mock_client = _mock_post(
        mock_client_cls, _gemini_reply("Here you go: https://img.example/a.png done"),
    )
    client = ImageClient(api_key="g-key")

    image = await client.generate_podcast_cover("Daily Brief", "rates")

    assert image.image_url == "https://img.example/a.png"
    assert not image.is_fallback
    call = mock_client.post.call_args
    assert call.args[0].endswith("/gemini-2.0-flash-exp:generateContent")
    assert call.kwargs["params"] == {"key": "g-key"}
    assert "1024x1024" in call.kwargs["json"]["contents"][0]["parts"][0]["text"]


@pytest.mark.asyncio
@patch("aperio.clients.images.httpx.AsyncClient")
async def test_reply_without_url_falls_back(mock_client_cls):
    _mock_post(mock_client_cls, _gemini_reply("I cannot draw that."))
    client = ImageClient(api_key="g-key")

    image = await client.generate_breaking_news_image("Market halts", urgency="high")

    assert image.is_fallback
    assert image.image_url == PLACEHOLDERS["news"]
    assert "urgent but professional" in image.prompt


@pytest.mark.asyncio
@patch("aperio.clients.images.httpx.AsyncClient")
async def test_http_failure_falls_back(mock_client_cls):
    _mock_post(mock_client_cls, side_effect=httpx.ConnectError("refused"))
    client = ImageClient(api_key="g-key")

    image = await client.generate_market_visualization("down", "high")

    assert image.is_fallback
    assert image.image_url == PLACEHOLDERS["chart"]


@pytest.mark.asyncio
@patch("aperio.clients.images.httpx.AsyncClient")
async def test_call_gemini_bad_shape_raises(mock_client_cls):
    _mock_post(mock_client_cls, {"candidates": []})
    client = ImageClient(api_key="g-key")

    with pytest.raises(ProviderError, match="unexpected response shape"):
        await client._call_gemini("prompt", "16:9", "editorial")


@pytest.mark.asyncio
async def test_generate_content_visuals_batch():
    client = ImageClient(api_key="")
    images = await client.generate_content_visuals([
        {"type": "story", "title": "A", "content": "stock performance"},
        {"type": "podcast", "title": "B"},
        {"type": "market_data", "data": {"trend": "up"}},
        {"type": "hologram"},
    ])
    assert [i.image_url for i in images] == [
        PLACEHOLDERS["story"], PLACEHOLDERS["podcast"], PLACEHOLDERS["chart"], PLACEHOLDERS["story"],
    ]
    assert images[3].alt_text == "hologram illustration"
    assert "Market showing up trends" in images[2].prompt


@pytest.mark.asyncio
async def test_economic_illustration_audience():
    client = ImageClient(api_key="")
    image = await client.generate_economic_illustration("yield curve", "beginner")
    assert "newcomers to finance" in image.prompt
    assert image.image_url == PLACEHOLDERS["concept"]


def test_extract_visual_concept_and_size():
    assert extract_visual_concept("Global markets slid") == "global markets"
    assert extract_visual_concept("Nothing visual") == "financial market analysis"
    assert size_for("9:16") == "1024x1792"
    assert size_for("weird") == "1792x1024"


@pytest.mark.asyncio
@patch("aperio.clients.images.httpx.AsyncClient")
async def test_non_json_reply_falls_back(mock_client_cls):
    mock_client = _mock_post(mock_client_cls)
    mock_client.post.return_value.json.side_effect = json.JSONDecodeError(
        "Expecting value", "<html>busy</html>", 0,
    )
    client = ImageClient(api_key="g-key")

    with pytest.raises(ProviderError):
        await client._call_gemini("prompt", "16:9", "editorial")

    image = await client.generate_story_image("Gold", "Gold rallies on rate cut bets")
    assert image.is_fallback
    assert image.image_url == PLACEHOLDERS["story"]
