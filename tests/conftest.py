"""Shared test fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from aperio.config import load_config
from aperio.llm.base import BaseLLMProvider, LLMResponse
from aperio.services import build_services


class FakeProvider(BaseLLMProvider):
    """Returns fixed text (or raises) and records every prompt it was sent."""

    def __init__(self, text: str = "", error: Exception | None = None, citations=None):
        super().__init__(api_key="test-key", base_url="", default_model="fake-model")
        self.text = text
        self.error = error
        self.citations = citations or []
        self.calls: list[dict[str, Any]] = []

    @property
    def provider_name(self) -> str:
        return "fake"

    async def complete(
        self,
        prompt: str,
        system: str = "",
        model: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1500,
        extra: dict[str, Any] | None = None,
    ) -> LLMResponse:
        self.calls.append({
            "prompt": prompt,
            "system": system,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "extra": extra or {},
        })
        if self.error is not None:
            raise self.error
        return LLMResponse(text=self.text, model="fake-model", citations=self.citations)


@pytest.fixture
def sample_config(tmp_path):
    """Config with a live-looking provider and an Anthropic writer (no real keys)."""
    config_text = """
llm:
  providers:
    mock:
      type: "openai_compatible"
      api_key: "test-key"
      base_url: "http://localhost:9999"
      default_model: "test-model"
    claude:
      type: "anthropic"
      api_key: "test-anthropic-key"
      default_model: "claude-haiku-4-5-20251001"
  tasks:
    search: { provider: "mock", max_tokens: 900 }
    context: { provider: "mock" }
    dialogue: { provider: "mock", temperature: 0.7 }
    article: { provider: "claude", max_tokens: 3000 }

market:
  api_key: "av-test"
economic:
  api_key: "fred-test"
images:
  api_key: "demo"

aggregate:
  sources: [news, market, economic, enhanced]

logging:
  level: "debug"
  file: ""
"""
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(config_text)
    return load_config(str(cfg_path))


@pytest.fixture
def demo_config():
    """No keys anywhere, so every provider serves canned data."""
    return {"logging": {"file": ""}}


@pytest.fixture
def demo_services(demo_config):
    return build_services(demo_config)


@pytest.fixture
def make_provider():
    """Factory for FakeProvider instances."""
    return FakeProvider
