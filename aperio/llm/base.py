"""Abstract base class for text-generation providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

# USD per 1M tokens (input, output)
PRICING = {
    "llama-3.1-sonar-large-128k-online": (1.0, 1.0),
    "llama-3.1-sonar-huge-128k-online": (5.0, 5.0),
    "sonar": (1.0, 1.0),
    "sonar-pro": (3.0, 15.0),
    "claude-sonnet-4-5-20250514": (3.0, 15.0),
    "claude-haiku-4-5-20251001": (0.80, 4.0),
}


def estimate_cost(input_tokens: int, output_tokens: int, model: str) -> float:
    """Rough cost estimate from known per-1M-token pricing."""
    input_rate, output_rate = PRICING.get(model, (1.0, 2.0))
    return (input_tokens * input_rate + output_tokens * output_rate) / 1_000_000


@dataclass
class LLMResponse:
    """Response from an LLM call."""

    text: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = ""
    citations: list[str] = field(default_factory=list)


class UsageTracker:
    """Accumulate token usage and cost across the calls of one process."""

    def __init__(self):
        self.calls = 0
        self.total_input_tokens = 0
        self.total_output_tokens = 0
        self.total_cost_usd = 0.0

    def track(self, input_tokens: int, output_tokens: int, model: str) -> None:
        self.calls += 1
        self.total_input_tokens += input_tokens
        self.total_output_tokens += output_tokens
        self.total_cost_usd += estimate_cost(input_tokens, output_tokens, model)


class BaseLLMProvider(ABC):
    """Base class for LLM providers."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        default_model: str,
        max_retries: int = 2,
        timeout: int = 60,
        task: str = "",
        tracker: UsageTracker | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.default_model = default_model
        self.max_retries = max_retries
        self.timeout = timeout
        self.task = task
        self.tracker = tracker

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        system: str = "",
        model: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1500,
        extra: dict[str, Any] | None = None,
    ) -> LLMResponse:
        """Send a completion request and return the response.

        ``extra`` carries provider-specific request fields (search filters,
        top_p); providers that do not understand them ignore them.
        """
        ...

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Human-readable provider name."""
        ...

    @property
    def is_demo(self) -> bool:
        return False

    def _track_cost(self, response: LLMResponse) -> None:
        if self.tracker and (response.input_tokens or response.output_tokens):
            self.tracker.track(
                response.input_tokens,
                response.output_tokens,
                response.model,
            )
