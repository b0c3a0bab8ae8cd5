"""Anthropic Claude provider, selectable per task as an alternative writer."""

from __future__ import annotations

import logging
from typing import Any

import anthropic

from aperio.llm import register_provider
from aperio.llm.base import BaseLLMProvider, LLMResponse
from aperio.models import ProviderError
from aperio.retry import retry_async

logger = logging.getLogger(__name__)


@register_provider("anthropic")
class AnthropicProvider(BaseLLMProvider):
    """Provider for Anthropic Claude models. Search filters are ignored."""

    @property
    def provider_name(self) -> str:
        return "anthropic"

    async def complete(
        self,
        prompt: str,
        system: str = "",
        model: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1500,
        extra: dict[str, Any] | None = None,
    ) -> LLMResponse:
        model = model or self.default_model
        if extra:
            logger.debug("Ignoring provider extras for anthropic: %s", sorted(extra))
        try:
            response = await retry_async(
                self._do_complete, prompt, system, model,
                temperature, max_tokens,
                max_retries=self.max_retries,
                label=self.task or self.provider_name,
            )
        except anthropic.APIError as exc:
            raise ProviderError(self.provider_name, str(exc)) from exc
        self._track_cost(response)
        return response

    async def _do_complete(
        self,
        prompt: str,
        system: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> LLMResponse:
        client = anthropic.AsyncAnthropic(api_key=self.api_key, timeout=self.timeout)

        kwargs = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        response = await client.messages.create(**kwargs)

        text = response.content[0].text if response.content else ""
        return LLMResponse(
            text=text,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            model=model,
        )
