"""OpenAI-compatible chat completions provider (Perplexity and friends)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from aperio.llm import register_provider
from aperio.llm.base import BaseLLMProvider, LLMResponse
from aperio.models import ProviderError
from aperio.retry import retry_async

logger = logging.getLogger(__name__)


@register_provider("openai_compatible")
class OpenAICompatibleProvider(BaseLLMProvider):
    """Provider for any OpenAI-compatible API."""

    @property
    def provider_name(self) -> str:
        return "openai_compatible"

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
        try:
            response = await retry_async(
                self._do_complete, prompt, system, model,
                temperature, max_tokens, extra or {},
                max_retries=self.max_retries,
                label=self.task or self.provider_name,
            )
        except httpx.HTTPError as exc:
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
        extra: dict[str, Any],
    ) -> LLMResponse:
        url = f"{self.base_url.rstrip('/')}/chat/completions"

        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        payload = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        payload.update({k: v for k, v in extra.items() if v is not None})

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(url, json=payload, headers=headers)
            resp.raise_for_status()

        try:
            data = resp.json()
            text = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ProviderError(
                self.provider_name, f"unexpected completion shape: {exc!r}",
            ) from exc

        usage = data.get("usage") or {}
        return LLMResponse(
            text=text or "",
            input_tokens=usage.get("prompt_tokens", 0),
            output_tokens=usage.get("completion_tokens", 0),
            model=model,
            citations=list(data.get("citations") or []),
        )
