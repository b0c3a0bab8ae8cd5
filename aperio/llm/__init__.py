"""Text-generation provider registry and task routing."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from aperio.llm.base import BaseLLMProvider, UsageTracker

PROVIDERS: dict[str, type[BaseLLMProvider]] = {}


def register_provider(name: str):
    """Decorator to register an LLM provider."""

    def decorator(cls):
        PROVIDERS[name] = cls
        return cls

    return decorator


def build_provider(
    config: dict,
    task: str,
    tracker: UsageTracker | None = None,
) -> BaseLLMProvider:
    """Construct the configured provider for a task.

    Callers build each provider once and pass it where it is needed;
    nothing is cached at module level.
    """
    from aperio.config import get_llm_task_config

    task_cfg = get_llm_task_config(config, task)
    provider_type = task_cfg["provider_type"]
    if provider_type not in PROVIDERS:
        raise ValueError(f"Unknown LLM provider type: {provider_type}")

    cls = PROVIDERS[provider_type]
    return cls(
        api_key=task_cfg["api_key"],
        base_url=task_cfg["base_url"],
        default_model=task_cfg["model"],
        max_retries=task_cfg["max_retries"],
        timeout=task_cfg["timeout"],
        task=task,
        tracker=tracker,
    )


# Import implementations to trigger registration
from aperio.llm.anthropic_provider import AnthropicProvider  # noqa: E402, F401
from aperio.llm.demo import DemoProvider  # noqa: E402, F401
from aperio.llm.openai_compat import OpenAICompatibleProvider  # noqa: E402, F401
