"""Canned provider used when no API key is configured."""

from __future__ import annotations

import json
import logging
from typing import Any

from aperio.llm import register_provider
from aperio.llm.base import BaseLLMProvider, LLMResponse

logger = logging.getLogger(__name__)

DEMO_SEARCH = (
    "Recent financial news: market analysts report mixed signals with "
    "moderate volatility. Key developments include regulatory updates and "
    "earnings adjustments. Sources indicate cautious optimism among "
    "institutional investors."
)

DEMO_CONTEXT = json.dumps({
    "keyPoints": [
        "Market showing mixed signals with moderate volatility",
        "Regulatory developments impacting sector performance",
        "Institutional investor sentiment remains cautiously optimistic",
        "Economic indicators suggest stable growth trajectory",
    ],
    "marketImpact": "moderate",
    "narrative": "balanced analysis with multiple perspectives",
    "relatedTopics": ["market trends", "economic policy", "sector analysis"],
})

DEMO_DIALOGUE = """\
SARAH: Let's take a closer look at what's moving markets right now.
MARCUS: The numbers are mixed. Volatility is moderate and volumes are about average.
ELENA: And the broader economy is sending steady signals, which keeps policymakers patient.
SARAH: So the takeaway for listeners is to stay informed and avoid overreacting."""

DEMO_ARTICLE = """\
# Markets Weigh Mixed Signals as Investors Stay Cautious
Analysts see moderate volatility ahead while economic data holds steady

Financial markets opened the week with a cautious tone as investors weighed
regulatory updates against steady economic indicators. As the data shows,
the major indices moved within a narrow range.

Analysts point to earnings adjustments and policy commentary as the key
drivers. Institutional investors remain cautiously optimistic, and the
numbers reveal little appetite for large directional bets.

Looking ahead, readers should watch upcoming inflation and employment
releases for the next clear signal."""

DEMO_RESPONSES = {
    "search": DEMO_SEARCH,
    "context": DEMO_CONTEXT,
    "dialogue": DEMO_DIALOGUE,
    "article": DEMO_ARTICLE,
}


@register_provider("demo")
class DemoProvider(BaseLLMProvider):
    """Returns deterministic text per task without any network call."""

    @property
    def provider_name(self) -> str:
        return "demo"

    @property
    def is_demo(self) -> bool:
        return True

    async def complete(
        self,
        prompt: str,
        system: str = "",
        model: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1500,
        extra: dict[str, Any] | None = None,
    ) -> LLMResponse:
        logger.debug("Demo completion for task '%s'", self.task)
        return LLMResponse(
            text=DEMO_RESPONSES.get(self.task, DEMO_SEARCH),
            model="demo",
        )
