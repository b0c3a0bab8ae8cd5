"""Gemini-backed illustration generation with static placeholders."""

from __future__ import annotations

import asyncio
import logging
import re

import httpx

from aperio.config import is_demo_key
from aperio.llm.prompts import IMAGE_TEMPLATES
from aperio.models import ImageResult, ProviderError
from aperio.retry import retry_async
from aperio.templating import build_prompt

logger = logging.getLogger(__name__)

PLACEHOLDERS = {
    "story": "https://images.unsplash.com/photo-1611974789855-9c2a0a7236a3?w=800&h=450&fit=crop",
    "podcast": "https://images.unsplash.com/photo-1590736969955-71cc94901144?w=400&h=400&fit=crop",
    "chart": "https://images.unsplash.com/photo-1642790106117-e829e14a795f?w=800&h=500&fit=crop",
    "concept": "https://images.unsplash.com/photo-1554224155-6726b3ff858f?w=800&h=600&fit=crop",
    "news": "https://images.unsplash.com/photo-1504711434969-e33886168f5c?w=800&h=450&fit=crop",
}

ASPECT_SIZES = {
    "1:1": "1024x1024",
    "16:9": "1792x1024",
    "9:16": "1024x1792",
    "4:3": "1536x1152",
    "16:10": "1792x1120",
}

VISUAL_CONCEPTS = (
    "market volatility",
    "economic growth",
    "inflation trends",
    "interest rate changes",
    "stock performance",
    "sector analysis",
    "global markets",
    "cryptocurrency trends",
    "economic indicators",
)

AUDIENCE_DESCRIPTIONS = {
    "beginner": "newcomers to finance, simple visual metaphors",
    "intermediate": "general audience, balanced detail and clarity",
    "advanced": "experienced investors, sophisticated concepts",
}

_URL = re.compile(r"https?://\S+")


def extract_visual_concept(content: str) -> str:
    lowered = content.lower()
    for concept in VISUAL_CONCEPTS:
        if concept in lowered:
            return concept
    return "financial market analysis"


def size_for(aspect_ratio: str) -> str:
    return ASPECT_SIZES.get(aspect_ratio, "1792x1024")


def placeholder(kind: str, alt_text: str, prompt: str = "") -> ImageResult:
    return ImageResult(
        image_url=PLACEHOLDERS.get(kind, PLACEHOLDERS["story"]),
        alt_text=alt_text,
        prompt=prompt,
        is_fallback=True,
    )


class ImageClient:
    """Illustrations for stories, podcast covers, market trends and news.

    Generation never raises: demo keys and failed calls both yield a
    placeholder image marked ``is_fallback``.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1/models",
        model: str = "gemini-2.0-flash-exp",
        timeout: int = 30,
        max_retries: int = 0,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries

    @property
    def is_demo(self) -> bool:
        return is_demo_key(self.api_key)

    async def _call_gemini(self, prompt: str, aspect_ratio: str, style: str) -> str:
        """Return an image URL from the model reply. Raises ProviderError."""
        payload = {
            "contents": [{"parts": [{
                "text": f"Generate an image ({style}, {size_for(aspect_ratio)}): {prompt}",
            }]}],
            "generationConfig": {
                "temperature": 0.7,
                "topK": 32,
                "topP": 1,
                "maxOutputTokens": 4096,
            },
            "safetySettings": [
                {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
                {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
            ],
        }
        url = f"{self.base_url}/{self.model}:generateContent"

        async def _post() -> dict:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(url, params={"key": self.api_key}, json=payload)
                resp.raise_for_status()
                return resp.json()

        try:
            data = await retry_async(_post, max_retries=self.max_retries, label="gemini")
        except (httpx.HTTPError, ValueError) as exc:
            raise ProviderError("gemini", str(exc)) from exc

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError("gemini", "unexpected response shape") from exc

        match = _URL.search(text or "")
        if not match:
            raise ProviderError("gemini", "no image URL in response")
        return match.group(0)

    async def _generate(
        self,
        kind: str,
        template: str,
        variables: dict,
        aspect_ratio: str,
        style: str,
        alt_text: str,
        caption: str = "",
    ) -> ImageResult:
        prompt = build_prompt(IMAGE_TEMPLATES[template], variables)
        if self.is_demo:
            result = placeholder(kind, alt_text, prompt)
            result.caption = caption
            return result

        try:
            image_url = await self._call_gemini(prompt, aspect_ratio, style)
        except ProviderError as exc:
            logger.warning("Image generation (%s) failed, using placeholder: %s", template, exc)
            result = placeholder(kind, alt_text, prompt)
            result.caption = caption
            return result

        return ImageResult(
            image_url=image_url, alt_text=alt_text, caption=caption, prompt=prompt,
        )

    async def generate_story_image(self, title: str, content: str) -> ImageResult:
        return await self._generate(
            "story", "storyImage",
            {"concept": extract_visual_concept(content)},
            "16:9", "editorial_illustration",
            alt_text=f"Illustration for: {title}",
            caption=f"Visual representation of key concepts from: {title}",
        )

    async def generate_podcast_cover(
        self, title: str, theme: str = "market analysis",
    ) -> ImageResult:
        return await self._generate(
            "podcast", "podcastCover",
            {"title": title, "theme": theme},
            "1:1", "podcast_cover",
            alt_text=f"Podcast cover for: {title}",
        )

    async def generate_market_visualization(
        self, trend: str = "mixed", volatility: str = "moderate",
    ) -> ImageResult:
        summary = f"Market showing {trend} trends with {volatility} volatility"
        return await self._generate(
            "chart", "marketTrend",
            {"marketData": summary},
            "16:10", "data_visualization",
            alt_text="Market trend visualization",
        )

    async def generate_economic_illustration(
        self, concept: str, complexity: str = "intermediate",
    ) -> ImageResult:
        audience = AUDIENCE_DESCRIPTIONS.get(complexity, AUDIENCE_DESCRIPTIONS["intermediate"])
        return await self._generate(
            "concept", "economicConcept",
            {"concept": concept, "audience": audience},
            "4:3", "educational_illustration",
            alt_text=f"Educational illustration: {concept}",
        )

    async def generate_breaking_news_image(
        self, headline: str, urgency: str = "normal",
    ) -> ImageResult:
        tone = "urgent but professional" if urgency == "high" else "informative"
        return await self._generate(
            "news", "breakingNews",
            {"headline": headline, "tone": tone},
            "16:9", "breaking_news",
            alt_text=f"Breaking news illustration: {headline}",
        )

    async def generate_content_visuals(self, items: list[dict]) -> list[ImageResult]:
        """Batch generation; each item has a ``type`` of story, podcast or market_data."""

        async def _one(item: dict) -> ImageResult:
            kind = item.get("type")
            if kind == "story":
                return await self.generate_story_image(
                    item.get("title", ""), item.get("content", ""),
                )
            if kind == "podcast":
                return await self.generate_podcast_cover(
                    item.get("title", ""), item.get("theme", "market analysis"),
                )
            if kind == "market_data":
                data = item.get("data") or {}
                return await self.generate_market_visualization(
                    data.get("trend", "mixed"), data.get("volatility", "moderate"),
                )
            return placeholder("story", f"{kind} illustration")

        return list(await asyncio.gather(*[_one(item) for item in items]))
