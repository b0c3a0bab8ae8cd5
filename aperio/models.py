"""Core data models for content generation."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

SCRIPT_TYPES = ("dailyBrief", "deepDive", "marketPulse", "economicLens")
ARTICLE_TYPES = (
    "featuredArticle",
    "marketAnalysis",
    "educationalContent",
    "breakingNews",
    "weeklyWrap",
)
CONTENT_TYPES = SCRIPT_TYPES + ARTICLE_TYPES
COMPLEXITIES = ("beginner", "intermediate", "advanced")

WORDS_PER_MINUTE_READ = 200


class ValidationError(ValueError):
    """User input failed validation before any provider call."""


class ProviderError(Exception):
    """An external provider failed or returned an unexpected shape."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


@dataclass(frozen=True)
class ContentRequest:
    """A single generation request, immutable once submitted."""

    topic: str
    content_type: str = "dailyBrief"
    complexity: str = "intermediate"
    include_visuals: bool = True
    include_market_data: bool = True


@dataclass
class SourceLink:
    title: str
    url: str
    domain: str


@dataclass
class NewsSummary:
    """Processed result of a news search."""

    summary: str
    sources: list[SourceLink] = field(default_factory=list)
    key_points: list[str] = field(default_factory=list)
    is_breaking: bool = False
    sentiment: str = "neutral"  # positive, negative, neutral
    relevance_score: float = 0.0


@dataclass
class EnhancedContext:
    """LLM-generated framing for a content type and topic."""

    topic: str
    content_type: str
    news_context: str
    key_points: list[str] = field(default_factory=list)
    sources: list[SourceLink] = field(default_factory=list)
    market_impact: str = "moderate"
    audience_level: str = "intermediate"
    suggested_narrative: str = ""
    related_topics: list[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.utcnow)


@dataclass
class Quote:
    symbol: str
    price: float
    change: float
    change_percent: float
    high: float | None = None
    low: float | None = None
    volume: int | None = None
    previous_close: float | None = None
    trading_day: str | None = None


@dataclass
class QuoteResult:
    """Outcome of one symbol lookup in a batch."""

    symbol: str
    data: Quote | None = None
    error: str | None = None


@dataclass
class MarketSnapshot:
    """Major index proxies plus a coarse read of direction."""

    indices: dict[str, Quote | None]
    trend: str  # up, down, mixed
    volatility: str  # low, moderate, high
    as_of: datetime = field(default_factory=datetime.utcnow)


@dataclass
class Indicator:
    key: str
    label: str
    value: float
    change: float = 0.0
    change_percent: float = 0.0
    date: str | None = None
    unit: str = "Value"
    description: str = ""


@dataclass
class SymbolMatch:
    symbol: str
    name: str
    type: str = "Equity"
    region: str = "United States"
    currency: str = "USD"
    match_score: float = 0.0


@dataclass
class CompanyInfo:
    symbol: str
    name: str
    description: str = ""
    sector: str = ""
    industry: str = ""
    market_cap: str = ""
    pe: str = ""
    dividend: str = ""
    beta: str = ""


@dataclass
class NewsItem:
    title: str
    summary: str
    source: str
    url: str = ""
    published_at: str = ""
    sentiment: str = "Neutral"
    sentiment_score: float = 0.0


@dataclass
class CryptoQuote:
    symbol: str
    name: str
    price: float
    refreshed_at: str | None = None


@dataclass
class SourceOutcome:
    """Per-source result of the context fan-out."""

    source: str
    ok: bool
    value: Any = None
    error: str | None = None


@dataclass
class AggregatedContext:
    """Merged context for one request. Every source field may be None."""

    topic: str
    content_type: str
    complexity: str
    news: NewsSummary | None = None
    market: MarketSnapshot | None = None
    economic: dict[str, Indicator] | None = None
    enhanced: EnhancedContext | None = None
    timestamp: datetime = field(default_factory=datetime.utcnow)
    outcomes: list[SourceOutcome] = field(default_factory=list)


@dataclass
class ImageResult:
    image_url: str
    alt_text: str
    caption: str = ""
    prompt: str = ""
    is_fallback: bool = False


@dataclass
class DialogueLine:
    speaker: str
    text: str


@dataclass
class SegmentPlan:
    """One planned segment of a script before dialogue is written."""

    name: str
    purpose: str
    estimated_duration: str
    key_points: list[str]
    characters: list[str]


@dataclass
class ScriptSegment:
    segment: str
    dialogue: list[DialogueLine]
    duration: str
    characters: list[str]
    key_points: list[str] = field(default_factory=list)


@dataclass
class Script:
    """A multi-voice dialogue script."""

    content_type: str
    topic: str
    segments: list[ScriptSegment]
    production_notes: dict[str, Any] = field(default_factory=dict)
    context: AggregatedContext | None = None
    generated_at: datetime = field(default_factory=datetime.utcnow)
    is_fallback: bool = False

    @property
    def word_count(self) -> int:
        return sum(
            len(line.text.split())
            for segment in self.segments
            for line in segment.dialogue
        )


@dataclass
class Chart:
    type: str
    data: list[dict[str, Any]]
    placement: str
    caption: str
    insight: str = ""


@dataclass
class ArticleMetadata:
    content_type: str
    topic: str
    complexity: str
    word_count: int
    read_time: int
    generated_at: datetime = field(default_factory=datetime.utcnow)
    target_length: str = ""
    sources: list[SourceLink] = field(default_factory=list)
    has_charts: bool = False
    chart_count: int = 0
    is_fallback: bool = False


@dataclass
class Article:
    """A generated written article with optional charts and images."""

    id: str
    headline: str
    subheadline: str
    content: str
    metadata: ArticleMetadata
    sections: dict[str, str] = field(default_factory=dict)
    charts: list[Chart] = field(default_factory=list)
    images: list[ImageResult] = field(default_factory=list)
    seo: dict[str, Any] = field(default_factory=dict)
    publishing: dict[str, Any] = field(default_factory=dict)


@dataclass
class ContentPackage:
    """Script plus optional visuals and market snapshot for one request."""

    request: ContentRequest
    script: Script
    story_image: ImageResult | None = None
    podcast_cover: ImageResult | None = None
    market: MarketSnapshot | None = None
    economic: dict[str, Indicator] | None = None
    generated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def estimated_read_time(self) -> int:
        words = self.script.production_notes.get("total_word_count", 0)
        return math.ceil(words / WORDS_PER_MINUTE_READ) if words else 3


@dataclass
class AudioTrack:
    id: str
    title: str
    audio_url: str
    duration: str
    characters: list[str]
    description: str = ""
    content_type: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class User:
    id: str
    email: str
    metadata: dict[str, Any] = field(default_factory=dict)
