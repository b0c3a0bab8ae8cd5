"""Deterministic stand-in content used when generation fails."""

from __future__ import annotations

import math

from aperio.articles import slugify
from aperio.models import (
    WORDS_PER_MINUTE_READ,
    Article,
    ArticleMetadata,
    ContentRequest,
    DialogueLine,
    Script,
    ScriptSegment,
    SegmentPlan,
)
from aperio.parsing import word_count

FALLBACK_ARTICLE_BODY = """\
This is a comprehensive analysis of {topic} in the current market environment.

Markets continue to digest a steady stream of corporate and economic news, \
and {topic} sits squarely within that conversation. Investors are weighing \
recent developments against the broader backdrop of interest rates, \
inflation and earnings expectations.

Key factors to consider include the direction of monetary policy, the \
resilience of consumer spending and how company guidance evolves over the \
coming quarter. Each of these will shape how {topic} is priced in the weeks \
ahead.

For readers, the practical takeaway is to follow the next round of data \
releases closely and to treat any single headline with measured caution."""


def fallback_article(request: ContentRequest) -> Article:
    """Plain article about the topic, without charts or images."""
    content = FALLBACK_ARTICLE_BODY.format(topic=request.topic)
    words = word_count(content)
    return Article(
        id=f"fallback-{slugify(request.topic)}",
        headline=f"Financial Analysis: {request.topic}",
        subheadline="Market insights and economic perspective",
        content=content,
        metadata=ArticleMetadata(
            content_type=request.content_type,
            topic=request.topic,
            complexity=request.complexity,
            word_count=words,
            read_time=math.ceil(words / WORDS_PER_MINUTE_READ),
            has_charts=False,
            chart_count=0,
            is_fallback=True,
        ),
        publishing={"status": "draft", "published_at": None, "featured": False},
    )


def fallback_dialogue(segment: SegmentPlan, topic: str) -> ScriptSegment:
    return ScriptSegment(
        segment=segment.name,
        dialogue=[
            DialogueLine("Sarah", f"Welcome back. Today we're looking at {topic}."),
            DialogueLine("Marcus", "The data shows some interesting trends in this area."),
        ],
        duration=segment.estimated_duration,
        characters=segment.characters,
        key_points=segment.key_points,
    )


def fallback_script(request: ContentRequest) -> Script:
    segment = ScriptSegment(
        segment="fallback",
        dialogue=[DialogueLine(
            "Sarah",
            f"Thanks for joining us for today's financial brief on {request.topic}.",
        )],
        duration="2:00",
        characters=["sarah"],
        key_points=["Market update", "Key insights", "Looking ahead"],
    )
    script = Script(
        content_type=request.content_type,
        topic=request.topic,
        segments=[segment],
        is_fallback=True,
    )
    script.production_notes = {
        "content_type": request.content_type,
        "estimated_duration_seconds": 120,
        "total_word_count": script.word_count,
        "voices": [{"id": "sarah", "name": "Sarah", "voice_style": "Professional host"}],
    }
    return script
