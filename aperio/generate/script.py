"""Multi-voice dialogue scripts built from aggregated context."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import TYPE_CHECKING

from aperio.config import get_llm_task_config
from aperio.context.aggregate import aggregate
from aperio.generate.fallback import fallback_dialogue, fallback_script
from aperio.llm.prompts import DIALOGUE_PROMPT, SYSTEM_JOURNALIST
from aperio.models import AggregatedContext, ContentRequest, Script, ScriptSegment, SegmentPlan
from aperio.parsing import parse_dialogue
from aperio.templating import build_prompt, humanize, select_template

if TYPE_CHECKING:
    from aperio.services import Services

logger = logging.getLogger(__name__)

SPEAKING_WPM = 150

CHARACTERS = {
    "sarah": {
        "name": "Sarah",
        "role": "Host",
        "personality": "Warm, accessible, guides conversations smoothly. "
        "NPR Marketplace style.",
        "voice_style": "Professional but conversational, explanatory tone",
    },
    "marcus": {
        "name": "Marcus",
        "role": "Market Analyst",
        "personality": "Data-driven, analytical, provides technical insights "
        "with clear explanations.",
        "voice_style": "Confident, numbers-focused, but approachable",
    },
    "elena": {
        "name": "Dr. Elena Rodriguez",
        "role": "Economist",
        "personality": "Academic expertise made accessible, provides broader "
        "economic context.",
        "voice_style": "Thoughtful, educational, connects dots between policy "
        "and markets",
    },
}

SCRIPT_TEMPLATES = {
    "dailyBrief": {
        "duration": "3-4 minutes",
        "structure": ["intro", "market_highlights", "economic_context", "key_takeaway", "outro"],
        "tone": "informative, accessible to general audience",
    },
    "deepDive": {
        "duration": "12-15 minutes",
        "structure": [
            "intro", "topic_setup", "data_analysis",
            "expert_perspectives", "implications", "conclusion",
        ],
        "tone": "comprehensive analysis for engaged listeners",
    },
    "marketPulse": {
        "duration": "90 seconds",
        "structure": ["urgent_intro", "breaking_context", "market_impact", "what_to_watch"],
        "tone": "urgent but measured, breaking news style",
    },
    "economicLens": {
        "duration": "8-10 minutes",
        "structure": [
            "concept_intro", "real_world_examples", "policy_connections", "future_outlook",
        ],
        "tone": "educational, builds understanding progressively",
    },
}

# segment: (purpose, share of total duration, speakers)
SEGMENTS = {
    "intro": ("Hook listeners and introduce today's focus", 0.15, ["sarah"]),
    "market_highlights": ("Cover key market movements and trends", 0.35, ["sarah", "marcus"]),
    "economic_context": ("Provide broader economic perspective", 0.25, ["elena", "sarah"]),
    "key_takeaway": ("Synthesize main insights for listeners", 0.15, ["sarah"]),
    "outro": ("Wrap up and preview tomorrow's content", 0.10, ["sarah"]),
    "topic_setup": ("Establish the issue and why it matters", 0.20, ["sarah"]),
    "data_analysis": ("Deep dive into relevant numbers and trends", 0.30, ["marcus", "elena"]),
    "expert_perspectives": ("Multiple viewpoints on implications", 0.25, ["elena", "marcus"]),
    "implications": ("What this means for different stakeholders", 0.15, ["sarah", "elena"]),
    "conclusion": ("Key insights and forward-looking perspective", 0.10, ["sarah"]),
    "urgent_intro": ("Immediate attention grabber for breaking news", 0.25, ["sarah"]),
    "breaking_context": ("Essential background context", 0.35, ["marcus", "sarah"]),
    "market_impact": ("Direct effects on markets and investors", 0.25, ["marcus"]),
    "what_to_watch": ("Key indicators and next developments", 0.15, ["sarah", "marcus"]),
    "concept_intro": ("Introduce economic concept clearly", 0.25, ["elena"]),
    "real_world_examples": ("Concrete examples to illustrate concept", 0.35, ["sarah", "elena"]),
    "policy_connections": ("How policy affects everyday economics", 0.25, ["elena"]),
    "future_outlook": ("Implications and what to expect", 0.15, ["elena", "sarah"]),
}
DEFAULT_SEGMENT = ("Provide relevant financial context", 0.20, ["sarah"])

DEFAULT_KEY_POINTS = ["Current market conditions", "Recent developments", "Key implications"]

MIXING_NOTES = [
    "Apply NPR-style EQ and compression",
    "Add subtle background music during transitions",
    "Ensure consistent audio levels between speakers",
    "Include brief pause between major segments",
]


def parse_duration(text: str) -> int:
    """``"3-4 minutes"`` -> 180, ``"90 seconds"`` -> 90, ``"2:30"`` -> 150."""
    clock = re.fullmatch(r"\s*(\d+):(\d{2})\s*", text)
    if clock:
        return int(clock.group(1)) * 60 + int(clock.group(2))
    minutes = re.search(r"(\d+)(?:-\d+)?\s*minutes?", text)
    if minutes:
        return int(minutes.group(1)) * 60
    seconds = re.search(r"(\d+)\s*seconds?", text)
    if seconds:
        return int(seconds.group(1))
    return 180


def format_duration(seconds: int) -> str:
    return f"{seconds // 60}:{seconds % 60:02d}"


def segment_duration(name: str, total: str) -> str:
    weight = SEGMENTS.get(name, DEFAULT_SEGMENT)[1]
    return format_duration(int(parse_duration(total) * weight + 0.5))


def segment_key_points(context: AggregatedContext) -> list[str]:
    if context.enhanced and context.enhanced.key_points:
        points = context.enhanced.key_points
    elif context.news and context.news.key_points:
        points = context.news.key_points
    else:
        points = DEFAULT_KEY_POINTS
    return list(points[:3])


def build_structure(template: dict, context: AggregatedContext) -> list[SegmentPlan]:
    key_points = segment_key_points(context)
    plans = []
    for name in template["structure"]:
        purpose, _, speakers = SEGMENTS.get(name, DEFAULT_SEGMENT)
        plans.append(SegmentPlan(
            name=name,
            purpose=purpose,
            estimated_duration=segment_duration(name, template["duration"]),
            key_points=list(key_points),
            characters=list(speakers),
        ))
    return plans


def _economic_backdrop(context: AggregatedContext) -> str:
    if context.economic:
        return "; ".join(
            f"{ind.label} {ind.value:g}" for ind in list(context.economic.values())[:4]
        )
    if context.enhanced and context.enhanced.news_context:
        return context.enhanced.news_context
    return "stable conditions"


def build_dialogue_prompt(plan: SegmentPlan, context: AggregatedContext, tone: str) -> str:
    characters = "\n".join(
        f"{CHARACTERS[c]['name']} ({CHARACTERS[c]['role']}): {CHARACTERS[c]['personality']}"
        for c in plan.characters
    )
    return build_prompt(DIALOGUE_PROMPT, {
        "segment": humanize(plan.name),
        "characters": characters,
        "purpose": plan.purpose,
        "tone": tone,
        "duration": plan.estimated_duration,
        "key_points": "\n".join(f"- {p}" for p in plan.key_points),
        "market_sentiment": context.enhanced.market_impact if context.enhanced else "mixed",
        "recent_news": context.news.summary if context.news else "general market conditions",
        "economic_backdrop": _economic_backdrop(context),
    })


async def _write_segment(
    services: Services, plan: SegmentPlan, context: AggregatedContext, tone: str,
) -> ScriptSegment:
    task_cfg = get_llm_task_config(services.config, "dialogue")
    prompt = build_dialogue_prompt(plan, context, tone)
    try:
        response = await services.dialogue_provider.complete(
            prompt,
            system=SYSTEM_JOURNALIST,
            temperature=task_cfg["temperature"],
            max_tokens=task_cfg["max_tokens"],
        )
    except Exception:
        logger.exception("Dialogue for segment '%s' failed", plan.name)
        return fallback_dialogue(plan, context.topic)

    dialogue = parse_dialogue(response.text)
    if not dialogue:
        logger.warning("Segment '%s' returned no dialogue lines", plan.name)
        return fallback_dialogue(plan, context.topic)

    return ScriptSegment(
        segment=plan.name,
        dialogue=dialogue,
        duration=plan.estimated_duration,
        characters=plan.characters,
        key_points=plan.key_points,
    )


def production_notes(script: Script, target_duration: str) -> dict:
    words = script.word_count
    planned = sum(parse_duration(seg.duration) for seg in script.segments)
    return {
        "content_type": script.content_type,
        "target_duration_seconds": parse_duration(target_duration),
        "estimated_duration_seconds": round(words / SPEAKING_WPM * 60),
        "total_estimated_duration": format_duration(planned),
        "total_word_count": words,
        "average_words_per_minute": SPEAKING_WPM,
        "voices": [
            {
                "id": key,
                "name": character["name"],
                "voice_style": character["voice_style"],
                "segments": sum(1 for seg in script.segments if key in seg.characters),
            }
            for key, character in CHARACTERS.items()
        ],
        "mixing_notes": list(MIXING_NOTES),
    }


async def generate_script(services: Services, request: ContentRequest) -> Script:
    """Aggregate context, plan segments and write all dialogue concurrently.

    A failing segment gets stand-in dialogue; any other failure returns the
    fallback script.
    """
    try:
        context = await aggregate(
            services, request.topic, request.content_type, request.complexity,
        )
        template = select_template(SCRIPT_TEMPLATES, request.content_type, "dailyBrief")
        plans = build_structure(template, context)

        segments = await asyncio.gather(*[
            _write_segment(services, plan, context, template["tone"]) for plan in plans
        ])

        script = Script(
            content_type=request.content_type,
            topic=request.topic,
            segments=list(segments),
            context=context,
        )
        script.production_notes = production_notes(script, template["duration"])
    except Exception:
        logger.exception("Script generation failed for '%s'", request.topic)
        return fallback_script(request)

    logger.info(
        "Script '%s' (%s): %d segments, %d words",
        request.topic, request.content_type, len(script.segments), script.word_count,
    )
    return script


async def generate_quick_pulse(services: Services, headline: str) -> Script:
    """Short market-pulse script reacting to a breaking headline."""
    return await generate_script(
        services, ContentRequest(topic=headline, content_type="marketPulse"),
    )


async def generate_content_series(
    services: Services, theme: str, episode_count: int = 5,
) -> dict:
    """Deep-dive episodes on one theme, generated one after another."""
    episodes = []
    for i in range(episode_count):
        episodes.append(await generate_script(
            services,
            ContentRequest(topic=f"{theme} - Episode {i + 1}", content_type="deepDive"),
        ))

    durations = [
        ep.production_notes.get("estimated_duration_seconds", 0) for ep in episodes
    ]
    total = sum(durations)
    return {
        "theme": theme,
        "episode_count": episode_count,
        "episodes": episodes,
        "total_duration_seconds": total,
        "average_duration_seconds": total / len(episodes) if episodes else 0,
    }
