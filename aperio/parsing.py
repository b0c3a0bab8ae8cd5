"""Best-effort parsing of free-text model output.

Nothing in here raises on odd input. Section slicing is plain label search:
a label that also appears earlier in the text than intended produces a wrong
span, and a missing label yields no section.
"""

from __future__ import annotations

import json
import re
from urllib.parse import urlparse

from aperio.models import DialogueLine, SourceLink

DEFAULT_HEADLINE = "Financial Market Analysis"

BREAKING_KEYWORDS = (
    "breaking", "just announced", "developing", "urgent", "alert", "immediate",
)
POSITIVE_WORDS = ("gained", "rose", "increased", "positive", "bullish", "optimistic")
NEGATIVE_WORDS = ("fell", "declined", "dropped", "negative", "bearish", "pessimistic")

_SOURCE_LINK = re.compile(r"\[(.*?)\]\((https?://.*?)\)")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def section_label(name: str) -> str:
    return name.replace("_", " ")


def _locate(text: str, label: str) -> int:
    match = re.search(re.escape(label), text, re.IGNORECASE)
    return match.start() if match else -1


def find_sections(text: str, names: list[str]) -> dict[str, str | None]:
    """Slice ``text`` into declared sections; absent sections map to None.

    A section runs from the first occurrence of its label to the start of
    the next declared section, or to the end of the text when that next
    section is missing or sits before this one. Slices are not trimmed.
    """
    starts = [_locate(text, section_label(name)) for name in names]
    sections: dict[str, str | None] = {}
    for i, name in enumerate(names):
        start = starts[i]
        if start == -1:
            sections[name] = None
            continue
        end = len(text)
        if i + 1 < len(starts) and starts[i + 1] >= start:
            end = starts[i + 1]
        sections[name] = text[start:end]
    return sections


def parse_sections(text: str, names: list[str]) -> dict[str, str]:
    """Like ``find_sections`` but only the sections that were found."""
    return {
        name: body
        for name, body in find_sections(text, names).items()
        if body is not None
    }


def extract_headlines(text: str) -> tuple[str, str]:
    """First and second non-empty lines, markdown heading marks stripped."""
    lines = [line.strip() for line in text.split("\n") if line.strip()]
    headline = re.sub(r"^#+\s*", "", lines[0]) if lines else ""
    subheadline = re.sub(r"^#+\s*", "", lines[1]) if len(lines) > 1 else ""
    return headline or DEFAULT_HEADLINE, subheadline


def parse_dialogue(text: str) -> list[DialogueLine]:
    """Turn ``SPEAKER: words`` lines into dialogue; other lines are dropped."""
    dialogue = []
    for line in text.split("\n"):
        if not line.strip() or ":" not in line:
            continue
        speaker, _, spoken = line.partition(":")
        speaker = speaker.strip().strip("*").strip()
        spoken = spoken.strip()
        if not speaker or not spoken:
            continue
        dialogue.append(DialogueLine(speaker=speaker, text=spoken))
    return dialogue


def extract_sources(text: str) -> list[SourceLink]:
    """Markdown ``[title](url)`` links in order of appearance."""
    sources = []
    for title, url in _SOURCE_LINK.findall(text):
        sources.append(SourceLink(title=title, url=url, domain=urlparse(url).hostname or ""))
    return sources


def extract_key_points(text: str, limit: int = 4) -> list[str]:
    sentences = [s.strip() for s in _SENTENCE_SPLIT.split(text) if len(s.strip()) > 20]
    return sentences[:limit]


def detect_breaking(text: str) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in BREAKING_KEYWORDS)


def analyze_sentiment(text: str) -> str:
    """Keyword tally: positive, negative or neutral."""
    lowered = text.lower()
    positive = sum(1 for word in POSITIVE_WORDS if word in lowered)
    negative = sum(1 for word in NEGATIVE_WORDS if word in lowered)
    if positive > negative:
        return "positive"
    if negative > positive:
        return "negative"
    return "neutral"


def calculate_relevance(text: str) -> float:
    return round(min(len(text) / 1000, 1.0), 2)


def word_count(text: str) -> int:
    return len(text.split())


def _normalize_quotes(text: str) -> str:
    """Replace smart/curly quotes with straight quotes for JSON parsing."""
    return (
        text
        .replace("“", '"')
        .replace("”", '"')
        .replace("‘", "'")
        .replace("’", "'")
    )


def _try_parse(text: str) -> dict | None:
    for candidate in (text, _normalize_quotes(text)):
        try:
            data = json.loads(candidate)
        except (json.JSONDecodeError, ValueError):
            continue
        if isinstance(data, dict):
            return data
    return None


def extract_json(text: str) -> dict | None:
    """Extract a JSON object from output that may carry fences or extra text."""
    result = _try_parse(text)
    if result is not None:
        return result

    fenced = re.search(r"```(?:json)?\s*\n?(.*?)\n?```", text, re.DOTALL)
    if fenced:
        result = _try_parse(fenced.group(1))
        if result is not None:
            return result

    brace = re.search(r"\{.*\}", text, re.DOTALL)
    if brace:
        return _try_parse(brace.group(0))

    return None
