"""Plain-text and JSON rendering of generated content for the terminal."""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from typing import Any

from aperio.models import Article, ContentPackage, Indicator, MarketSnapshot, Script, SymbolMatch
from aperio.templating import humanize

RULE = "─" * 60


def _plain(obj: Any) -> Any:
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if isinstance(obj, dict):
        return {k: _plain(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_plain(v) for v in obj]
    return obj


def to_json(obj: Any) -> str:
    """Dataclasses (nested in dicts and lists too) as indented JSON."""
    return json.dumps(_plain(obj), indent=2, default=str)


def format_script(script: Script) -> str:
    notes = script.production_notes
    lines = [
        f"{humanize(script.content_type).upper()}: {script.topic}",
        RULE,
    ]
    if script.is_fallback:
        lines.append("(fallback script: generation failed)")
    for segment in script.segments:
        lines.append("")
        lines.append(f"[{humanize(segment.segment).upper()}] {segment.duration}")
        for line in segment.dialogue:
            lines.append(f"  {line.speaker}: {line.text}")
    lines.append("")
    lines.append(RULE)
    lines.append(
        f"{notes.get('total_word_count', script.word_count)} words, "
        f"~{notes.get('estimated_duration_seconds', 0)}s spoken"
    )
    return "\n".join(lines)


def format_article(article: Article) -> str:
    meta = article.metadata
    lines = [article.headline]
    if article.subheadline:
        lines.append(article.subheadline)
    lines.append(RULE)
    lines.append(
        f"{meta.word_count} words, {meta.read_time} min read"
        + (f", {meta.chart_count} charts" if meta.has_charts else "")
        + (" (fallback)" if meta.is_fallback else "")
    )
    lines.append("")
    lines.append(article.content)
    for chart in article.charts:
        lines.append("")
        lines.append(f"[chart: {chart.type}] {chart.caption}")
    if meta.sources:
        lines.append("")
        lines.append("Sources:")
        lines.extend(f"  - {s.title} <{s.url}>" for s in meta.sources)
    return "\n".join(lines)


def format_market(snapshot: MarketSnapshot) -> str:
    lines = [f"Market: trend {snapshot.trend}, volatility {snapshot.volatility}"]
    for name, quote in snapshot.indices.items():
        if quote is None:
            lines.append(f"  {name:<8} n/a")
        else:
            lines.append(
                f"  {name:<8} {quote.symbol:<6} {quote.price:>10.2f} "
                f"{quote.change:>+8.2f} ({quote.change_percent:+.2f}%)"
            )
    return "\n".join(lines)


def format_indicators(indicators: dict[str, Indicator]) -> str:
    lines = ["Economic indicators:"]
    for ind in indicators.values():
        date = f" as of {ind.date}" if ind.date else ""
        lines.append(
            f"  {ind.label:<28} {ind.value:>12,.2f} {ind.change:>+10.2f} ({ind.unit}){date}"
        )
    return "\n".join(lines)


def format_package(package: ContentPackage) -> str:
    parts = [format_script(package.script)]
    for label, image in (("Story image", package.story_image), ("Podcast cover", package.podcast_cover)):
        if image is not None:
            suffix = " (placeholder)" if image.is_fallback else ""
            parts.append(f"{label}: {image.image_url}{suffix}")
    if package.market is not None:
        parts.append(format_market(package.market))
    if package.economic:
        parts.append(format_indicators(package.economic))
    parts.append(f"Estimated read time: {package.estimated_read_time} min")
    return "\n\n".join(parts)


def format_dashboard(dashboard) -> str:
    lines = ["MARKET DASHBOARD", RULE]
    for name, quote in dashboard.indices.items():
        if quote is not None:
            lines.append(f"  {name:<8} {quote.price:>10.2f} ({quote.change_percent:+.2f}%)")
    lines.append("")
    lines.append("Watchlist:")
    for quote in dashboard.stocks:
        lines.append(f"  {quote.symbol:<6} {quote.price:>10.2f} ({quote.change_percent:+.2f}%)")
    lines.append("")
    lines.append("Crypto:")
    for coin in dashboard.crypto:
        lines.append(f"  {coin.symbol:<6} {coin.price:>12,.2f} USD")
    lines.append("")
    lines.append(format_indicators(dashboard.economic))
    lines.append("")
    lines.append("Headlines:")
    for item in dashboard.news:
        lines.append(f"  [{item.sentiment}] {item.title} ({item.source})")
    if dashboard.fallbacks:
        lines.append("")
        lines.append(f"Canned data shown for: {', '.join(dashboard.fallbacks)}")
    return "\n".join(lines)


def format_symbols(matches: list[SymbolMatch]) -> str:
    if not matches:
        return "No matching symbols."
    return "\n".join(f"{m.symbol:<8} {m.name} ({m.region}, {m.currency})" for m in matches)


def format_article_rows(rows: list[dict]) -> str:
    if not rows:
        return "No published articles."
    lines = []
    for row in rows:
        published = (row.get("published_at") or "")[:10] or "unpublished"
        lines.append(f"{published}  [{row.get('category') or '-'}] {row.get('title', '')}")
        lines.append(f"            /articles/{row.get('slug', '')}")
    return "\n".join(lines)


def format_stored_article(row: dict) -> str:
    lines = [row.get("title", ""), ""]
    if row.get("excerpt"):
        lines += [row["excerpt"], ""]
    lines.append(row.get("content") or "")
    return "\n".join(lines)
