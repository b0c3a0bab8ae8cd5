"""CLI entrypoint: python -m aperio {script|article|content|series|pulse|market|indicators|search|breaking|image|articles}."""

from __future__ import annotations

import argparse
import asyncio
import logging
import logging.handlers
import os
import sys
from pathlib import Path

from aperio.config import get_audio_pool, get_log_file, get_log_level, load_config
from aperio.db import DatabaseError
from aperio.models import COMPLEXITIES, ContentRequest, ProviderError, ValidationError
from aperio.render import (
    format_article,
    format_article_rows,
    format_dashboard,
    format_indicators,
    format_package,
    format_script,
    format_stored_article,
    format_symbols,
    to_json,
)
from aperio.services import Services, build_services


def setup_logging(config: dict) -> None:
    """Configure logging with console + rotating file output."""
    root = logging.getLogger()
    root.setLevel(get_log_level(config))

    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Console handler (stderr, so --json output stays clean)
    console = logging.StreamHandler()
    console.setFormatter(fmt)
    root.addHandler(console)

    # File handler (rotate at 5MB, keep 3 backups)
    log_file = get_log_file(config)
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=5 * 1024 * 1024, backupCount=3,
        )
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)

    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


logger = logging.getLogger("aperio")


def _request(args: argparse.Namespace, default_type: str) -> ContentRequest:
    return ContentRequest(
        topic=args.topic or "",
        content_type=args.type or default_type,
        complexity=args.complexity,
        include_visuals=args.visuals,
        include_market_data=args.market_data,
    )


def _require_topic(args: argparse.Namespace) -> str:
    if not args.topic or not args.topic.strip():
        raise ValidationError("--topic is required for this command")
    return args.topic.strip()


async def cmd_script(services: Services, args: argparse.Namespace) -> None:
    """Generate a multi-voice dialogue script."""
    from aperio.generate.script import generate_script

    request = _request(args, "dailyBrief")
    _require_topic(args)
    script = await generate_script(services, request)
    print(to_json(script) if args.json else format_script(script))


async def cmd_article(services: Services, args: argparse.Namespace) -> None:
    """Generate a long-form article with charts."""
    from aperio.generate.article import generate_article

    request = _request(args, "featuredArticle")
    _require_topic(args)
    article = await generate_article(services, request)
    print(to_json(article) if args.json else format_article(article))


async def cmd_content(services: Services, args: argparse.Namespace) -> None:
    """Generate a content package and queue it as an audio track."""
    from aperio.audio import AudioSession, create_audio_track
    from aperio.pipeline import generate_content

    request = _request(args, "dailyBrief")
    package = await generate_content(services, request)
    track = create_audio_track(package.script, request, get_audio_pool(services.config))
    session = AudioSession()
    session.play_all([track])

    if args.json:
        print(to_json({"package": package, "track": track}))
        return
    print(format_package(package))
    print(f"\nNow playing: {track.title} [{track.duration}] {track.audio_url}")


async def cmd_series(services: Services, args: argparse.Namespace) -> None:
    """Generate a themed series of deep-dive episodes."""
    from aperio.generate.script import generate_content_series

    theme = _require_topic(args)
    series = await generate_content_series(services, theme, args.episodes)
    if args.json:
        print(to_json(series))
        return
    for episode in series["episodes"]:
        print(format_script(episode))
        print()
    print(
        f"{series['episode_count']} episodes, "
        f"~{series['total_duration_seconds']}s total"
    )


async def cmd_pulse(services: Services, args: argparse.Namespace) -> None:
    """Generate a short market-pulse script for a breaking headline."""
    from aperio.generate.script import generate_quick_pulse

    script = await generate_quick_pulse(services, _require_topic(args))
    print(to_json(script) if args.json else format_script(script))


async def cmd_market(services: Services, args: argparse.Namespace) -> None:
    """Show the market dashboard."""
    from aperio.dashboard import load_dashboard

    dashboard = await load_dashboard(services)
    print(to_json(dashboard) if args.json else format_dashboard(dashboard))


async def cmd_indicators(services: Services, args: argparse.Namespace) -> None:
    """Show the latest FRED economic indicators."""
    indicators = await services.economic.get_economic_indicators()
    print(to_json(indicators) if args.json else format_indicators(indicators))


async def cmd_search(services: Services, args: argparse.Namespace) -> None:
    """Search ticker symbols by keyword."""
    from aperio.dashboard import search_symbols

    matches = await search_symbols(services, args.topic or "")
    print(to_json(matches) if args.json else format_symbols(matches))


async def cmd_breaking(services: Services, args: argparse.Namespace) -> None:
    """Check a watchlist for breaking news."""
    watchlist = args.topic.split(",") if args.topic else None
    result = await services.news.detect_breaking_news(watchlist)
    if args.json:
        print(to_json(result))
        return
    if not result["has_breaking"]:
        print("No breaking news.")
        return
    for item in result["items"]:
        print(f"{item['symbol']}: {item['news'].summary[:200]}")


async def cmd_image(services: Services, args: argparse.Namespace) -> None:
    """Generate an illustration for a topic."""
    topic = _require_topic(args)
    if args.type == "breakingNews":
        image = await services.images.generate_breaking_news_image(topic, "high")
    elif args.type in ("economicLens", "educationalContent"):
        image = await services.images.generate_economic_illustration(topic, args.complexity)
    else:
        image = await services.images.generate_story_image(topic, topic)
    if args.json:
        print(to_json(image))
        return
    print(image.image_url + (" (placeholder)" if image.is_fallback else ""))
    print(image.alt_text)


async def cmd_articles(services: Services, args: argparse.Namespace) -> None:
    """List published articles, or show one when --topic names a slug."""
    from aperio.articles import get_published_by_slug, list_published

    if services.db is None:
        raise ValidationError("database url and anon_key must be configured")
    if args.topic:
        row = await get_published_by_slug(services.db, args.topic)
        print(to_json(row) if args.json else format_stored_article(row))
        return
    rows = await list_published(services.db, category=args.type)
    print(to_json(rows) if args.json else format_article_rows(rows))


COMMANDS = {
    "script": cmd_script,
    "article": cmd_article,
    "content": cmd_content,
    "series": cmd_series,
    "pulse": cmd_pulse,
    "market": cmd_market,
    "indicators": cmd_indicators,
    "search": cmd_search,
    "breaking": cmd_breaking,
    "image": cmd_image,
    "articles": cmd_articles,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m aperio")
    parser.add_argument("command", choices=list(COMMANDS))
    parser.add_argument("--topic", help="topic, search query or comma-separated watchlist")
    parser.add_argument("--type", help="content type, e.g. dailyBrief or breakingNews")
    parser.add_argument("--complexity", choices=COMPLEXITIES, default="intermediate")
    parser.add_argument("--visuals", action=argparse.BooleanOptionalAction, default=True)
    parser.add_argument("--market-data", action=argparse.BooleanOptionalAction, default=True)
    parser.add_argument("--episodes", type=int, default=5)
    parser.add_argument("--json", action="store_true", help="print JSON instead of text")
    return parser


async def _run(config: dict, args: argparse.Namespace) -> None:
    services = build_services(config)
    await COMMANDS[args.command](services, args)
    tracker = services.tracker
    if tracker.calls:
        logger.info(
            "LLM usage: %d calls, %d in / %d out tokens, ~$%.4f",
            tracker.calls, tracker.total_input_tokens,
            tracker.total_output_tokens, tracker.total_cost_usd,
        )


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    config = load_config(os.environ.get("CONFIG_PATH", "config.yaml"))
    setup_logging(config)

    try:
        asyncio.run(_run(config, args))
    except (ValidationError, LookupError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except ProviderError as exc:
        logger.error("Provider failure: %s", exc)
        sys.exit(1)
    except DatabaseError as exc:
        logger.error("Database failure: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
