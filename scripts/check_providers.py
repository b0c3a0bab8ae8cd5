#!/usr/bin/env python3
"""Live check of the configured data providers.

Run from a machine with internet access and real keys in config.yaml/.env:

    python scripts/check_providers.py
    python scripts/check_providers.py --topic "chip stocks"
    python scripts/check_providers.py --provider market
    python scripts/check_providers.py --provider news --topic inflation
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from aperio.config import load_config
from aperio.models import ProviderError
from aperio.services import Services, build_services


def _header(name: str, live: bool) -> None:
    print(f"\n{'=' * 60}")
    print(f"  {name} ({'live' if live else 'demo data'})")
    print(f"{'=' * 60}")


async def check_news(services: Services, topic: str) -> None:
    _header("News search", not services.news.search_provider.is_demo)
    summary = await services.news.search_financial_news(topic)
    print(f"  Sentiment: {summary.sentiment}  Breaking: {summary.is_breaking}")
    print(f"  Summary:   {summary.summary[:200].replace(chr(10), ' ')}...")
    for source in summary.sources[:5]:
        print(f"  Source:    {source.domain}  {source.url[:70]}")


async def check_market(services: Services, topic: str) -> None:
    _header("Alpha Vantage", not services.market.is_demo)
    overview = await services.market.get_market_overview()
    print(f"  Trend: {overview.trend}  Volatility: {overview.volatility}")
    for name, quote in overview.indices.items():
        price = f"{quote.price:.2f} ({quote.change_percent:+.2f}%)" if quote else "n/a"
        print(f"  {name:<8} {price}")


async def check_economic(services: Services, topic: str) -> None:
    _header("FRED", not services.economic.is_demo)
    indicators = await services.economic.get_economic_indicators()
    for ind in indicators.values():
        print(f"  {ind.label:<28} {ind.value:>12,.2f}  {ind.date or ''}")


async def check_images(services: Services, topic: str) -> None:
    _header("Gemini images", not services.images.is_demo)
    image = await services.images.generate_story_image(topic, topic)
    print(f"  URL:      {image.image_url}")
    print(f"  Fallback: {image.is_fallback}")


CHECKS = {
    "news": check_news,
    "market": check_market,
    "economic": check_economic,
    "images": check_images,
}


async def main() -> None:
    parser = argparse.ArgumentParser(description="Check live data providers")
    parser.add_argument(
        "--topic", default="Federal Reserve interest rates",
        help="Topic for news and image checks",
    )
    parser.add_argument(
        "--provider", choices=[*CHECKS, "all"], default="all",
        help="Which provider to check (default: all)",
    )
    parser.add_argument(
        "--config", default=None,
        help="Config file path (default: config.yaml or CONFIG_PATH env)",
    )
    args = parser.parse_args()

    config_path = args.config or os.environ.get("CONFIG_PATH", "config.yaml")
    services = build_services(load_config(config_path))

    names = list(CHECKS) if args.provider == "all" else [args.provider]
    failed = []
    for name in names:
        try:
            await CHECKS[name](services, args.topic)
        except ProviderError as exc:
            print(f"  FAILED: {exc}")
            failed.append(name)

    print(f"\nDone. {len(names) - len(failed)}/{len(names)} providers ok.")
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
