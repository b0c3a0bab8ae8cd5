"""Chart data, captions and insights embedded in generated articles.

Series values are illustrative. They are seeded from the topic so the same
topic always yields the same charts.
"""

from __future__ import annotations

import random
from typing import Any

from aperio.models import AggregatedContext, Chart
from aperio.templating import build_prompt, humanize

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep"]

# chart type: (placement, caption template)
CHART_STRATEGIES = {
    "market_performance": (
        "after_market_overview",
        "Market performance over the {timeframe} shows {trend} with {key_insight}",
    ),
    "economic_indicators": (
        "after_economic_context",
        "Key economic indicators reveal {pattern} suggesting {implication}",
    ),
    "sector_performance": (
        "within_sector_analysis",
        "Sector breakdown highlights {winner} outperforming while {laggard} faces headwinds",
    ),
    "risk_return": (
        "within_analysis",
        "Risk-return analysis shows {insight} for current market positioning",
    ),
}

# label, indicator key, fallback value
ECONOMIC_BARS = [
    ("GDP Growth", "gdp", 2.3),
    ("Unemployment", "unemployment", 3.8),
    ("Inflation Rate", "inflation", 3.2),
    ("Fed Funds Rate", "federal_rate", 5.25),
    ("Consumer Confidence", "consumer_sentiment", 102.5),
]

SECTORS = [
    ("Technology", 28.5), ("Healthcare", 15.2), ("Finance", 18.7), ("Energy", 8.9),
    ("Consumer", 12.3), ("Industrial", 9.8), ("Other", 6.6),
]

RISK_RETURN = [
    ("AAPL", 15.2, 8.5), ("TSLA", 18.7, 12.3), ("MSFT", 12.1, 6.8), ("NVDA", 22.5, 15.2),
    ("JNJ", 8.9, 4.2), ("AMZN", 25.8, 18.9), ("GOOGL", 14.3, 7.6), ("META", 19.4, 11.8),
]


def time_series(rng: random.Random, start: float, end: float, points: int = 9) -> list[dict]:
    """Linear drift from start to end with up to 5% noise per point."""
    data = []
    for i in range(points):
        base = start + (end - start) * i / (points - 1)
        noise = (rng.random() - 0.5) * base * 0.05
        data.append({"x": f"2024-{MONTHS[i % len(MONTHS)]}", "y": round(base + noise)})
    return data


def market_performance_data(rng: random.Random, context: AggregatedContext) -> list[dict]:
    series = [
        {"id": "S&P 500", "data": time_series(rng, 4200, 4650)},
        {"id": "NASDAQ", "data": time_series(rng, 13200, 14920)},
        {"id": "DOW", "data": time_series(rng, 33500, 36100)},
    ]
    if context.news and context.news.sentiment == "negative":
        for s in series:
            for point in s["data"]:
                point["y"] = round(point["y"] * (0.95 + rng.random() * 0.1))
    return series


def economic_indicator_data(context: AggregatedContext) -> list[dict]:
    live = context.economic or {}
    return [
        {"indicator": label, "value": live[key].value if key in live else default}
        for label, key, default in ECONOMIC_BARS
    ]


def sector_performance_data(rng: random.Random) -> list[dict]:
    return [
        {"id": name, "value": round(value * (0.9 + rng.random() * 0.2), 1)}
        for name, value in SECTORS
    ]


def risk_return_data() -> list[dict]:
    return [{
        "id": "stocks",
        "data": [{"x": x, "y": y, "symbol": s} for s, x, y in RISK_RETURN],
    }]


def market_trend(series: list[dict]) -> tuple[str, str]:
    sp500 = next((s for s in series if s["id"] == "S&P 500"), None)
    if not sp500 or not sp500["data"]:
        return "mixed", "varied performance across indices"
    first, last = sp500["data"][0]["y"], sp500["data"][-1]["y"]
    change = (last - first) / first * 100
    direction = "upward momentum" if change > 0 else "downward pressure"
    return direction, f"{abs(change):.1f}% {'gain' if change > 0 else 'decline'} year-to-date"


def economic_pattern(bars: list[dict]) -> tuple[str, str]:
    inflation = next((b for b in bars if b["indicator"] == "Inflation Rate"), None)
    if inflation and inflation["value"] > 3:
        return "elevated inflation persists", "continued monetary policy tightening likely"
    return "mixed economic signals", "cautious optimism among policymakers"


def sector_leaders(sectors: list[dict]) -> tuple[str, str]:
    ranked = sorted(sectors, key=lambda s: s["value"], reverse=True)
    return ranked[0]["id"], ranked[-1]["id"]


def chart_data(chart_type: str, rng: random.Random, context: AggregatedContext) -> list[dict]:
    if chart_type == "market_performance":
        return market_performance_data(rng, context)
    if chart_type == "economic_indicators":
        return economic_indicator_data(context)
    if chart_type == "sector_performance":
        return sector_performance_data(rng)
    if chart_type == "risk_return":
        return risk_return_data()
    return [{"id": humanize(chart_type), "data": time_series(rng, 100, 110, 6)}]


def caption_and_insight(chart_type: str, data: list[dict[str, Any]]) -> tuple[str, str]:
    if chart_type not in CHART_STRATEGIES:
        label = humanize(chart_type).lower()
        return (
            f"Analysis of {label} reveals important market patterns",
            f"The {label} data adds context to the story",
        )

    template = CHART_STRATEGIES[chart_type][1]
    if chart_type == "market_performance":
        direction, detail = market_trend(data)
        caption = build_prompt(template, {
            "timeframe": "past 9 months", "trend": direction, "key_insight": detail,
        })
        return caption, f"Indices show {direction} with a {detail}"
    if chart_type == "economic_indicators":
        pattern, implication = economic_pattern(data)
        caption = build_prompt(template, {"pattern": pattern, "implication": implication})
        return caption, f"{pattern.capitalize()}; {implication}"
    if chart_type == "sector_performance":
        winner, laggard = sector_leaders(data)
        caption = build_prompt(template, {"winner": winner, "laggard": laggard})
        return caption, f"{winner} leads and {laggard} trails"
    insight = "higher volatility has been rewarded with higher returns"
    return build_prompt(template, {"insight": insight}), insight.capitalize()


def build_charts(chart_types: list[str], topic: str, context: AggregatedContext) -> list[Chart]:
    rng = random.Random(topic)
    charts = []
    for chart_type in chart_types:
        data = chart_data(chart_type, rng, context)
        caption, insight = caption_and_insight(chart_type, data)
        placement = CHART_STRATEGIES.get(chart_type, ("after_context", ""))[0]
        charts.append(Chart(
            type=chart_type, data=data, placement=placement,
            caption=caption, insight=insight,
        ))
    return charts
