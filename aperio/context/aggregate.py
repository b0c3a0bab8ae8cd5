"""Concurrent fan-out to the context sources."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from aperio.config import get_aggregate_sources, get_source_timeout
from aperio.context import SOURCES
from aperio.models import AggregatedContext, SourceOutcome

if TYPE_CHECKING:
    from aperio.services import Services

logger = logging.getLogger(__name__)

CONTEXT_FIELDS = ("news", "market", "economic", "enhanced")


async def _run_source(
    services: Services,
    name: str,
    topic: str,
    content_type: str,
    complexity: str,
    timeout: float | None,
) -> SourceOutcome:
    try:
        source = SOURCES[name](services)
        call = source.fetch(topic, content_type, complexity)
        if timeout:
            value = await asyncio.wait_for(call, timeout)
        else:
            value = await call
    except Exception as exc:
        if timeout and isinstance(exc, asyncio.TimeoutError):
            logger.warning("Context source '%s' timed out after %.1fs", name, timeout)
            return SourceOutcome(source=name, ok=False, error="timeout")
        logger.exception("Context source '%s' failed for '%s'", name, topic)
        return SourceOutcome(source=name, ok=False, error=str(exc))
    return SourceOutcome(source=name, ok=True, value=value)


async def aggregate(
    services: Services,
    topic: str,
    content_type: str = "dailyBrief",
    complexity: str = "intermediate",
) -> AggregatedContext:
    """Query every configured source at once and merge what comes back.

    Never raises. A source that fails or misses its deadline leaves its
    field as None; ``outcomes`` records what happened to each one.
    """
    names = get_aggregate_sources(services.config)
    timeout = get_source_timeout(services.config)

    outcomes = await asyncio.gather(*[
        _run_source(services, name, topic, content_type, complexity, timeout)
        for name in names
    ])

    context = AggregatedContext(
        topic=topic,
        content_type=content_type,
        complexity=complexity,
        outcomes=list(outcomes),
    )
    for outcome in outcomes:
        if outcome.ok and outcome.source in CONTEXT_FIELDS:
            setattr(context, outcome.source, outcome.value)

    failed = [o.source for o in outcomes if not o.ok]
    logger.info(
        "Context for '%s' (%s): %d/%d sources ok%s",
        topic, content_type, len(outcomes) - len(failed), len(outcomes),
        f", failed: {', '.join(failed)}" if failed else "",
    )
    return context
