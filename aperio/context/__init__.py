"""Context source registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from aperio.context.base import BaseContextSource

SOURCES: dict[str, type[BaseContextSource]] = {}


def register_source(name: str):
    """Decorator to register a context source."""

    def decorator(cls):
        SOURCES[name] = cls
        return cls

    return decorator


# Import implementations to trigger registration
from aperio.context.sources import (  # noqa: E402, F401
    EconomicSource,
    EnhancedSource,
    MarketSource,
    NewsSource,
)
