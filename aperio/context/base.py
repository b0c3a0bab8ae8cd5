"""Abstract base class for context sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from aperio.services import Services


class BaseContextSource(ABC):
    """One independent input to an aggregated context."""

    def __init__(self, services: Services):
        self.services = services

    @abstractmethod
    async def fetch(self, topic: str, content_type: str, complexity: str) -> Any:
        """Return this source's contribution. May raise; the caller isolates it."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Field of AggregatedContext this source fills."""
        ...
