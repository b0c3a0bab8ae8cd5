"""Exponential backoff for transient provider failures."""

from __future__ import annotations

import asyncio
import logging

import httpx

logger = logging.getLogger(__name__)

RETRYABLE_HTTP_CODES = {429, 500, 502, 503, 504}
RETRYABLE_EXCEPTIONS = (
    httpx.TimeoutException,
    httpx.ConnectError,
    httpx.RemoteProtocolError,
    ConnectionError,
    TimeoutError,
)
# Anthropic SDK errors matched by name so this module does not import the SDK
RETRYABLE_SDK_ERRORS = {
    "RateLimitError",
    "OverloadedError",
    "InternalServerError",
    "APIConnectionError",
}


def backoff_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    retry_after: str | None = None,
) -> float:
    """Delay before the next attempt, preferring a Retry-After header."""
    if retry_after:
        try:
            return min(float(retry_after), max_delay)
        except ValueError:
            pass
    return min(base_delay * (2**attempt), max_delay)


def _is_retryable(exc: Exception) -> tuple[bool, str | None]:
    """Classify an exception; second item is a Retry-After value if any."""
    if isinstance(exc, RETRYABLE_EXCEPTIONS):
        return True, None
    if isinstance(exc, httpx.HTTPStatusError):
        if exc.response.status_code in RETRYABLE_HTTP_CODES:
            return True, exc.response.headers.get("retry-after")
        return False, None
    return type(exc).__name__ in RETRYABLE_SDK_ERRORS, None


async def retry_async(
    fn,
    *args,
    max_retries: int = 2,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    label: str = "",
    **kwargs,
):
    """Call an async function, retrying timeouts, 429 and 5xx responses.

    With ``max_retries=0`` the call is made exactly once and any error
    propagates unchanged.
    """
    for attempt in range(max_retries + 1):
        try:
            return await fn(*args, **kwargs)
        except Exception as exc:
            retryable, retry_after = _is_retryable(exc)
            if not retryable or attempt == max_retries:
                raise
            delay = backoff_delay(attempt, base_delay, max_delay, retry_after)
            logger.warning(
                "%sRetry %d/%d after %s: %s (waiting %.1fs)",
                f"[{label}] " if label else "",
                attempt + 1, max_retries, type(exc).__name__, exc, delay,
            )
            await asyncio.sleep(delay)
