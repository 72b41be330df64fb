"""Retry decorator for handling API rate limits.

Both the GitHub API (through githubkit) and the chat-completions API (through
httpx) answer with 429, or GitHub's 403 "rate limit" variant, when a caller is
going too fast. Calls rejected that way are retried a bounded number of times,
waiting as long as the rate limit headers ask. Every other error propagates
untouched.
"""

import asyncio
import functools
import inspect
import time
from typing import Any, Callable, Mapping, TypeVar

import httpx
import structlog
from githubkit.exception import PrimaryRateLimitExceeded, RequestFailed, SecondaryRateLimitExceeded

from github_release_notes.utils.constants import (
    DEFAULT_RATE_LIMIT_INITIAL_DELAY,
    DEFAULT_RATE_LIMIT_MAX_DELAY,
    DEFAULT_RATE_LIMIT_RETRIES,
)

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

RETRYABLE_ERRORS = (PrimaryRateLimitExceeded, SecondaryRateLimitExceeded, RequestFailed, httpx.HTTPStatusError)


def _wait_time_from_headers(headers: Mapping[str, str], default: float, function_name: str) -> float:
    """Work out how long to wait from retry-after or x-ratelimit-reset headers."""
    retry_after = headers.get("retry-after")
    if retry_after:
        try:
            return float(retry_after)
        except ValueError:
            logger.warning("Invalid retry-after header value", retry_after=retry_after, function=function_name)
            return default

    rate_limit_reset = headers.get("x-ratelimit-reset")
    if rate_limit_reset:
        try:
            seconds_left = int(rate_limit_reset) - int(time.time())
        except ValueError:
            logger.warning("Invalid x-ratelimit-reset header value", rate_limit_reset=rate_limit_reset, function=function_name)
            return default
        if seconds_left > 0:
            return seconds_left + 1

    return default


def _is_rate_limit_response(status_code: int, message: str) -> bool:
    """Return True for 429 responses and GitHub's 403 secondary rate limit responses."""
    if status_code == 429:
        return True
    return status_code == 403 and "rate limit" in message.lower()


def _rate_limit_wait(error: Exception, default: float, function_name: str) -> float | None:
    """Seconds to wait before retrying ``error``, or None when it is not a rate limit error."""
    if isinstance(error, (PrimaryRateLimitExceeded, SecondaryRateLimitExceeded)):
        retry_after = getattr(error, "retry_after", None)
        return retry_after.total_seconds() if retry_after else default
    response = getattr(error, "response", None)
    if response is None or not _is_rate_limit_response(response.status_code, str(error)):
        return None
    return _wait_time_from_headers(response.headers, default, function_name)


def retry_on_rate_limit(
    max_retries: int = DEFAULT_RATE_LIMIT_RETRIES,
    initial_delay: float = DEFAULT_RATE_LIMIT_INITIAL_DELAY,
    max_delay: float = DEFAULT_RATE_LIMIT_MAX_DELAY,
    exponential_base: float = 2.0,
) -> Callable[[F], F]:
    """Decorator for retrying async functions when they encounter rate limits.

    Waits follow the retry-after (or x-ratelimit-reset) header when present and
    otherwise back off exponentially from ``initial_delay``; no wait exceeds
    ``max_delay``. Once the retries are spent the last error is raised so the
    caller can apply its own fallback.

    Args:
        max_retries: Maximum number of retry attempts (default: 1)
        initial_delay: Initial delay in seconds between retries (default: 5.0)
        max_delay: Maximum delay in seconds between retries (default: 60.0)
        exponential_base: Base for exponential backoff calculation (default: 2.0)

    Example:
        @retry_on_rate_limit()
        async def get_commit(self, commit_sha):
            return await self.client.rest.repos.async_get_commit(...)
    """

    def decorator(func: F) -> F:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"Function {func.__name__} decorated with @retry_on_rate_limit must be async.")

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = initial_delay
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except RETRYABLE_ERRORS as e:
                    wait_time = _rate_limit_wait(e, delay, func.__name__)
                    if wait_time is None:
                        raise
                    if attempt >= max_retries:
                        logger.error("Max retries reached for rate limit error", function=func.__name__, attempts=attempt + 1, error_type=type(e).__name__)
                        raise
                    wait_time = min(wait_time, max_delay)
                    attempt += 1
                    logger.warning(
                        f"Rate limit hit, retrying in {wait_time} seconds",
                        function=func.__name__,
                        attempt=attempt,
                        max_retries=max_retries,
                        error_type=type(e).__name__,
                    )
                    await asyncio.sleep(wait_time)
                    delay = min(delay * exponential_base, max_delay)

        return wrapper  # type: ignore

    return decorator
