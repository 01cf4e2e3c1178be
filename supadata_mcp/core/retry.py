"""
Retry Policy with Exponential Backoff

Wraps a single remote call and retries it while the remote side reports
rate limiting. Any other failure propagates on the first attempt.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from supadata_mcp.core.base import RetryState
from supadata_mcp.core.config import RetryConfig
from supadata_mcp.core.logging import logging_manager

T = TypeVar('T')

RATE_LIMIT_MARKERS = ('rate limit', '429')


def is_transient(error: BaseException) -> bool:
    """
    Classify a failure as retry-eligible

    Only the message is inspected, so a reworded remote error stops being
    retried. Failures without a message are never transient.
    """
    if not isinstance(error, Exception):
        return False

    message = str(error).lower()
    if not message:
        return False

    return any(marker in message for marker in RATE_LIMIT_MARKERS)


class RetryPolicy:
    """
    Bounded exponential backoff for rate-limited remote calls
    """

    def __init__(self, config: Optional[RetryConfig] = None):
        self.config = config or RetryConfig()
        if self.config.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def compute_delay(self, attempt: int) -> int:
        """
        Delay before the attempt following ``attempt``

        Args:
            attempt: Attempt number that just failed (1-based)

        Returns:
            Delay in milliseconds
        """
        delay = self.config.initial_delay_ms * (self.config.backoff_factor ** (attempt - 1))
        return int(min(delay, self.config.max_delay_ms))

    async def run(self, operation: Callable[[], Awaitable[T]], context: str) -> T:
        """
        Invoke ``operation`` until it succeeds, fails permanently or the
        attempt bound is reached

        Args:
            operation: Zero-argument coroutine factory
            context: Label used in log records

        Returns:
            Result of the first successful invocation
        """
        state = RetryState()

        while True:
            try:
                return await operation()
            except Exception as error:
                if not is_transient(error) or state.attempt >= self.config.max_attempts:
                    raise

                state.last_delay_ms = self.compute_delay(state.attempt)
                await asyncio.sleep(state.last_delay_ms / 1000)
                logging_manager.log_warning(
                    f"Rate limit hit for {context}. "
                    f"Attempt {state.attempt}/{self.config.max_attempts}. "
                    f"Retrying in {state.last_delay_ms}ms",
                    {'error': str(error)}
                )
                state.attempt += 1
