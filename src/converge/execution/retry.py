"""Backoff policies and the retry executor used at remote-call boundaries.

A policy decides how long to wait and whether another attempt is allowed.
The executor drives an operation under a policy and classifies failures
by ``RemoteErrorCode``: codes in the retryable set are absorbed until the
budget runs out, everything else propagates on first sight.

Example:
    >>> from converge.execution.retry import BackoffRetryExecutor, ExponentialBackoff
    >>> from converge.core.errors import RemoteErrorCode
    >>>
    >>> executor = BackoffRetryExecutor()
    >>> executor.run(
    ...     release_once,
    ...     ExponentialBackoff(max_retries=5, base_delay=1.0),
    ...     {RemoteErrorCode.AUTH_FAILURE},
    ... )
"""

from __future__ import annotations

import random
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Collection
from dataclasses import dataclass
from typing import TYPE_CHECKING

from converge.core.errors import RemoteError, RemoteErrorCode, RetryExhaustedError
from converge.core.logging import get_logger

if TYPE_CHECKING:
    from converge.core.settings import ConvergeSettings

logger = get_logger(__name__)


class RetryStrategy(ABC):
    """Abstract base for retry strategies."""

    @abstractmethod
    def next_delay(self, attempt: int) -> float:
        """Calculate delay before next retry attempt.

        Args:
            attempt: Zero-based attempt number (0 = first retry)

        Returns:
            Delay in seconds before next attempt
        """
        ...

    @abstractmethod
    def should_retry(self, attempt: int) -> bool:
        """Determine if another attempt is allowed.

        Args:
            attempt: Number of attempts already made

        Returns:
            True if should retry, False otherwise
        """
        ...


@dataclass
class ExponentialBackoff(RetryStrategy):
    """Exponential backoff with optional jitter.

    Delay = min(base_delay * (multiplier ** attempt), max_delay) + jitter

    Attributes:
        max_retries: Maximum number of attempts
        base_delay: Initial delay in seconds
        max_delay: Maximum delay cap in seconds
        multiplier: Exponential multiplier
        jitter: Add randomness to prevent thundering herd
        jitter_range: Range of jitter as fraction of delay (0.0-1.0)
    """

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 60.0
    multiplier: float = 2.0
    jitter: bool = True
    jitter_range: float = 0.25

    def next_delay(self, attempt: int) -> float:
        """Calculate exponential backoff delay."""
        delay = min(
            self.base_delay * (self.multiplier ** attempt),
            self.max_delay,
        )

        if self.jitter:
            jitter_amount = delay * self.jitter_range
            delay += random.uniform(-jitter_amount, jitter_amount)
            delay = max(0, delay)

        return delay

    def should_retry(self, attempt: int) -> bool:
        return attempt < self.max_retries


@dataclass
class ConstantBackoff(RetryStrategy):
    """Constant delay between retries."""

    max_retries: int = 3
    delay: float = 1.0

    def next_delay(self, attempt: int) -> float:
        return self.delay

    def should_retry(self, attempt: int) -> bool:
        return attempt < self.max_retries


@dataclass
class NoRetry(RetryStrategy):
    """Single attempt, fail immediately."""

    def next_delay(self, attempt: int) -> float:
        return 0.0

    def should_retry(self, attempt: int) -> bool:
        return False


def default_backoff(settings: ConvergeSettings) -> ExponentialBackoff:
    """Build the release backoff policy from settings."""
    return ExponentialBackoff(
        max_retries=settings.backoff_max_retries,
        base_delay=settings.backoff_base_delay,
        max_delay=settings.backoff_max_delay,
        multiplier=settings.backoff_multiplier,
        jitter=settings.backoff_jitter,
    )


class BackoffRetryExecutor:
    """Drive an operation until it reports done, fails fatally, or the budget runs out.

    ``operation`` returns True when finished and False to be polled again.
    A ``RemoteError`` whose code is in ``retryable_codes`` counts as a
    failed attempt and is retried after the policy's delay. Any other
    exception propagates unchanged. When the policy refuses another
    attempt, ``RetryExhaustedError`` is raised, chained to the last error.

    Attributes:
        sleep: Called with each delay in seconds (``time.sleep`` by default)
        on_retry: Optional callback ``(attempt, error, delay)`` before each wait
    """

    def __init__(
        self,
        sleep: Callable[[float], None] = time.sleep,
        on_retry: Callable[[int, RemoteError | None, float], None] | None = None,
    ):
        self.sleep = sleep
        self.on_retry = on_retry

    def run(
        self,
        operation: Callable[[], bool],
        policy: RetryStrategy,
        retryable_codes: Collection[RemoteErrorCode],
    ) -> None:
        codes = frozenset(retryable_codes)
        attempt = 0
        last_error: RemoteError | None = None

        while True:
            attempt += 1
            try:
                if operation():
                    return
                last_error = None
            except RemoteError as e:
                if not e.is_retryable_in(codes):
                    raise
                last_error = e

            if not policy.should_retry(attempt):
                raise RetryExhaustedError(
                    f"timed out after {attempt} attempts",
                    attempts=attempt,
                    cause=last_error,
                )

            delay = policy.next_delay(attempt - 1)
            logger.debug(
                "retry_scheduled",
                attempt=attempt,
                delay=round(delay, 3),
                error=last_error,
            )
            if self.on_retry:
                self.on_retry(attempt, last_error, delay)

            self.sleep(delay)


__all__ = [
    "RetryStrategy",
    "ExponentialBackoff",
    "ConstantBackoff",
    "NoRetry",
    "BackoffRetryExecutor",
    "default_backoff",
]
