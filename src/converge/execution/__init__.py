"""Retry policies and executor."""

from converge.execution.retry import (
    BackoffRetryExecutor,
    ConstantBackoff,
    ExponentialBackoff,
    NoRetry,
    RetryStrategy,
    default_backoff,
)

__all__ = [
    "BackoffRetryExecutor",
    "ConstantBackoff",
    "ExponentialBackoff",
    "NoRetry",
    "RetryStrategy",
    "default_backoff",
]
