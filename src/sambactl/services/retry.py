"""Bounded retry with exponential backoff.

INVARIANT: Only errors the predicate accepts are retried. The default
predicate is :func:`is_retryable`, which never accepts conflict or
validation errors: samba-tool mutations are not idempotent, and a "create"
that timed out may already have landed.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog
from pydantic import BaseModel, Field

from sambactl.domain.errors import SambaToolError, TypedError
from sambactl.services.classifier import to_typed_error

log = structlog.get_logger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[object]]


def is_retryable(error: TypedError) -> bool:
    """Default retry predicate: network, timeout, or a 5xx-equivalent signal."""
    return error.retryable


class RetryOptions(BaseModel):
    """Retry policy for one invocation.

    Attributes:
        max_attempts: Total attempts including the first (>= 1).
        base_delay: Seconds to wait after the first failure.
        backoff_factor: Multiplier applied per further failure.
        jitter: Fractional spread around each delay; 0 disables it.
        should_retry: Predicate deciding whether an error is worth retrying.
    """

    model_config = {"frozen": True}

    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=1.0, ge=0)
    backoff_factor: float = Field(default=2.0, ge=1)
    jitter: float = Field(default=0.0, ge=0, le=1)
    should_retry: Callable[[TypedError], bool] = is_retryable


def backoff_delay(attempt: int, options: RetryOptions) -> float:
    """Seconds to sleep after failed attempt number *attempt* (1-based)."""
    delay = options.base_delay * options.backoff_factor ** (attempt - 1)
    if options.jitter:
        delay *= random.uniform(1 - options.jitter, 1 + options.jitter)
    return delay


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    options: RetryOptions | None = None,
    *,
    sleep: Sleep = asyncio.sleep,
    label: str | None = None,
) -> T:
    """Await ``operation()`` until it succeeds or the policy gives up.

    Raises:
        SambaToolError: The last classified error, once attempts are
            exhausted or the predicate rejects it.
    """
    opts = options or RetryOptions()
    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as exc:
            error = to_typed_error(exc, label)
            if attempt >= opts.max_attempts or not opts.should_retry(error):
                if isinstance(exc, SambaToolError):
                    raise
                raise SambaToolError(error) from exc

            delay = backoff_delay(attempt, opts)
            log.info(
                "retry.attempt_failed",
                operation=label,
                attempt=attempt,
                max_attempts=opts.max_attempts,
                kind=error.kind.value,
                code=error.code,
                delay=delay,
            )
            await sleep(delay)
            attempt += 1
