"""Bounded async retry for generation calls.

Design goals:
- Explicit state (policy + attempt counter)
- Classification happens once per attempt, at one place
- Only the final, exhausted or terminal error crosses this boundary
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import random
from typing import TYPE_CHECKING, TypeVar

from lumen.errors import (
    APIError,
    ContentBlockedError,
    InternalError,
    TransientFailureExhaustedError,
)
from lumen.providers._errors import ErrorClass, classify_error

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff with additive jitter.

    Attempt ``n`` (zero-based) that fails sleeps for
    ``base_delay_ms * 2**n + uniform(0, jitter_ms)`` milliseconds before the
    next one. ``max_retries + 1`` attempts are made in total.
    """

    max_retries: int = 3
    base_delay_ms: int = 1000
    jitter_ms: int = 500
    #: Per-attempt timeout; ``None`` leaves the call unbounded.
    attempt_timeout_s: float | None = None
    #: Retry errors classified as fatal (malformed responses, unknown errors).
    retry_fatal: bool = True

    def __post_init__(self) -> None:
        """Validate invariants to keep retry behavior predictable."""
        if self.max_retries < 0:
            raise ValueError("RetryPolicy.max_retries must be >= 0")
        if self.base_delay_ms < 0:
            raise ValueError("RetryPolicy.base_delay_ms must be >= 0")
        if self.jitter_ms < 0:
            raise ValueError("RetryPolicy.jitter_ms must be >= 0")
        if self.attempt_timeout_s is not None and self.attempt_timeout_s <= 0:
            raise ValueError("RetryPolicy.attempt_timeout_s must be > 0 or None")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


def backoff_delay_s(
    policy: RetryPolicy, attempt: int, *, rng: Callable[[], float] = random.random
) -> float:
    """Return the sleep in seconds after zero-based *attempt* failed."""
    jitter = rng() * policy.jitter_ms
    return (policy.base_delay_ms * (2**attempt) + jitter) / 1000.0


def _final_error(
    classified: ErrorClass, *, provider: str, attempts: int
) -> APIError | InternalError:
    if classified.kind == "blocked":
        if classified.reason:
            message = (
                f"Content generation blocked by {provider} safety filters. "
                f"Reason: {classified.reason}"
            )
        else:
            message = (
                f"Content generation blocked by {provider} safety filters. "
                f"({classified.message})"
            )
        return ContentBlockedError(
            message, reason=classified.reason, provider=provider, phase="generate"
        )

    if classified.kind == "retryable":
        if classified.timeout:
            message = (
                f"{provider} AI API error: Operation timed out (deadline_exceeded) "
                f"after {attempts} attempt(s)."
            )
        else:
            message = (
                f"{provider} AI API error after {attempts} attempt(s): "
                f"{classified.message}"
            )
            if classified.status_token:
                message += f" (Status: {classified.status_token})"
        return TransientFailureExhaustedError(
            message,
            attempts=attempts,
            status_token=classified.status_token,
            provider=provider,
        )

    return InternalError(f"{provider} AI API error: {classified.message}")


async def retry_generate(
    attempt_fn: Callable[[int], Awaitable[T]],
    *,
    policy: RetryPolicy,
    provider: str,
    sleep: Callable[[float], Awaitable[object]] | None = None,
    rng: Callable[[], float] = random.random,
) -> T:
    """Run *attempt_fn* with bounded retries.

    ``attempt_fn`` receives the zero-based attempt index. Content blocks are
    terminal. Retryable errors are retried until attempts run out; fatal
    errors follow ``policy.retry_fatal``. Cancellation is never retried.
    """
    sleep_fn = sleep if sleep is not None else asyncio.sleep

    for attempt in range(policy.max_attempts):
        try:
            if policy.attempt_timeout_s is None:
                result = await attempt_fn(attempt)
            else:
                result = await asyncio.wait_for(
                    attempt_fn(attempt), timeout=policy.attempt_timeout_s
                )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            classified = classify_error(exc)
            logger.warning(
                "%s attempt %d/%d failed [%s]: %s",
                provider,
                attempt + 1,
                policy.max_attempts,
                classified.kind,
                classified.message,
            )

            exhausted = attempt >= policy.max_retries
            if (
                classified.kind == "blocked"
                or (classified.kind == "fatal" and not policy.retry_fatal)
                or exhausted
            ):
                final = _final_error(classified, provider=provider, attempts=attempt + 1)
                logger.error("Final error from %s: %s", provider, final)
                raise final from exc

            delay = backoff_delay_s(policy, attempt, rng=rng)
            logger.info("Retrying %s in %.0fms", provider, delay * 1000)
            await sleep_fn(delay)
            continue

        logger.info(
            "%s attempt %d/%d succeeded", provider, attempt + 1, policy.max_attempts
        )
        return result

    # Unreachable: every iteration returns or raises.
    raise InternalError(  # pragma: no cover
        f"Max retries ({policy.max_attempts}) reached for {provider} without success."
    )
