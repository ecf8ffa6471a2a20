"""Exception hierarchy for Lumen."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class LumenError(Exception):
    """Base exception for all Lumen errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(LumenError):
    """Configuration validation or resolution failed."""


class InvalidParamsError(LumenError):
    """Caller input is malformed; never retried."""


class PathOutsideWorkspaceError(InvalidParamsError):
    """A requested path resolves outside the workspace root."""


class InternalError(LumenError):
    """Unexpected response shape, uninitialized state, or a Lumen bug."""


class APIError(LumenError):
    """Provider call failed.

    Providers attach retry metadata so the retry engine can classify
    failures from structured signals before falling back to message text.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        retryable: bool | None = None,
        status_code: int | None = None,
        provider: str | None = None,
        phase: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.retryable = retryable
        self.status_code = status_code
        self.provider = provider
        self.phase = phase


class RateLimitError(APIError):
    """Rate limit exceeded (HTTP 429)."""


class ContentBlockedError(APIError):
    """The provider refused generation on safety or policy grounds.

    Terminal: the retry engine re-raises it immediately.
    """

    def __init__(
        self,
        message: str,
        *,
        reason: str | None = None,
        hint: str | None = None,
        provider: str | None = None,
        phase: str | None = None,
    ) -> None:
        super().__init__(
            message, hint=hint, retryable=False, provider=provider, phase=phase
        )
        self.reason = reason


class TransientFailureExhaustedError(APIError):
    """Every attempt failed with a retryable error."""

    def __init__(
        self,
        message: str,
        *,
        attempts: int,
        status_token: str | None = None,
        hint: str | None = None,
        provider: str | None = None,
    ) -> None:
        super().__init__(
            message, hint=hint, retryable=False, provider=provider, phase="generate"
        )
        self.attempts = attempts
        self.status_token = status_token


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)
