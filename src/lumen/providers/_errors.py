"""Provider-side error mapping and failure classification.

Providers wrap SDK exceptions via :func:`wrap_provider_error` at the single
point where the SDK call returns, attaching structured retry metadata. The
retry engine then calls :func:`classify_error`, which trusts those structured
signals first and only falls back to message heuristics for errors that carry
no status at all.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import re
from typing import Literal

import httpx

from lumen._http import BLOCKED_MARKERS, RETRYABLE_STATUS_CODES, TRANSIENT_MARKERS
from lumen.errors import (
    APIError,
    ContentBlockedError,
    RateLimitError,
    _walk_exception_chain,
)

ErrorKind = Literal["retryable", "blocked", "fatal"]

_REASON_RE = re.compile(r"(?:finish reason|reason):\s*(.+)", re.IGNORECASE)
_STATUS_TOKEN_RE = re.compile(r"\b(429|500|503|internal|unavailable)\b")


@dataclass(frozen=True)
class ErrorClass:
    """Outcome of classifying one failed attempt."""

    kind: ErrorKind
    message: str
    reason: str | None = None
    status_token: str | None = None
    timeout: bool = False


def extract_status_code(exc: BaseException) -> int | None:
    """Walk the exception chain to find an HTTP status code."""
    for e in _walk_exception_chain(exc):
        # google-genai exposes the HTTP status as ``code``.
        for attr in ("status_code", "code", "status"):
            value = getattr(e, attr, None)
            if isinstance(value, int) and 100 <= value <= 599:
                return value
        response = getattr(e, "response", None)
        value = getattr(response, "status_code", None)
        if isinstance(value, int) and 100 <= value <= 599:
            return value
    return None


def extract_block_reason(message: str) -> str | None:
    """Pull a ``Reason: ...`` suffix out of a block message, if present."""
    m = _REASON_RE.search(message)
    if m:
        reason = m.group(1).strip()
        return reason or None
    return None


def _is_timeout(exc: BaseException) -> bool:
    for e in _walk_exception_chain(exc):
        if isinstance(e, (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException)):
            return True
    return False


def _is_transport_error(exc: BaseException) -> bool:
    for e in _walk_exception_chain(exc):
        if isinstance(e, (httpx.RequestError, ConnectionError)):
            return True
    return False


def _has_blocked_marker(exc: BaseException, lowered: str) -> bool:
    if getattr(exc, "status", None) == "BLOCKED":
        return True
    return any(marker in lowered for marker in BLOCKED_MARKERS)


def _auth_hint(provider: str, status_code: int | None, cause: str) -> str | None:
    """Generate a hint for auth errors where naming the credential is useful."""
    cause_lower = cause.lower()
    if status_code in {401, 403} or (
        status_code == 400 and ("api key" in cause_lower or "api_key" in cause_lower)
    ):
        if provider == "gemini":
            return "Check credentials (set GEMINI_API_KEY to a valid key)."
        return (
            "Check credentials/permissions for GOOGLE_CLOUD_PROJECT "
            "(try `gcloud auth application-default login`)."
        )
    return None


def wrap_provider_error(
    exc: BaseException,
    *,
    provider: str,
    phase: str,
    message: str | None = None,
) -> APIError:
    """Map provider SDK exceptions into APIError with stable retry metadata."""
    if isinstance(exc, asyncio.CancelledError):
        raise exc

    # Already wrapped: fill in missing context only.
    if isinstance(exc, APIError):
        if exc.provider is None:
            exc.provider = provider
        if exc.phase is None:
            exc.phase = phase
        return exc

    cause = str(exc)
    lowered = cause.lower()
    if _has_blocked_marker(exc, lowered):
        return ContentBlockedError(
            f"{provider} content generation blocked. Reason: {cause}",
            reason=extract_block_reason(cause) or cause,
            provider=provider,
            phase=phase,
        )

    status_code = extract_status_code(exc)
    retryable: bool | None = None
    if isinstance(status_code, int):
        retryable = status_code in RETRYABLE_STATUS_CODES
    if _is_timeout(exc) or _is_transport_error(exc):
        retryable = True

    msg = message or f"{provider} {phase} failed"
    status_note = f" (status={status_code})" if isinstance(status_code, int) else ""
    err_cls: type[APIError] = RateLimitError if status_code == 429 else APIError
    return err_cls(
        f"{msg}{status_note}: {cause}" if cause else f"{msg}{status_note}",
        hint=_auth_hint(provider, status_code, cause),
        retryable=retryable,
        status_code=status_code,
        provider=provider,
        phase=phase,
    )


def _status_token(lowered: str) -> str | None:
    m = _STATUS_TOKEN_RE.search(lowered)
    return m.group(1) if m else None


def classify_error(exc: BaseException) -> ErrorClass:
    """Classify a failed attempt as retryable, blocked, or fatal.

    Structured signals win: ContentBlockedError, APIError retry metadata,
    HTTP status codes, timeout and transport exception types. Message
    substrings are consulted only when the error carries no status code.
    """
    message = str(exc) or type(exc).__name__
    lowered = message.lower()

    if isinstance(exc, ContentBlockedError):
        return ErrorClass(
            "blocked",
            message,
            reason=exc.reason or extract_block_reason(message),
        )

    if _is_timeout(exc):
        return ErrorClass(
            "retryable", message, status_token="deadline_exceeded", timeout=True
        )

    status_code = exc.status_code if isinstance(exc, APIError) else None
    if status_code is None:
        status_code = extract_status_code(exc)

    if isinstance(exc, APIError) and exc.retryable is True:
        token = str(status_code) if status_code is not None else _status_token(lowered)
        return ErrorClass("retryable", message, status_token=token)
    if status_code is not None:
        if status_code in RETRYABLE_STATUS_CODES:
            return ErrorClass("retryable", message, status_token=str(status_code))
        return ErrorClass("fatal", message, status_token=str(status_code))
    if _is_transport_error(exc):
        return ErrorClass("retryable", message, status_token=_status_token(lowered))

    # Fallback heuristics for errors without structured codes.
    if _has_blocked_marker(exc, lowered):
        return ErrorClass("blocked", message, reason=extract_block_reason(message))
    if "deadline_exceeded" in lowered:
        return ErrorClass(
            "retryable", message, status_token="deadline_exceeded", timeout=True
        )
    if any(marker in lowered for marker in TRANSIENT_MARKERS):
        return ErrorClass("retryable", message, status_token=_status_token(lowered))
    return ErrorClass("fatal", message)
