"""Transport and message-classification constants shared by providers and retry."""

from __future__ import annotations

# Retryable status codes shared by provider mapping and core retry.
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 429, 500, 502, 503, 504})

# Lowercase message fragments that mark a transient fault. Only consulted when
# the provider error carries no structured status.
TRANSIENT_MARKERS: tuple[str, ...] = (
    "429",
    "500",
    "503",
    "deadline_exceeded",
    "internal",
    "network error",
    "socket hang up",
    "unavailable",
    "could not connect",
    "connection reset",
    "timed out",
)

# Lowercase message fragments that mark a safety/policy refusal.
BLOCKED_MARKERS: tuple[str, ...] = ("blocked", "safety")
