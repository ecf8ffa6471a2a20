"""Per-provider safety policy tables.

Filters are deliberately permissive: every harm category is set to
``BLOCK_NONE`` so refusals only come from the provider's non-configurable
layers. Those still surface as block reasons and are handled by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from lumen.config import ProviderName

_HARM_CATEGORIES: tuple[str, ...] = (
    "HARM_CATEGORY_DANGEROUS_CONTENT",
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
)


@dataclass(frozen=True)
class SafetyPolicy:
    """Ordered (harm category, block threshold) pairs for one provider."""

    provider: str
    rules: tuple[tuple[str, str], ...]

    def to_settings(self) -> list[Any]:
        """Convert the table into ``google.genai`` safety settings."""
        from google.genai import types

        return [
            types.SafetySetting(
                category=types.HarmCategory(category),
                threshold=types.HarmBlockThreshold(threshold),
            )
            for category, threshold in self.rules
        ]


VERTEX_SAFETY_POLICY = SafetyPolicy(
    provider="vertex",
    rules=tuple((category, "BLOCK_NONE") for category in _HARM_CATEGORIES),
)

GEMINI_SAFETY_POLICY = SafetyPolicy(
    provider="gemini",
    rules=tuple((category, "BLOCK_NONE") for category in _HARM_CATEGORIES),
)

_POLICIES: dict[str, SafetyPolicy] = {
    "vertex": VERTEX_SAFETY_POLICY,
    "gemini": GEMINI_SAFETY_POLICY,
}


def safety_policy_for(provider: ProviderName) -> SafetyPolicy:
    """Return the constant safety policy for *provider*."""
    return _POLICIES[provider]
