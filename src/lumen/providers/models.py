"""Domain models for the provider transport layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from lumen.safety import SafetyPolicy


@dataclass(frozen=True)
class Message:
    """One conversational turn; only text parts are produced today."""

    role: Literal["user", "model"]
    parts: tuple[str, ...]

    @classmethod
    def user(cls, text: str) -> Message:
        return cls(role="user", parts=(text,))

    @classmethod
    def model(cls, text: str) -> Message:
        return cls(role="model", parts=(text,))


@dataclass(frozen=True)
class ToolSet:
    """Tool declarations attached to a request.

    ``function_declarations`` is kept as a type-level hook; no current tool
    produces one and both providers drop them.
    """

    web_search: bool = False
    function_declarations: tuple[dict[str, Any], ...] = ()

    @property
    def count(self) -> int:
        return int(self.web_search) + len(self.function_declarations)


@dataclass(frozen=True)
class ProviderRequest:
    """A unified request payload for a provider generation call."""

    model: str
    history: tuple[Message, ...]
    temperature: float
    max_output_tokens: int
    safety: SafetyPolicy
    tools: ToolSet | None = None

    @property
    def wants_grounding(self) -> bool:
        return self.tools is not None and self.tools.web_search


@dataclass
class ProviderResponse:
    """A normalized (possibly end-of-stream aggregated) provider response."""

    text: str | None = None
    block_reason: str | None = None
    finish_reason: str | None = None
    safety_ratings: list[dict[str, Any]] = field(default_factory=list)
