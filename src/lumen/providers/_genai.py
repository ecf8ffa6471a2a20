"""Shared google-genai request/response translation for both providers."""

from __future__ import annotations

import asyncio
import enum
from typing import TYPE_CHECKING, Any

from lumen.providers._errors import wrap_provider_error
from lumen.providers.models import ProviderResponse

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from lumen.providers.models import Message, ProviderRequest, ToolSet


def enum_name(value: Any) -> str | None:
    """Extract a stable string name from SDK enums or plain strings."""
    if value is None:
        return None
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, str):
        return value or None
    return str(value)


def build_contents(history: tuple[Message, ...]) -> list[Any]:
    """Convert message history into google-genai ``Content`` objects."""
    from google.genai import types

    return [
        types.Content(
            role=message.role,
            parts=[types.Part.from_text(text=text) for text in message.parts],
        )
        for message in history
    ]


def build_tools(tools: ToolSet | None) -> list[Any] | None:
    """Convert a ToolSet into google-genai ``Tool`` declarations."""
    if tools is None:
        return None
    from google.genai import types

    tool_objs: list[Any] = []
    if tools.web_search:
        tool_objs.append(types.Tool(google_search=types.GoogleSearch()))
    if tools.function_declarations:
        tool_objs.append(
            types.Tool(
                function_declarations=[
                    types.FunctionDeclaration(
                        name=decl["name"],
                        description=decl.get("description", ""),
                        parameters=decl.get("parameters"),
                    )
                    for decl in tools.function_declarations
                ]
            )
        )
    return tool_objs or None


def build_config(request: ProviderRequest) -> Any:
    """Build the ``GenerateContentConfig`` for *request*."""
    from google.genai import types

    config_kwargs: dict[str, Any] = {
        "temperature": request.temperature,
        "max_output_tokens": request.max_output_tokens,
        "safety_settings": request.safety.to_settings(),
    }
    tool_objs = build_tools(request.tools)
    if tool_objs:
        config_kwargs["tools"] = tool_objs
    return types.GenerateContentConfig(**config_kwargs)


def _first_candidate(response: Any) -> Any:
    candidates = getattr(response, "candidates", None) or []
    return candidates[0] if candidates else None


def _candidate_texts(candidate: Any) -> list[str]:
    content = getattr(candidate, "content", None)
    parts = getattr(content, "parts", None) or []
    texts: list[str] = []
    for part in parts:
        if getattr(part, "thought", False):
            continue
        text = getattr(part, "text", None)
        if isinstance(text, str) and text:
            texts.append(text)
    return texts


def _safety_ratings(candidate: Any) -> list[dict[str, Any]]:
    ratings = getattr(candidate, "safety_ratings", None) or []
    return [
        {
            "category": enum_name(getattr(r, "category", None)),
            "probability": enum_name(getattr(r, "probability", None)),
            "blocked": getattr(r, "blocked", None),
        }
        for r in ratings
    ]


def parse_response(response: Any) -> ProviderResponse:
    """Normalize a google-genai response into a ProviderResponse.

    Text joins the non-thought text parts of the first candidate, matching
    what a stream of the same content accumulates.
    """
    feedback = getattr(response, "prompt_feedback", None)
    candidate = _first_candidate(response)
    texts = _candidate_texts(candidate) if candidate is not None else []
    return ProviderResponse(
        text="".join(texts) or None,
        block_reason=enum_name(getattr(feedback, "block_reason", None)),
        finish_reason=enum_name(getattr(candidate, "finish_reason", None)),
        safety_ratings=_safety_ratings(candidate) if candidate is not None else [],
    )


class GenaiResponseStream:
    """Wrap a google-genai chunk iterator and build the end-of-stream aggregate.

    google-genai streams only yield per-chunk responses, so the aggregate is
    assembled here from every chunk observed: concatenated candidate text,
    the first block reason, and the last finish reason and safety ratings.
    """

    def __init__(self, chunks: AsyncIterator[Any], *, provider: str) -> None:
        self._chunks = chunks
        self._provider = provider
        self._texts: list[str] = []
        self._block_reason: str | None = None
        self._finish_reason: str | None = None
        self._safety_ratings: list[dict[str, Any]] = []

    async def __aiter__(self) -> AsyncIterator[Any]:
        try:
            async for chunk in self._chunks:
                self._observe(chunk)
                yield chunk
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider=self._provider,
                phase="stream",
                message=f"{self._provider} stream failed",
            ) from e

    def _observe(self, chunk: Any) -> None:
        feedback = getattr(chunk, "prompt_feedback", None)
        block_reason = enum_name(getattr(feedback, "block_reason", None))
        if block_reason and self._block_reason is None:
            self._block_reason = block_reason

        candidate = _first_candidate(chunk)
        if candidate is None:
            return
        self._texts.extend(_candidate_texts(candidate))
        finish_reason = enum_name(getattr(candidate, "finish_reason", None))
        if finish_reason:
            self._finish_reason = finish_reason
        ratings = _safety_ratings(candidate)
        if ratings:
            self._safety_ratings = ratings

    def chunk_text(self, chunk: Any) -> str | None:
        text = chunk.text
        return text if isinstance(text, str) else None

    async def aggregate(self) -> ProviderResponse:
        return ProviderResponse(
            text="".join(self._texts) or None,
            block_reason=self._block_reason,
            finish_reason=self._finish_reason,
            safety_ratings=list(self._safety_ratings),
        )
