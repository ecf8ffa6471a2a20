"""Provider protocol: minimal interface for generation backends."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from lumen.providers.models import ProviderRequest, ProviderResponse, ToolSet


@runtime_checkable
class ResponseStream(Protocol):
    """Incremental response: native chunks plus an end-of-stream aggregate."""

    def __aiter__(self) -> AsyncIterator[Any]:
        """Iterate native response chunks."""
        ...

    def chunk_text(self, chunk: Any) -> str | None:
        """Extract the text delta of one chunk; may raise."""
        ...

    async def aggregate(self) -> ProviderResponse:
        """Return the aggregated response once the stream is exhausted."""
        ...


@runtime_checkable
class Provider(Protocol):
    """Minimal provider protocol: generate and generate_stream."""

    name: str

    def adapt_tools(self, tools: ToolSet | None) -> ToolSet | None:
        """Drop declarations this provider cannot send."""
        ...

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        """Single-shot generation."""
        ...

    async def generate_stream(self, request: ProviderRequest) -> ResponseStream:
        """Start an incremental generation."""
        ...

    async def aclose(self) -> None:
        """Release SDK clients."""
        ...
