"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: scripted providers and streams cover
the retry, extraction and dispatch suites without bespoke subclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from lumen.providers.models import ProviderRequest, ProviderResponse, ToolSet


class FakeStream:
    """Scripted ResponseStream.

    ``chunks`` items are returned by ``chunk_text`` as-is, except exceptions,
    which ``chunk_text`` raises. ``fail_after`` raises from the iterator after
    that many chunks were yielded.
    """

    def __init__(
        self,
        chunks: list[Any],
        *,
        aggregate: ProviderResponse | None = None,
        fail_after: tuple[int, Exception] | None = None,
    ) -> None:
        self.chunks = chunks
        self._aggregate = aggregate or ProviderResponse()
        self._fail_after = fail_after

    async def __aiter__(self):
        for i, chunk in enumerate(self.chunks):
            if self._fail_after is not None and i == self._fail_after[0]:
                raise self._fail_after[1]
            yield chunk

    def chunk_text(self, chunk: Any) -> str | None:
        if isinstance(chunk, Exception):
            raise chunk
        return chunk

    async def aggregate(self) -> ProviderResponse:
        return self._aggregate


@dataclass
class FakeProvider:
    """Provider double returning a scripted sequence of outcomes.

    Each outcome is a str (the response text), a ProviderResponse, a
    FakeStream or an exception to raise. The last outcome repeats once the
    script runs out.
    """

    name: str = "vertex"
    outcomes: list[Any] = field(default_factory=lambda: ["ok"])
    requests: list[ProviderRequest] = field(default_factory=list)
    adapted: list[ToolSet | None] = field(default_factory=list)
    keep_tools: bool = True
    closed: bool = False

    def _next(self) -> Any:
        if len(self.outcomes) > 1:
            return self.outcomes.pop(0)
        return self.outcomes[0]

    def adapt_tools(self, tools: ToolSet | None) -> ToolSet | None:
        self.adapted.append(tools)
        return tools if self.keep_tools else None

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        self.requests.append(request)
        outcome = self._next()
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, str):
            return ProviderResponse(text=outcome)
        if isinstance(outcome, FakeStream):
            return ProviderResponse(text="".join(c for c in outcome.chunks if isinstance(c, str)))
        return outcome

    async def generate_stream(self, request: ProviderRequest) -> FakeStream:
        self.requests.append(request)
        outcome = self._next()
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, str):
            return FakeStream([outcome])
        if isinstance(outcome, ProviderResponse):
            return FakeStream([outcome.text], aggregate=outcome)
        return outcome

    async def aclose(self) -> None:
        self.closed = True


class SleepRecorder:
    """Injectable sleep that records delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
