"""Generation execution: non-streaming extraction, stream accumulation, retries."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from lumen.errors import ContentBlockedError, InternalError, InvalidParamsError
from lumen.providers.models import ProviderRequest, ToolSet
from lumen.retry import retry_generate
from lumen.safety import safety_policy_for

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from lumen.config import ProviderConfig
    from lumen.providers.base import Provider, ResponseStream
    from lumen.providers.models import Message, ProviderResponse

logger = logging.getLogger(__name__)

# Block reasons that mean "no block".
NON_BLOCKING_REASONS: frozenset[str] = frozenset(
    {"BLOCK_REASON_UNSPECIFIED", "BLOCKED_REASON_UNSPECIFIED", "OTHER"}
)


def check_response(response: ProviderResponse, *, provider: str, where: str) -> None:
    """Raise ContentBlockedError when *response* carries a block signal.

    Safety ratings without a block are logged and otherwise ignored.
    """
    block_reason = response.block_reason
    if block_reason and block_reason not in NON_BLOCKING_REASONS:
        raise ContentBlockedError(
            f"{provider} content generation blocked ({where}). Reason: {block_reason}",
            reason=block_reason,
            provider=provider,
            phase="generate",
        )
    if response.finish_reason == "SAFETY":
        raise ContentBlockedError(
            f"{provider} content generation blocked ({where}). Finish Reason: SAFETY",
            reason="SAFETY",
            provider=provider,
            phase="generate",
        )
    if response.safety_ratings:
        logger.warning(
            "%s: safety ratings returned despite permissive thresholds: %s",
            provider,
            json.dumps(response.safety_ratings),
        )


async def generate_once(provider: Provider, request: ProviderRequest) -> str:
    """Run one non-streaming generation and return its text."""
    response = await provider.generate(request)
    logger.info("Received non-streaming response from %s", provider.name)
    check_response(response, provider=provider.name, where="response")
    if not response.text:
        logger.error(
            "Unexpected non-streaming response structure from %s: %r",
            provider.name,
            response,
        )
        raise InternalError(
            f"Failed to extract response text from {provider.name} (non-streaming)."
        )
    return response.text


async def accumulate_stream(stream: ResponseStream, *, provider: str) -> str:
    """Concatenate the text deltas of *stream*, then validate the aggregate."""
    buffer: list[str] = []
    async for chunk in stream:
        try:
            text = stream.chunk_text(chunk)
        except Exception as e:
            if "safety" in str(e).lower():
                raise ContentBlockedError(
                    f"{provider} content generation blocked during stream. Reason: {e}",
                    reason=str(e),
                    provider=provider,
                    phase="stream",
                ) from e
            logger.warning("Non-text or error chunk in %s stream: %s", provider, e)
            continue
        if not text:
            logger.debug("Skipping empty chunk in %s stream", provider)
            continue
        buffer.append(text)

    aggregate = await stream.aggregate()
    check_response(aggregate, provider=provider, where="aggregated stream")

    accumulated = "".join(buffer)
    if not accumulated and aggregate.text:
        accumulated = aggregate.text
    if not accumulated:
        logger.error("Empty response from %s stream. Aggregate: %r", provider, aggregate)
        raise InternalError(f"Received empty or non-text response from {provider} stream.")

    logger.info("Finished processing stream from %s", provider)
    return accumulated


async def generate_stream_once(provider: Provider, request: ProviderRequest) -> str:
    """Run one streaming generation and return the accumulated text."""
    stream = await provider.generate_stream(request)
    return await accumulate_stream(stream, provider=provider.name)


async def generate_text(
    history: Sequence[Message],
    *,
    provider: Provider,
    config: ProviderConfig,
    use_web_search: bool = False,
    function_declarations: Sequence[dict[str, Any]] = (),
    sleep: Callable[[float], Awaitable[object]] | None = None,
) -> str:
    """Generate text for *history* with retries.

    Returns the full text or raises one of InvalidParamsError,
    ContentBlockedError, TransientFailureExhaustedError or InternalError.
    Partial text is never returned.

    Example:
        text = await generate_text(
            [Message.user("Explain asyncio")], provider=provider, config=config
        )
    """
    if not history:
        raise InvalidParamsError("Conversation history must contain at least one message")

    requested: ToolSet | None = None
    if use_web_search or function_declarations:
        requested = ToolSet(
            web_search=use_web_search,
            function_declarations=tuple(function_declarations),
        )
    tools = provider.adapt_tools(requested)

    request = ProviderRequest(
        model=config.model,
        history=tuple(history),
        temperature=config.temperature,
        max_output_tokens=config.max_output_tokens,
        safety=safety_policy_for(config.provider),
        tools=tools,
    )
    grounding = requested is not None and requested.web_search
    tool_count = tools.count if tools is not None else 0
    policy = config.retry_policy

    async def attempt(index: int) -> str:
        logger.info(
            "Calling %s AI (%s, temp: %s, grounding: %s, tools: %d, stream: %s, "
            "attempt: %d/%d)",
            provider.name,
            config.model,
            config.temperature,
            grounding,
            tool_count,
            config.use_streaming,
            index + 1,
            policy.max_attempts,
        )
        if config.use_streaming:
            return await generate_stream_once(provider, request)
        return await generate_once(provider, request)

    return await retry_generate(
        attempt, policy=policy, provider=provider.name, sleep=sleep
    )
