"""Gemini Developer API provider implementation (API-key credentials)."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from lumen.errors import APIError
from lumen.providers._errors import wrap_provider_error
from lumen.providers._genai import (
    GenaiResponseStream,
    build_config,
    build_contents,
    parse_response,
)

if TYPE_CHECKING:
    from lumen.providers.models import ProviderRequest, ProviderResponse, ToolSet

logger = logging.getLogger(__name__)


class GeminiProvider:
    """Google Gemini API provider."""

    name = "gemini"

    def __init__(self, api_key: str) -> None:
        """Create provider with an API key."""
        self.api_key = api_key
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazy-initialize the Gemini client."""
        if self._client is None:
            try:
                from google import genai
            except ImportError as e:
                raise APIError(
                    "google-genai package not installed",
                    hint="pip install google-genai",
                ) from e

            self._client = genai.Client(api_key=self.api_key)
            logger.info("Initialized Gemini API client")
        return self._client

    def adapt_tools(self, tools: ToolSet | None) -> ToolSet | None:
        """Drop every declaration: this path sends plain generation requests."""
        if tools is None:
            return None
        if tools.function_declarations:
            logger.warning(
                "Gemini provider: %d function declaration(s) are not supported "
                "and were dropped.",
                len(tools.function_declarations),
            )
        elif tools.web_search:
            logger.info(
                "Gemini provider: explicit search declaration dropped "
                "(search is handled implicitly by the model)."
            )
        return None

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        """Generate content in a single call."""
        client = self._get_client()
        try:
            response = await client.aio.models.generate_content(
                model=request.model,
                contents=build_contents(request.history),
                config=build_config(request),
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider=self.name,
                phase="generate",
                message="Gemini generate failed",
            ) from e
        logger.debug("Received non-streaming response from Gemini API")
        return parse_response(response)

    async def generate_stream(self, request: ProviderRequest) -> GenaiResponseStream:
        """Start a streaming generation."""
        client = self._get_client()
        try:
            chunks = await client.aio.models.generate_content_stream(
                model=request.model,
                contents=build_contents(request.history),
                config=build_config(request),
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider=self.name,
                phase="stream",
                message="Gemini stream failed",
            ) from e
        return GenaiResponseStream(chunks, provider=self.name)

    async def aclose(self) -> None:
        """Close the client if it was created."""
        client, self._client = self._client, None
        aio = getattr(client, "aio", None)
        aclose = getattr(aio, "aclose", None)
        if callable(aclose):
            await aclose()
