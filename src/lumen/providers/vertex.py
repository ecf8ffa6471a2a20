"""Vertex AI provider implementation (project/location credentials)."""

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
from lumen.providers.models import ToolSet

if TYPE_CHECKING:
    from lumen.providers.models import ProviderRequest, ProviderResponse

logger = logging.getLogger(__name__)

# Search grounding is served from the preview API surface.
GROUNDING_API_VERSION = "v1beta1"


class VertexProvider:
    """Google Vertex AI provider."""

    name = "vertex"

    def __init__(self, project: str, location: str) -> None:
        """Create provider for a GCP project and region."""
        self.project = project
        self.location = location
        self._clients: dict[bool, Any] = {}

    def _get_client(self, *, grounding: bool) -> Any:
        """Lazy-initialize the default or the grounding-capable client."""
        client = self._clients.get(grounding)
        if client is None:
            try:
                from google import genai
                from google.genai import types
            except ImportError as e:
                raise APIError(
                    "google-genai package not installed",
                    hint="pip install google-genai",
                ) from e

            kwargs: dict[str, Any] = {
                "vertexai": True,
                "project": self.project,
                "location": self.location,
            }
            if grounding:
                kwargs["http_options"] = types.HttpOptions(
                    api_version=GROUNDING_API_VERSION
                )
            client = genai.Client(**kwargs)
            self._clients[grounding] = client
            logger.info(
                "Initialized Vertex AI client for project %s in %s (grounding=%s)",
                self.project,
                self.location,
                grounding,
            )
        return client

    def adapt_tools(self, tools: ToolSet | None) -> ToolSet | None:
        """Keep only search when grounding is mixed with function declarations."""
        if tools is None:
            return None
        if tools.web_search and tools.function_declarations:
            logger.warning(
                "Vertex provider: grounding requested with %d other tool(s); "
                "keeping only search.",
                len(tools.function_declarations),
            )
            return ToolSet(web_search=True)
        return tools

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        """Generate content in a single call."""
        client = self._get_client(grounding=request.wants_grounding)
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
                message="Vertex generate failed",
            ) from e
        logger.debug("Received non-streaming response from Vertex AI")
        return parse_response(response)

    async def generate_stream(self, request: ProviderRequest) -> GenaiResponseStream:
        """Start a streaming generation."""
        client = self._get_client(grounding=request.wants_grounding)
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
                message="Vertex stream failed",
            ) from e
        return GenaiResponseStream(chunks, provider=self.name)

    async def aclose(self) -> None:
        """Close every client created so far."""
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            aio = getattr(client, "aio", None)
            aclose = getattr(aio, "aclose", None)
            if callable(aclose):
                await aclose()
