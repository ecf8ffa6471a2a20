"""Provider implementations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from lumen.errors import ConfigurationError

from .base import Provider, ResponseStream
from .gemini import GeminiProvider
from .models import Message, ProviderRequest, ProviderResponse, ToolSet
from .vertex import VertexProvider

if TYPE_CHECKING:
    from lumen.config import ProviderConfig


def get_provider(config: ProviderConfig) -> Provider:
    """Build the provider variant selected by *config*; called once at startup."""
    if config.provider == "vertex":
        if not config.gcp_project or not config.gcp_location:
            raise ConfigurationError(
                "gcp_project and gcp_location required for Vertex AI",
                hint="Set GOOGLE_CLOUD_PROJECT and GOOGLE_CLOUD_LOCATION.",
            )
        return VertexProvider(config.gcp_project, config.gcp_location)

    if not config.api_key:
        raise ConfigurationError(
            "api_key required for the Gemini API",
            hint="Set GEMINI_API_KEY.",
        )
    return GeminiProvider(config.api_key)


__all__ = [
    "GeminiProvider",
    "Message",
    "Provider",
    "ProviderRequest",
    "ProviderResponse",
    "ResponseStream",
    "ToolSet",
    "VertexProvider",
    "get_provider",
]
