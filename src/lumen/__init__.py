"""Lumen: Gemini-backed answer tools and workspace file tools over MCP.

Public API:
    - generate_text(): Provider-agnostic generation with retries
    - resolve_config(): Environment-driven ProviderConfig
    - get_provider(): Vertex AI or Gemini API adapter for a config
    - Workspace: Sandboxed filesystem operations
"""

from __future__ import annotations

import logging

from lumen.config import ProviderConfig, resolve_config, resolve_workspace_root
from lumen.errors import (
    APIError,
    ConfigurationError,
    ContentBlockedError,
    InternalError,
    InvalidParamsError,
    LumenError,
    PathOutsideWorkspaceError,
    RateLimitError,
    TransientFailureExhaustedError,
)
from lumen.execute import generate_text
from lumen.providers import Message, get_provider
from lumen.retry import RetryPolicy
from lumen.workspace import Workspace

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("lumen-mcp")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("lumen").addHandler(logging.NullHandler())

__all__ = [
    "APIError",
    "ConfigurationError",
    "ContentBlockedError",
    "InternalError",
    "InvalidParamsError",
    "LumenError",
    "Message",
    "PathOutsideWorkspaceError",
    "ProviderConfig",
    "RateLimitError",
    "RetryPolicy",
    "TransientFailureExhaustedError",
    "Workspace",
    "generate_text",
    "get_provider",
    "resolve_config",
    "resolve_workspace_root",
]
