"""Tool catalogue exposed by the server."""

from __future__ import annotations

from .answer_query import (
    answer_query_direct,
    answer_query_websearch,
    save_answer_query_direct,
    save_answer_query_websearch,
)
from .base import (
    MODEL_ID_PLACEHOLDER,
    FilesystemTool,
    PromptSpec,
    PromptTool,
    ToolDefinition,
)
from .docs import (
    explain_topic_with_docs,
    get_doc_snippets,
    save_doc_snippet,
    save_topic_explanation,
)
from .filesystem import FILESYSTEM_TOOLS
from .guidelines import generate_project_guidelines, save_generate_project_guidelines

ALL_TOOLS: tuple[ToolDefinition, ...] = (
    answer_query_websearch,
    answer_query_direct,
    explain_topic_with_docs,
    get_doc_snippets,
    generate_project_guidelines,
    save_generate_project_guidelines,
    save_doc_snippet,
    save_topic_explanation,
    save_answer_query_direct,
    save_answer_query_websearch,
    *FILESYSTEM_TOOLS,
)

TOOL_MAP: dict[str, ToolDefinition] = {tool.name: tool for tool in ALL_TOOLS}

__all__ = [
    "ALL_TOOLS",
    "MODEL_ID_PLACEHOLDER",
    "TOOL_MAP",
    "FilesystemTool",
    "PromptSpec",
    "PromptTool",
    "ToolDefinition",
]
