"""Tool definition types shared by the prompt and filesystem tools."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from lumen.providers.models import Message

if TYPE_CHECKING:
    from collections.abc import Callable

    from pydantic import BaseModel

    from lumen.workspace import Workspace

# Replaced with the configured model id when tools are listed.
MODEL_ID_PLACEHOLDER = "${modelId}"


@dataclass(frozen=True)
class PromptSpec:
    """What a prompt tool asks of the model."""

    system_instruction: str
    user_query: str
    use_web_search: bool = False
    #: No current tool enables this; kept for the function-declaration hook.
    enable_function_calling: bool = False

    def history(self) -> list[Message]:
        """Single user turn: instruction, blank line, query."""
        return [Message.user(f"{self.system_instruction}\n\n{self.user_query}")]


@dataclass(frozen=True)
class _Tool:
    name: str
    description: str
    args_model: type[BaseModel]

    def input_schema(self) -> dict[str, Any]:
        return self.args_model.model_json_schema()

    def describe(self, model_id: str) -> str:
        return self.description.replace(MODEL_ID_PLACEHOLDER, model_id)

    def parse_args(self, arguments: dict[str, Any]) -> Any:
        """Validate raw arguments; raises ``pydantic.ValidationError``."""
        return self.args_model.model_validate(arguments)


@dataclass(frozen=True)
class PromptTool(_Tool):
    """A tool answered by the generative model.

    When ``saves_as`` is set the answer is written to the ``output_path``
    argument instead of being returned.
    """

    build_prompt: Callable[[Any, str], PromptSpec]
    saves_as: str | None = None


@dataclass(frozen=True)
class FilesystemTool(_Tool):
    """A tool executed against the workspace without the model."""

    run: Callable[[Workspace, Any], str]


ToolDefinition = PromptTool | FilesystemTool
