"""Tool catalogue: argument models, prompt builders, descriptions."""

from __future__ import annotations

from pydantic import ValidationError
import pytest

from lumen.tools import ALL_TOOLS, MODEL_ID_PLACEHOLDER, TOOL_MAP, FilesystemTool, PromptTool

pytestmark = pytest.mark.unit

PROMPT_TOOLS = {
    "answer_query_websearch": False,
    "answer_query_direct": False,
    "explain_topic_with_docs": False,
    "get_doc_snippets": False,
    "generate_project_guidelines": False,
    "save_generate_project_guidelines": True,
    "save_doc_snippet": True,
    "save_topic_explanation": True,
    "save_answer_query_direct": True,
    "save_answer_query_websearch": True,
}

FILESYSTEM_TOOLS = {
    "read_file_content",
    "read_multiple_files_content",
    "write_file_content",
    "edit_file_content",
    "create_directory",
    "list_directory_contents",
    "get_directory_tree",
    "move_file_or_directory",
    "search_filesystem",
    "get_filesystem_info",
}


def test_catalogue_is_complete_and_unique() -> None:
    names = [tool.name for tool in ALL_TOOLS]

    assert len(names) == len(set(names)) == 20
    assert set(names) == set(PROMPT_TOOLS) | FILESYSTEM_TOOLS
    assert all(isinstance(TOOL_MAP[n], FilesystemTool) for n in FILESYSTEM_TOOLS)


@pytest.mark.parametrize(("name", "saves"), sorted(PROMPT_TOOLS.items()))
def test_save_tools_require_an_output_path(name: str, saves: bool) -> None:
    tool = TOOL_MAP[name]
    assert isinstance(tool, PromptTool)

    required = tool.input_schema().get("required", [])

    assert (tool.saves_as is not None) is saves
    assert ("output_path" in required) is saves


def test_descriptions_substitute_the_model_id() -> None:
    for tool in ALL_TOOLS:
        described = tool.describe("gemini-9-ultra")
        assert MODEL_ID_PLACEHOLDER not in described
    assert "gemini-9-ultra" in TOOL_MAP["answer_query_direct"].describe("gemini-9-ultra")


def test_websearch_prompt_uses_search() -> None:
    tool = TOOL_MAP["answer_query_websearch"]
    spec = tool.build_prompt(tool.parse_args({"query": "latest Python?"}), "m")

    assert spec.use_web_search is True
    (message,) = spec.history()
    assert message.role == "user"
    assert message.parts[0] == f"{spec.system_instruction}\n\nlatest Python?"


def test_direct_prompt_does_not_use_search() -> None:
    tool = TOOL_MAP["answer_query_direct"]
    spec = tool.build_prompt(tool.parse_args({"query": "What is a monad?"}), "m")

    assert spec.use_web_search is False
    assert spec.user_query == "What is a monad?"


@pytest.mark.parametrize("name", ["explain_topic_with_docs", "get_doc_snippets"])
def test_doc_prompts_mention_topic(name: str) -> None:
    tool = TOOL_MAP[name]
    args = tool.parse_args({"topic": "Python requests", "query": "retries"})

    spec = tool.build_prompt(args, "m")

    assert spec.use_web_search is True
    assert "Python requests" in spec.system_instruction
    assert "retries" in spec.user_query


def test_guidelines_prompt_joins_the_stack() -> None:
    tool = TOOL_MAP["generate_project_guidelines"]
    args = tool.parse_args({"tech_stack": ["React 18.2", " TypeScript 5.3 "]})

    spec = tool.build_prompt(args, "m")

    assert "React 18.2, TypeScript 5.3" in spec.user_query
    assert spec.use_web_search is True


@pytest.mark.parametrize(
    ("name", "arguments"),
    [
        ("answer_query_direct", {}),
        ("answer_query_direct", {"query": ""}),
        ("generate_project_guidelines", {"tech_stack": []}),
        ("save_doc_snippet", {"topic": "x", "query": "y"}),
        ("search_filesystem", {"path": ".", "pattern": ""}),
    ],
)
def test_invalid_arguments_fail_validation(name: str, arguments: dict) -> None:
    with pytest.raises(ValidationError):
        TOOL_MAP[name].parse_args(arguments)


def test_edit_arguments_accept_camel_case() -> None:
    args = TOOL_MAP["edit_file_content"].parse_args(
        {"path": "a.txt", "edits": [{"oldText": "a", "newText": "b"}], "dryRun": True}
    )

    assert args.dry_run is True
    assert args.edits[0].old_text == "a"
    schema = TOOL_MAP["edit_file_content"].input_schema()
    assert "dryRun" in schema["properties"]
