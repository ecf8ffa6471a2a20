"""General question-answering tools (with and without web search)."""

from __future__ import annotations

from pydantic import BaseModel, Field

from lumen.tools.base import MODEL_ID_PLACEHOLDER, PromptSpec, PromptTool


class QueryArgs(BaseModel):
    query: str = Field(min_length=1, description="The natural language question to answer.")


class SaveQueryArgs(QueryArgs):
    output_path: str = Field(
        min_length=1,
        description="Relative path within the workspace where the answer is saved.",
    )


WEBSEARCH_INSTRUCTION = """You are an AI assistant designed to answer questions accurately using provided search results.
Answer the user's query using information from Google Search results.
- Synthesize information from the search results into a clear, comprehensive answer.
- Prefer recent, authoritative sources and say when sources disagree.
- Cite the sources you relied on where it helps the reader verify a claim.
- If the search results do not contain enough information, say so explicitly instead of guessing."""

DIRECT_INSTRUCTION = """You are an AI assistant answering a question based solely on your internal knowledge.
Answer the user's query directly and accurately.
- Do not use web search; rely on what you already know.
- Be explicit about uncertainty, and mention when your knowledge may be outdated.
- Prefer a concise, well-structured answer over an exhaustive one."""


def build_websearch_prompt(args: QueryArgs, model_id: str) -> PromptSpec:
    del model_id
    return PromptSpec(
        system_instruction=WEBSEARCH_INSTRUCTION,
        user_query=args.query,
        use_web_search=True,
    )


def build_direct_prompt(args: QueryArgs, model_id: str) -> PromptSpec:
    del model_id
    return PromptSpec(system_instruction=DIRECT_INSTRUCTION, user_query=args.query)


answer_query_websearch = PromptTool(
    name="answer_query_websearch",
    description=(
        "Answers a natural language query using the configured Gemini model "
        f"({MODEL_ID_PLACEHOLDER}) enhanced with Google Search results for "
        "up-to-date information."
    ),
    args_model=QueryArgs,
    build_prompt=build_websearch_prompt,
)

answer_query_direct = PromptTool(
    name="answer_query_direct",
    description=(
        "Answers a natural language query using only the internal knowledge of the "
        f"configured Gemini model ({MODEL_ID_PLACEHOLDER}). Does not use web search."
    ),
    args_model=QueryArgs,
    build_prompt=build_direct_prompt,
)

save_answer_query_websearch = PromptTool(
    name="save_answer_query_websearch",
    description=(
        "Answers a natural language query using Google Search results and saves "
        "the answer to a file in the workspace. Uses the configured Gemini model "
        f"({MODEL_ID_PLACEHOLDER})."
    ),
    args_model=SaveQueryArgs,
    build_prompt=build_websearch_prompt,
    saves_as="websearch answer",
)

save_answer_query_direct = PromptTool(
    name="save_answer_query_direct",
    description=(
        "Answers a natural language query using only internal knowledge and saves "
        "the answer to a file in the workspace. Uses the configured Gemini model "
        f"({MODEL_ID_PLACEHOLDER})."
    ),
    args_model=SaveQueryArgs,
    build_prompt=build_direct_prompt,
    saves_as="direct answer",
)
