"""Documentation tools: topic explanations and precise code snippets."""

from __future__ import annotations

from pydantic import BaseModel, Field

from lumen.tools.base import MODEL_ID_PLACEHOLDER, PromptSpec, PromptTool


class TopicQueryArgs(BaseModel):
    topic: str = Field(
        min_length=1,
        description=(
            "The software/library/framework topic "
            "(e.g., 'React Router', 'Python requests')."
        ),
    )
    query: str = Field(
        min_length=1, description="The specific question or use case to address."
    )


class SaveTopicQueryArgs(TopicQueryArgs):
    output_path: str = Field(
        min_length=1,
        description="Relative path within the workspace where the result is saved.",
    )


def build_explanation_prompt(args: TopicQueryArgs, model_id: str) -> PromptSpec:
    del model_id
    instruction = f"""You are an expert technical writer explaining '{args.topic}'.
Use Google Search to find the official documentation and other authoritative sources for '{args.topic}', then explain the topic as it relates to the user's question.
- Base the explanation on the official documentation first; use other sources only to fill gaps.
- Include short, correct code examples where they make the explanation clearer.
- Mention version-specific behavior when it matters.
- Structure the answer with headings and keep it focused on the question."""
    return PromptSpec(
        system_instruction=instruction,
        user_query=f"Explain {args.query} in the context of {args.topic}.",
        use_web_search=True,
    )


def build_snippet_prompt(args: TopicQueryArgs, model_id: str) -> PromptSpec:
    del model_id
    instruction = f"""You are a documentation lookup tool for '{args.topic}'.
Use Google Search to find the official documentation for '{args.topic}' and return ONLY the precise code snippets or short documentation excerpts that directly answer the user's question.
- Do not add explanations, introductions or conclusions.
- Prefer examples taken verbatim from the official documentation.
- Wrap each code snippet in a fenced code block with the correct language tag.
- If nothing relevant exists, reply exactly: "No relevant snippets found in the official documentation." """
    return PromptSpec(
        system_instruction=instruction,
        user_query=f"Find code snippets for: {args.query}",
        use_web_search=True,
    )


explain_topic_with_docs = PromptTool(
    name="explain_topic_with_docs",
    description=(
        "Provides a detailed explanation for a query about a specific software "
        "topic by synthesizing information primarily from official documentation "
        f"found via web search. Uses the configured Gemini model ({MODEL_ID_PLACEHOLDER})."
    ),
    args_model=TopicQueryArgs,
    build_prompt=build_explanation_prompt,
)

get_doc_snippets = PromptTool(
    name="get_doc_snippets",
    description=(
        "Provides precise, authoritative code snippets or concise answers for "
        "technical queries by searching official documentation. Returns only "
        f"snippets, without explanation. Uses the configured Gemini model ({MODEL_ID_PLACEHOLDER})."
    ),
    args_model=TopicQueryArgs,
    build_prompt=build_snippet_prompt,
)

save_topic_explanation = PromptTool(
    name="save_topic_explanation",
    description=(
        "Explains a software topic using official documentation found via web "
        "search and saves the explanation to a file in the workspace. Uses the "
        f"configured Gemini model ({MODEL_ID_PLACEHOLDER})."
    ),
    args_model=SaveTopicQueryArgs,
    build_prompt=build_explanation_prompt,
    saves_as="explanation",
)

save_doc_snippet = PromptTool(
    name="save_doc_snippet",
    description=(
        "Finds code snippets in official documentation via web search and saves "
        "them to a file in the workspace. Uses the configured Gemini model "
        f"({MODEL_ID_PLACEHOLDER})."
    ),
    args_model=SaveTopicQueryArgs,
    build_prompt=build_snippet_prompt,
    saves_as="snippet",
)
