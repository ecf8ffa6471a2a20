"""Project guideline generation from a technology stack."""

from __future__ import annotations

from pydantic import BaseModel, Field

from lumen.tools.base import MODEL_ID_PLACEHOLDER, PromptSpec, PromptTool


class GuidelinesArgs(BaseModel):
    tech_stack: list[str] = Field(
        min_length=1,
        description=(
            "Technologies in the project, optionally with versions "
            "(e.g. ['React 18.2', 'TypeScript 5.3', 'FastAPI'])."
        ),
    )


class SaveGuidelinesArgs(GuidelinesArgs):
    output_path: str = Field(
        min_length=1,
        description="Relative path within the workspace where the guidelines are saved.",
    )


def build_guidelines_prompt(args: GuidelinesArgs, model_id: str) -> PromptSpec:
    del model_id
    stack = ", ".join(item.strip() for item in args.tech_stack if item.strip())
    instruction = f"""You are an expert software architect writing project guidelines for a team working with: {stack}.
Use Google Search to consult the official documentation and current community best practices for each technology and version listed.
Produce a single Markdown document with these sections:
1. Project structure and naming conventions
2. Coding style and formatting rules
3. Recommended libraries and patterns for each technology
4. Error handling and logging
5. Testing strategy
6. Security considerations
7. Performance considerations
Only recommend practices that apply to the listed versions. When a version is not given, target the current stable release and say so."""
    return PromptSpec(
        system_instruction=instruction,
        user_query=f"Generate comprehensive project guidelines for: {stack}",
        use_web_search=True,
    )


generate_project_guidelines = PromptTool(
    name="generate_project_guidelines",
    description=(
        "Generates a structured project guidelines document (Markdown) for a "
        "given technology stack, using web search for current best practices. "
        f"Uses the configured Gemini model ({MODEL_ID_PLACEHOLDER})."
    ),
    args_model=GuidelinesArgs,
    build_prompt=build_guidelines_prompt,
)

save_generate_project_guidelines = PromptTool(
    name="save_generate_project_guidelines",
    description=(
        "Generates project guidelines for a technology stack using web search and "
        "saves them to a file in the workspace. Uses the configured Gemini model "
        f"({MODEL_ID_PLACEHOLDER})."
    ),
    args_model=SaveGuidelinesArgs,
    build_prompt=build_guidelines_prompt,
    saves_as="guidelines",
)
