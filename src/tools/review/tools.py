"""Code review prompt template."""

from typing import Any

from src.mcp.models import PromptEnvelope, PromptMessage, TextContent
from src.mcp.registry import CapabilityKind, CapabilityRegistry
from src.mcp.schema import Schema, StringField

HEADER = "Please analyze and review the following code in detail."
SUGGESTIONS_FOOTER = (
    "\nFor each item, include concrete improvement suggestions with example code."
)

# (focus area, section text), in the order they appear in the prompt
REVIEW_SECTIONS = [
    (
        "quality",
        "## 1. Code quality\n"
        "- Readability and clarity\n"
        "- Naming conventions\n"
        "- Structure and organization\n"
        "- Duplicated code",
    ),
    (
        "performance",
        "## 2. Performance\n"
        "- Algorithmic efficiency\n"
        "- Unnecessary computation or memory use\n"
        "- Async handling (where applicable)\n"
        "- Database query efficiency (where applicable)",
    ),
    (
        "security",
        "## 3. Security\n"
        "- Input validation and sanitization\n"
        "- Injection, XSS and similar vulnerabilities\n"
        "- Authentication and authorization\n"
        "- Handling of secrets (API keys, passwords)\n"
        "- Error handling and information leakage",
    ),
    (
        "maintainability",
        "## 4. Maintainability\n"
        "- Modularity and reuse\n"
        "- Testability\n"
        "- Documentation and comments\n"
        "- Dependency management",
    ),
    (
        "best_practices",
        "## 5. Best practices and standards\n"
        "- Language coding standards\n"
        "- Design patterns (where applicable)\n"
        "- SOLID principles (where applicable)\n"
        "- Error handling patterns",
    ),
]

FOCUS_AREAS = [area for area, _ in REVIEW_SECTIONS] + ["all"]


def parse_focus_areas(value: str) -> list[str]:
    areas = [area.strip() for area in value.split(",") if area.strip()]
    return areas or ["all"]


def build_review_prompt(
    code: str,
    language: str = "auto",
    focus_areas: str = "all",
    include_suggestions: bool = True,
) -> str:
    """
    Assemble the review request text.

    Sections are picked by focus area; unknown areas are ignored. The code
    block is tagged with the language unless it is ``auto``.
    """
    areas = parse_focus_areas(focus_areas)
    sections = [
        text for area, text in REVIEW_SECTIONS
        if "all" in areas or area in areas
    ]

    if language != "auto":
        language_line = f"\n**Language**: {language}\n"
        fence = language
    else:
        language_line = "\n**Language**: auto-detect\n"
        fence = ""

    return (
        HEADER
        + language_line
        + "\n"
        + "\n\n".join(sections)
        + "\n\n"
        + "---\n\n"
        + "**Code to review:**\n\n"
        + f"```{fence}\n{code}\n```"
        + (SUGGESTIONS_FOOTER if include_suggestions else "")
    )


async def code_review_handler(arguments: dict[str, Any]) -> PromptEnvelope:
    """Handle the code_review prompt."""
    # An empty value means the default
    suggestions = arguments["include_suggestions"]
    text = build_review_prompt(
        arguments["code"],
        language=arguments["language"],
        focus_areas=arguments["focus_areas"],
        include_suggestions=suggestions.lower() == "true" if suggestions else True,
    )
    return PromptEnvelope(
        description="Code Review Request",
        messages=[PromptMessage(role="user", content=TextContent(text=text))],
    )


def register_tools(registry: CapabilityRegistry) -> None:
    """Register the code review prompt with the registry."""

    registry.register(
        CapabilityKind.PROMPT,
        "code_review",
        Schema({
            "code": StringField(description="Code to review"),
            "language": StringField(
                description="Code language (e.g. python, typescript, java; default: auto - detect)",
                required=False,
                default="auto",
            ),
            "focus_areas": StringField(
                description=(
                    "Comma-separated review focus: "
                    f"{','.join(FOCUS_AREAS)} (default: all)"
                ),
                required=False,
                default="all",
            ),
            "include_suggestions": StringField(
                description="Whether to ask for improvement suggestions (true/false, default: true)",
                required=False,
                default="true",
            ),
        }),
        code_review_handler,
        description="Builds a detailed code review request from a predefined template.",
        title="Code Review Request",
    )
