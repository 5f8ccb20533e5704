"""Canned prompts for each documentation type.

Every helper here only binds a system prompt and a template and forwards to
`process_batch`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from vibeinsights.completion.client import CompletionClient
from vibeinsights.errors import ConfigurationError
from vibeinsights.models import ProcessingOptions, ProcessingResult, ProgressCallback
from vibeinsights.processing.batch import process_batch

LOGGER = logging.getLogger(__name__)


DOC_TYPES: tuple[str, ...] = ("architecture", "user-stories", "narrative", "custom")
COMPLEXITY_LEVELS: tuple[str, ...] = ("simple", "moderate", "detailed")

_CHUNK_FOOTER = """
This is chunk {{chunkIndex}} of {{totalChunks}} total chunks from the repository.

Code:
{{content}}
"""


@dataclass(frozen=True, slots=True)
class PromptTemplate:
    label: str
    system_prompt: str
    prompt_template: str


ARCHITECTURE = PromptTemplate(
    label="Architectural documentation",
    system_prompt=(
        "You are an experienced software architect who specializes in creating clear, "
        "detailed architectural documentation."
    ),
    prompt_template=(
        "Please analyze the following repository code chunk and generate a comprehensive "
        "architectural documentation.\n"
        "Focus on the overall structure, key components, design patterns, and how different "
        "parts of the system interact.\n"
        "Format the output as markdown with proper headings, code blocks, and bullet points "
        "as needed.\n" + _CHUNK_FOOTER
    ),
)

USER_STORIES = PromptTemplate(
    label="User stories",
    system_prompt=(
        "You are a product manager who specializes in creating detailed user stories from "
        "technical implementations."
    ),
    prompt_template=(
        "Please analyze the following repository code chunk and generate user stories that "
        "describe the functionality from an end-user perspective.\n"
        "Include acceptance criteria for each story when possible.\n"
        "Format the output as markdown with proper headings and structure.\n" + _CHUNK_FOOTER
    ),
)

_NARRATIVE_DETAIL = {
    "simple": (
        "Keep explanations simple and beginner-friendly, focusing on high-level concepts "
        "rather than implementation details."
    ),
    "moderate": (
        "Balance technical details with narrative storytelling, making the code approachable "
        "to intermediate programmers."
    ),
    "detailed": (
        "Include detailed explanations of algorithms, patterns, and technical concepts, "
        "suitable for experienced developers."
    ),
}


def narrative_template(complexity: str = "moderate") -> PromptTemplate:
    """Code story prompt tuned to the reader's level."""
    if complexity not in _NARRATIVE_DETAIL:
        raise ConfigurationError(
            f"Unknown complexity {complexity!r}, expected one of {', '.join(COMPLEXITY_LEVELS)}"
        )
    return PromptTemplate(
        label="Code story",
        system_prompt=(
            "You are a master programmer and storyteller who excels at explaining complex code "
            "through narrative storytelling."
        ),
        prompt_template=(
            "Please analyze the following code chunk and create a narrative \"Code Story\" that "
            "explains the complex structures and logic in an engaging, storytelling format.\n"
            f"{_NARRATIVE_DETAIL[complexity]}\n\n"
            "Use analogies, metaphors, and storytelling elements to make the code "
            "understandable.\n"
            "Focus on the \"why\" behind design decisions, not just the \"what\" and \"how\".\n"
            "Format the output as markdown with proper headings, code blocks for key examples, "
            "and narrative sections.\n" + _CHUNK_FOOTER
        ),
    )


def custom_template(custom_prompt: str) -> PromptTemplate:
    """Prompt that asks the model to answer the caller's own request."""
    if not custom_prompt or not custom_prompt.strip():
        raise ConfigurationError("custom analysis needs a non-empty prompt")
    return PromptTemplate(
        label="Custom analysis",
        system_prompt=(
            "You are an AI assistant specialized in code analysis and documentation generation."
        ),
        prompt_template=(
            "Please analyze the following repository code chunk and respond to this specific "
            f"request:\n\n{custom_prompt.strip()}\n" + _CHUNK_FOOTER
        ),
    )


def get_template(
    doc_type: str,
    *,
    custom_prompt: str | None = None,
    complexity: str = "moderate",
) -> PromptTemplate:
    """Return the prompt pair for a documentation type name."""
    if doc_type == "architecture":
        return ARCHITECTURE
    if doc_type == "user-stories":
        return USER_STORIES
    if doc_type == "narrative":
        return narrative_template(complexity)
    if doc_type == "custom":
        return custom_template(custom_prompt or "")
    raise ConfigurationError(
        f"Unknown documentation type {doc_type!r}, expected one of {', '.join(DOC_TYPES)}"
    )


def _progress_logger(label: str) -> ProgressCallback:
    def log_progress(completed: int, total: int) -> None:
        LOGGER.info("%s: %d/%d chunks processed", label, completed, total)

    return log_progress


def _bind(template: PromptTemplate, options: ProcessingOptions | None) -> ProcessingOptions:
    base = options or ProcessingOptions()
    return replace(
        base,
        system_prompt=template.system_prompt,
        prompt_template=template.prompt_template,
        on_progress=base.on_progress or _progress_logger(template.label),
    )


async def generate_documentation(
    content: str,
    client: CompletionClient,
    doc_type: str,
    *,
    custom_prompt: str | None = None,
    complexity: str = "moderate",
    options: ProcessingOptions | None = None,
) -> ProcessingResult:
    template = get_template(doc_type, custom_prompt=custom_prompt, complexity=complexity)
    return await process_batch(content, client, _bind(template, options))


async def generate_architecture_doc(
    content: str, client: CompletionClient, *, options: ProcessingOptions | None = None
) -> ProcessingResult:
    return await process_batch(content, client, _bind(ARCHITECTURE, options))


async def generate_user_stories(
    content: str, client: CompletionClient, *, options: ProcessingOptions | None = None
) -> ProcessingResult:
    return await process_batch(content, client, _bind(USER_STORIES, options))


async def generate_code_story(
    content: str,
    client: CompletionClient,
    complexity: str = "moderate",
    *,
    options: ProcessingOptions | None = None,
) -> ProcessingResult:
    return await process_batch(content, client, _bind(narrative_template(complexity), options))


async def generate_custom_analysis(
    content: str,
    custom_prompt: str,
    client: CompletionClient,
    *,
    options: ProcessingOptions | None = None,
) -> ProcessingResult:
    return await process_batch(content, client, _bind(custom_template(custom_prompt), options))
