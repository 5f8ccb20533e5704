"""Batch dispatch of corpus chunks to a completion client."""

from vibeinsights.processing.batch import (
    build_prompt,
    combine_results,
    dispatch_chunks,
    process_batch,
    validate_options,
)
from vibeinsights.processing.templates import (
    DOC_TYPES,
    PromptTemplate,
    generate_architecture_doc,
    generate_code_story,
    generate_custom_analysis,
    generate_documentation,
    generate_user_stories,
    get_template,
)

__all__ = [
    "DOC_TYPES",
    "PromptTemplate",
    "build_prompt",
    "combine_results",
    "dispatch_chunks",
    "generate_architecture_doc",
    "generate_code_story",
    "generate_custom_analysis",
    "generate_documentation",
    "generate_user_stories",
    "get_template",
    "process_batch",
    "validate_options",
]
