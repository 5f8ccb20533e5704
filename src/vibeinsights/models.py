"""Core VibeInsights data models."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional

DEFAULT_MODEL = "gpt-4o"
DEFAULT_MAX_CHUNK_SIZE = 120_000
DEFAULT_CONCURRENCY = 3
DEFAULT_MAX_TOKENS = 4000
DEFAULT_SYSTEM_PROMPT = "You are an expert software developer analyzing code."
DEFAULT_PROMPT_TEMPLATE = "Please analyze the following code:\n\n{{content}}"

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True, slots=True)
class Chunk:
    """Contiguous slice of a corpus, in corpus order."""

    index: int
    text: str

    @property
    def char_count(self) -> int:
        return len(self.text)


@dataclass(slots=True)
class ProcessingOptions:
    """Settings for one `process_batch` call.

    `prompt_template` may reference `{{content}}`, `{{chunkIndex}}` (1-based)
    and `{{totalChunks}}`. `request_timeout` bounds each completion call in
    seconds; a timed-out call is recorded as a failed chunk.
    """

    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE
    concurrency: int = DEFAULT_CONCURRENCY
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    prompt_template: str = DEFAULT_PROMPT_TEMPLATE
    on_progress: Optional[ProgressCallback] = None
    request_timeout: Optional[float] = None


@dataclass(frozen=True, slots=True)
class ChunkResult:
    """Outcome of dispatching a single chunk.

    On failure `output` holds an inline error marker and `error` the
    underlying message, so the combined document still shows the gap.
    """

    index: int
    output: str
    success: bool
    error: Optional[str] = None


@dataclass(slots=True)
class ProcessingMetrics:
    total_chunks: int
    total_input_chars: int
    total_output_chars: int
    estimated_input_tokens: int
    processing_time_ms: float


@dataclass(slots=True)
class ProcessingResult:
    """Combined document, ordered per-chunk results and metrics."""

    combined_result: str
    chunk_results: List[ChunkResult] = field(default_factory=list)
    metrics: Optional[ProcessingMetrics] = None

    @property
    def failed_chunks(self) -> List[ChunkResult]:
        return [result for result in self.chunk_results if not result.success]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
