from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ActivityStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class AnalysisStrategy(str, Enum):
    IMAGE = "image"
    DOCUMENT = "document"
    TEXT = "text"
    UNSUPPORTED = "unsupported"


class PipelineState(str, Enum):
    GATING = "gating"
    ROUTING = "routing"
    DIRECT_ANALYSIS = "direct_analysis"
    CHUNKED_ANALYSIS = "chunked_analysis"
    SYNTHESIZING = "synthesizing"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


class OutcomeStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    UNSUPPORTED = "unsupported"
    FAILED = "failed"


@dataclass(frozen=True)
class AnalysisRequest:
    """Invocation payload for one document analysis."""

    document_id: int
    storage_path: str
    case_id: str


@dataclass
class AnalysisJob:
    """State of one analysis run, owned by the orchestrator."""

    job_id: int
    case_id: str
    document_id: int
    storage_path: str
    content_type: str = ""
    size_bytes: int | None = None


@dataclass(frozen=True)
class Chunk:
    """Zero-indexed slice `text[start:end]` of a document."""

    index: int
    start: int
    end: int
    text: str

    @property
    def position(self) -> int:
        return self.index + 1


@dataclass(frozen=True)
class ChunkSuccess:
    index: int
    text: str


@dataclass(frozen=True)
class ChunkBlocked:
    index: int
    reason: str


@dataclass(frozen=True)
class ChunkFailed:
    index: int
    error: str


ChunkOutcome = ChunkSuccess | ChunkBlocked | ChunkFailed


@dataclass(frozen=True)
class StructuredResult:
    """Final structured analysis of a document."""

    suggested_name: str
    description: str
    tags: tuple[str, ...] = ()
    category: str = "Uncategorized"


@dataclass(frozen=True)
class SynthesisResult:
    result: StructuredResult
    used_chunks: int
    blocked_chunks: int
    failed_chunks: int

    @property
    def omitted_chunks(self) -> int:
        return self.blocked_chunks + self.failed_chunks


@dataclass(frozen=True)
class ContentHash:
    algorithm: str
    hex_digest: str


@dataclass(frozen=True)
class SizeDecision:
    eligible: bool
    reason: str | None = None
    size_unknown: bool = False


@dataclass(frozen=True)
class ActivityEvent:
    """Append-only audit record of pipeline progress."""

    job_id: int
    case_id: str
    phase: str
    message: str
    status: ActivityStatus
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class DocumentUpdate:
    """Fields written to the document metadata record; None means unchanged."""

    description: str | None = None
    suggested_name: str | None = None
    tags: tuple[str, ...] | None = None
    category: str | None = None
    content_hash: ContentHash | None = None
    last_modified_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class AnalysisOutcome:
    """What a finished pipeline run reports back to its caller."""

    status: OutcomeStatus
    result: StructuredResult | None = None
    error: str | None = None
    content_hash: ContentHash | None = None

    @property
    def failed(self) -> bool:
        return self.status is OutcomeStatus.FAILED
