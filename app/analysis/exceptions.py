class AnalysisError(Exception):
    """Base exception for document analysis failures."""


class RetryExhaustedError(AnalysisError):
    """Raised when a model call stays rate-limited through every retry."""

    def __init__(self, description: str, max_retries: int) -> None:
        super().__init__(
            f"{description} failed after {max_retries} attempts due to rate limiting"
        )
        self.description = description
        self.max_retries = max_retries


class SafetyBlockedError(AnalysisError):
    """Raised when the provider refuses a whole-document or synthesis call."""


class MalformedModelOutputError(AnalysisError):
    """Raised when no structured result can be recovered from model output."""


class AllChunksFailedError(AnalysisError):
    """Raised when no chunk produced a usable summary."""

    def __init__(self, total: int, blocked: int, failed: int) -> None:
        super().__init__(
            f"all chunks failed: none of {total} chunks could be summarized "
            f"({blocked} blocked for safety reasons, {failed} failed)"
        )
        self.total = total
        self.blocked = blocked
        self.failed = failed


class EmptyDocumentError(AnalysisError):
    """Raised when a document has no readable content to analyze."""


class IllegalStateTransitionError(AnalysisError):
    """Raised when the pipeline attempts a transition its state machine forbids."""
