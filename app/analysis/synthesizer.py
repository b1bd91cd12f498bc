from collections.abc import Sequence

from app.analysis.document_analyzer import DocumentAnalyzer
from app.analysis.exceptions import AllChunksFailedError
from app.analysis.models import (
    ChunkBlocked,
    ChunkFailed,
    ChunkOutcome,
    ChunkSuccess,
    SynthesisResult,
)
from app.analysis.prompt_builder import PromptBuilder
from app.logging.logger import Log
from app.providers.models import ModelRequest


class Synthesizer:
    """Merges successful chunk summaries into one structured result."""

    def __init__(
        self,
        *,
        analyzer: DocumentAnalyzer,
        prompts: PromptBuilder,
        temperature: float = 0.2,
    ) -> None:
        self._analyzer = analyzer
        self._prompts = prompts
        self._temperature = temperature

    def synthesize(self, outcomes: Sequence[ChunkOutcome], fallback_name: str) -> SynthesisResult:
        """Raises AllChunksFailedError, without calling the model, if no chunk succeeded."""
        ordered = sorted(outcomes, key=lambda outcome: outcome.index)
        successes = [o.text for o in ordered if isinstance(o, ChunkSuccess)]
        blocked = sum(1 for o in ordered if isinstance(o, ChunkBlocked))
        failed = sum(1 for o in ordered if isinstance(o, ChunkFailed))

        if not successes:
            raise AllChunksFailedError(total=len(ordered), blocked=blocked, failed=failed)

        Log.info(
            f"Synthesizing {len(successes)} chunk summaries "
            f"({blocked} blocked, {failed} failed)"
        )
        request = ModelRequest(
            prompt=self._prompts.synthesis(successes, omitted=blocked + failed),
            temperature=self._temperature,
        )
        result = self._analyzer.analyze(
            request,
            description="Final synthesis",
            fallback_name=fallback_name,
        )
        return SynthesisResult(
            result=result,
            used_chunks=len(successes),
            blocked_chunks=blocked,
            failed_chunks=failed,
        )
