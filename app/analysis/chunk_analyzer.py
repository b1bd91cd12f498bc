from app.analysis.activity import ActivityRecorder
from app.analysis.models import Chunk, ChunkBlocked, ChunkFailed, ChunkOutcome, ChunkSuccess
from app.analysis.prompt_builder import PromptBuilder
from app.analysis.result_extractor import build_chunk_summary, extract_json
from app.analysis.retry import RetryingModelInvoker
from app.logging.logger import Log
from app.providers.base import BaseModelClient
from app.providers.models import ModelRequest


class ChunkAnalyzer:
    """Summarizes one chunk; every failure becomes an outcome, never an exception."""

    def __init__(
        self,
        *,
        client: BaseModelClient,
        invoker: RetryingModelInvoker,
        prompts: PromptBuilder,
        activity: ActivityRecorder,
        chunk_count: int,
        temperature: float = 0.2,
    ) -> None:
        self._client = client
        self._invoker = invoker
        self._prompts = prompts
        self._activity = activity
        self._chunk_count = chunk_count
        self._temperature = temperature

    def __call__(self, chunk: Chunk) -> ChunkOutcome:
        label = f"Chunk {chunk.position} of {self._chunk_count}"
        request = ModelRequest(
            prompt=self._prompts.chunk(chunk, self._chunk_count),
            temperature=self._temperature,
        )
        try:
            response = self._invoker.invoke(
                lambda: self._client.invoke(request),
                description=f"Summarization of chunk {chunk.position}",
                activity=self._activity,
            )
        except Exception as exc:
            Log.error(f"{label} failed: {exc}")
            return ChunkFailed(index=chunk.index, error=str(exc))

        if response.blocked:
            reason = response.describe_block()
            Log.warning(f"{label} was blocked for safety reasons: {reason}")
            return ChunkBlocked(index=chunk.index, reason=reason)

        Log.debug(f"{label} raw response:\n{response.text}")
        summary = build_chunk_summary(extract_json(response.text))
        if summary is None:
            Log.warning(f"{label} returned no usable summary")
            return ChunkFailed(index=chunk.index, error="Model output contained no valid summary")
        return ChunkSuccess(index=chunk.index, text=summary)
