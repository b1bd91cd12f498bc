import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor

from app.analysis.activity import ActivityRecorder
from app.analysis.models import Chunk, ChunkFailed, ChunkOutcome
from app.logging.logger import Log


class BatchScheduler:
    """Processes chunks in fixed-width batches with a pause between batches.

    Chunks inside a batch run concurrently; batches run one after another.
    Outcomes come back in chunk order.
    """

    def __init__(self, batch_size: int = 2, batch_delay_seconds: float = 3.0) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self._batch_size = batch_size
        self._batch_delay = batch_delay_seconds

    def run(
        self,
        chunks: Sequence[Chunk],
        process: Callable[[Chunk], ChunkOutcome],
        activity: ActivityRecorder,
    ) -> list[ChunkOutcome]:
        outcomes: list[ChunkOutcome] = []
        batches = [
            chunks[start:start + self._batch_size]
            for start in range(0, len(chunks), self._batch_size)
        ]
        for number, batch in enumerate(batches):
            if number > 0:
                time.sleep(self._batch_delay)
            activity.processing(
                "Chunk Batch Started",
                f"Processing chunks {batch[0].position}-{batch[-1].position} "
                f"of {len(chunks)} (batch {number + 1} of {len(batches)}).",
            )
            outcomes.extend(self._run_batch(batch, process))
        return outcomes

    def _run_batch(
        self,
        batch: Sequence[Chunk],
        process: Callable[[Chunk], ChunkOutcome],
    ) -> list[ChunkOutcome]:
        with ThreadPoolExecutor(
            max_workers=self._batch_size, thread_name_prefix="chunk"
        ) as executor:
            futures = [executor.submit(process, chunk) for chunk in batch]
            results: list[ChunkOutcome] = []
            for chunk, future in zip(batch, futures):
                try:
                    results.append(future.result())
                except Exception as exc:
                    Log.exception(f"Chunk {chunk.position} raised unexpectedly: {exc}")
                    results.append(ChunkFailed(index=chunk.index, error=str(exc)))
            return results
