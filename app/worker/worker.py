import signal
import time
from types import FrameType

from app.config.settings import Settings
from app.database.connection import get_connection
from app.database.models import JobRecord
from app.database.repositories.job_repository import JobRepository
from app.logging.logger import Log
from app.worker.job_runner import JobRunner


class Worker:
    """Poll loop: claim -> dispatch, sleeping when the queue is empty.

    A job that has started always runs to completion; SIGTERM and Ctrl+C
    only stop the loop between jobs.
    """

    def __init__(
        self,
        job_repo: JobRepository,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._job_repo = job_repo
        self._job_runner = job_runner
        self._settings = settings
        self._stop_requested = False

    def request_stop(self, signum: int | None = None, _frame: FrameType | None = None) -> None:
        """Ask the loop to exit before claiming the next job."""
        if signum is not None:
            Log.info(f"Received signal {signum}, finishing current job before exit")
        self._stop_requested = True

    def run(self, max_jobs: int | None = None) -> None:
        """Main poll loop. Runs until stopped.

        If max_jobs is set, stop after processing that many jobs (for testing).
        """
        signal.signal(signal.SIGTERM, self.request_stop)
        Log.info("Analysis worker started, polling for jobs")
        jobs_done = 0
        try:
            while not self._stop_requested:
                if max_jobs is not None and jobs_done >= max_jobs:
                    break
                job = self._try_claim_job()
                if job is None:
                    Log.debug("No jobs available, sleeping")
                    time.sleep(self._settings.job_poll_interval_seconds)
                    continue
                self._job_runner.run(job)
                jobs_done += 1
        except KeyboardInterrupt:
            Log.info("Worker interrupted")
        Log.info(f"Worker shutting down after {jobs_done} job(s)")

    def _try_claim_job(self) -> JobRecord | None:
        """Attempt to claim the next pending job. Database errors are retried on the next poll."""
        try:
            with get_connection() as conn:
                return self._job_repo.claim_next_job(conn)
        except Exception as exc:
            Log.warning(f"Database error while claiming a job, will retry: {exc}")
            return None
