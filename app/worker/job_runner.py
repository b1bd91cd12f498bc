from app.analysis.models import AnalysisRequest
from app.analysis.orchestrator import PipelineOrchestrator
from app.database.models import JobRecord
from app.database.repositories.job_repository import JobRepository
from app.logging.logger import Log


class JobRunner:
    """Run one claimed job through the analysis pipeline and record its status."""

    def __init__(self, orchestrator: PipelineOrchestrator, job_repo: JobRepository) -> None:
        self._orchestrator = orchestrator
        self._job_repo = job_repo

    def run(self, job: JobRecord) -> None:
        """Execute a single job. Failed analyses are terminal and never re-queued."""
        Log.info(f"Running job {job.id} for document {job.document_id} (case {job.case_id})")
        request = AnalysisRequest(
            document_id=job.document_id,
            storage_path=job.storage_path,
            case_id=job.case_id,
        )
        outcome = self._orchestrator.run(request, job.id)
        try:
            if outcome.failed:
                self._job_repo.mark_failed(job.id, outcome.error or "Analysis failed")
                Log.error(f"Job {job.id} failed: {outcome.error}")
            else:
                self._job_repo.mark_done(job.id)
                Log.info(f"Job {job.id} finished with status {outcome.status.value}")
        except Exception as exc:
            Log.error(f"Job {job.id}: failed to record final status: {exc}")
