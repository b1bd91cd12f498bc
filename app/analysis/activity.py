from app.analysis.models import ActivityEvent, ActivityStatus
from app.database.repositories.activity_repository import ActivityRepository
from app.logging.logger import Log


class ActivityRecorder:
    """Emits the audit trail of one analysis job.

    Every event is logged and appended to the activity sink. A failing sink
    is logged and does not interrupt the analysis.
    """

    def __init__(self, sink: ActivityRepository, *, job_id: int, case_id: str) -> None:
        self._sink = sink
        self._job_id = job_id
        self._case_id = case_id

    def processing(self, phase: str, message: str) -> None:
        self._emit(phase, message, ActivityStatus.PROCESSING)

    def completed(self, phase: str, message: str) -> None:
        self._emit(phase, message, ActivityStatus.COMPLETED)

    def error(self, phase: str, message: str) -> None:
        self._emit(phase, message, ActivityStatus.ERROR)

    def _emit(self, phase: str, message: str, status: ActivityStatus) -> None:
        event = ActivityEvent(
            job_id=self._job_id,
            case_id=self._case_id,
            phase=phase,
            message=message,
            status=status,
        )
        if status is ActivityStatus.ERROR:
            Log.error(f"[job {self._job_id}] {phase}: {message}")
        else:
            Log.info(f"[job {self._job_id}] {phase} ({status.value}): {message}")
        try:
            self._sink.append(event)
        except Exception as exc:
            Log.warning(f"[job {self._job_id}] Failed to record activity '{phase}': {exc}")
