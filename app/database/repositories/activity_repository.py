from app.analysis.models import ActivityEvent
from app.database.connection import get_connection

AGENT_NAME = "Summarizer Agent"


class ActivityRepository:
    """Append-only writes to the agent_activities audit log."""

    def append(self, event: ActivityEvent) -> None:
        role = "Error Handler" if event.status.value == "error" else "File Processor"
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO agent_activities
                    (case_id, job_id, agent_name, agent_role, activity_type,
                     content, status, timestamp)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    event.case_id,
                    event.job_id,
                    AGENT_NAME,
                    role,
                    event.phase,
                    event.message,
                    event.status.value,
                    event.timestamp,
                ),
            )
            conn.commit()
