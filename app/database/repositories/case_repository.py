from app.database.connection import get_connection

ERROR_STATUS = "Error"


class CaseRepository:
    """Reads case-level settings and records case status for the analysis pipeline."""

    def get_ai_provider(self, case_id: str) -> str | None:
        """Return the model provider configured for a case, or None for the default."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT ai_provider FROM cases WHERE id = %s", (case_id,))
                row = cur.fetchone()

        if row is None or not row[0]:
            return None
        return str(row[0])

    def update_status(self, case_id: str, status: str, message: str) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE cases
                SET status = %s, status_message = %s, last_updated = NOW()
                WHERE id = %s
                """,
                (status, message, case_id),
            )
            conn.commit()
