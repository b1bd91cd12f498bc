from typing import Any

from psycopg import sql

from app.analysis.models import DocumentUpdate
from app.database.connection import get_connection
from app.database.exceptions import RecordNotFoundError


class CaseFilesRepository:
    """Writes analysis results to the case_files_metadata table."""

    def update_record(self, document_id: int, update: DocumentUpdate) -> None:
        """Write every non-None field of `update` to the document's row.

        Last writer wins; there is no read-modify-write.

        Raises:
            RecordNotFoundError: if no metadata row exists for the document.
        """
        columns = self._columns(update)
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in columns
        )
        query = sql.SQL("UPDATE case_files_metadata SET {} WHERE id = %s").format(assignments)
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, (*columns.values(), document_id))
                if cur.rowcount == 0:
                    raise RecordNotFoundError(f"Metadata for document {document_id} not found")
            conn.commit()

    @staticmethod
    def _columns(update: DocumentUpdate) -> dict[str, Any]:
        columns: dict[str, Any] = {}
        if update.description is not None:
            columns["description"] = update.description
        if update.suggested_name is not None:
            columns["suggested_name"] = update.suggested_name
        if update.tags is not None:
            columns["tags"] = list(update.tags)
        if update.category is not None:
            columns["file_category"] = update.category
        if update.content_hash is not None:
            columns["file_hash"] = update.content_hash.hex_digest
            columns["hash_algorithm"] = update.content_hash.algorithm
        columns["last_modified_at"] = update.last_modified_at
        return columns
