from dataclasses import dataclass
from datetime import datetime


@dataclass
class JobRecord:
    """Represents a row from the analysis_jobs table."""

    id: int
    document_id: int
    case_id: str
    storage_path: str
    status: str
    error_message: str | None = None
    locked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
