import os
import uuid
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest
from psycopg.rows import dict_row

from app.config.settings import Settings
from app.database.connection import close_pool, get_connection, init_pool
from app.database.models import JobRecord

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "evidence_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(SCHEMA_PATH.read_text(encoding="utf-8"))
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to point at it.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(
    integration_pool: None,
) -> Generator[list[tuple[str, Any]], None, None]:
    cleanup: list[tuple[str, Any]] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table, row_id in cleanup:
                if table == "analysis_jobs":
                    cur.execute("DELETE FROM agent_activities WHERE job_id = %s", (row_id,))
                    cur.execute("DELETE FROM analysis_jobs WHERE id = %s", (row_id,))
            for table, row_id in cleanup:
                if table == "case_files_metadata":
                    cur.execute("DELETE FROM case_files_metadata WHERE id = %s", (row_id,))
            for table, row_id in cleanup:
                if table == "cases":
                    cur.execute("DELETE FROM agent_activities WHERE case_id = %s", (row_id,))
                    cur.execute("DELETE FROM cases WHERE id = %s", (row_id,))
        conn.commit()


@pytest.fixture
def seed_case(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, Any]],
) -> str:
    case_id = str(uuid.uuid4())
    db_conn.execute(
        "INSERT INTO cases (id, ai_provider, status) VALUES (%s, %s, %s)",
        (case_id, "example", "Open"),
    )
    db_conn.commit()
    integration_cleanup.append(("cases", case_id))
    return case_id


@pytest.fixture
def seed_document(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, Any]],
    seed_case: str,
) -> tuple[int, str]:
    storage_path = f"user-1/{seed_case}/notes.txt"
    with db_conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO case_files_metadata (case_id, storage_path)
            VALUES (%s, %s)
            RETURNING id
            """,
            (seed_case, storage_path),
        )
        row = cur.fetchone()
        assert row is not None
        document_id = row[0]
    db_conn.commit()
    integration_cleanup.append(("case_files_metadata", document_id))
    return (document_id, storage_path)


@pytest.fixture
def seed_job(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, Any]],
    seed_case: str,
    seed_document: tuple[int, str],
) -> JobRecord:
    document_id, storage_path = seed_document
    with db_conn.cursor(row_factory=dict_row) as cur:
        cur.execute(
            """
            INSERT INTO analysis_jobs (document_id, case_id, storage_path, status)
            VALUES (%s, %s, %s, 'pending')
            RETURNING id
            """,
            (document_id, seed_case, storage_path),
        )
        row = cur.fetchone()
        assert row is not None
        job_id = row["id"]
    db_conn.commit()
    integration_cleanup.append(("analysis_jobs", job_id))
    return JobRecord(
        id=job_id,
        document_id=document_id,
        case_id=seed_case,
        storage_path=storage_path,
        status="pending",
    )


@pytest.fixture
def files_on_disk(tmp_path: Path, seed_document: tuple[int, str]) -> Path:
    """Place the seeded document's file under a temporary storage root."""
    _document_id, storage_path = seed_document
    target = tmp_path / storage_path
    target.parent.mkdir(parents=True)
    target.write_text("Handwritten notes about the custody exchange on Friday.")
    return tmp_path
