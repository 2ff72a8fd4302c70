from __future__ import annotations

import sqlite3
from typing import Sequence

from domain.models import JobStatus, JobStatusKind


class SQLiteJobStatusRepository:
    """
    SQLite-backed implementation of ``JobStatusRepositoryPort``.

    Keeps the last caller-visible status per job so terminal results stay
    pollable after the browser session is gone. The connection is shared
    with the web server's worker threads.
    """

    _SCHEMA_SQL = """\
    CREATE TABLE IF NOT EXISTS job_statuses (
        job_id           TEXT PRIMARY KEY,
        status           TEXT NOT NULL,
        message          TEXT NOT NULL,
        external_job_id  TEXT,
        external_job_url TEXT,
        error            TEXT
    );
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(self._SCHEMA_SQL)

    def save(self, status: JobStatus) -> None:
        self._conn.execute(
            "INSERT INTO job_statuses "
            "(job_id, status, message, external_job_id, external_job_url, error) "
            "VALUES (?, ?, ?, ?, ?, ?) "
            "ON CONFLICT(job_id) DO UPDATE SET "
            "status=excluded.status, message=excluded.message, "
            "external_job_id=excluded.external_job_id, "
            "external_job_url=excluded.external_job_url, error=excluded.error",
            self._status_to_row(status),
        )
        self._conn.commit()

    def get(self, job_id: str) -> JobStatus | None:
        row = self._conn.execute(
            "SELECT job_id, status, message, external_job_id, external_job_url, error "
            "FROM job_statuses WHERE job_id = ?",
            (job_id,),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_status(row)

    def delete(self, job_id: str) -> None:
        self._conn.execute("DELETE FROM job_statuses WHERE job_id = ?", (job_id,))
        self._conn.commit()

    def list_all(self) -> Sequence[JobStatus]:
        rows = self._conn.execute(
            "SELECT job_id, status, message, external_job_id, external_job_url, error "
            "FROM job_statuses ORDER BY rowid",
        ).fetchall()
        return [self._row_to_status(r) for r in rows]

    def close(self) -> None:
        self._conn.close()

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _status_to_row(s: JobStatus) -> tuple[str | None, ...]:
        return (
            s.job_id,
            s.status.value,
            s.message,
            s.external_job_id,
            s.external_job_url,
            s.error,
        )

    @staticmethod
    def _row_to_status(row: tuple[object, ...]) -> JobStatus:
        return JobStatus(
            job_id=str(row[0]),
            status=JobStatusKind(row[1]),
            message=str(row[2]),
            external_job_id=str(row[3]) if row[3] else None,
            external_job_url=str(row[4]) if row[4] else None,
            error=str(row[5]) if row[5] else None,
        )
