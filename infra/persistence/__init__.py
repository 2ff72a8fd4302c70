"""SQLite-backed persistence adapters for domain repository ports."""

from .sqlite_job_status_repository import SQLiteJobStatusRepository

__all__ = ["SQLiteJobStatusRepository"]
