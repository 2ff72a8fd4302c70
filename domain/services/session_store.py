from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from domain.models import JobStatus, QuoteRequest
from domain.ports import BrowserHandlePort, PageHandlePort


@dataclass
class Session:
    """
    Live automation context for one in-progress job.

    Owns the browser and page. The controller removes the entry and
    closes the browser together; a stored Session always has a live browser.
    """

    job_id: str
    browser: BrowserHandlePort
    page: PageHandlePort
    request: QuoteRequest
    status: JobStatus


class SessionStore:
    """
    In-memory mapping from job id to live session.

    Not persisted: a process restart drops every in-flight session.
    Status updates replace the whole record, so readers never observe
    a partially updated status.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def add(self, session: Session) -> None:
        self._sessions[session.job_id] = session

    def get(self, job_id: str) -> Session | None:
        return self._sessions.get(job_id)

    def update_status(self, job_id: str, status: JobStatus) -> bool:
        session = self._sessions.get(job_id)
        if session is None:
            return False
        session.status = status
        return True

    def remove(self, job_id: str) -> Session | None:
        return self._sessions.pop(job_id, None)

    def job_ids(self) -> list[str]:
        return list(self._sessions)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))
