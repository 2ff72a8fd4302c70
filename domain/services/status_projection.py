from __future__ import annotations

from typing import Callable

from domain.models import JobStatus
from domain.ports import JobStatusRepositoryPort
from domain.services.session_lifecycle import QuoteSessionController


def _never_scheduled(_job_id: str) -> bool:
    return False


class StatusProjection:
    """
    Read-only status lookup used for polling and OTP gating.

    A live session's cached status wins. Otherwise the stored record is
    returned, unless it claims a non-terminal state for a job that is
    neither running nor scheduled to run; such a record is stale and
    reported as a miss.
    """

    def __init__(
        self,
        *,
        controller: QuoteSessionController,
        repo: JobStatusRepositoryPort,
        is_scheduled: Callable[[str], bool] = _never_scheduled,
    ) -> None:
        self._controller = controller
        self._repo = repo
        self._is_scheduled = is_scheduled

    def lookup(self, job_id: str) -> JobStatus | None:
        live = self._controller.get_status(job_id)
        if live is not None:
            return live
        record = self._repo.get(job_id)
        if record is None:
            return None
        if record.status.is_active and not self._is_alive(job_id):
            return None
        return record

    def _is_alive(self, job_id: str) -> bool:
        return self._controller.is_running(job_id) or self._is_scheduled(job_id)
