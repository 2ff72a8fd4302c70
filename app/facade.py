from __future__ import annotations

import asyncio
from typing import Sequence

from domain.errors import JobNotAwaitingOtpError, JobNotFoundError
from domain.models import JobStatus, JobStatusKind, QuoteRequest
from domain.ports import IdGeneratorPort, JobStatusRepositoryPort, LoggerPort
from domain.services import QuoteSessionController, StatusProjection, validate_quote_request


class QuoteJobFacade:
    """
    UI-facing facade for quote-request jobs: start, poll, OTP, cancel.

    Keeps the caller-visible status records and the background tasks that
    run each job's form stages. The HTTP layer and the CLI only talk to this.
    """

    def __init__(
        self,
        *,
        controller: QuoteSessionController,
        status_repo: JobStatusRepositoryPort,
        id_generator: IdGeneratorPort,
        logger: LoggerPort,
    ) -> None:
        self._controller = controller
        self._status_repo = status_repo
        self._id_generator = id_generator
        self._logger = logger
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._submitting: set[str] = set()
        self._cancelled: set[str] = set()
        self._projection = StatusProjection(
            controller=controller,
            repo=status_repo,
            is_scheduled=self._is_scheduled,
        )

    async def start_job(self, request: QuoteRequest) -> JobStatus:
        validate_quote_request(request)
        job_id = self._id_generator.new_job_id()
        initial = JobStatus(job_id, JobStatusKind.PENDING, "Job queued for processing")
        self._status_repo.save(initial)

        task = asyncio.create_task(self._run_job(job_id, request))
        self._tasks[job_id] = task
        task.add_done_callback(lambda _t: self._tasks.pop(job_id, None))
        self._logger.info("job_started", job_id=job_id, category=request.category_name)
        return initial

    def get_job(self, job_id: str) -> JobStatus | None:
        return self._projection.lookup(job_id)

    def list_jobs(self) -> Sequence[JobStatus]:
        return [
            status
            for status in (self.get_job(record.job_id) for record in self._status_repo.list_all())
            if status is not None
        ]

    async def submit_otp(self, job_id: str, code: str) -> JobStatus:
        current = self.get_job(job_id)
        if current is None:
            raise JobNotFoundError(job_id)
        if current.status is not JobStatusKind.AWAITING_OTP:
            raise JobNotAwaitingOtpError(job_id, current.status.value)

        self._submitting.add(job_id)
        try:
            self._record_update(JobStatus(job_id, JobStatusKind.SUBMITTING, "Verifying code..."))
            final = await self._controller.submit_otp(job_id, code)
            self._record_update(final)
        finally:
            self._submitting.discard(job_id)
            self._cancelled.discard(job_id)
        self._logger.info("job_finished", job_id=job_id, status=final.status.value)
        return final

    async def cancel_job(self, job_id: str) -> None:
        task = self._tasks.get(job_id)
        if task is not None or job_id in self._submitting or self._controller.is_running(job_id):
            self._cancelled.add(job_id)
        try:
            if task is not None and not task.done():
                task.cancel()
            await self._controller.cancel_session(job_id)
            if task is not None:
                await asyncio.gather(task, return_exceptions=True)
            self._status_repo.delete(job_id)
        finally:
            # an in-flight OTP submission clears the mark once it has returned
            if job_id not in self._submitting:
                self._cancelled.discard(job_id)
        self._logger.info("job_cancelled", job_id=job_id)

    async def join(self, job_id: str) -> None:
        """Wait until the job's form stages have finished or suspended."""
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def shutdown(self) -> None:
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        await self._controller.close_all()

    # -- internal helpers ---------------------------------------------------

    def _is_scheduled(self, job_id: str) -> bool:
        if job_id in self._submitting:
            return True
        task = self._tasks.get(job_id)
        return task is not None and not task.done()

    async def _run_job(self, job_id: str, request: QuoteRequest) -> None:
        try:
            await self._controller.start_session(job_id, request, self._record_update)
        except Exception as exc:
            self._logger.error("job_processing_failed", job_id=job_id, error=str(exc))
            self._record_update(
                JobStatus(
                    job_id,
                    JobStatusKind.FAILED,
                    "Job processing failed",
                    error=str(exc) or type(exc).__name__,
                )
            )

    def _record_update(self, status: JobStatus) -> None:
        if status.job_id in self._cancelled:
            return
        self._status_repo.save(status)
        self._logger.info(
            "job_status_update",
            job_id=status.job_id,
            status=status.status.value,
            message=status.message,
        )
