from __future__ import annotations

import asyncio
from typing import Callable

from domain.errors import SessionAlreadyActiveError, SessionClosedError
from domain.models import AutomationConfig, JobStatus, JobStatusKind, QuoteRequest
from domain.ports import BrowserHandlePort, BrowserLauncherPort, LoggerPort, PageHandlePort
from domain.services.form_stages import FormStageDriver
from domain.services.session_store import Session, SessionStore

StatusCallback = Callable[[JobStatus], None]


class QuoteSessionController:
    """
    Owns the lifecycle of every automation session.

    ``start_session`` runs the form stages and suspends at ``awaiting_otp``
    with the session left open. ``submit_otp`` resumes it and always ends
    it. ``cancel_session`` ends it from any stage. Whatever the exit path,
    the session entry is removed and its browser closed together.
    """

    def __init__(
        self,
        *,
        launcher: BrowserLauncherPort,
        store: SessionStore,
        driver: FormStageDriver,
        config: AutomationConfig,
        logger: LoggerPort,
    ) -> None:
        self._launcher = launcher
        self._store = store
        self._driver = driver
        self._config = config
        self._logger = logger
        self._starting: set[str] = set()
        self._cancel_requested: set[str] = set()

    async def start_session(
        self,
        job_id: str,
        request: QuoteRequest,
        on_update: StatusCallback,
    ) -> None:
        if self.is_running(job_id):
            raise SessionAlreadyActiveError(job_id)

        self._starting.add(job_id)
        browser: BrowserHandlePort | None = None
        registered = False
        try:
            on_update(JobStatus(job_id, JobStatusKind.PENDING, "Launching browser..."))
            browser = await self._launcher.launch(self._config)
            page = await browser.new_page()
            self._store.add(
                Session(
                    job_id=job_id,
                    browser=browser,
                    page=page,
                    request=request,
                    status=JobStatus(job_id, JobStatusKind.FILLING_FORM, "Starting..."),
                )
            )
            registered = True
            if job_id in self._cancel_requested:
                raise SessionClosedError(job_id)
            self._logger.info("session_started", job_id=job_id)
            await self._run_stages(job_id, page, request, on_update)
        except asyncio.CancelledError:
            self._logger.warning("session_start_cancelled", job_id=job_id)
            await self._cleanup_failed_start(job_id, browser, registered)
            raise
        except Exception as exc:
            self._logger.error("stage_failed", job_id=job_id, error=str(exc))
            await self._cleanup_failed_start(job_id, browser, registered)
            on_update(
                JobStatus(
                    job_id,
                    JobStatusKind.FAILED,
                    "Job posting failed",
                    error=str(exc) or type(exc).__name__,
                )
            )
        finally:
            self._starting.discard(job_id)
            self._cancel_requested.discard(job_id)

    async def submit_otp(self, job_id: str, code: str) -> JobStatus:
        session = self._store.get(job_id)
        if session is None:
            return JobStatus(
                job_id,
                JobStatusKind.FAILED,
                "Session not found",
                error="No active session for this job",
            )
        if session.status.status is JobStatusKind.SUBMITTING:
            return JobStatus(
                job_id,
                JobStatusKind.FAILED,
                "OTP submission already in progress",
                error="Another verification attempt is running for this job",
            )

        self._store.update_status(job_id, JobStatus(job_id, JobStatusKind.SUBMITTING, "Verifying code..."))
        try:
            await self._driver.enter_otp(session.page, code)
            ref = await self._driver.extract_result(session.page)
        except Exception as exc:
            self._logger.error("otp_submission_failed", job_id=job_id, error=str(exc))
            result = JobStatus(
                job_id,
                JobStatusKind.FAILED,
                "Failed to verify OTP",
                error=str(exc) or type(exc).__name__,
            )
        else:
            if ref is None:
                self._logger.warning("external_job_id_not_found", job_id=job_id)
            result = JobStatus(
                job_id,
                JobStatusKind.COMPLETED,
                "Job posted successfully!",
                external_job_id=ref.job_id if ref else None,
                external_job_url=ref.job_url if ref else None,
            )
            self._logger.info("otp_submitted", job_id=job_id, external_job_id=result.external_job_id)
        finally:
            await self._teardown(job_id)
        return result

    async def cancel_session(self, job_id: str) -> None:
        if job_id in self._starting:
            self._cancel_requested.add(job_id)
        if await self._teardown(job_id):
            self._logger.info("session_cancelled", job_id=job_id)
        elif job_id in self._cancel_requested:
            self._logger.info("session_cancel_pending", job_id=job_id)

    def get_status(self, job_id: str) -> JobStatus | None:
        session = self._store.get(job_id)
        return session.status if session else None

    def is_running(self, job_id: str) -> bool:
        return job_id in self._starting or job_id in self._store

    async def close_all(self) -> None:
        for job_id in self._store.job_ids():
            await self.cancel_session(job_id)

    # -- internal helpers ---------------------------------------------------

    async def _run_stages(
        self,
        job_id: str,
        page: PageHandlePort,
        request: QuoteRequest,
        on_update: StatusCallback,
    ) -> None:
        filling = JobStatusKind.FILLING_FORM

        self._transition(job_id, filling, "Navigating to quote form...", on_update)
        await page.goto(
            self._config.start_url,
            wait_until="networkidle",
            timeout_ms=self._config.navigation_timeout_ms,
        )

        self._transition(job_id, filling, "Selecting category...", on_update)
        await self._driver.fill_category(page, request.category_name)

        self._transition(job_id, filling, "Entering location...", on_update)
        await self._driver.fill_location(page, request.postcode)

        self._transition(job_id, filling, "Getting quotes form...", on_update)
        await self._driver.advance(page)

        self._transition(job_id, filling, "Answering questions...", on_update)
        await self._driver.answer_questions(page)

        self._transition(job_id, filling, "Adding job description...", on_update)
        await self._driver.fill_description(page, request.description)

        if request.photos is not None and request.photos.has_any:
            self._transition(job_id, JobStatusKind.UPLOADING_PHOTOS, "Uploading photos...", on_update)
            await self._driver.upload_photos(page, request.photos)

        self._transition(job_id, filling, "Entering contact details...", on_update)
        await self._driver.fill_contact(page, request.contact)

        self._transition(
            job_id,
            JobStatusKind.AWAITING_OTP,
            "Please enter the verification code sent to your phone",
            on_update,
        )

    def _transition(
        self,
        job_id: str,
        kind: JobStatusKind,
        message: str,
        on_update: StatusCallback,
    ) -> None:
        status = JobStatus(job_id, kind, message)
        if job_id in self._cancel_requested or not self._store.update_status(job_id, status):
            raise SessionClosedError(job_id)
        on_update(status)

    async def _cleanup_failed_start(
        self,
        job_id: str,
        browser: BrowserHandlePort | None,
        registered: bool,
    ) -> None:
        if registered:
            await self._teardown(job_id)
        elif browser is not None:
            await self._close_quietly(job_id, browser)

    async def _teardown(self, job_id: str) -> bool:
        session = self._store.remove(job_id)
        if session is None:
            return False
        await self._close_quietly(job_id, session.browser)
        self._logger.info("session_closed", job_id=job_id)
        return True

    async def _close_quietly(self, job_id: str, browser: BrowserHandlePort) -> None:
        try:
            await browser.close()
        except Exception as exc:
            self._logger.warning("browser_close_failed", job_id=job_id, error=str(exc))
