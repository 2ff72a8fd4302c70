from __future__ import annotations


class BrowserInteractionError(Exception):
    """A click, type, upload or navigation against the live page failed."""


class NavigationTimeoutError(BrowserInteractionError):
    """A navigation or load wait exceeded its upper bound."""


class SessionClosedError(Exception):
    """The session was torn down while its form-stage sequence was running."""

    def __init__(self, job_id: str) -> None:
        super().__init__(f"Session for job {job_id} was closed")
        self.job_id = job_id


class SessionAlreadyActiveError(Exception):
    """A second form-stage sequence was requested for a running job."""

    def __init__(self, job_id: str) -> None:
        super().__init__(f"Job {job_id} already has an active session")
        self.job_id = job_id


class JobNotFoundError(Exception):
    def __init__(self, job_id: str) -> None:
        super().__init__(f"Job not found: {job_id}")
        self.job_id = job_id


class JobNotAwaitingOtpError(Exception):
    def __init__(self, job_id: str, current_status: str) -> None:
        super().__init__(f"Job {job_id} is not awaiting OTP (status: {current_status})")
        self.job_id = job_id
        self.current_status = current_status


class QuoteRequestValidationError(ValueError):
    """Raised when a quote request is missing required information."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__("Missing required fields: " + ", ".join(missing))
        self.missing = missing


__all__ = [
    "BrowserInteractionError",
    "NavigationTimeoutError",
    "SessionClosedError",
    "SessionAlreadyActiveError",
    "JobNotFoundError",
    "JobNotAwaitingOtpError",
    "QuoteRequestValidationError",
]
