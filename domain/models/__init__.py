from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence


class JobTiming(str, Enum):
    """When the customer wants the work done."""

    ASAP = "asap"
    WITHIN_2_WEEKS = "within_2_weeks"
    WITHIN_1_MONTH = "within_1_month"
    WITHIN_3_MONTHS = "within_3_months"
    FLEXIBLE = "flexible"


class JobStatusKind(str, Enum):
    """Lifecycle states for a quote-request job."""

    PENDING = "pending"
    FILLING_FORM = "filling_form"
    UPLOADING_PHOTOS = "uploading_photos"
    AWAITING_OTP = "awaiting_otp"
    SUBMITTING = "submitting"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatusKind.COMPLETED, JobStatusKind.FAILED)

    @property
    def is_active(self) -> bool:
        return not self.is_terminal

    @property
    def rank(self) -> int:
        """Position in the stage order; photo upload shares the form-filling rank."""
        return _STATUS_RANKS[self]


_STATUS_RANKS = {
    JobStatusKind.PENDING: 0,
    JobStatusKind.FILLING_FORM: 1,
    JobStatusKind.UPLOADING_PHOTOS: 1,
    JobStatusKind.AWAITING_OTP: 2,
    JobStatusKind.SUBMITTING: 3,
    JobStatusKind.COMPLETED: 4,
    JobStatusKind.FAILED: 4,
}


@dataclass(frozen=True)
class ContactDetails:
    """Who the tradespeople should contact. All fields are required."""

    name: str
    email: str
    phone: str


@dataclass(frozen=True)
class PhotoAttachments:
    """
    Optional photos attached to the request.

    Each value is an embedded image payload, normally a ``data:image/...;base64,``
    URI. Anything that is not a data URI is ignored at upload time.
    """

    original: str | None = None
    visualization: str | None = None

    @property
    def has_any(self) -> bool:
        return bool(self.original or self.visualization)

    def labelled(self) -> list[tuple[str, str]]:
        items = []
        if self.original:
            items.append(("original", self.original))
        if self.visualization:
            items.append(("visualization", self.visualization))
        return items


@dataclass(frozen=True)
class QuoteRequest:
    """
    Caller-supplied description of the job to post.

    Validation happens before the automation core sees the request.
    """

    category_name: str
    postcode: str
    description: str
    contact: ContactDetails
    category_slug: str = ""
    suburb: str | None = None
    property_type: str = "house"
    timing: JobTiming = JobTiming.FLEXIBLE
    photos: PhotoAttachments | None = None


@dataclass(frozen=True)
class JobStatus:
    """
    Caller-visible projection of a job.

    ``external_job_id``/``external_job_url`` are only set on completed jobs,
    ``error`` only on failed ones.
    """

    job_id: str
    status: JobStatusKind
    message: str
    external_job_id: str | None = None
    external_job_url: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class ExternalJobRef:
    """The target site's own reference to a posted quote request."""

    job_id: str
    job_url: str


_DEFAULT_LAUNCH_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-software-rasterizer",
)


@dataclass(frozen=True)
class AutomationConfig:
    """Settings for driving the quote form in a headless browser."""

    start_url: str = "https://hipages.com.au/get-quotes"
    headless: bool = True
    executable_path: str | None = None
    navigation_timeout_ms: int = 30_000
    advance_timeout_ms: int = 10_000
    max_question_rounds: int = 10
    typing_delay_ms: int = 50
    pause_scale: float = 1.0
    viewport_width: int = 1280
    viewport_height: int = 800
    job_url_template: str = "https://hipages.com.au/jobs/{job_id}"
    launch_args: Sequence[str] = field(default_factory=lambda: _DEFAULT_LAUNCH_ARGS)


@dataclass(frozen=True)
class AppConfig:
    """Application-level configuration loaded from config.json."""

    automation: AutomationConfig = field(default_factory=AutomationConfig)
    host: str = "0.0.0.0"
    port: int = 3001
    db_path: str = ":memory:"
    cors_origins: Sequence[str] = ("*",)


@dataclass(frozen=True)
class FreeTextQuestionResponse:
    """Structured response to a free-text question asked to the user."""

    question_id: str
    text: str


__all__ = [
    "AppConfig",
    "AutomationConfig",
    "ContactDetails",
    "ExternalJobRef",
    "FreeTextQuestionResponse",
    "JobStatus",
    "JobStatusKind",
    "JobTiming",
    "PhotoAttachments",
    "QuoteRequest",
]
