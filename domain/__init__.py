"""
Domain layer package.

This package contains the quote-request models, the browser capability
ports and the session services that are independent of any specific
browser engine or web framework.
"""

from .models import (  # noqa: F401
    AppConfig,
    AutomationConfig,
    ContactDetails,
    ExternalJobRef,
    JobStatus,
    JobStatusKind,
    JobTiming,
    PhotoAttachments,
    QuoteRequest,
)
from .ports import (  # noqa: F401
    BrowserHandlePort,
    BrowserLauncherPort,
    ClockPort,
    ElementHandlePort,
    IdGeneratorPort,
    JobStatusRepositoryPort,
    LoggerPort,
    PageHandlePort,
    UserInteractionPort,
)

__all__ = [
    # Models
    "AppConfig",
    "AutomationConfig",
    "ContactDetails",
    "PhotoAttachments",
    "QuoteRequest",
    "JobTiming",
    "JobStatusKind",
    "JobStatus",
    "ExternalJobRef",
    # Ports
    "BrowserLauncherPort",
    "BrowserHandlePort",
    "PageHandlePort",
    "ElementHandlePort",
    "JobStatusRepositoryPort",
    "UserInteractionPort",
    "ClockPort",
    "IdGeneratorPort",
    "LoggerPort",
]
