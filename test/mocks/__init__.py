"""
Reusable fakes and in-memory implementations for tests.
"""

from .fake_browser import FakeBrowser, FakeElement, FakeLauncher, FakePage
from .fake_job_status_repository import InMemoryJobStatusRepository
from .fake_quote_site import QuoteSite, build_quote_site
from .fake_runtime import FixedClock, InMemoryLogger, SequentialIdGenerator
from .fake_user_interaction import FakeUserInteraction

__all__ = [
    "FakeBrowser",
    "FakeElement",
    "FakeLauncher",
    "FakePage",
    "FakeUserInteraction",
    "InMemoryJobStatusRepository",
    "QuoteSite",
    "build_quote_site",
    "FixedClock",
    "SequentialIdGenerator",
    "InMemoryLogger",
]
