from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import Any, Protocol, Sequence, runtime_checkable

from domain.models import AppConfig, AutomationConfig, FreeTextQuestionResponse, JobStatus


@runtime_checkable
class ElementHandlePort(Protocol):
    """A single element on the live page."""

    async def click(self) -> None:
        ...

    async def type_text(self, text: str, *, delay_ms: int = 0) -> None:
        ...

    async def upload_files(self, paths: Sequence[str]) -> None:
        ...

    async def label(self) -> str:
        """Visible text, value or aria-label; used for label matching."""
        ...


@runtime_checkable
class PageHandlePort(Protocol):
    """
    Page-level browser primitives consumed by the form-stage driver.

    All interactions may raise ``BrowserInteractionError``; waits that
    exceed their bound raise ``NavigationTimeoutError``.
    """

    async def goto(self, url: str, *, wait_until: str, timeout_ms: int) -> None:
        ...

    async def query_selector(self, selector: str) -> ElementHandlePort | None:
        ...

    async def query_selector_all(self, selector: str) -> Sequence[ElementHandlePort]:
        ...

    async def press_key(self, key: str) -> None:
        ...

    async def wait_for_settle(self, timeout_ms: int) -> None:
        ...

    def current_url(self) -> str:
        ...

    async def content(self) -> str:
        ...


@runtime_checkable
class BrowserHandlePort(Protocol):
    """An owned browser process."""

    async def new_page(self) -> PageHandlePort:
        ...

    async def close(self) -> None:
        ...


@runtime_checkable
class BrowserLauncherPort(Protocol):
    """
    Starts browser processes.

    The concrete implementation is expected to wrap tools such as
    Playwright.
    """

    async def launch(self, config: AutomationConfig) -> BrowserHandlePort:
        ...


@runtime_checkable
class JobStatusRepositoryPort(Protocol):
    """Caller-side store of the last known status for each job."""

    @abstractmethod
    def save(self, status: JobStatus) -> None:
        ...

    @abstractmethod
    def get(self, job_id: str) -> JobStatus | None:
        ...

    @abstractmethod
    def delete(self, job_id: str) -> None:
        ...

    @abstractmethod
    def list_all(self) -> Sequence[JobStatus]:
        ...


@runtime_checkable
class ConfigProviderPort(Protocol):
    """Source of application configuration."""

    def get_config(self) -> AppConfig:
        ...

    def validate(self) -> list[str]:
        ...


@runtime_checkable
class UserInteractionPort(Protocol):
    """
    High-level user interaction abstraction (e.g. a terminal).

    All methods are asynchronous so blocking input can be moved off
    the event loop.
    """

    async def send_info(self, message: str) -> None:
        ...

    async def ask_free_text(
        self,
        question_id: str,
        prompt: str,
    ) -> FreeTextQuestionResponse:
        ...


@runtime_checkable
class ClockPort(Protocol):
    """Time source for deterministic and easily testable code."""

    def now(self) -> datetime:
        ...


@runtime_checkable
class IdGeneratorPort(Protocol):
    """Generation of opaque, unguessable job identifiers."""

    def new_job_id(self) -> str:
        ...


@runtime_checkable
class LoggerPort(Protocol):
    """Structured, testable logging abstraction."""

    def info(self, message: str, **fields: Any) -> None:
        ...

    def warning(self, message: str, **fields: Any) -> None:
        ...

    def error(self, message: str, **fields: Any) -> None:
        ...


__all__ = [
    "ElementHandlePort",
    "PageHandlePort",
    "BrowserHandlePort",
    "BrowserLauncherPort",
    "JobStatusRepositoryPort",
    "ConfigProviderPort",
    "UserInteractionPort",
    "ClockPort",
    "IdGeneratorPort",
    "LoggerPort",
]
