"""Shared fixtures and context for BDD step definitions."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterator, TypeVar

import pytest

from app import QuoteJobFacade
from domain.models import AutomationConfig, JobStatus
from domain.services import FormStageDriver, QuoteSessionController, SessionStore
from test.mocks import (
    FakeLauncher,
    FakePage,
    InMemoryJobStatusRepository,
    InMemoryLogger,
    QuoteSite,
    SequentialIdGenerator,
)

T = TypeVar("T")


@dataclass
class QuoteJobContext:
    """Holds mutable state shared across BDD steps."""

    loop: asyncio.AbstractEventLoop
    site_factory: Callable[[], QuoteSite] | None = None
    launch_error: Exception | None = None
    sites: list[QuoteSite] = field(default_factory=list)
    repo: InMemoryJobStatusRepository = field(default_factory=InMemoryJobStatusRepository)
    logger: InMemoryLogger = field(default_factory=InMemoryLogger)
    launcher: FakeLauncher | None = None
    facade: QuoteJobFacade | None = None
    job_id: str | None = None
    last_result: JobStatus | None = None
    error: Exception | None = None

    def build(self) -> QuoteJobFacade:
        def page_factory() -> FakePage:
            assert self.site_factory is not None
            site = self.site_factory()
            self.sites.append(site)
            return site.page

        config = AutomationConfig(pause_scale=0)
        self.launcher = FakeLauncher(page_factory, launch_error=self.launch_error)
        controller = QuoteSessionController(
            launcher=self.launcher,
            store=SessionStore(),
            driver=FormStageDriver(config=config, logger=self.logger),
            config=config,
            logger=self.logger,
        )
        self.facade = QuoteJobFacade(
            controller=controller,
            status_repo=self.repo,
            id_generator=SequentialIdGenerator(),
            logger=self.logger,
        )
        return self.facade

    def run(self, make: Callable[[], Awaitable[T]]) -> T:
        """Run a coroutine on the scenario's loop so background jobs survive between steps."""

        async def _call() -> Any:
            return await make()

        return self.loop.run_until_complete(_call())


@pytest.fixture()
def job_ctx() -> Iterator[QuoteJobContext]:
    loop = asyncio.new_event_loop()
    ctx = QuoteJobContext(loop=loop)
    yield ctx
    if ctx.facade is not None:
        loop.run_until_complete(ctx.facade.shutdown())
    loop.close()
