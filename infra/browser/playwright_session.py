from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from domain.errors import BrowserInteractionError, NavigationTimeoutError
from domain.models import AutomationConfig

_LABEL_SCRIPT = (
    "el => (el.innerText || el.value || el.getAttribute('aria-label') || el.textContent || '')"
)


@contextmanager
def _translated_errors(action: str) -> Iterator[None]:
    """Re-raise Playwright failures as domain interaction errors."""
    try:
        yield
    except PlaywrightTimeoutError as exc:
        raise NavigationTimeoutError(f"{action} timed out: {exc.message}") from exc
    except PlaywrightError as exc:
        raise BrowserInteractionError(f"{action} failed: {exc.message}") from exc


class PlaywrightElement:
    """Implements ``ElementHandlePort`` over a Playwright ``ElementHandle``."""

    def __init__(self, handle: Any) -> None:
        self._handle = handle

    async def click(self) -> None:
        with _translated_errors("click"):
            await self._handle.click()

    async def type_text(self, text: str, *, delay_ms: int = 0) -> None:
        with _translated_errors("type"):
            await self._handle.type(text, delay=delay_ms)

    async def upload_files(self, paths: Sequence[str]) -> None:
        with _translated_errors("upload"):
            await self._handle.set_input_files(list(paths))

    async def label(self) -> str:
        with _translated_errors("read label"):
            value = await self._handle.evaluate(_LABEL_SCRIPT)
        return str(value or "")


class PlaywrightPage:
    """Implements ``PageHandlePort`` over a Playwright ``Page``."""

    def __init__(self, page: Any) -> None:
        self._page = page

    async def goto(self, url: str, *, wait_until: str, timeout_ms: int) -> None:
        with _translated_errors(f"navigation to {url}"):
            await self._page.goto(url, wait_until=wait_until, timeout=timeout_ms)

    async def query_selector(self, selector: str) -> PlaywrightElement | None:
        with _translated_errors(f"query {selector}"):
            handle = await self._page.query_selector(selector)
        return PlaywrightElement(handle) if handle is not None else None

    async def query_selector_all(self, selector: str) -> list[PlaywrightElement]:
        with _translated_errors(f"query {selector}"):
            handles = await self._page.query_selector_all(selector)
        return [PlaywrightElement(h) for h in handles]

    async def press_key(self, key: str) -> None:
        with _translated_errors(f"key {key}"):
            await self._page.keyboard.press(key)

    async def wait_for_settle(self, timeout_ms: int) -> None:
        with _translated_errors("page settle"):
            await self._page.wait_for_load_state("networkidle", timeout=timeout_ms)

    def current_url(self) -> str:
        return self._page.url

    async def content(self) -> str:
        with _translated_errors("read content"):
            return await self._page.content()


class PlaywrightBrowser:
    """
    Implements ``BrowserHandlePort``; owns one Chromium process.

    ``close()`` shuts down the browser and the Playwright driver that
    started it.
    """

    def __init__(self, playwright: Any, browser: Any, config: AutomationConfig) -> None:
        self._playwright = playwright
        self._browser = browser
        self._config = config

    async def new_page(self) -> PlaywrightPage:
        with _translated_errors("open page"):
            page = await self._browser.new_page(
                viewport={
                    "width": self._config.viewport_width,
                    "height": self._config.viewport_height,
                },
            )
        return PlaywrightPage(page)

    async def close(self) -> None:
        try:
            with _translated_errors("browser close"):
                await self._browser.close()
        finally:
            await self._playwright.stop()


class PlaywrightLauncher:
    """
    Playwright-backed implementation of BrowserLauncherPort.

    Requires ``playwright`` to be installed and browsers set up via
    ``playwright install chromium``. Every launch starts an independent
    browser process so sessions never share pages.
    """

    def __init__(self, *, starter: Any = async_playwright) -> None:
        self._starter = starter

    async def launch(self, config: AutomationConfig) -> PlaywrightBrowser:
        playwright = await self._starter().start()
        try:
            with _translated_errors("browser launch"):
                browser = await playwright.chromium.launch(
                    headless=config.headless,
                    executable_path=config.executable_path or None,
                    args=list(config.launch_args),
                )
        except BaseException:
            await playwright.stop()
            raise
        return PlaywrightBrowser(playwright, browser, config)
