from __future__ import annotations

import asyncio
from typing import Any

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from domain.errors import BrowserInteractionError, NavigationTimeoutError
from domain.models import AutomationConfig
from infra.browser import PlaywrightBrowser, PlaywrightElement, PlaywrightLauncher, PlaywrightPage


class _Handle:
    def __init__(self, label: Any = "Get quotes", error: Exception | None = None) -> None:
        self._label = label
        self._error = error
        self.calls: list[tuple[str, Any]] = []

    async def click(self) -> None:
        if self._error is not None:
            raise self._error
        self.calls.append(("click", None))

    async def type(self, text: str, delay: int = 0) -> None:
        self.calls.append(("type", (text, delay)))

    async def set_input_files(self, files: list[str]) -> None:
        self.calls.append(("set_input_files", files))

    async def evaluate(self, script: str) -> Any:
        return self._label


class _Keyboard:
    def __init__(self) -> None:
        self.pressed: list[str] = []

    async def press(self, key: str) -> None:
        self.pressed.append(key)


class _Page:
    def __init__(self) -> None:
        self.url = "https://quotes.test/start"
        self.keyboard = _Keyboard()
        self.handles: dict[str, list[_Handle]] = {"textarea": [_Handle()]}
        self.goto_calls: list[tuple[str, str, int]] = []
        self.load_states: list[tuple[str, int]] = []
        self.goto_error: Exception | None = None

    async def goto(self, url: str, wait_until: str, timeout: int) -> None:
        if self.goto_error is not None:
            raise self.goto_error
        self.goto_calls.append((url, wait_until, timeout))

    async def query_selector(self, selector: str) -> _Handle | None:
        found = self.handles.get(selector) or []
        return found[0] if found else None

    async def query_selector_all(self, selector: str) -> list[_Handle]:
        return list(self.handles.get(selector) or [])

    async def wait_for_load_state(self, state: str, timeout: int) -> None:
        self.load_states.append((state, timeout))

    async def content(self) -> str:
        return "<html>jobId: 1</html>"


class _Chromium:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.launch_kwargs: dict[str, Any] = {}
        self.browser = _Browser()

    async def launch(self, **kwargs: Any) -> "_Browser":
        self.launch_kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.browser


class _Browser:
    def __init__(self, close_error: Exception | None = None) -> None:
        self.close_error = close_error
        self.closed = False
        self.page_kwargs: dict[str, Any] = {}

    async def new_page(self, **kwargs: Any) -> _Page:
        self.page_kwargs = kwargs
        return _Page()

    async def close(self) -> None:
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


class _Playwright:
    def __init__(self, chromium: _Chromium) -> None:
        self.chromium = chromium
        self.stopped = False

    async def stop(self) -> None:
        self.stopped = True


class _Starter:
    def __init__(self, playwright: _Playwright) -> None:
        self._playwright = playwright

    async def start(self) -> _Playwright:
        return self._playwright


def test_element_forwards_actions() -> None:
    handle = _Handle(label=None)
    element = PlaywrightElement(handle)

    async def run() -> str:
        await element.click()
        await element.type_text("Plumbing", delay_ms=50)
        await element.upload_files(("/tmp/a.jpg", "/tmp/b.png"))
        return await element.label()

    assert asyncio.run(run()) == ""
    assert handle.calls == [
        ("click", None),
        ("type", ("Plumbing", 50)),
        ("set_input_files", ["/tmp/a.jpg", "/tmp/b.png"]),
    ]


def test_timeouts_become_navigation_timeout_errors() -> None:
    element = PlaywrightElement(_Handle(error=PlaywrightTimeoutError("Timeout 30000ms exceeded.")))
    with pytest.raises(NavigationTimeoutError, match="click timed out: Timeout 30000ms exceeded."):
        asyncio.run(element.click())


def test_playwright_errors_become_interaction_errors() -> None:
    element = PlaywrightElement(_Handle(error=PlaywrightError("Element is not attached to the DOM")))
    with pytest.raises(BrowserInteractionError, match="click failed: Element is not attached") as exc_info:
        asyncio.run(element.click())
    assert not isinstance(exc_info.value, NavigationTimeoutError)


def test_page_forwards_navigation_queries_and_keys() -> None:
    raw = _Page()
    page = PlaywrightPage(raw)

    async def run() -> tuple[Any, Any, list[Any], str]:
        await page.goto("https://quotes.test/get-quotes", wait_until="networkidle", timeout_ms=30_000)
        await page.press_key("Enter")
        await page.wait_for_settle(10_000)
        found = await page.query_selector("textarea")
        missing = await page.query_selector("input[type=file]")
        every = await page.query_selector_all("textarea")
        return found, missing, every, await page.content()

    found, missing, every, html = asyncio.run(run())

    assert raw.goto_calls == [("https://quotes.test/get-quotes", "networkidle", 30_000)]
    assert raw.keyboard.pressed == ["Enter"]
    assert raw.load_states == [("networkidle", 10_000)]
    assert isinstance(found, PlaywrightElement)
    assert missing is None
    assert len(every) == 1
    assert html == "<html>jobId: 1</html>"
    assert page.current_url() == "https://quotes.test/start"


def test_navigation_timeout_is_translated() -> None:
    raw = _Page()
    raw.goto_error = PlaywrightTimeoutError("Timeout 30000ms exceeded.")
    with pytest.raises(NavigationTimeoutError, match="navigation to https://quotes.test"):
        asyncio.run(PlaywrightPage(raw).goto("https://quotes.test", wait_until="networkidle", timeout_ms=1))


def test_launcher_starts_chromium_with_config() -> None:
    playwright = _Playwright(_Chromium())
    launcher = PlaywrightLauncher(starter=lambda: _Starter(playwright))
    config = AutomationConfig(headless=False, executable_path="", viewport_width=1024, viewport_height=768)

    async def run() -> PlaywrightBrowser:
        browser = await launcher.launch(config)
        await browser.new_page()
        return browser

    browser = asyncio.run(run())

    assert isinstance(browser, PlaywrightBrowser)
    kwargs = playwright.chromium.launch_kwargs
    assert kwargs["headless"] is False
    assert kwargs["executable_path"] is None
    assert "--no-sandbox" in kwargs["args"]
    assert playwright.chromium.browser.page_kwargs == {"viewport": {"width": 1024, "height": 768}}


def test_launch_failure_stops_playwright() -> None:
    playwright = _Playwright(_Chromium(error=PlaywrightError("Executable doesn't exist")))
    launcher = PlaywrightLauncher(starter=lambda: _Starter(playwright))

    with pytest.raises(BrowserInteractionError, match="browser launch failed"):
        asyncio.run(launcher.launch(AutomationConfig()))
    assert playwright.stopped


def test_browser_close_always_stops_playwright() -> None:
    playwright = _Playwright(_Chromium())
    raw_browser = _Browser(close_error=PlaywrightError("Browser has been closed"))
    browser = PlaywrightBrowser(playwright, raw_browser, AutomationConfig())

    with pytest.raises(BrowserInteractionError, match="browser close failed"):
        asyncio.run(browser.close())
    assert raw_browser.closed
    assert playwright.stopped
