from .playwright_session import (
    PlaywrightBrowser,
    PlaywrightElement,
    PlaywrightLauncher,
    PlaywrightPage,
)

__all__ = [
    "PlaywrightLauncher",
    "PlaywrightBrowser",
    "PlaywrightPage",
    "PlaywrightElement",
]
