"""Infrastructure adapters: concrete implementations of domain ports."""

from .browser import PlaywrightLauncher
from .config import FileSystemConfigProvider
from .interaction import ConsoleUserInteraction
from .persistence import SQLiteJobStatusRepository
from .runtime import StructuredLogger, SystemClock, UuidIdGenerator

__all__ = [
    "PlaywrightLauncher",
    "FileSystemConfigProvider",
    "ConsoleUserInteraction",
    "SQLiteJobStatusRepository",
    "SystemClock",
    "UuidIdGenerator",
    "StructuredLogger",
]
