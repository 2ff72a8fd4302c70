"""Application/UI layer package."""

from .facade import QuoteJobFacade

__all__ = ["QuoteJobFacade"]
