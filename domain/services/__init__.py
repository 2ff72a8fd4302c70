"""
Domain services.

These services orchestrate the quote-request workflow while depending only
on domain models and ports so that infrastructure and UI layers can remain thin.
"""

from .form_stages import FormStageDriver
from .photos import decode_data_uri, staged_photo_files
from .request_validation import validate_quote_request
from .result_extraction import extract_external_job
from .selectors import DEFAULT_SELECTORS, SelectorStrategy, StageSelectors, find_first
from .session_lifecycle import QuoteSessionController, StatusCallback
from .session_store import Session, SessionStore
from .status_projection import StatusProjection

__all__ = [
    "FormStageDriver",
    "StageSelectors",
    "SelectorStrategy",
    "DEFAULT_SELECTORS",
    "find_first",
    "decode_data_uri",
    "staged_photo_files",
    "extract_external_job",
    "validate_quote_request",
    "Session",
    "SessionStore",
    "QuoteSessionController",
    "StatusCallback",
    "StatusProjection",
]
