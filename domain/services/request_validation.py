from __future__ import annotations

from domain.errors import QuoteRequestValidationError
from domain.models import QuoteRequest
from domain.utils import is_blank


def validate_quote_request(request: QuoteRequest) -> None:
    """Reject requests with blank required fields before any browser is launched."""
    missing = [
        name
        for name, value in (
            ("categoryName", request.category_name),
            ("postcode", request.postcode),
            ("description", request.description),
            ("contact.name", request.contact.name),
            ("contact.email", request.contact.email),
            ("contact.phone", request.contact.phone),
        )
        if is_blank(value)
    ]
    if missing:
        raise QuoteRequestValidationError(missing)
