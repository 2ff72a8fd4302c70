from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from domain.ports import ElementHandlePort, PageHandlePort


@dataclass(frozen=True)
class SelectorStrategy:
    """
    One way of locating an element.

    Without labels the first element matching ``selector`` is taken.
    With labels, the first matching element whose label contains one of
    them (case-insensitive) is taken.
    """

    selector: str
    labels: tuple[str, ...] = ()


SelectorChain = Sequence[SelectorStrategy]


def _s(selector: str, *labels: str) -> SelectorStrategy:
    return SelectorStrategy(selector=selector, labels=tuple(label.lower() for label in labels))


_CLICKABLE = 'button, [role="button"], input[type="submit"], a'


@dataclass(frozen=True)
class StageSelectors:
    """Fallback selector chains for every stage of the quote form."""

    category_input: SelectorChain
    location_input: SelectorChain
    suggestion: SelectorChain
    advance_control: SelectorChain
    choice_control: SelectorChain
    next_control: SelectorChain
    description_field: SelectorChain
    file_input: SelectorChain
    name_field: SelectorChain
    email_field: SelectorChain
    phone_field: SelectorChain
    submit_control: SelectorChain
    otp_input: SelectorChain
    verify_control: SelectorChain


DEFAULT_SELECTORS = StageSelectors(
    category_input=(
        _s('input[type="search"]'),
        _s('input[placeholder*="search" i]'),
        _s('input[placeholder*="trade" i]'),
        _s('input[name*="category" i]'),
    ),
    location_input=(
        _s('input[placeholder*="postcode" i]'),
        _s('input[placeholder*="suburb" i]'),
        _s('input[name*="location" i]'),
        _s('input[name*="postcode" i]'),
    ),
    suggestion=(
        _s('[role="option"]'),
        _s(".suggestion"),
        _s(".autocomplete-item"),
    ),
    advance_control=(
        _s(_CLICKABLE, "get quotes", "continue", "next"),
        _s('button[type="submit"]'),
    ),
    choice_control=(
        _s('input[type="radio"]:not(:checked)'),
        _s('[role="radio"][aria-checked="false"]'),
    ),
    next_control=(
        _s(_CLICKABLE, "next", "continue"),
    ),
    description_field=(
        _s("textarea"),
        _s('input[type="text"][name*="description" i]'),
    ),
    file_input=(
        _s('input[type="file"]'),
    ),
    name_field=(
        _s('input[autocomplete="name"]'),
        _s('input[name*="name" i]'),
        _s('input[placeholder*="name" i]'),
    ),
    email_field=(
        _s('input[type="email"]'),
        _s('input[name*="email" i]'),
    ),
    phone_field=(
        _s('input[type="tel"]'),
        _s('input[name*="phone" i]'),
        _s('input[name*="mobile" i]'),
    ),
    submit_control=(
        _s('button[type="submit"]'),
        _s(_CLICKABLE, "submit", "get quotes", "post job"),
    ),
    otp_input=(
        _s('input[autocomplete="one-time-code"]'),
        _s('input[type="text"][maxlength="6"]'),
        _s('input[name*="otp" i]'),
        _s('input[placeholder*="code" i]'),
    ),
    verify_control=(
        _s('button[type="submit"]'),
        _s(_CLICKABLE, "verify", "submit", "confirm"),
    ),
)


async def find_first(page: PageHandlePort, chain: SelectorChain) -> ElementHandlePort | None:
    """Try each strategy in order; ``None`` when nothing on the page matches."""
    for strategy in chain:
        if not strategy.labels:
            element = await page.query_selector(strategy.selector)
            if element is not None:
                return element
            continue
        for element in await page.query_selector_all(strategy.selector):
            text = (await element.label()).strip().lower()
            if any(label in text for label in strategy.labels):
                return element
    return None


__all__ = [
    "SelectorStrategy",
    "SelectorChain",
    "StageSelectors",
    "DEFAULT_SELECTORS",
    "find_first",
]
