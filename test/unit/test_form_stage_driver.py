from __future__ import annotations

import asyncio
import base64
import os

import pytest

from domain.errors import BrowserInteractionError, NavigationTimeoutError
from domain.models import AutomationConfig, ContactDetails, PhotoAttachments
from domain.services import FormStageDriver
from test.mocks import FakeElement, FakePage, InMemoryLogger, build_quote_site
from test.mocks.fake_quote_site import FILE_INPUT

_CONFIG = AutomationConfig(pause_scale=0, advance_timeout_ms=1234, max_question_rounds=3)
_CONTACT = ContactDetails(name="Ada Lovelace", email="ada@example.com", phone="0400111222")


def _png_uri() -> str:
    return "data:image/png;base64," + base64.b64encode(b"\x89PNG fake").decode("ascii")


def _driver(config: AutomationConfig = _CONFIG) -> tuple[FormStageDriver, InMemoryLogger]:
    logger = InMemoryLogger()
    return FormStageDriver(config=config, logger=logger), logger


def test_category_picks_suggestion_and_location_falls_back_to_enter() -> None:
    site = build_quote_site(suggestions=1)
    driver, _ = _driver()

    async def run() -> None:
        assert await driver.fill_category(site.page, "Plumbing")
        assert await driver.fill_location(site.page, "2000")

    asyncio.run(run())

    assert site["category"].typed == ["Plumbing"]
    assert site["suggestion-0"].clicks == 1
    assert site["location"].typed == ["2000"]
    assert site.page.pressed_keys == ["Enter"]


def test_typing_delay_scales_with_pause_scale() -> None:
    site = build_quote_site()
    driver, _ = _driver()
    asyncio.run(driver.fill_category(site.page, "Plumbing"))
    assert site["category"].typing_delays == [0]


def test_missing_field_is_skipped_and_logged() -> None:
    page = FakePage()
    driver, logger = _driver()

    filled = asyncio.run(driver.fill_category(page, "Plumbing"))

    assert filled is False
    assert page.pressed_keys == []
    assert ("info", "element_not_found", {"stage": "category"}) in logger.events


def test_advance_clicks_get_quotes_and_waits_for_settle() -> None:
    site = build_quote_site()
    driver, _ = _driver()

    assert asyncio.run(driver.advance(site.page)) is True

    assert site["get-quotes"].clicks == 1
    assert site["help-link"].clicks == 0
    assert site.page.settle_waits == [1234]
    assert site.questions_shown == 1


def test_advance_tolerates_navigation_timeout() -> None:
    site = build_quote_site()
    site.page.settle_error = NavigationTimeoutError("Timeout 1234ms exceeded")
    driver, logger = _driver()

    assert asyncio.run(driver.advance(site.page)) is True
    assert "advance_navigation_timeout" in logger.messages("warning")


def test_advance_propagates_other_interaction_failures() -> None:
    site = build_quote_site()
    site["get-quotes"].fail_on.add("click")
    driver, _ = _driver()

    with pytest.raises(BrowserInteractionError):
        asyncio.run(driver.advance(site.page))


def test_advance_without_control_returns_false() -> None:
    driver, _ = _driver()
    assert asyncio.run(driver.advance(FakePage())) is False


def test_answer_questions_until_description_appears() -> None:
    site = build_quote_site(question_rounds=2)
    driver, logger = _driver()

    async def run() -> int:
        await driver.advance(site.page)
        return await driver.answer_questions(site.page)

    rounds = asyncio.run(run())

    assert rounds == 2
    assert site["choice-1"].clicks == 1
    assert site["choice-2"].clicks == 1
    assert ("info", "questions_answered", {"rounds": 2}) in logger.events


def test_answer_questions_is_bounded_by_max_rounds() -> None:
    site = build_quote_site(question_rounds=6)
    driver, _ = _driver()

    async def run() -> int:
        await driver.advance(site.page)
        return await driver.answer_questions(site.page)

    assert asyncio.run(run()) == 3
    assert site.questions_shown == 4


def test_answer_questions_stops_without_next_control() -> None:
    page = FakePage()
    choice = FakeElement("choice")
    page.add('input[type="radio"]:not(:checked)', choice)
    driver, _ = _driver()

    assert asyncio.run(driver.answer_questions(page)) == 0
    assert choice.clicks == 1


def test_answer_questions_with_description_already_visible() -> None:
    site = build_quote_site(question_rounds=0)
    driver, _ = _driver()

    async def run() -> int:
        await driver.advance(site.page)
        return await driver.answer_questions(site.page)

    assert asyncio.run(run()) == 0


def test_description_and_contact_then_submit_reveals_otp() -> None:
    site = build_quote_site(question_rounds=0)
    driver, _ = _driver()

    async def run() -> tuple[bool, bool]:
        await driver.advance(site.page)
        described = await driver.fill_description(site.page, "Leaking kitchen tap")
        submitted = await driver.fill_contact(site.page, _CONTACT)
        return described, submitted

    described, submitted = asyncio.run(run())

    assert described and submitted
    assert site["description"].typed == ["Leaking kitchen tap"]
    assert site["name"].typed == ["Ada Lovelace"]
    assert site["email"].typed == ["ada@example.com"]
    assert site["phone"].typed == ["0400111222"]
    assert site["submit"].clicks == 1
    assert "otp" in site.elements


def test_upload_photos_passes_existing_files_and_cleans_up() -> None:
    site = build_quote_site(question_rounds=0)
    driver, _ = _driver()
    photos = PhotoAttachments(original=_png_uri(), visualization=_png_uri())

    async def run() -> int:
        await driver.advance(site.page)
        return await driver.upload_photos(site.page, photos)

    assert asyncio.run(run()) == 2

    file_input = site["file"]
    assert len(file_input.uploads) == 1
    assert file_input.files_present_at_upload == [True, True]
    assert not any(os.path.exists(path) for path in file_input.uploads[0])


def test_upload_failure_still_removes_staged_files() -> None:
    site = build_quote_site(question_rounds=0)
    driver, _ = _driver()

    async def run() -> None:
        await driver.advance(site.page)
        site["file"].fail_on.add("upload")
        await driver.upload_photos(site.page, PhotoAttachments(original=_png_uri()))

    with pytest.raises(BrowserInteractionError):
        asyncio.run(run())

    assert not any(os.path.exists(path) for path in site["file"].uploads[0])


def test_upload_without_file_input_does_not_decode_photos() -> None:
    page = FakePage()
    driver, logger = _driver()
    broken = PhotoAttachments(original="data:image/png;base64,@@@")

    assert asyncio.run(driver.upload_photos(page, broken)) == 0
    assert ("info", "element_not_found", {"stage": "file_input"}) in logger.events


def test_upload_with_only_non_data_uri_photos_uploads_nothing() -> None:
    page = FakePage()
    file_input = FakeElement("file")
    page.add(FILE_INPUT, file_input)
    driver, _ = _driver()

    count = asyncio.run(driver.upload_photos(page, PhotoAttachments(original="https://example.com/a.jpg")))

    assert count == 0
    assert file_input.uploads == []


def test_enter_otp_and_extract_result() -> None:
    site = build_quote_site(question_rounds=0, reveal_job_id="55501")
    driver, _ = _driver()

    async def run():
        await driver.advance(site.page)
        await driver.fill_contact(site.page, _CONTACT)
        await driver.enter_otp(site.page, "123456")
        return await driver.extract_result(site.page)

    ref = asyncio.run(run())

    assert site["otp"].typed == ["123456"]
    assert site["verify"].clicks == 1
    assert ref is not None
    assert ref.job_id == "55501"
    assert ref.job_url == "https://hipages.com.au/jobs/55501"


def test_extract_result_miss_returns_none() -> None:
    page = FakePage(url="https://quotes.test/thanks", html="<p>Thanks</p>")
    driver, _ = _driver()
    assert asyncio.run(driver.extract_result(page)) is None
