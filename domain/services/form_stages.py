from __future__ import annotations

import asyncio

from domain.errors import NavigationTimeoutError
from domain.models import AutomationConfig, ContactDetails, ExternalJobRef, PhotoAttachments
from domain.ports import ElementHandlePort, LoggerPort, PageHandlePort
from domain.services.photos import staged_photo_files
from domain.services.result_extraction import extract_external_job
from domain.services.selectors import DEFAULT_SELECTORS, SelectorChain, StageSelectors, find_first

# Fixed pauses in milliseconds, scaled by AutomationConfig.pause_scale.
AUTOCOMPLETE_PAUSE_MS = 1000
SETTLE_PAUSE_MS = 500
QUESTION_CLICK_PAUSE_MS = 300
QUESTION_ADVANCE_PAUSE_MS = 1000
POST_ADVANCE_PAUSE_MS = 2000
UPLOAD_PAUSE_MS = 2000
CONTACT_SUBMIT_PAUSE_MS = 3000
OTP_VERIFY_PAUSE_MS = 3000


class FormStageDriver:
    """
    Performs each stage of the quote form against a live page.

    Every stage is best-effort: an element that cannot be found is
    skipped, never treated as an error. Interaction failures raised by
    the page propagate to the caller.
    """

    def __init__(
        self,
        *,
        config: AutomationConfig,
        logger: LoggerPort,
        selectors: StageSelectors = DEFAULT_SELECTORS,
    ) -> None:
        self._config = config
        self._logger = logger
        self._selectors = selectors

    async def fill_category(self, page: PageHandlePort, category_name: str) -> bool:
        return await self._fill_autocomplete(page, self._selectors.category_input, category_name, "category")

    async def fill_location(self, page: PageHandlePort, postcode: str) -> bool:
        return await self._fill_autocomplete(page, self._selectors.location_input, postcode, "location")

    async def advance(self, page: PageHandlePort) -> bool:
        control = await self._locate(page, self._selectors.advance_control, "advance")
        if control is None:
            return False
        await control.click()
        try:
            await page.wait_for_settle(self._config.advance_timeout_ms)
        except NavigationTimeoutError:
            self._logger.warning("advance_navigation_timeout", timeout_ms=self._config.advance_timeout_ms)
        await self._pause(POST_ADVANCE_PAUSE_MS)
        return True

    async def answer_questions(self, page: PageHandlePort) -> int:
        """
        Click through the category-specific questions.

        Each round picks the first unselected choice and presses "next".
        Stops when a free-text area shows up, when no "next" control is
        left, or after ``max_question_rounds``. Returns the rounds advanced.
        """
        rounds = 0
        for _ in range(self._config.max_question_rounds):
            if await find_first(page, self._selectors.description_field) is not None:
                break
            choice = await find_first(page, self._selectors.choice_control)
            if choice is not None:
                await choice.click()
                await self._pause(QUESTION_CLICK_PAUSE_MS)
            next_control = await find_first(page, self._selectors.next_control)
            if next_control is None:
                break
            await next_control.click()
            rounds += 1
            await self._pause(QUESTION_ADVANCE_PAUSE_MS)
        self._logger.info("questions_answered", rounds=rounds)
        return rounds

    async def fill_description(self, page: PageHandlePort, description: str) -> bool:
        field = await self._locate(page, self._selectors.description_field, "description")
        if field is not None:
            await field.type_text(description, delay_ms=self._typing_delay(20))
        await self._pause(SETTLE_PAUSE_MS)
        return field is not None

    async def upload_photos(self, page: PageHandlePort, photos: PhotoAttachments) -> int:
        """Upload every embedded photo through the first file input. Returns the file count."""
        file_input = await self._locate(page, self._selectors.file_input, "file_input")
        if file_input is None:
            return 0
        with staged_photo_files(photos, logger=self._logger) as paths:
            if not paths:
                return 0
            await file_input.upload_files(paths)
            await self._pause(UPLOAD_PAUSE_MS)
            return len(paths)

    async def fill_contact(self, page: PageHandlePort, contact: ContactDetails) -> bool:
        for chain, value, stage in (
            (self._selectors.name_field, contact.name, "name"),
            (self._selectors.email_field, contact.email, "email"),
            (self._selectors.phone_field, contact.phone, "phone"),
        ):
            field = await self._locate(page, chain, stage)
            if field is not None:
                await field.type_text(value, delay_ms=self._typing_delay(30))
        await self._pause(SETTLE_PAUSE_MS)

        submit = await self._locate(page, self._selectors.submit_control, "submit")
        if submit is not None:
            await submit.click()
        await self._pause(CONTACT_SUBMIT_PAUSE_MS)
        return submit is not None

    async def enter_otp(self, page: PageHandlePort, code: str) -> None:
        otp_input = await self._locate(page, self._selectors.otp_input, "otp_input")
        if otp_input is not None:
            await otp_input.type_text(code, delay_ms=self._typing_delay(100))
        verify = await self._locate(page, self._selectors.verify_control, "verify")
        if verify is not None:
            await verify.click()
        await self._pause(OTP_VERIFY_PAUSE_MS)

    async def extract_result(self, page: PageHandlePort) -> ExternalJobRef | None:
        html = await page.content()
        return extract_external_job(page.current_url(), html, self._config.job_url_template)

    # -- internal helpers ---------------------------------------------------

    async def _fill_autocomplete(
        self,
        page: PageHandlePort,
        chain: SelectorChain,
        text: str,
        stage: str,
    ) -> bool:
        field = await self._locate(page, chain, stage)
        if field is not None:
            await field.type_text(text, delay_ms=self._typing_delay(self._config.typing_delay_ms))
            await self._pause(AUTOCOMPLETE_PAUSE_MS)
            suggestion = await find_first(page, self._selectors.suggestion)
            if suggestion is not None:
                await suggestion.click()
            else:
                await page.press_key("Enter")
        await self._pause(SETTLE_PAUSE_MS)
        return field is not None

    async def _locate(
        self,
        page: PageHandlePort,
        chain: SelectorChain,
        stage: str,
    ) -> ElementHandlePort | None:
        element = await find_first(page, chain)
        if element is None:
            self._logger.info("element_not_found", stage=stage)
        return element

    def _typing_delay(self, default_ms: int) -> int:
        return int(default_ms * self._config.pause_scale)

    async def _pause(self, duration_ms: int) -> None:
        seconds = duration_ms * self._config.pause_scale / 1000
        if seconds > 0:
            await asyncio.sleep(seconds)
