from __future__ import annotations

import asyncio

from domain.models import FreeTextQuestionResponse


class ConsoleUserInteraction:
    """Simple stdin/stdout implementation of UserInteractionPort."""

    async def send_info(self, message: str) -> None:
        print(message)

    async def ask_free_text(
        self,
        question_id: str,
        prompt: str,
    ) -> FreeTextQuestionResponse:
        text = await asyncio.to_thread(input, f"{prompt}\n> ")
        return FreeTextQuestionResponse(question_id=question_id, text=text.strip())
