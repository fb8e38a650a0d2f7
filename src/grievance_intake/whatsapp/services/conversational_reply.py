"""
Conversational reply for the free-form collection step.

Session context + LLM under a short timeout; any timeout or error falls back
to templates.free_form_added so the user always gets a fast acknowledgement.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from grievance_intake.config.settings import settings
from grievance_intake.core.llm_client import LLMCallOptions, call_llm
from grievance_intake.core.logging import get_logger
from grievance_intake.whatsapp.templates import templates
from grievance_intake.whatsapp.types import WhatsAppSession

logger = get_logger(__name__)

CONVERSATION_TIMEOUT_MS = 4500
BUFFER_PREVIEW_LEN = 800

SYSTEM_PROMPT = (
    "You are a friendly complaint intake assistant for Uttar Pradesh government "
    "grievances. The user is describing their issue in their own words. Reply in "
    "1-2 short sentences: acknowledge what they said and encourage them to add more "
    'details or reply "done" when finished. Be warm and concise. Do not extract or '
    "repeat structured data; just acknowledge. Reply in the same language as the "
    "user if possible, otherwise English."
)

LLMCall = Callable[[str, str, LLMCallOptions], Awaitable[Optional[str]]]


class ConversationalReplyTimeout(Exception):
    """The model did not answer within the reply budget."""


def build_session_context(session: WhatsAppSession, current_message: str) -> str:
    """Compose the user prompt from the session so far and the latest message."""
    parts = [
        "Context: User is filing a grievance (Option A - describe in one go).",
        "Current step: collecting free-form description.",
    ]

    buffered = (session.free_form_text_buffer or "").strip()
    if buffered:
        if len(buffered) <= BUFFER_PREVIEW_LEN:
            preview = buffered
        else:
            preview = buffered[:BUFFER_PREVIEW_LEN] + "..."
        parts.append(f"So far they wrote:\n{preview}")

    image_count, document_count = session.attachment_counts
    if image_count + document_count > 0:
        parts.append(
            f"Attachments: {image_count} image(s), {document_count} document(s)."
        )

    parts.append(f"\nLatest message from user:\n{current_message}")
    return "\n".join(parts)


def _discard_outcome(task: "asyncio.Future[Optional[str]]") -> None:
    # Abandoned calls still finish in the background; consume the result.
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.debug(f"Abandoned conversational reply call failed late: {error}")


class ConversationalReplyGenerator:
    """Short acknowledgement replies for the free-form grievance step.

    get_reply() never raises: a missing model, a slow model, a failing model
    and an empty answer all resolve to the fallback template.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        llm: LLMCall = call_llm,
        fallback: str = templates.free_form_added,
        timeout_ms: int = CONVERSATION_TIMEOUT_MS,
    ) -> None:
        self.model = model
        self.llm = llm
        self.fallback = fallback
        self.timeout_ms = timeout_ms

    def _options(self) -> LLMCallOptions:
        return LLMCallOptions(
            model=self.model,
            max_tokens=150,
            temperature=0.4,
            response_format="text",
            request_timeout=self.timeout_ms / 1000,
        )

    async def _race(self, prompt: str) -> Optional[str]:
        task = asyncio.ensure_future(self.llm(prompt, SYSTEM_PROMPT, self._options()))
        try:
            done, _ = await asyncio.wait({task}, timeout=self.timeout_ms / 1000)
        finally:
            # Timed out or caller cancelled: the request keeps running, result dropped.
            if not task.done():
                task.add_done_callback(_discard_outcome)
        if task not in done:
            raise ConversationalReplyTimeout("Conversational reply timeout")
        if task.cancelled():
            raise RuntimeError("Conversational reply call was cancelled")
        return task.result()

    async def get_reply(self, session: WhatsAppSession, current_message: str) -> str:
        if not self.model:
            logger.warning("WHATSAPP_CONVERSATION_MODEL not set, using fallback message")
            return self.fallback

        try:
            prompt = build_session_context(session, current_message or "")
            reply = await self._race(prompt)
            trimmed = (reply or "").strip()
        except Exception as e:
            logger.warning(
                "Conversational reply failed, using fallback",
                extra={"details": {"error": str(e)}},
            )
            return self.fallback

        return trimmed if trimmed else self.fallback


async def get_conversational_reply(
    session: WhatsAppSession, current_message: str
) -> str:
    """Reply for the free-form step using the configured conversation model."""
    generator = ConversationalReplyGenerator(
        model=settings.whatsapp.conversation_model
    )
    return await generator.get_reply(session, current_message)
