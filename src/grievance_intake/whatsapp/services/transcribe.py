"""
Audio transcription for WhatsApp voice notes.

Uses OpenRouter's input_audio chat completions so the same key covers both
chat and transcription. Audio is sent base64-encoded; OpenRouter does not
accept audio URLs.
"""

import asyncio
import base64
from typing import Optional

import requests

from grievance_intake.config.settings import settings
from grievance_intake.core.logging import get_logger
from grievance_intake.llm.generate import OPENROUTER_API_URL, OPENROUTER_APP_TITLE

logger = get_logger(__name__)

MAX_FILE_SIZE = 25 * 1024 * 1024  # 25MB

TRANSCRIBE_INSTRUCTION = (
    "Transcribe this audio to plain text. Output only the transcription, "
    "no commentary or punctuation beyond what is spoken."
)

MIME_TO_FORMAT = {
    "audio/ogg": "ogg",
    "audio/opus": "ogg",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/mp4": "m4a",
    "audio/x-m4a": "m4a",
    "audio/wav": "wav",
    "audio/wave": "wav",
    "audio/webm": "webm",
    "audio/flac": "flac",
    "audio/aiff": "aiff",
    "audio/aac": "aac",
}

_KNOWN_EXTENSIONS = set(MIME_TO_FORMAT.values())


def audio_format(mime_type: Optional[str], file_name: Optional[str] = None) -> str:
    """Map a MIME type (or, failing that, a file extension) to an OpenRouter format."""
    mime = (mime_type or "").lower().split(";")[0].strip()
    if mime in MIME_TO_FORMAT:
        return MIME_TO_FORMAT[mime]

    if file_name and "." in file_name:
        ext = file_name.rsplit(".", 1)[-1].lower()
        if ext in _KNOWN_EXTENSIONS:
            return ext

    # WhatsApp voice notes are usually ogg/opus
    return "ogg"


def _post_transcription(api_key: str, model: str, audio_b64: str, fmt: str) -> str:
    body = {
        "model": model,
        "messages": [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": TRANSCRIBE_INSTRUCTION},
                    {
                        "type": "input_audio",
                        "input_audio": {"data": audio_b64, "format": fmt},
                    },
                ],
            }
        ],
        "max_tokens": 1024,
        "temperature": 0,
    }
    response = requests.post(
        OPENROUTER_API_URL,
        headers={
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
            "HTTP-Referer": settings.whatsapp.frontend_url,
            "X-Title": OPENROUTER_APP_TITLE,
        },
        json=body,
        timeout=settings.llm.request_timeout,
    )
    if not response.ok:
        logger.warning(
            "Transcribe: OpenRouter API error",
            extra={
                "details": {
                    "status": response.status_code,
                    "body": response.text[:300],
                }
            },
        )
        return ""

    data = response.json()
    try:
        text = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return (text or "").strip()


async def transcribe_audio(
    buffer: bytes, mime_type: str, file_name: Optional[str] = None
) -> str:
    """Transcribe a voice note to text.

    Returns an empty string when transcription is not configured or fails, so
    the caller can fall back to a generic message.
    """
    api_key = settings.llm.openrouter_api_key.strip()
    if not api_key:
        logger.debug("Transcribe: OPENROUTER_API_KEY not set, skipping")
        return ""
    if len(buffer) > MAX_FILE_SIZE:
        logger.warning("Transcribe: file too large", extra={"details": {"size": len(buffer)}})
        return ""

    model = settings.whatsapp.conversation_model
    if not model:
        logger.debug("Transcribe: WHATSAPP_CONVERSATION_MODEL not set, skipping")
        return ""

    fmt = audio_format(mime_type, file_name)
    audio_b64 = base64.b64encode(buffer).decode("ascii")

    try:
        return await asyncio.to_thread(_post_transcription, api_key, model, audio_b64, fmt)
    except Exception as e:
        logger.warning(
            "Transcribe: OpenRouter audio failed", extra={"details": {"error": str(e)}}
        )
        return ""
