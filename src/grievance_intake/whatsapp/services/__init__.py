"""Reply and media services used by the WhatsApp conversation flow."""

from .conversational_reply import ConversationalReplyGenerator, get_conversational_reply
from .transcribe import transcribe_audio

__all__ = ["ConversationalReplyGenerator", "get_conversational_reply", "transcribe_audio"]
