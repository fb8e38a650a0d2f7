"""Canned WhatsApp messages sent when no generated text is available."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MessageTemplates:
    free_form_added: str = (
        "Got it, I've added this to your complaint. "
        "You can keep sending details, photos or documents, "
        "or reply *done* when you're finished."
    )


templates = MessageTemplates()
