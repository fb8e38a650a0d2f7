"""WhatsApp grievance intake: session types, templates and reply services."""

from .templates import templates
from .types import SessionData, WhatsAppSession

__all__ = ["SessionData", "WhatsAppSession", "templates"]
