"""WhatsApp grievance intake helpers: LLM-backed conversational replies."""

__version__ = "0.1.0"
