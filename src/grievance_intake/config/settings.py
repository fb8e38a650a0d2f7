"""Configuration settings for the grievance intake service."""
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _optional_env(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


@dataclass
class WhatsAppSettings:
    # Model used for conversational replies and voice-note transcription
    conversation_model: Optional[str] = field(
        default_factory=lambda: _optional_env("WHATSAPP_CONVERSATION_MODEL")
    )
    frontend_url: str = field(
        default_factory=lambda: os.getenv("FRONTEND_URL", "http://localhost:8080")
    )


@dataclass
class LLMSettings:
    provider: str = field(default_factory=lambda: os.getenv("LLM_PROVIDER", "openrouter"))
    request_timeout: int = field(
        default_factory=lambda: int(os.getenv("LLM_REQUEST_TIMEOUT", 30))
    )
    ollama_url: str = field(
        default_factory=lambda: os.getenv("OLLAMA_URL", "http://localhost:11434")
    )

    # API Keys
    openrouter_api_key: str = field(default_factory=lambda: os.getenv("OPENROUTER_API_KEY", ""))
    openai_api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    anthropic_api_key: str = field(default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""))
    gemini_api_key: str = field(default_factory=lambda: os.getenv("GEMINI_API_KEY", ""))

    def api_key_for(self, provider: str) -> str:
        return getattr(self, f"{provider.lower().strip()}_api_key", "")


class Settings:
    whatsapp = WhatsAppSettings()
    llm = LLMSettings()


settings = Settings()
