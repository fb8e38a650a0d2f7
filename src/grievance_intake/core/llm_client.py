"""
Async LLM call wrapper: one entrypoint for every feature that talks to a model.
Blocking provider SDKs run in a worker thread so callers can race them against timers.
"""

import asyncio
from typing import Literal, Optional

from pydantic import BaseModel, Field

from grievance_intake.config.settings import settings
from grievance_intake.llm.generate import generate_with_llm


class LLMCallOptions(BaseModel):
    model: str = Field(..., min_length=1)
    max_tokens: int = Field(default=512, ge=1)
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    response_format: Literal["text", "json"] = "text"
    # None means the configured LLM_PROVIDER
    provider: Optional[str] = None
    # Seconds; None means LLM_REQUEST_TIMEOUT. Bounds how long a worker thread is held.
    request_timeout: Optional[float] = Field(default=None, gt=0)


async def call_llm(prompt: str, system_prompt: str, options: LLMCallOptions) -> str:
    """Run a single completion and return the model text.

    Raises whatever the provider layer raises (ValueError for configuration
    problems, RuntimeError for transport or response failures).
    """
    provider = options.provider or settings.llm.provider
    api_key = settings.llm.api_key_for(provider)
    return await asyncio.to_thread(
        generate_with_llm,
        prompt,
        provider=provider,
        api_key=api_key or None,
        system_prompt=system_prompt,
        model=options.model,
        temperature=options.temperature,
        max_tokens=options.max_tokens,
        response_format=options.response_format,
        timeout=options.request_timeout,
    )
