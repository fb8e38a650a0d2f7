"""Blocking LLM completion functions, one per supported provider."""

from typing import Optional

import requests

from grievance_intake.config.settings import settings
from grievance_intake.core.logging import get_logger

logger = get_logger(__name__)

OPENROUTER_API_URL = "https://openrouter.ai/api/v1/chat/completions"
OPENROUTER_APP_TITLE = "Grievance Aid System"

PROVIDERS = ("openrouter", "openai", "anthropic", "gemini", "ollama")


def generate_with_llm(
    prompt: str,
    provider: str = "openrouter",
    api_key: Optional[str] = None,
    system_prompt: Optional[str] = None,
    model: Optional[str] = None,
    temperature: float = 0.1,
    max_tokens: int = 512,
    response_format: str = "text",
    timeout: Optional[float] = None,
) -> str:
    """Generate text using specified LLM provider.

    Args:
        prompt: User prompt
        provider: 'openrouter', 'openai', 'anthropic', 'gemini' or 'ollama'
        api_key: API key for cloud providers (required for non-Ollama)
        system_prompt: System instruction
        model: Provider model identifier; each provider has a default
        temperature: Sampling temperature
        max_tokens: Max response length
        response_format: 'text' or 'json'
        timeout: Per-request timeout in seconds; defaults to LLM_REQUEST_TIMEOUT

    Returns:
        Generated text response, stripped of surrounding whitespace
    """
    provider = provider.lower().strip()
    json_mode = response_format == "json"
    timeout = timeout or settings.llm.request_timeout
    logger.debug(f"LLM request: provider={provider} model={model} format={response_format}")

    if provider == "openrouter":
        return _generate_openrouter(
            prompt,
            api_key,
            system_prompt,
            model,
            temperature,
            max_tokens,
            json_mode,
            timeout,
        )
    elif provider == "openai":
        return _generate_openai(
            prompt,
            api_key,
            system_prompt,
            model,
            temperature,
            max_tokens,
            json_mode,
            timeout,
        )
    elif provider == "anthropic":
        return _generate_anthropic(
            prompt, api_key, system_prompt, model, temperature, max_tokens, timeout
        )
    elif provider == "gemini":
        return _generate_gemini(
            prompt,
            api_key,
            system_prompt,
            model,
            temperature,
            max_tokens,
            json_mode,
            timeout,
        )
    elif provider == "ollama":
        return _generate_ollama(
            prompt, system_prompt, model, temperature, max_tokens, json_mode, timeout
        )
    else:
        raise ValueError(f"Unknown provider: {provider}")


def _chat_messages(prompt: str, system_prompt: Optional[str]) -> list:
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})
    return messages


def _generate_openrouter(
    prompt: str,
    api_key: Optional[str],
    system_prompt: Optional[str],
    model: Optional[str],
    temperature: float,
    max_tokens: int,
    json_mode: bool,
    timeout: float,
) -> str:
    """Generate using the OpenRouter chat completions API."""
    if not api_key:
        raise ValueError("OPENROUTER_API_KEY required")

    payload = {
        "model": model or "google/gemini-2.5-flash",
        "messages": _chat_messages(prompt, system_prompt),
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if json_mode:
        payload["response_format"] = {"type": "json_object"}

    try:
        response = requests.post(
            OPENROUTER_API_URL,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "HTTP-Referer": settings.whatsapp.frontend_url,
                "X-Title": OPENROUTER_APP_TITLE,
            },
            json=payload,
            timeout=timeout,
        )
    except requests.exceptions.RequestException as e:
        raise RuntimeError(f"OpenRouter request failed: {e}") from e

    if response.status_code >= 400:
        raise RuntimeError(
            f"OpenRouter HTTP {response.status_code}: {response.text[:300]}"
        )

    try:
        content = response.json()["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise RuntimeError("OpenRouter returned an unexpected response") from e
    return (content or "").strip()


def _generate_openai(
    prompt: str,
    api_key: Optional[str],
    system_prompt: Optional[str],
    model: Optional[str],
    temperature: float,
    max_tokens: int,
    json_mode: bool,
    timeout: float,
) -> str:
    """Generate using OpenAI GPT."""
    if not api_key:
        raise ValueError("OPENAI_API_KEY required")

    import openai

    client = openai.OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
    kwargs = {}
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    try:
        response = client.chat.completions.create(
            model=model or "gpt-4o-mini",
            messages=_chat_messages(prompt, system_prompt),
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )
    except openai.OpenAIError as e:
        raise RuntimeError(f"OpenAI request failed: {e}") from e
    return (response.choices[0].message.content or "").strip()


def _generate_anthropic(
    prompt: str,
    api_key: Optional[str],
    system_prompt: Optional[str],
    model: Optional[str],
    temperature: float,
    max_tokens: int,
    timeout: float,
) -> str:
    """Generate using Anthropic Claude."""
    if not api_key:
        raise ValueError("ANTHROPIC_API_KEY required")

    import anthropic

    client = anthropic.Anthropic(api_key=api_key, timeout=timeout, max_retries=0)
    try:
        response = client.messages.create(
            model=model or "claude-3-5-haiku-20241022",
            max_tokens=max_tokens,
            temperature=temperature,
            system=system_prompt or "",
            messages=[{"role": "user", "content": prompt}],
        )
    except anthropic.AnthropicError as e:
        raise RuntimeError(f"Anthropic request failed: {e}") from e
    if not response.content:
        return ""
    return response.content[0].text.strip()


def _generate_gemini(
    prompt: str,
    api_key: Optional[str],
    system_prompt: Optional[str],
    model: Optional[str],
    temperature: float,
    max_tokens: int,
    json_mode: bool,
    timeout: float,
) -> str:
    """Generate using Google Gemini."""
    if not api_key:
        raise ValueError("GEMINI_API_KEY required")

    import google.generativeai as genai
    from google.api_core import exceptions as google_exceptions

    genai.configure(api_key=api_key)
    gemini = genai.GenerativeModel(
        model or "gemini-1.5-flash", system_instruction=system_prompt or None
    )

    generation_config = {
        "temperature": temperature,
        "max_output_tokens": max_tokens,
    }
    if json_mode:
        generation_config["response_mime_type"] = "application/json"

    try:
        response = gemini.generate_content(
            prompt,
            generation_config=generation_config,
            request_options={"timeout": timeout},
        )
        # .text raises ValueError when the candidate was blocked or empty
        return response.text.strip()
    except google_exceptions.GoogleAPIError as e:
        raise RuntimeError(f"Gemini request failed: {e}") from e
    except ValueError as e:
        raise RuntimeError(f"Gemini returned no text: {e}") from e


def _generate_ollama(
    prompt: str,
    system_prompt: Optional[str],
    model: Optional[str],
    temperature: float,
    max_tokens: int,
    json_mode: bool,
    timeout: float,
) -> str:
    """Generate using local Ollama."""
    payload = {
        "model": model or "llama3.2:1b",
        "prompt": prompt,
        "system": system_prompt or "",
        "stream": False,
        "options": {"temperature": temperature, "num_predict": max_tokens},
    }
    if json_mode:
        payload["format"] = "json"

    try:
        response = requests.post(
            f"{settings.llm.ollama_url}/api/generate",
            json=payload,
            timeout=timeout,
        )
        response.raise_for_status()
    except requests.exceptions.ConnectionError as e:
        raise RuntimeError("Ollama not running. Start with: ollama serve") from e
    except requests.exceptions.RequestException as e:
        raise RuntimeError(f"Ollama request failed: {e}") from e

    try:
        return response.json()["response"].strip()
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise RuntimeError("Ollama returned an unexpected response") from e
