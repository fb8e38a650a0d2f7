"""Tests for voice-note transcription (no network)."""

import base64
import logging

import pytest
import requests

from grievance_intake.config.settings import settings
from grievance_intake.whatsapp.services import transcribe
from grievance_intake.whatsapp.services.transcribe import (
    MAX_FILE_SIZE,
    audio_format,
    transcribe_audio,
)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self.ok = status_code < 400
        self._payload = payload
        self.text = text

    def json(self):
        return self._payload


@pytest.fixture
def configured(monkeypatch):
    """Configure a key and a model for transcription."""
    monkeypatch.setattr(settings.llm, "openrouter_api_key", "or-key")
    monkeypatch.setattr(settings.whatsapp, "conversation_model", "google/gemini-2.5-flash")


@pytest.fixture
def post_calls(monkeypatch):
    """Capture requests.post calls and answer with a queued response."""
    calls = []
    responses = []

    def fake_post(url, **kwargs):
        calls.append({"url": url, **kwargs})
        return responses.pop(0)

    monkeypatch.setattr(transcribe.requests, "post", fake_post)
    return calls, responses


@pytest.mark.parametrize(
    "mime_type,file_name,expected",
    [
        ("audio/ogg; codecs=opus", None, "ogg"),
        ("AUDIO/MPEG", None, "mp3"),
        ("audio/x-m4a", None, "m4a"),
        ("application/octet-stream", "note.WAV", "wav"),
        ("", "voice.flac", "flac"),
        ("application/octet-stream", "voice.txt", "ogg"),
        (None, None, "ogg"),
    ],
)
def test_audio_format(mime_type, file_name, expected):
    """Test MIME type and extension mapping."""
    assert audio_format(mime_type, file_name) == expected


@pytest.mark.asyncio
async def test_no_api_key_skips(monkeypatch, post_calls):
    """Test that no key means no request."""
    calls, _ = post_calls
    monkeypatch.setattr(settings.llm, "openrouter_api_key", "  ")

    assert await transcribe_audio(b"voice", "audio/ogg") == ""
    assert calls == []


@pytest.mark.asyncio
async def test_no_model_skips(monkeypatch, post_calls):
    """Test that no conversation model means no request."""
    calls, _ = post_calls
    monkeypatch.setattr(settings.llm, "openrouter_api_key", "or-key")
    monkeypatch.setattr(settings.whatsapp, "conversation_model", None)

    assert await transcribe_audio(b"voice", "audio/ogg") == ""
    assert calls == []


@pytest.mark.asyncio
async def test_oversized_file_rejected(configured, post_calls, caplog):
    """Test that files over 25MB are not sent."""
    calls, _ = post_calls

    with caplog.at_level(logging.WARNING):
        result = await transcribe_audio(b"\0" * (MAX_FILE_SIZE + 1), "audio/ogg")

    assert result == ""
    assert calls == []
    assert any("file too large" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_successful_transcription(configured, post_calls):
    """Test the request body and the returned transcription."""
    calls, responses = post_calls
    responses.append(
        FakeResponse(payload={"choices": [{"message": {"content": "  sadak tooti hai \n"}}]})
    )

    result = await transcribe_audio(b"OggS-voice", "audio/ogg; codecs=opus", "voice.ogg")

    assert result == "sadak tooti hai"
    call = calls[0]
    assert call["headers"]["Authorization"] == "Bearer or-key"
    body = call["json"]
    assert body["model"] == "google/gemini-2.5-flash"
    assert body["max_tokens"] == 1024
    assert body["temperature"] == 0
    text_part, audio_part = body["messages"][0]["content"]
    assert text_part["type"] == "text"
    assert audio_part["type"] == "input_audio"
    assert audio_part["input_audio"]["format"] == "ogg"
    assert base64.b64decode(audio_part["input_audio"]["data"]) == b"OggS-voice"


@pytest.mark.asyncio
async def test_api_error_returns_empty(configured, post_calls, caplog):
    """Test that an HTTP error is logged and yields an empty string."""
    _, responses = post_calls
    responses.append(FakeResponse(status_code=400, text="unsupported audio format"))

    with caplog.at_level(logging.WARNING):
        result = await transcribe_audio(b"voice", "audio/ogg")

    assert result == ""
    record = next(r for r in caplog.records if "API error" in r.getMessage())
    assert record.details == {"status": 400, "body": "unsupported audio format"}


@pytest.mark.asyncio
async def test_network_error_returns_empty(configured, monkeypatch, caplog):
    """Test that transport failures are absorbed."""

    def broken_post(url, **kwargs):
        raise requests.exceptions.ConnectionError("connection reset by peer")

    monkeypatch.setattr(transcribe.requests, "post", broken_post)

    with caplog.at_level(logging.WARNING):
        result = await transcribe_audio(b"voice", "audio/ogg")

    assert result == ""
    record = next(r for r in caplog.records if "audio failed" in r.getMessage())
    assert "connection reset by peer" in record.details["error"]


@pytest.mark.asyncio
async def test_empty_choices_returns_empty(configured, post_calls):
    """Test that a response without choices yields an empty string."""
    _, responses = post_calls
    responses.append(FakeResponse(payload={"choices": []}))

    assert await transcribe_audio(b"voice", "audio/ogg") == ""
