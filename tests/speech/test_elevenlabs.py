"""Tests for the ElevenLabs passthrough client."""

import json

import httpx
import pytest

from gitgud.core.errors import SpeechError
from gitgud.speech.elevenlabs import ElevenLabsClient, sanitize_text


def test_sanitize_text_masks_urls_and_emails():
    text = "See https://example.com/x?y=1 or mail me@example.org now"
    assert sanitize_text(text) == "See [URL] or mail [EMAIL] now"


def test_sanitize_text_leaves_plain_text():
    assert sanitize_text("just a roast") == "just a roast"


@pytest.mark.asyncio
async def test_text_to_speech_returns_audio():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, content=b"ID3audio", headers={"Content-Type": "audio/mpeg"})

    client = ElevenLabsClient("xi-key", transport=httpx.MockTransport(handler))
    audio = await client.text_to_speech("hello", "voice-1")

    assert audio == b"ID3audio"
    request = seen[0]
    assert request.url.path == "/v1/text-to-speech/voice-1"
    assert request.headers["xi-api-key"] == "xi-key"
    body = json.loads(request.content)
    assert body["model_id"] == "eleven_multilingual_v2"
    assert body["voice_settings"] == {"stability": 0.5, "similarity_boost": 0.75}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, message",
    [(401, "ElevenLabs API key invalid"), (429, "ElevenLabs rate limit exceeded"), (500, "ElevenLabs API error: 500 oops")],
)
async def test_error_statuses(status, message):
    client = ElevenLabsClient(
        "xi-key", transport=httpx.MockTransport(lambda r: httpx.Response(status, text="oops"))
    )
    with pytest.raises(SpeechError, match=message):
        await client.text_to_speech("hello", "voice-1")
