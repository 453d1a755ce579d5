"""
ElevenLabs text-to-speech passthrough.
"""

import re
from typing import Optional

import httpx

from gitgud.core.errors import SpeechError
from gitgud.core.logging import get_logger

logger = get_logger(__name__)

ELEVENLABS_API_URL = "https://api.elevenlabs.io/v1"
DEFAULT_MODEL_ID = "eleven_multilingual_v2"

_URL_RE = re.compile(r"https?://[^\s]+")
_EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")


def sanitize_text(text: str) -> str:
    """Mask URLs and e-mail addresses so the voice does not read them out."""
    return _EMAIL_RE.sub("[EMAIL]", _URL_RE.sub("[URL]", text))


class ElevenLabsClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = ELEVENLABS_API_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def text_to_speech(
        self, text: str, voice_id: str, model_id: str = DEFAULT_MODEL_ID
    ) -> bytes:
        """Synthesize ``text`` and return MPEG audio bytes."""
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.base_url}/text-to-speech/{voice_id}",
                    headers={
                        "Accept": "audio/mpeg",
                        "xi-api-key": self.api_key,
                    },
                    json={
                        "text": text,
                        "model_id": model_id,
                        "voice_settings": {
                            "stability": 0.5,
                            "similarity_boost": 0.75,
                        },
                    },
                )
        except httpx.RequestError as e:
            logger.error("ElevenLabs request failed", extra={"error": str(e)})
            raise SpeechError(f"ElevenLabs request failed: {e}") from e

        if response.status_code == 401:
            raise SpeechError("ElevenLabs API key invalid")
        if response.status_code == 429:
            raise SpeechError("ElevenLabs rate limit exceeded")
        if response.status_code != 200:
            raise SpeechError(
                f"ElevenLabs API error: {response.status_code} {response.text}"
            )
        return response.content
