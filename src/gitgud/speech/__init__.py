"""Text-to-speech passthrough."""

from .elevenlabs import ElevenLabsClient, sanitize_text

__all__ = ["ElevenLabsClient", "sanitize_text"]
