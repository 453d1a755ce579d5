"""
Error taxonomy shared by the orchestrator and the HTTP layer.
Why: collaborator failures stay distinctly tagged; the HTTP layer owns status codes.
"""

from typing import Any, Dict, Optional

from gitgud.core.schemas import ErrorBody, ErrorResponse


class GitGudError(Exception):
    """Base exception carrying a wire error code."""

    code = "INTERNAL_ERROR"
    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=ErrorBody(code=self.code, message=self.message))


class ValidationError(GitGudError):
    code = "BAD_REQUEST"
    kind = "validation_error"
    status_code = 400


class SignalSourceError(GitGudError):
    """Fetching profile signals from GitHub failed."""

    code = "GITHUB_ERROR"
    kind = "signal_source_error"


class GenerationError(GitGudError):
    """Generation failed or returned structurally invalid output."""

    code = "OPENAI_ERROR"
    kind = "generation_error"


class SpeechError(GitGudError):
    kind = "speech_error"


class RateLimitExceeded(GitGudError):
    code = "RATE_LIMIT"
    kind = "rate_limit_exceeded"
    status_code = 429

    def __init__(self, reset_at: float, message: Optional[str] = None):
        self.reset_at = reset_at
        super().__init__(
            message or "Rate limit exceeded. Try again later.",
            {"reset_at": reset_at},
        )
