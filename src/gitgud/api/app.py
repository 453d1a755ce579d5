"""FastAPI backend for GitGud: roast and text-to-speech endpoints."""

from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from gitgud import __version__
from gitgud.config.settings import Settings
from gitgud.core.cache import GenerationCache, SignalCache
from gitgud.core.errors import GitGudError, ValidationError
from gitgud.core.logging import get_logger, level_from_name, setup_logging
from gitgud.core.metrics import Metrics
from gitgud.core.middleware import ObservabilityMiddleware, RateLimitMiddleware
from gitgud.core.rate_limiter import RateLimiter
from gitgud.core.schemas import ErrorBody, ErrorResponse, RoastRequest, RoastResponse, TTSRequest
from gitgud.llm.generate import RoastGenerator
from gitgud.orchestrator import RoastOrchestrator
from gitgud.sources.github import GitHubClient
from gitgud.speech.elevenlabs import ElevenLabsClient, sanitize_text

logger = get_logger(__name__)

SERVICE_NAME = "gitgud-backend"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error(status_code: int, code: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=ErrorBody(code=code, message=message))
    return JSONResponse(body.model_dump(), status_code=status_code)


def create_app(
    settings: Optional[Settings] = None,
    *,
    github_client: Optional[GitHubClient] = None,
    generator: Optional[RoastGenerator] = None,
    speech_client: Optional[ElevenLabsClient] = None,
    rate_limiter: Optional[RateLimiter] = None,
    signal_cache: Optional[SignalCache] = None,
    generation_cache: Optional[GenerationCache] = None,
) -> FastAPI:
    """Build the application with one set of caches and one limiter per app."""
    settings = settings or Settings()
    setup_logging(level_from_name(settings.log_level))
    metrics = Metrics()

    github_client = github_client or GitHubClient(token=settings.github_token or None)
    generator = generator or RoastGenerator(
        api_key=settings.openai_api_key, model=settings.openai_model
    )
    speech_client = speech_client or ElevenLabsClient(settings.elevenlabs_api_key)
    rate_limiter = rate_limiter or RateLimiter(
        max_requests=settings.rate_limit.max_requests,
        window_seconds=settings.rate_limit.window_seconds,
        max_clients=settings.rate_limit.max_clients,
    )
    signal_cache = signal_cache or SignalCache(
        ttl_seconds=settings.cache.signal_ttl_seconds,
        capacity=settings.cache.signal_capacity,
    )
    generation_cache = generation_cache or GenerationCache(
        ttl_seconds=settings.cache.generation_ttl_seconds,
        capacity=settings.cache.generation_capacity,
    )
    orchestrator = RoastOrchestrator(
        fetch_signals=github_client.get_signals,
        generate=generator.generate_roast,
        signal_cache=signal_cache,
        generation_cache=generation_cache,
        metrics=metrics,
    )

    app = FastAPI(title="GitGud Backend API", version=__version__)
    app.state.settings = settings
    app.state.metrics = metrics
    app.state.rate_limiter = rate_limiter
    app.state.orchestrator = orchestrator
    app.state.speech_client = speech_client

    # Added innermost first: rate limiting runs inside observability and CORS.
    app.add_middleware(
        RateLimitMiddleware,
        limiter=rate_limiter,
        metrics=metrics,
        trusted_proxies=settings.trusted_proxies,
    )
    app.add_middleware(ObservabilityMiddleware, metrics=metrics)
    if not settings.allowed_origins and settings.environment == "production":
        logger.warning("CORS is allowing all origins in production. Set ALLOWED_ORIGINS.")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-RateLimit-Remaining", "X-RateLimit-Reset", "X-Request-ID"],
    )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        messages = [err.get("msg", "invalid value") for err in exc.errors()]
        logger.warning(
            "Invalid request", extra={"path": request.url.path, "errors": messages}
        )
        error = ValidationError(f"Validation error: {', '.join(messages)}")
        return JSONResponse(error.to_response().model_dump(), status_code=error.status_code)

    @app.exception_handler(GitGudError)
    async def _gitgud_error(request: Request, exc: GitGudError) -> JSONResponse:
        return JSONResponse(exc.to_response().model_dump(), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unexpected error", exc_info=exc, extra={"path": request.url.path})
        return _error(500, "INTERNAL_ERROR", str(exc) or "Internal server error")

    @app.get("/")
    async def info() -> dict:
        """API information."""
        return {
            "name": "GitGud Backend API",
            "version": __version__,
            "description": "Backend API for GitGud Chrome extension",
            "endpoints": {
                "GET /": "API information (this endpoint)",
                "GET /health": "Health check endpoint",
                "GET /metrics": "In-memory request and cache metrics",
                "POST /roast": "Generate roast, advice, and personality profile for a GitHub user",
                "POST /tts": "Convert text to speech using ElevenLabs",
            },
            "timestamp": _now_iso(),
        }

    @app.get("/health")
    async def health() -> dict:
        """Health check endpoint."""
        return {"status": "ok", "service": SERVICE_NAME, "timestamp": _now_iso()}

    @app.get("/metrics")
    async def get_metrics(request: Request) -> dict:
        return request.app.state.metrics.snapshot()

    @app.post("/roast", response_model=RoastResponse)
    async def roast(body: RoastRequest, request: Request) -> RoastResponse:
        logger.info(
            "Roast request received",
            extra={
                "username": body.username,
                "intensity": body.intensity.value,
                "request_id": getattr(request.state, "request_id", None),
            },
        )
        return await request.app.state.orchestrator.handle_roast(body)

    @app.post("/tts")
    async def tts(body: TTSRequest, request: Request) -> Response:
        text = sanitize_text(body.text)
        logger.info(
            "TTS request received",
            extra={"text_length": len(text), "voice_id": body.voice_id, "model_id": body.model_id},
        )
        audio = await request.app.state.speech_client.text_to_speech(
            text, body.voice_id, body.model_id
        )
        logger.info("TTS generation completed", extra={"audio_size": len(audio)})
        return Response(content=audio, media_type="audio/mpeg")

    return app
