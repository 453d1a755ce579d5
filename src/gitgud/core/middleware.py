"""
FastAPI middleware for observability (request_id + latency) and per-client
rate limiting.
"""

import time
import uuid
from datetime import datetime, timezone
from typing import Callable, Collection

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from .errors import RateLimitExceeded
from .logging import get_logger
from .metrics import Metrics
from .rate_limiter import RateLimiter

_LOG = get_logger(__name__)


def get_client_ip(request: Request, trusted_proxies: Collection[str] = ()) -> str:
    """Caller address used as the rate-limit key.

    The socket peer, unless that peer is a trusted proxy, in which case the
    first X-Forwarded-For hop (or X-Real-IP) names the caller.
    """
    peer = request.client.host if request.client else "unknown"
    if peer not in trusted_proxies:
        return peer
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip() or peer
    return request.headers.get("X-Real-IP") or peer


class ObservabilityMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, metrics: Metrics) -> None:
        super().__init__(app)
        self.metrics = metrics

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = int((time.perf_counter() - start) * 1000)
            self.metrics.increment_requests()
            self.metrics.record_latency(duration_ms)
            status = response.status_code if response is not None else 500
            if status >= 500:
                self.metrics.increment_errors()
            _LOG.info(
                "request completed",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "status": status,
                    "duration_ms": duration_ms,
                    "request_id": request_id,
                },
            )
            if response is not None:
                response.headers["X-Request-ID"] = request_id


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Admits each request through the limiter before any route runs."""

    def __init__(
        self,
        app: ASGIApp,
        limiter: RateLimiter,
        metrics: Metrics,
        trusted_proxies: Collection[str] = (),
    ) -> None:
        super().__init__(app)
        self.limiter = limiter
        self.metrics = metrics
        self.trusted_proxies = frozenset(trusted_proxies)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        result = self.limiter.check(get_client_ip(request, self.trusted_proxies))

        if not result.allowed:
            self.metrics.increment_rate_limited()
            reset_iso = datetime.fromtimestamp(result.reset_at, tz=timezone.utc)
            error = RateLimitExceeded(
                result.reset_at,
                f"Rate limit exceeded. Try again after {reset_iso.isoformat()}",
            )
            return JSONResponse(
                error.to_response().model_dump(),
                status_code=error.status_code,
                headers={
                    "Retry-After": str(result.retry_after_seconds(self.limiter.now())),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(int(result.reset_at)),
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Remaining"] = str(result.remaining)
        response.headers["X-RateLimit-Reset"] = str(int(result.reset_at))
        return response
