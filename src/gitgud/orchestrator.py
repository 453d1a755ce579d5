"""Orchestrator: single entry point for roast requests.

Signals come from the signal cache or GitHub, the roast from the generation
cache or OpenAI; both caches are written only after the upstream call
succeeds, so failures are never cached.
"""

import time
import uuid
from typing import Awaitable, Callable

from gitgud.core.cache import GenerationCache, SignalCache
from gitgud.core.errors import GenerationError, SignalSourceError
from gitgud.core.logging import get_logger
from gitgud.core.metrics import Metrics
from gitgud.core.schemas import (
    Intensity,
    RoastRequest,
    RoastResponse,
    RoastResult,
    Signals,
)

logger = get_logger(__name__)

FetchSignals = Callable[[str, int, bool], Awaitable[Signals]]
Generate = Callable[[Signals, Intensity], Awaitable[RoastResult]]


class RoastOrchestrator:
    def __init__(
        self,
        fetch_signals: FetchSignals,
        generate: Generate,
        signal_cache: SignalCache,
        generation_cache: GenerationCache,
        metrics: Metrics,
    ) -> None:
        self.fetch_signals = fetch_signals
        self.generate = generate
        self.signal_cache = signal_cache
        self.generation_cache = generation_cache
        self.metrics = metrics

    async def handle_roast(self, request: RoastRequest) -> RoastResponse:
        """Compose signals and roast for ``request`` with as few upstream calls as possible.

        Raises:
            SignalSourceError: GitHub signals could not be fetched.
            GenerationError: the roast could not be generated.
        """
        request_id = str(uuid.uuid4())
        start = time.perf_counter()
        log_ctx = {
            "request_id": request_id,
            "username": request.username,
            "intensity": request.intensity.value,
        }

        signals = await self._get_signals(request, log_ctx)
        result = await self._get_result(request, signals, log_ctx)

        logger.info(
            "Roast request completed",
            extra={**log_ctx, "total_ms": int((time.perf_counter() - start) * 1000)},
        )
        return RoastResponse(
            request_id=request_id,
            username=request.username,
            signals=signals,
            result=result,
        )

    async def _get_signals(self, request: RoastRequest, log_ctx: dict) -> Signals:
        signals = self.signal_cache.get(
            request.username, request.max_repos, request.include_readme
        )
        self.metrics.record_cache("signals", hit=signals is not None)
        if signals is not None:
            logger.info("GitHub data served from cache", extra=log_ctx)
            return signals

        start = time.perf_counter()
        try:
            signals = await self.fetch_signals(
                request.username, request.max_repos, request.include_readme
            )
        except SignalSourceError as e:
            logger.error("GitHub API error", extra={**log_ctx, "error": e.message})
            raise
        except Exception as e:
            logger.error("GitHub API error", extra={**log_ctx, "error": str(e)})
            raise SignalSourceError(str(e) or "Unknown GitHub error") from e

        self.signal_cache.set(
            request.username, request.max_repos, request.include_readme, signals
        )
        logger.info(
            "GitHub data fetched",
            extra={**log_ctx, "duration_ms": int((time.perf_counter() - start) * 1000)},
        )
        return signals

    async def _get_result(
        self, request: RoastRequest, signals: Signals, log_ctx: dict
    ) -> RoastResult:
        result = self.generation_cache.get(request.username, request.intensity)
        self.metrics.record_cache("generation", hit=result is not None)
        if result is not None:
            logger.info("OpenAI result served from cache", extra=log_ctx)
            return result

        start = time.perf_counter()
        try:
            result = await self.generate(signals, request.intensity)
        except GenerationError as e:
            logger.error("OpenAI API error", extra={**log_ctx, "error": e.message})
            raise
        except Exception as e:
            logger.error("OpenAI API error", extra={**log_ctx, "error": str(e)})
            raise GenerationError(str(e) or "Unknown OpenAI error") from e

        self.generation_cache.set(request.username, request.intensity, result)
        logger.info(
            "OpenAI response generated",
            extra={**log_ctx, "duration_ms": int((time.perf_counter() - start) * 1000)},
        )
        return result
