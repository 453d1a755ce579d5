"""
In-memory metrics for /metrics endpoint (rough p50/p95).
Why: quick visibility without Prometheus.
"""

from collections import deque
from typing import Deque, Dict, List

MAX_LATENCY_SAMPLES = 1000


def _percentile(values: List[int], p: float) -> int:
    if not values:
        return 0
    idx = max(0, min(len(values) - 1, int(len(values) * p)))
    return sorted(values)[idx]


class Metrics:
    def __init__(self, max_samples: int = MAX_LATENCY_SAMPLES) -> None:
        self.total_requests = 0
        self.total_errors = 0
        self.rate_limited = 0
        self.cache_hits: Dict[str, int] = {"signals": 0, "generation": 0}
        self.cache_misses: Dict[str, int] = {"signals": 0, "generation": 0}
        self._latencies: Deque[int] = deque(maxlen=max_samples)

    def increment_requests(self) -> None:
        self.total_requests += 1

    def increment_errors(self) -> None:
        self.total_errors += 1

    def increment_rate_limited(self) -> None:
        self.rate_limited += 1

    def record_cache(self, cache: str, hit: bool) -> None:
        counters = self.cache_hits if hit else self.cache_misses
        counters[cache] = counters.get(cache, 0) + 1

    def record_latency(self, ms: int) -> None:
        self._latencies.append(ms)

    def snapshot(self) -> Dict[str, object]:
        lat = list(self._latencies)
        return {
            "total_requests": self.total_requests,
            "total_errors": self.total_errors,
            "rate_limited": self.rate_limited,
            "cache_hits": dict(self.cache_hits),
            "cache_misses": dict(self.cache_misses),
            "p50_ms": _percentile(lat, 0.50),
            "p95_ms": _percentile(lat, 0.95),
        }

