"""
Bounded in-memory TTL cache with LRU eviction, plus the two upstream memoizers.
Why: GitHub and OpenAI calls are slow and rate limited; repeat lookups for the
same subject should not reach them again within the freshness window.
"""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Tuple, TypeVar

from gitgud.core.schemas import Intensity, RoastResult, Signals

V = TypeVar("V")

_Entry = Tuple[object, float]  # (value, expires_at)

SIGNAL_CACHE_TTL_SECONDS = 5 * 60
GENERATION_CACHE_TTL_SECONDS = 10 * 60
DEFAULT_CAPACITY = 100

KEY_SEPARATOR = ":"


class BoundedTTLCache(Generic[V]):
    """Thread-safe key/value store with a fixed TTL and LRU eviction.

    An entry is never returned once its expiry has passed, whether or not it
    has been physically removed yet. ``ttl_seconds=0`` disables caching.
    """

    def __init__(
        self,
        capacity: int,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        if ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must be >= 0, got {ttl_seconds}")
        self.capacity = capacity
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._data: "OrderedDict[str, _Entry]" = OrderedDict()
        self._lock = threading.Lock()

    def _is_expired(self, expires_at: float) -> bool:
        return self.ttl_seconds == 0 or self._clock() > expires_at

    def get(self, key: str) -> Optional[V]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._is_expired(expires_at):
                del self._data[key]
                return None
            self._data.move_to_end(key)
            return value  # type: ignore[return-value]

    def set(self, key: str, value: V) -> None:
        with self._lock:
            if key in self._data:
                del self._data[key]
            elif len(self._data) >= self.capacity:
                self._data.popitem(last=False)
            self._data[key] = (value, self._clock() + self.ttl_seconds)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            entry = self._data.get(key)  # type: ignore[arg-type]
            return entry is not None and not self._is_expired(entry[1])

    def __len__(self) -> int:
        """Number of live entries; expired ones are purged first."""
        with self._lock:
            for key in [k for k, (_, exp) in self._data.items() if self._is_expired(exp)]:
                del self._data[key]
            return len(self._data)


@dataclass(frozen=True)
class SignalCacheKey:
    username: str
    max_items: int
    include_extra: bool

    def serialize(self) -> str:
        # Trailing fields never contain the separator, so the form is
        # unambiguous when read from the right.
        flag = "true" if self.include_extra else "false"
        return KEY_SEPARATOR.join((self.username, str(int(self.max_items)), flag))


@dataclass(frozen=True)
class GenerationCacheKey:
    username: str
    intensity: Intensity

    def serialize(self) -> str:
        return KEY_SEPARATOR.join((self.username, Intensity(self.intensity).value))


class SignalCache:
    """Memoizes GitHub profile signals per (username, max_repos, include_readme)."""

    def __init__(
        self,
        ttl_seconds: float = SIGNAL_CACHE_TTL_SECONDS,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cache: BoundedTTLCache[Signals] = BoundedTTLCache(
            capacity, ttl_seconds, clock
        )

    def get(
        self, username: str, max_items: int, include_extra: bool
    ) -> Optional[Signals]:
        return self._cache.get(
            SignalCacheKey(username, max_items, include_extra).serialize()
        )

    def set(
        self, username: str, max_items: int, include_extra: bool, signals: Signals
    ) -> None:
        self._cache.set(
            SignalCacheKey(username, max_items, include_extra).serialize(), signals
        )

    def __len__(self) -> int:
        return len(self._cache)


class GenerationCache:
    """Memoizes generated roasts per (username, intensity)."""

    def __init__(
        self,
        ttl_seconds: float = GENERATION_CACHE_TTL_SECONDS,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cache: BoundedTTLCache[RoastResult] = BoundedTTLCache(
            capacity, ttl_seconds, clock
        )

    def get(self, username: str, intensity: Intensity) -> Optional[RoastResult]:
        return self._cache.get(GenerationCacheKey(username, intensity).serialize())

    def set(self, username: str, intensity: Intensity, result: RoastResult) -> None:
        self._cache.set(GenerationCacheKey(username, intensity).serialize(), result)

    def __len__(self) -> int:
        return len(self._cache)
