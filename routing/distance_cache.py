from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, Tuple

from .distance_resolver import DistanceResolver, DistanceResult, LatLon, validate_pair

logger = logging.getLogger(__name__)

CacheKey = Tuple[float, float, float, float]

DEFAULT_TTL_SECONDS = 30 * 24 * 60 * 60  # 30 days
DEFAULT_MAX_ENTRIES = 10000


class CachingDistanceResolver(DistanceResolver):
    """
    Wraps any DistanceResolver with an in-memory cache of provider answers so repeated
    ranking passes do not re-query the provider for the same coordinate pairs.

    - Keys are direction independent: A->B and B->A share one entry.
    - Entries expire after ttl_seconds.
    - When full, the oldest 10% of entries are dropped.
    - Fallback (Haversine) answers are not cached, so a recovered provider is used again.
    """
    def __init__(
        self,
        inner: DistanceResolver,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ):
        if max_entries <= 0:
            raise ValueError("max_entries must be > 0")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")

        self.inner = inner
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        self._cache = {}  # type: Dict[CacheKey, Tuple[float, DistanceResult]]

    @staticmethod
    def make_key(origin: LatLon, destination: LatLon) -> CacheKey:
        # ~1 m precision is plenty for pickup distances
        a = (round(float(origin[0]), 5), round(float(origin[1]), 5))
        b = (round(float(destination[0]), 5), round(float(destination[1]), 5))
        first, second = sorted([a, b])
        return (first[0], first[1], second[0], second[1])

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def resolve(self, origin: LatLon, destination: LatLon) -> DistanceResult:
        origin, destination = validate_pair(origin, destination)
        key = self.make_key(origin, destination)
        now = self._clock()

        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                stored_at, result = cached
                if now - stored_at <= self.ttl_seconds:
                    return result
                del self._cache[key]

        # resolve outside the lock; concurrent misses for one key just both ask the provider
        result = self.inner.resolve(origin, destination)
        if result.used_fallback:
            return result

        with self._lock:
            if key not in self._cache and len(self._cache) >= self.max_entries:
                self._evict_oldest()
            self._cache[key] = (now, result)
        return result

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def _evict_oldest(self) -> None:
        drop = max(1, self.max_entries // 10)
        oldest = sorted(self._cache.items(), key=lambda item: item[1][0])[:drop]
        for key, _ in oldest:
            del self._cache[key]
        logger.info(f"Distance cache full, evicted {len(oldest)} oldest entries")
