"""In-process TTL cache for proximity analyses.

Keys round coordinates to 3 decimal places (~111 m grid) and include the
radius and the sorted category list. Access is guarded by a lock so the cache
can be shared by concurrent analyses.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable

from valuation.config import settings
from valuation.models.property import Coordinates
from valuation.models.proximity import LandmarkCategory, ProximityResult


@dataclass(frozen=True)
class ProximityCacheStats:
    size: int
    keys: list[str]


def proximity_cache_key(
    coordinates: Coordinates, radius_meters: int, categories: Iterable[LandmarkCategory]
) -> str:
    lat, lng = coordinates.rounded(3)
    names = ",".join(sorted(c.value for c in categories))
    return f"{lat:.3f},{lng:.3f},{radius_meters},{names}"


class ProximityCache:
    def __init__(self, ttl_seconds: float | None = None, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = (
            ttl_seconds if ttl_seconds is not None else settings.proximity_cache_ttl_days * 86400
        )
        self.clock = clock
        self._entries: dict[str, tuple[ProximityResult, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> ProximityResult | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            result, stored_at = entry
            if self.clock() - stored_at > self.ttl_seconds:
                del self._entries[key]
                return None
            return result

    def set(self, key: str, result: ProximityResult) -> None:
        with self._lock:
            self._entries[key] = (result, self.clock())

    def purge_expired(self) -> int:
        """Drop expired entries; returns how many were removed."""
        now = self.clock()
        with self._lock:
            expired = [k for k, (_, ts) in self._entries.items() if now - ts > self.ttl_seconds]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def stats(self) -> ProximityCacheStats:
        with self._lock:
            return ProximityCacheStats(size=len(self._entries), keys=list(self._entries))
