"""ResultCache — expiring fingerprint → DetectionResult store."""
import logging
import threading
from datetime import datetime, timedelta
from typing import Optional

from budget_vision.clock import Clock, utc_now
from budget_vision.constants import DEFAULT_CACHE_TTL_HOURS, MSG_CACHE_EVICTED
from budget_vision.models import CacheEntry, DetectionResult

logger = logging.getLogger(__name__)


class ResultCache:
    """In-process result cache.

    Every operation takes the same lock, so eviction, lookup and insertion
    can interleave from any thread or task. ``get`` re-checks expiry on its
    own and never returns a stale entry, whether or not ``evict_expired``
    has run.
    """

    def __init__(
        self,
        ttl: timedelta = timedelta(hours=DEFAULT_CACHE_TTL_HOURS),
        clock: Clock = utc_now,
    ) -> None:
        if ttl <= timedelta(0):
            raise ValueError(f"ttl must be positive, got {ttl}")
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def get(self, key: str) -> Optional[DetectionResult]:
        now = self._clock()
        with self._lock:
            match self._entries.get(key):
                case None:
                    return None
                case entry if entry.is_expired(now):
                    return None
                case entry:
                    return entry.value

    def put(self, key: str, result: DetectionResult) -> None:
        expires_at = self._clock() + self._ttl
        with self._lock:
            self._entries[key] = CacheEntry(key=key, value=result, expires_at=expires_at)

    def evict_expired(self, now: Optional[datetime] = None) -> int:
        now = now or self._clock()
        with self._lock:
            expired = [k for k, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug(MSG_CACHE_EVICTED, len(expired))
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
