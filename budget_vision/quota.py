"""QuotaTracker — call budget per calendar month."""
import logging
import threading
from datetime import datetime
from typing import Optional

from budget_vision.clock import Clock, month_start, utc_now
from budget_vision.constants import DEFAULT_QUOTA_LIMIT, MSG_QUOTA_ROLLOVER
from budget_vision.models import QuotaState

logger = logging.getLogger(__name__)


class QuotaTracker:
    """Counts remote calls against a fixed monthly limit.

    The period is the UTC calendar month read from the clock; the count
    resets to zero the first time the tracker is touched in a new month.
    ``reset`` lets an operator supply the boundary explicitly instead.
    Safe to share between orchestrators and threads.
    """

    def __init__(
        self,
        limit: int = DEFAULT_QUOTA_LIMIT,
        clock: Clock = utc_now,
        used: int = 0,
    ) -> None:
        if limit < 0:
            raise ValueError(f"limit must not be negative, got {limit}")
        if not 0 <= used <= limit:
            raise ValueError(f"used must be between 0 and {limit}, got {used}")
        self._limit = limit
        self._clock = clock
        self._count = used
        self._period_start = month_start(clock())
        self._lock = threading.Lock()

    def try_reserve(self) -> bool:
        with self._lock:
            self._roll_over()
            match self._count >= self._limit:
                case True:
                    return False
                case False:
                    self._count += 1
                    return True

    def remaining(self) -> int:
        with self._lock:
            self._roll_over()
            return max(self._limit - self._count, 0)

    def reset(self, period_start: Optional[datetime] = None) -> None:
        with self._lock:
            self._count = 0
            self._period_start = period_start or month_start(self._clock())

    @property
    def state(self) -> QuotaState:
        with self._lock:
            self._roll_over()
            return QuotaState(
                count=self._count, limit=self._limit, period_start=self._period_start
            )

    def _roll_over(self) -> None:
        # Caller holds the lock.
        current = month_start(self._clock())
        if current > self._period_start:
            self._count = 0
            self._period_start = current
            logger.info(MSG_QUOTA_ROLLOVER, current.date().isoformat())
