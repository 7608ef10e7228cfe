"""RetryExecutor — exponential backoff around an async operation."""
import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from budget_vision.constants import (
    DEFAULT_MAX_RETRY_ATTEMPTS,
    DEFAULT_RETRY_BASE_DELAY,
    MSG_RETRY,
)
from budget_vision.errors import RetryExhaustedError, TransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TransientPredicate = Callable[[BaseException], bool]
Sleep = Callable[[float], Awaitable[None]]


def is_transient(exc: BaseException) -> bool:
    """Timeouts and I/O transport failures are worth retrying; nothing else is."""
    match exc:
        case TransientError() | TimeoutError() | asyncio.TimeoutError() | OSError():
            return True
        case _:
            return False


class RetryExecutor:

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_RETRY_ATTEMPTS,
        base_delay: float = DEFAULT_RETRY_BASE_DELAY,
        is_transient: TransientPredicate = is_transient,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._is_transient = is_transient
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def delay_for(self, attempt: int) -> float:
        return self._base_delay * 2 ** attempt

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` until it succeeds, fails fatally or runs out of attempts.

        Fatal errors propagate unchanged. The last transient error is wrapped
        in RetryExhaustedError. CancelledError is never classified, so a
        backoff sleep can be interrupted from outside.
        """
        for attempt in range(self._max_attempts):
            try:
                return await operation()
            except Exception as exc:
                match self._is_transient(exc):
                    case False:
                        raise
                    case True if attempt == self._max_attempts - 1:
                        raise RetryExhaustedError(self._max_attempts, exc) from exc
                    case True:
                        delay = self.delay_for(attempt)
                        logger.warning(MSG_RETRY, attempt + 1, exc, delay)
                        await self._sleep(delay)
        raise AssertionError("unreachable")
