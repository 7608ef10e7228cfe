"""AnalysisOrchestrator — cache, quota and retry around one remote vision call."""
import asyncio
import enum
import logging
from datetime import timedelta
from typing import Awaitable, Callable, Optional

from budget_vision.cache import ResultCache
from budget_vision.clock import Clock, utc_now
from budget_vision.config import Config
from budget_vision.constants import (
    MSG_BUSY,
    MSG_CACHE_HIT,
    MSG_CACHE_MISS,
    MSG_CANCELLED,
    MSG_CAPTURE_FAILED,
    MSG_CONNECT_FAILED,
    MSG_CONNECTED,
    MSG_DISPOSED,
    MSG_DROPPED_AFTER_DISPOSE,
    MSG_LOCAL_FAILED,
    MSG_LOCAL_RESOLVED,
    MSG_QUOTA_EXHAUSTED,
    MSG_RELEASE_FAILED,
    MSG_REMOTE_CALL,
    MSG_REMOTE_FAILED,
)
from budget_vision.device.source import ImageSource
from budget_vision.errors import DisposedError, InvalidStateError
from budget_vision.hashing import fingerprint
from budget_vision.local import LocalResolver, NoLocalResolution
from budget_vision.models import DetectionResult
from budget_vision.presentation import PresentationSink, present_result
from budget_vision.quota import QuotaTracker
from budget_vision.retry import RetryExecutor
from budget_vision.vision.client import VisionClient

logger = logging.getLogger(__name__)


class AnalysisOutcome(enum.Enum):
    LOCAL = "local"
    CACHE_HIT = "cache_hit"
    REMOTE = "remote"
    BUSY = "busy"
    QUOTA_EXHAUSTED = "quota_exhausted"
    FAILED = "failed"
    CANCELLED = "cancelled"


class AnalysisOrchestrator:
    """Turns image bytes into presented detections, calling the remote service only when needed.

    One analysis runs at a time; overlapping calls are dropped, not queued.
    Running out of quota is a normal outcome, not an error. Remote failures
    are logged and kept in ``last_error``; the instance stays usable.
    ``dispose`` is idempotent, cancels an in-flight remote call and releases
    the image source and vision client exactly once.
    """

    def __init__(
        self,
        vision_client: VisionClient,
        sink: PresentationSink,
        image_source: Optional[ImageSource] = None,
        local_resolver: Optional[LocalResolver] = None,
        cache: Optional[ResultCache] = None,
        quota: Optional[QuotaTracker] = None,
        retry: Optional[RetryExecutor] = None,
        clock: Clock = utc_now,
    ) -> None:
        self._client = vision_client
        self._sink = sink
        self._source = image_source
        self._local = local_resolver if local_resolver is not None else NoLocalResolution()
        self._cache = cache if cache is not None else ResultCache(clock=clock)
        self._quota = quota if quota is not None else QuotaTracker(clock=clock)
        self._retry = retry if retry is not None else RetryExecutor()
        self._clock = clock
        self._busy = False
        self._disposed = False
        self._remote_task: Optional[asyncio.Task] = None
        self.last_error: Optional[BaseException] = None

    @classmethod
    def from_config(
        cls,
        config: Config,
        vision_client: VisionClient,
        sink: PresentationSink,
        image_source: Optional[ImageSource] = None,
        clock: Clock = utc_now,
    ) -> "AnalysisOrchestrator":
        return cls(
            vision_client=vision_client,
            sink=sink,
            image_source=image_source,
            cache=ResultCache(ttl=timedelta(hours=config.cache_ttl_hours), clock=clock),
            quota=QuotaTracker(limit=config.quota_limit, clock=clock),
            retry=RetryExecutor(
                max_attempts=config.max_retry_attempts,
                base_delay=config.retry_base_delay,
            ),
            clock=clock,
        )

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def cache(self) -> ResultCache:
        return self._cache

    @property
    def quota(self) -> QuotaTracker:
        return self._quota

    # ── lifecycle ─────────────────────────────────────────────────────────────

    async def start(self) -> bool:
        """Check the remote service is reachable, then start the image source."""
        self._ensure_not_disposed()
        try:
            await self._retry.execute(self._client.ping)
        except Exception as exc:
            self.last_error = exc
            logger.error(MSG_CONNECT_FAILED, exc)
            return False
        logger.info(MSG_CONNECTED)

        match self._source:
            case None:
                return True
            case source:
                try:
                    await source.start()
                except Exception as exc:
                    self.last_error = exc
                    logger.error(MSG_CAPTURE_FAILED, exc)
                    return False
                return True

    async def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True

        match self._remote_task:
            case None:
                pass
            case task:
                task.cancel()

        if self._source is not None:
            await self._release("image source", self._source.stop)
        await self._release("vision client", self._client.close)
        logger.info(MSG_DISPOSED)

    async def __aenter__(self) -> "AnalysisOrchestrator":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.dispose()

    # ── analysis ──────────────────────────────────────────────────────────────

    async def capture_and_analyze(self) -> AnalysisOutcome:
        self._ensure_not_disposed()
        match self._source:
            case None:
                raise InvalidStateError("no image source configured")
            case source:
                pass
        try:
            image_bytes = await source.capture_image()
        except Exception as exc:
            self.last_error = exc
            logger.error(MSG_CAPTURE_FAILED, exc)
            return AnalysisOutcome.FAILED
        return await self.analyze(image_bytes)

    async def analyze(self, image_bytes: bytes) -> AnalysisOutcome:
        self._ensure_not_disposed()

        if self._quota.remaining() == 0:
            logger.warning(MSG_QUOTA_EXHAUSTED, self._quota.state.limit)
            return AnalysisOutcome.QUOTA_EXHAUSTED

        # No await between the check and the set: overlapping calls cannot both pass.
        if self._busy:
            logger.debug(MSG_BUSY)
            return AnalysisOutcome.BUSY
        self._busy = True
        try:
            return await self._analyze(image_bytes)
        finally:
            self._busy = False

    async def _analyze(self, image_bytes: bytes) -> AnalysisOutcome:
        resolved = await self._resolve_locally(image_bytes)
        if self._disposed:
            logger.debug(MSG_DROPPED_AFTER_DISPOSE)
            return AnalysisOutcome.CANCELLED
        if resolved:
            logger.info(MSG_LOCAL_RESOLVED)
            return AnalysisOutcome.LOCAL

        key = fingerprint(image_bytes)
        self._cache.evict_expired()
        match self._cache.get(key):
            case DetectionResult() as cached:
                logger.debug(MSG_CACHE_HIT, key)
                present_result(self._sink, cached)
                return AnalysisOutcome.CACHE_HIT
            case None:
                logger.debug(MSG_CACHE_MISS, key)

        if not self._quota.try_reserve():
            logger.warning(MSG_QUOTA_EXHAUSTED, self._quota.state.limit)
            return AnalysisOutcome.QUOTA_EXHAUSTED

        logger.info(MSG_REMOTE_CALL)
        try:
            raw = await self._call_remote(lambda: self._client.analyze_bytes(image_bytes))
            result = DetectionResult.from_raw(raw, created_at=self._clock())
        except asyncio.CancelledError:
            if not self._disposed:
                raise
            logger.info(MSG_CANCELLED)
            return AnalysisOutcome.CANCELLED
        except Exception as exc:
            self.last_error = exc
            logger.error(MSG_REMOTE_FAILED, exc)
            return AnalysisOutcome.FAILED

        if self._disposed:
            logger.debug(MSG_DROPPED_AFTER_DISPOSE)
            return AnalysisOutcome.CANCELLED

        self._cache.put(key, result)
        present_result(self._sink, result)
        return AnalysisOutcome.REMOTE

    async def _call_remote(self, operation: Callable[[], Awaitable]) -> list:
        # Child task so dispose() can cancel a pending backoff or request.
        self._remote_task = asyncio.create_task(self._retry.execute(operation))
        try:
            return await self._remote_task
        finally:
            self._remote_task = None

    async def _resolve_locally(self, image_bytes: bytes) -> bool:
        try:
            return await self._local.try_resolve(image_bytes)
        except Exception as exc:
            logger.warning(MSG_LOCAL_FAILED, exc)
            return False

    # ── helpers ───────────────────────────────────────────────────────────────

    def _ensure_not_disposed(self) -> None:
        if self._disposed:
            raise DisposedError(type(self).__name__)

    async def _release(self, name: str, release: Callable[[], Awaitable[None]]) -> None:
        try:
            await release()
        except Exception as exc:
            logger.warning(MSG_RELEASE_FAILED, name, exc)
