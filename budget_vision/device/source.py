"""ImageSource — capture device lifecycle as an explicit async state machine."""
import asyncio
import enum
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence

from budget_vision.constants import MSG_SOURCE_STATE
from budget_vision.errors import InvalidStateError

logger = logging.getLogger(__name__)


class SourceState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    STARTING = "starting"
    READY = "ready"
    STOPPING = "stopping"
    STOPPED = "stopped"


class ImageSource(ABC):
    """Uninitialized → Starting → Ready → Stopping → Stopped.

    ``start`` and ``stop`` are awaitable transitions; subclasses supply the
    device work through ``_open``, ``_grab`` and ``_release``. A failed
    ``_open`` releases the device and leaves the source Stopped. ``stop`` is
    idempotent and releases the device at most once.
    """

    def __init__(self) -> None:
        self._state = SourceState.UNINITIALIZED
        self._lock = asyncio.Lock()

    @property
    def state(self) -> SourceState:
        return self._state

    def _transition(self, new_state: SourceState) -> None:
        logger.debug(MSG_SOURCE_STATE, self._state.value, new_state.value)
        self._state = new_state

    async def start(self) -> None:
        async with self._lock:
            match self._state:
                case SourceState.READY:
                    return
                case SourceState.UNINITIALIZED:
                    pass
                case state:
                    raise InvalidStateError(f"cannot start image source in state {state.value}")
            self._transition(SourceState.STARTING)
            try:
                await self._open()
            except BaseException:
                await self._shutdown()
                raise
            self._transition(SourceState.READY)

    async def capture_image(self) -> bytes:
        match self._state:
            case SourceState.READY:
                return await self._grab()
            case state:
                raise InvalidStateError(f"cannot capture in state {state.value}")

    async def stop(self) -> None:
        async with self._lock:
            match self._state:
                case SourceState.STOPPED:
                    return
                case SourceState.UNINITIALIZED:
                    self._transition(SourceState.STOPPED)
                case _:
                    await self._shutdown()

    async def _shutdown(self) -> None:
        self._transition(SourceState.STOPPING)
        try:
            await self._release()
        finally:
            self._transition(SourceState.STOPPED)

    @abstractmethod
    async def _open(self) -> None: ...

    @abstractmethod
    async def _grab(self) -> bytes: ...

    @abstractmethod
    async def _release(self) -> None: ...


class FileImageSource(ImageSource):
    """Replays image files from disk, cycling through ``paths``."""

    def __init__(self, paths: Sequence[Path]) -> None:
        super().__init__()
        self._paths = [Path(p) for p in paths]
        self._index = 0

    async def _open(self) -> None:
        if not self._paths:
            raise ValueError("FileImageSource needs at least one path")
        match [p for p in self._paths if not p.is_file()]:
            case []:
                pass
            case missing:
                raise FileNotFoundError(f"image files not found: {', '.join(map(str, missing))}")

    async def _grab(self) -> bytes:
        path = self._paths[self._index % len(self._paths)]
        self._index += 1
        return await asyncio.to_thread(path.read_bytes)

    async def _release(self) -> None:
        self._index = 0
