"""LocalResolver — offline processing tried before any remote call."""
from abc import ABC, abstractmethod


class LocalResolver(ABC):
    @abstractmethod
    async def try_resolve(self, image_bytes: bytes) -> bool:
        """Return True when the image was fully handled locally. May raise; callers fall back to remote."""
        ...


class NoLocalResolution(LocalResolver):

    async def try_resolve(self, image_bytes: bytes) -> bool:
        return False
