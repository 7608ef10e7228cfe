"""VisionClient — abstract base for remote image analysis backends."""
import json
import re
from abc import ABC, abstractmethod

from budget_vision.errors import FatalError
from budget_vision.models import Detection

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


def parse_detections(text: str) -> list[Detection]:
    """Parse the model's JSON reply into detections. Raises FatalError on junk."""
    body = _FENCE.sub("", text.strip())
    try:
        items = json.loads(body)
    except json.JSONDecodeError as exc:
        raise FatalError(f"Vision reply is not JSON: {exc}") from exc

    match items:
        case list():
            pass
        case _:
            raise FatalError(f"Vision reply must be a JSON array, got {type(items).__name__}")

    try:
        return [
            Detection.create(item["label"], item["confidence"], item["box"])
            for item in items
        ]
    except (KeyError, TypeError, ValueError) as exc:
        raise FatalError(f"Malformed detection in vision reply: {exc}") from exc


class VisionClient(ABC):
    @abstractmethod
    async def analyze_bytes(self, image_bytes: bytes) -> list[Detection]:
        """Detect objects in image bytes.

        Raises TransientError for timeouts and transport failures,
        FatalError for everything else.
        """
        ...

    @abstractmethod
    async def ping(self) -> None:
        """Cheap authenticated call used to verify connectivity. Same errors as analyze_bytes."""
        ...

    @abstractmethod
    async def close(self) -> None: ...
