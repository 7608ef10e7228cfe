"""ClaudeVisionClient — Anthropic Claude vision backend."""
import base64

import anthropic
from anthropic import AsyncAnthropic

from budget_vision.constants import (
    CLAUDE_VISION_MODEL,
    DEFAULT_REMOTE_TIMEOUT,
    DETECTION_PROMPT,
    IMAGE_MEDIA_TYPE,
    VISION_MAX_TOKENS,
)
from budget_vision.errors import FatalError, TransientError
from budget_vision.models import Detection
from budget_vision.vision.client import VisionClient, parse_detections


def _translate(exc: anthropic.APIError) -> Exception:
    match exc:
        case anthropic.APITimeoutError() | anthropic.APIConnectionError():
            return TransientError(str(exc))
        case _:
            return FatalError(str(exc))


class ClaudeVisionClient(VisionClient):

    def __init__(self, api_key: str, timeout: float = DEFAULT_REMOTE_TIMEOUT) -> None:
        # Retries belong to RetryExecutor, not the SDK.
        self._client = AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)

    async def analyze_bytes(self, image_bytes: bytes) -> list[Detection]:
        image_data = base64.standard_b64encode(image_bytes).decode()
        try:
            message = await self._client.messages.create(
                model=CLAUDE_VISION_MODEL,
                max_tokens=VISION_MAX_TOKENS,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image",
                                "source": {
                                    "type": "base64",
                                    "media_type": IMAGE_MEDIA_TYPE,
                                    "data": image_data,
                                },
                            },
                            {"type": "text", "text": DETECTION_PROMPT},
                        ],
                    }
                ],
            )
        except anthropic.APIError as exc:
            raise _translate(exc) from exc
        return parse_detections(message.content[0].text)

    async def ping(self) -> None:
        try:
            await self._client.models.list()
        except anthropic.APIError as exc:
            raise _translate(exc) from exc

    async def close(self) -> None:
        await self._client.close()
