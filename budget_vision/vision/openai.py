"""OpenAIVisionClient — OpenAI GPT-4o vision backend."""
import base64

import openai
from openai import AsyncOpenAI

from budget_vision.constants import (
    DEFAULT_REMOTE_TIMEOUT,
    DETECTION_PROMPT,
    IMAGE_MEDIA_TYPE,
    OPENAI_VISION_MODEL,
    VISION_MAX_TOKENS,
)
from budget_vision.errors import FatalError, TransientError
from budget_vision.models import Detection
from budget_vision.vision.client import VisionClient, parse_detections


def _translate(exc: openai.OpenAIError) -> Exception:
    match exc:
        case openai.APITimeoutError() | openai.APIConnectionError():
            return TransientError(str(exc))
        case _:
            return FatalError(str(exc))


class OpenAIVisionClient(VisionClient):

    def __init__(self, api_key: str, timeout: float = DEFAULT_REMOTE_TIMEOUT) -> None:
        self._client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    async def analyze_bytes(self, image_bytes: bytes) -> list[Detection]:
        image_data = base64.standard_b64encode(image_bytes).decode()
        try:
            response = await self._client.chat.completions.create(
                model=OPENAI_VISION_MODEL,
                max_tokens=VISION_MAX_TOKENS,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image_url",
                                "image_url": {"url": f"data:{IMAGE_MEDIA_TYPE};base64,{image_data}"},
                            },
                            {"type": "text", "text": DETECTION_PROMPT},
                        ],
                    }
                ],
            )
        except openai.OpenAIError as exc:
            raise _translate(exc) from exc
        content = response.choices[0].message.content
        return parse_detections(content or "")

    async def ping(self) -> None:
        try:
            await self._client.models.list()
        except openai.OpenAIError as exc:
            raise _translate(exc) from exc

    async def close(self) -> None:
        await self._client.close()
