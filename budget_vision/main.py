"""Entry point — wires Config → VisionClient → AnalysisOrchestrator."""
import argparse
import asyncio
import logging
from pathlib import Path

from rich.logging import RichHandler

from budget_vision.config import Config
from budget_vision.constants import MSG_QUOTA_REMAINING, MSG_STARTING
from budget_vision.device.source import FileImageSource
from budget_vision.errors import InitializationError
from budget_vision.orchestrator import AnalysisOrchestrator
from budget_vision.presentation import RichConsoleSink
from budget_vision.vision.claude import ClaudeVisionClient
from budget_vision.vision.client import VisionClient
from budget_vision.vision.openai import OpenAIVisionClient


def _setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    list(map(root.removeHandler, root.handlers[:]))
    root.addHandler(RichHandler(rich_tracebacks=True))


def build_vision_client(config: Config) -> VisionClient:
    """Anthropic wins when both keys are configured."""
    match (config.anthropic_api_key, config.openai_api_key):
        case (str() as k, _) if k:
            return ClaudeVisionClient(k, timeout=config.remote_timeout)
        case (_, str() as k) if k:
            return OpenAIVisionClient(k, timeout=config.remote_timeout)
        case _:
            raise InitializationError("ANTHROPIC_API_KEY or OPENAI_API_KEY must be set in .env")


async def run(config: Config, images: list[Path]) -> int:
    logger = logging.getLogger(__name__)
    orchestrator = AnalysisOrchestrator.from_config(
        config,
        vision_client=build_vision_client(config),
        sink=RichConsoleSink(),
        image_source=FileImageSource(images),
    )
    async with orchestrator:
        if not await orchestrator.start():
            return 1
        for _ in images:
            outcome = await orchestrator.capture_and_analyze()
            logger.debug("Outcome: %s", outcome.value)
        logger.info(MSG_QUOTA_REMAINING, orchestrator.quota.remaining())
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="budget-vision",
        description="Detect objects in images on a pay-per-call vision API without wasting quota.",
    )
    parser.add_argument("images", nargs="+", type=Path, help="image files to analyze")
    args = parser.parse_args()

    config = Config.from_env()
    _setup_logging(config.log_level)

    logger = logging.getLogger(__name__)
    logger.info(MSG_STARTING)

    raise SystemExit(asyncio.run(run(config, args.images)))


if __name__ == "__main__":
    main()
