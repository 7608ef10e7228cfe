"""Presentation sinks — where detections end up once analyzed."""
import logging
from abc import ABC, abstractmethod

from rich.console import Console
from rich.table import Table

from budget_vision.constants import MSG_DETECTION
from budget_vision.models import DetectionResult, Region

logger = logging.getLogger(__name__)


def _format_region(location: Region) -> str:
    return "(" + ", ".join(f"{c:g}" for c in location) + ")"


class PresentationSink(ABC):
    @abstractmethod
    def present(self, label: str, confidence: float, location: Region) -> None:
        """Fire-and-forget: render one detection. Must not block."""
        ...


def present_result(sink: PresentationSink, result: DetectionResult) -> None:
    for detection in result.detections:
        sink.present(detection.label, detection.confidence, detection.region)


class LoggingSink(PresentationSink):

    def present(self, label: str, confidence: float, location: Region) -> None:
        logger.info(MSG_DETECTION, label, confidence * 100, _format_region(location))


class RichConsoleSink(PresentationSink):
    """Prints each detection as a one-row rich table."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def present(self, label: str, confidence: float, location: Region) -> None:
        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column("label", style="bold cyan")
        table.add_column("confidence", justify="right", style="green")
        table.add_column("location", style="dim")
        table.add_row(label, f"{confidence:.0%}", _format_region(location))
        self._console.print(table)
