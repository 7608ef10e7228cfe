from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, NamedTuple

Region = tuple[float, ...]


class Detection(NamedTuple):
    label: str
    confidence: float
    region: Region

    @classmethod
    def create(cls, label: str, confidence: float, region: Iterable[float]) -> "Detection":
        """Validated constructor: confidence in [0, 1], region 2D or 3D."""
        coords = tuple(float(c) for c in region)
        match len(coords):
            case 2 | 3:
                pass
            case n:
                raise ValueError(f"region must have 2 or 3 coordinates, got {n}")
        conf = float(confidence)
        if not 0.0 <= conf <= 1.0:
            raise ValueError(f"confidence must be between 0 and 1, got {conf}")
        return cls(label=str(label), confidence=conf, region=coords)


@dataclass(frozen=True)
class DetectionResult:
    detections: tuple[Detection, ...]
    created_at: datetime

    @classmethod
    def from_raw(cls, raw: Iterable, created_at: datetime) -> "DetectionResult":
        """Wrap a remote response: Detection instances or (label, confidence, region) triples."""
        return cls(
            detections=tuple(Detection.create(*item) for item in raw),
            created_at=created_at,
        )


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: DetectionResult
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


@dataclass(frozen=True)
class QuotaState:
    count: int
    limit: int
    period_start: datetime

    @property
    def remaining(self) -> int:
        return max(self.limit - self.count, 0)
