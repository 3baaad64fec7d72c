from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from ..core.exceptions import DomainError

Embedding = tuple[float, ...]
# (top, right, bottom, left) in frame pixels
BoundingBox = tuple[float, float, float, float]


def as_embedding(values: Iterable[Any]) -> Embedding:
    """Coerce to a non-empty tuple of finite floats; ValueError otherwise."""
    vector = tuple(float(x) for x in values)
    if not vector:
        raise ValueError("embedding is empty")
    if not all(math.isfinite(x) for x in vector):
        raise ValueError("embedding has non-finite values")
    return vector


def match_percent(distance: float) -> float:
    return max(0.0, (1.0 - distance) * 100.0)


@dataclass(frozen=True)
class FaceDetection:
    """One face reported by the embedding provider."""

    score: float
    embedding: Embedding
    box: Optional[BoundingBox] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "FaceDetection":
        box = data.get("box")
        score = float(data["score"])
        if not math.isfinite(score):
            raise ValueError("score is not finite")
        return cls(
            score=score,
            embedding=as_embedding(data["descriptor"]),
            box=tuple(float(x) for x in box) if box else None,
        )


@dataclass(frozen=True)
class MatchResult:
    distance: float
    threshold: float

    @property
    def matched(self) -> bool:
        return self.distance <= self.threshold

    @property
    def match_percent(self) -> float:
        return match_percent(self.distance)


@dataclass(frozen=True)
class EnrollmentResult:
    template: Optional[Embedding] = None
    error: Optional[DomainError] = None
    failed_step: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None
