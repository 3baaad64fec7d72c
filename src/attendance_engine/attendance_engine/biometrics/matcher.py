from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence

import numpy as np

from ..core.constants import (
    FACE_ENROLL_DISTANCE_THRESHOLD,
    FACE_ENROLL_MIN_CONFIDENCE,
    FACE_VERIFY_DISTANCE_THRESHOLD,
    FACE_VERIFY_MIN_CONFIDENCE,
)
from ..core.enums import MatchMode
from ..core.exceptions import (
    AccessDeniedError,
    FaceMismatchError,
    LowDetectionConfidenceError,
    MultipleFacesDetectedError,
    NoFaceDetectedError,
    TemplateNotEnrolledError,
    TemplateParseError,
    ValidationError,
)
from .model import Embedding, FaceDetection, MatchResult

logger = logging.getLogger(__name__)


class FaceProvider(Protocol):
    """Black-box embedding model: one frame in, zero or more detections out."""

    def detect_faces(self, frame) -> Sequence[FaceDetection]:
        raise NotImplementedError


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise TemplateParseError()
    return float(np.linalg.norm(va - vb))


class BiometricMatcher:
    """Single-face gating and template comparison.

    Verification accepts ``distance <= verify_threshold``; the enrollment
    continuity check accepts ``distance <= enroll_threshold``. Both bounds are
    inclusive.
    """

    def __init__(
        self,
        *,
        verify_threshold: float = FACE_VERIFY_DISTANCE_THRESHOLD,
        enroll_threshold: float = FACE_ENROLL_DISTANCE_THRESHOLD,
        verify_min_confidence: float = FACE_VERIFY_MIN_CONFIDENCE,
        enroll_min_confidence: float = FACE_ENROLL_MIN_CONFIDENCE,
        provider: Optional[FaceProvider] = None,
    ):
        self.verify_threshold = float(verify_threshold)
        self.enroll_threshold = float(enroll_threshold)
        self._min_confidence = {
            MatchMode.VERIFY: float(verify_min_confidence),
            MatchMode.ENROLL: float(enroll_min_confidence),
        }
        self._provider = provider

    def confidence_floor(self, mode: MatchMode) -> float:
        return self._min_confidence[MatchMode(mode)]

    def detect(self, detections: Sequence[FaceDetection], mode: MatchMode) -> FaceDetection:
        """Return the single usable face or raise the first failed gate."""
        if not detections:
            raise NoFaceDetectedError()
        if len(detections) > 1:
            raise MultipleFacesDetectedError(faces=len(detections))

        face = detections[0]
        floor = self.confidence_floor(mode)
        if face.score < floor:
            logger.info("Face score %.2f below %s floor %.2f", face.score, MatchMode(mode).value, floor)
            raise LowDetectionConfidenceError(score=round(face.score, 3))
        return face

    def faces_in_frame(self, frame) -> List[FaceDetection]:
        """Run the server-side provider over a raw camera frame."""
        if self._provider is None:
            raise ValidationError("Server-side face detection is not enabled; send face descriptors instead.")
        return list(self._provider.detect_faces(frame))

    def verify(self, live: Embedding, stored: Optional[Embedding]) -> MatchResult:
        if stored is None:
            raise TemplateNotEnrolledError()

        result = MatchResult(distance=euclidean_distance(live, stored), threshold=self.verify_threshold)
        if not result.matched:
            logger.info("Face verification rejected (distance=%.4f)", result.distance)
            raise AccessDeniedError(result.match_percent)
        return result

    def check_continuity(self, live: Embedding, existing: Embedding) -> MatchResult:
        result = MatchResult(distance=euclidean_distance(live, existing), threshold=self.enroll_threshold)
        if not result.matched:
            logger.info("Enrollment sample differs from existing profile (distance=%.4f)", result.distance)
            raise FaceMismatchError()
        return result
