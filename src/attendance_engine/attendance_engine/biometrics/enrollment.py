from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..core.constants import FACE_ENROLLMENT_STEPS
from ..core.enums import MatchMode
from ..core.exceptions import ValidationError
from .matcher import BiometricMatcher
from .model import Embedding, FaceDetection, as_embedding

logger = logging.getLogger(__name__)


class EnrollmentSession:
    """Guided capture of one sample per pose.

    ``step`` is 1-based. A failed capture leaves the session on the same
    step; ``reset`` discards every sample and starts over at step 1.
    """

    def __init__(
        self,
        matcher: BiometricMatcher,
        *,
        existing_template: Optional[Embedding] = None,
        steps: Sequence[str] = FACE_ENROLLMENT_STEPS,
    ):
        self._matcher = matcher
        self._existing = existing_template
        self._steps = tuple(steps)
        self._samples: List[Embedding] = []

    @property
    def step(self) -> int:
        return min(len(self._samples) + 1, len(self._steps))

    @property
    def total_steps(self) -> int:
        return len(self._steps)

    @property
    def instruction(self) -> Optional[str]:
        if self.complete:
            return None
        return self._steps[len(self._samples)]

    @property
    def complete(self) -> bool:
        return len(self._samples) >= len(self._steps)

    @property
    def samples(self) -> tuple:
        return tuple(self._samples)

    def capture(self, detections: Sequence[FaceDetection]) -> Embedding:
        """Gate one capture and, when it passes, advance to the next step."""
        if self.complete:
            raise RuntimeError("Enrollment already complete")

        face = self._matcher.detect(detections, MatchMode.ENROLL)
        embedding = self._usable_sample(face.embedding)
        if self._existing is not None:
            self._matcher.check_continuity(embedding, self._existing)

        self._samples.append(embedding)
        logger.debug("Enrollment step %d/%d captured", len(self._samples), len(self._steps))
        return embedding

    def _usable_sample(self, embedding: Embedding) -> Embedding:
        try:
            vector = as_embedding(embedding)
        except (TypeError, ValueError) as exc:
            raise ValidationError("Face sample is invalid. Please capture this step again.") from exc
        if self._samples and len(vector) != len(self._samples[0]):
            raise ValidationError("Face sample does not match the earlier steps. Please start over.")
        return vector

    def reset(self) -> None:
        self._samples.clear()

    def template(self) -> Embedding:
        """The final step's embedding; only available once complete."""
        if not self.complete:
            raise RuntimeError("Enrollment not complete")
        return self._samples[-1]
