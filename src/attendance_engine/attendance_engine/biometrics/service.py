from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.exceptions import DomainError, TemplateParseError, ValidationError
from .enrollment import EnrollmentSession
from .matcher import BiometricMatcher
from .model import Embedding, EnrollmentResult, FaceDetection
from .repository import FaceTemplateRepository

logger = logging.getLogger(__name__)


class FaceEnrollmentService:
    def __init__(self, *, templates: FaceTemplateRepository, matcher: BiometricMatcher):
        self._templates = templates
        self._matcher = matcher

    def start(self, user_id: int) -> EnrollmentSession:
        return EnrollmentSession(self._matcher, existing_template=self._existing_template(user_id))

    def finish(self, user_id: int, session: EnrollmentSession) -> Embedding:
        template = session.template()
        self._templates.set_template(int(user_id), template)
        logger.info("Face template stored for user %s", user_id)
        return template

    def enroll(self, user_id: int, captures: Sequence[Sequence[FaceDetection]]) -> EnrollmentResult:
        """Run every step from ``captures`` (one detection list per step).

        The template is written only when all steps pass; a failing step
        is reported with its 1-based number and nothing is stored.
        """
        session = self.start(user_id)
        if len(captures) != session.total_steps:
            return EnrollmentResult(
                error=ValidationError(f"Expected {session.total_steps} captures, got {len(captures)}.")
            )

        for detections in captures:
            step = session.step
            try:
                session.capture(detections)
            except DomainError as exc:
                logger.info("Enrollment for user %s failed at step %d: %s", user_id, step, exc.code.value)
                return EnrollmentResult(error=exc, failed_step=step)

        try:
            template = self.finish(user_id, session)
        except DomainError as exc:
            return EnrollmentResult(error=exc, failed_step=session.total_steps)
        return EnrollmentResult(template=template)

    def remove(self, user_id: int) -> None:
        self._templates.remove_template(int(user_id))
        logger.info("Face template removed for user %s", user_id)

    def _existing_template(self, user_id: int) -> Optional[Embedding]:
        try:
            return self._templates.get_template(int(user_id))
        except TemplateParseError:
            logger.warning("Stored face template for user %s is unreadable; skipping continuity check", user_id)
            return None
