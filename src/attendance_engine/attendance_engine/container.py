from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.classifier import SessionStatusClassifier
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .biometrics.matcher import BiometricMatcher, FaceProvider
from .biometrics.mysql_face_template_repository import MySQLFaceTemplateRepository
from .biometrics.repository import FaceTemplateRepository
from .biometrics.service import FaceEnrollmentService
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .locations.mysql_location_repository import MySQLLocationRepository
from .locations.repository import LocationRepository
from .sessions.mysql_session_type_repository import MySQLSessionTypeRepository
from .sessions.repository import SessionTypeRepository


@dataclass(frozen=True)
class EngineSettings:
    """Engine tunables; a settings module may override any of them."""

    verify_threshold: float = constants.FACE_VERIFY_DISTANCE_THRESHOLD
    enroll_threshold: float = constants.FACE_ENROLL_DISTANCE_THRESHOLD
    verify_min_confidence: float = constants.FACE_VERIFY_MIN_CONFIDENCE
    enroll_min_confidence: float = constants.FACE_ENROLL_MIN_CONFIDENCE
    early_grace_minutes: int = constants.DEFAULT_EARLY_GRACE_MINUTES
    late_grace_minutes: int = constants.DEFAULT_LATE_GRACE_MINUTES
    min_session_minutes: int = constants.DEFAULT_MIN_SESSION_MINUTES
    overtime_after_hours: float = constants.DEFAULT_OVERTIME_AFTER_HOURS
    refresh_template: bool = True
    face_provider: str = "client"

    @classmethod
    def from_settings(cls, settings: Any) -> "EngineSettings":
        defaults = cls()
        return cls(
            verify_threshold=float(getattr(settings, "FACE_VERIFY_DISTANCE_THRESHOLD", defaults.verify_threshold)),
            enroll_threshold=float(getattr(settings, "FACE_ENROLL_DISTANCE_THRESHOLD", defaults.enroll_threshold)),
            verify_min_confidence=float(getattr(settings, "FACE_VERIFY_MIN_CONFIDENCE", defaults.verify_min_confidence)),
            enroll_min_confidence=float(getattr(settings, "FACE_ENROLL_MIN_CONFIDENCE", defaults.enroll_min_confidence)),
            early_grace_minutes=int(getattr(settings, "EARLY_GRACE_MINUTES", defaults.early_grace_minutes)),
            late_grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", defaults.late_grace_minutes)),
            min_session_minutes=int(getattr(settings, "MIN_SESSION_MINUTES", defaults.min_session_minutes)),
            overtime_after_hours=float(getattr(settings, "OVERTIME_AFTER_HOURS", defaults.overtime_after_hours)),
            refresh_template=bool(getattr(settings, "REFRESH_FACE_TEMPLATE", defaults.refresh_template)),
            face_provider=str(getattr(settings, "FACE_PROVIDER", defaults.face_provider)),
        )


@dataclass(frozen=True)
class Container:
    attendance_repo: AttendanceRepository
    session_types_repo: SessionTypeRepository
    locations_repo: LocationRepository
    templates_repo: FaceTemplateRepository

    matcher: BiometricMatcher
    attendance_service: AttendanceService
    enrollment_service: FaceEnrollmentService

    settings: EngineSettings = EngineSettings()
    conn: Optional[DatabaseConnection] = None


def _build_face_provider(name: str) -> Optional[FaceProvider]:
    if name == "face_recognition":
        # dlib/OpenCV are an optional extra; only import them when asked for
        from .biometrics.face_recognition_provider import FaceRecognitionProvider

        return FaceRecognitionProvider()
    return None


def wire(
    *,
    attendance_repo: AttendanceRepository,
    session_types_repo: SessionTypeRepository,
    locations_repo: LocationRepository,
    templates_repo: FaceTemplateRepository,
    settings: EngineSettings | None = None,
    conn: Optional[DatabaseConnection] = None,
    face_provider: Optional[FaceProvider] = None,
    clock=None,
) -> Container:
    """Assemble services over any repository implementations."""
    settings = settings or EngineSettings()
    matcher = BiometricMatcher(
        verify_threshold=settings.verify_threshold,
        enroll_threshold=settings.enroll_threshold,
        verify_min_confidence=settings.verify_min_confidence,
        enroll_min_confidence=settings.enroll_min_confidence,
        provider=face_provider,
    )
    attendance_service = AttendanceService(
        attendance_repo,
        session_types_repo,
        locations_repo,
        templates_repo,
        matcher=matcher,
        classifier=SessionStatusClassifier(
            early_grace_minutes=settings.early_grace_minutes,
            late_grace_minutes=settings.late_grace_minutes,
        ),
        clock=clock,
        min_session_minutes=settings.min_session_minutes,
        overtime_after_hours=settings.overtime_after_hours,
        refresh_template=settings.refresh_template,
    )
    enrollment_service = FaceEnrollmentService(templates=templates_repo, matcher=matcher)

    return Container(
        attendance_repo=attendance_repo,
        session_types_repo=session_types_repo,
        locations_repo=locations_repo,
        templates_repo=templates_repo,
        matcher=matcher,
        attendance_service=attendance_service,
        enrollment_service=enrollment_service,
        settings=settings,
        conn=conn,
    )


def build_container(*, db_config: dict, settings: EngineSettings | None = None) -> Container:
    settings = settings or EngineSettings()
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return wire(
        attendance_repo=MySQLAttendanceRepository(conn),
        session_types_repo=MySQLSessionTypeRepository(conn),
        locations_repo=MySQLLocationRepository(conn),
        templates_repo=MySQLFaceTemplateRepository(conn),
        settings=settings,
        conn=conn,
        face_provider=_build_face_provider(settings.face_provider),
    )
