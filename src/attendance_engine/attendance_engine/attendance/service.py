from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Sequence, Tuple, Union

from ..biometrics.matcher import BiometricMatcher
from ..biometrics.model import FaceDetection
from ..biometrics.repository import FaceTemplateRepository
from ..common.datetime_utils import Clock, now_local, round_hours
from ..core.constants import DEFAULT_MIN_SESSION_MINUTES, DEFAULT_OVERTIME_AFTER_HOURS
from ..core.enums import CheckMethod, MatchMode, SessionState
from ..core.exceptions import (
    AlreadyActiveElsewhereError,
    DomainError,
    LocationUnavailableError,
    MinimumDurationNotMetError,
    NoSessionSelectedError,
    OutsideGeofenceError,
    PersistenceError,
    RecordNotFoundError,
)
from ..locations.geofence import is_within_any_allowed_site, nearest_site
from ..locations.model import GeolocationSample
from ..locations.repository import LocationRepository
from ..sessions.model import SessionType
from ..sessions.repository import SessionTypeRepository
from .classifier import SessionStatusClassifier
from .model import AttendanceRecord, TransitionResult
from .repository import AttendanceRepository

Detections = Union[Sequence[FaceDetection], Callable[[], Sequence[FaceDetection]]]

logger = logging.getLogger(__name__)


class AttendanceService:
    """NotStarted -> Active -> Completed, one Active record per user.

    ``check_in``/``check_out`` never raise domain errors: every rejection
    comes back as a ``TransitionResult`` and leaves stored state untouched.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        session_types: SessionTypeRepository,
        locations: LocationRepository,
        templates: FaceTemplateRepository,
        *,
        matcher: BiometricMatcher,
        classifier: SessionStatusClassifier | None = None,
        clock: Clock | None = None,
        min_session_minutes: int = DEFAULT_MIN_SESSION_MINUTES,
        overtime_after_hours: float = DEFAULT_OVERTIME_AFTER_HOURS,
        refresh_template: bool = True,
    ):
        self._attendance = attendance
        self._session_types = session_types
        self._locations = locations
        self._templates = templates
        self._matcher = matcher
        self._classifier = classifier or SessionStatusClassifier()
        self._clock = clock or now_local
        self._min_session = timedelta(minutes=min_session_minutes)
        self._overtime_after = timedelta(hours=overtime_after_hours)
        self._refresh_template = bool(refresh_template)

    def now(self) -> datetime:
        return self._clock()

    # ---- reads ----------------------------------------------------------

    def active_record(self, user_id: int) -> Optional[AttendanceRecord]:
        return self._attendance.find_active_for_user(int(user_id))

    def todays_records(self, user_id: int, day: date | None = None) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_user_and_date(int(user_id), day or self.now().date())

    def session_state(self, user_id: int, session_type_id: int, day: date | None = None) -> SessionState:
        return self._state_from(self.todays_records(user_id, day), int(session_type_id))

    def session_overview(self, user_id: int, day: date | None = None) -> List[Tuple[SessionType, SessionState]]:
        """Every active session type with the user's state for ``day``."""
        records = self.todays_records(user_id, day)
        return [
            (st, self._state_from(records, st.session_type_id))
            for st in self._session_types.list_session_types(active_only=True)
        ]

    @staticmethod
    def _state_from(records: Sequence[AttendanceRecord], session_type_id: int) -> SessionState:
        matching = [r for r in records if r.session_type_id == session_type_id]
        if not matching:
            return SessionState.NOT_STARTED
        if any(r.is_active for r in matching):
            return SessionState.ACTIVE
        return SessionState.COMPLETED

    # ---- transitions ----------------------------------------------------

    def check_in(
        self,
        user_id: int,
        *,
        session_type_id: Optional[int],
        position: Optional[GeolocationSample],
        detections: Detections,
        skip_location_check: bool = False,
    ) -> TransitionResult:
        """Open a record when every gate passes.

        ``detections`` may be a zero-argument callable; it is only invoked once
        the session, position and geofence gates have passed.
        """
        try:
            record = self._check_in(
                int(user_id),
                session_type_id=session_type_id,
                position=position,
                detections=detections,
                skip_location_check=skip_location_check,
            )
        except DomainError as exc:
            self._log_rejection("Check-in", user_id, exc)
            return TransitionResult(error=exc)
        return TransitionResult(record=record)

    def check_out(
        self,
        user_id: int,
        *,
        position: Optional[GeolocationSample],
        attendance_id: Optional[int] = None,
    ) -> TransitionResult:
        try:
            record = self._check_out(int(user_id), position=position, attendance_id=attendance_id)
        except DomainError as exc:
            self._log_rejection("Check-out", user_id, exc)
            return TransitionResult(error=exc)
        return TransitionResult(record=record)

    def _check_in(
        self,
        user_id: int,
        *,
        session_type_id: Optional[int],
        position: Optional[GeolocationSample],
        detections: Detections,
        skip_location_check: bool,
    ) -> AttendanceRecord:
        active = self._attendance.find_active_for_user(user_id)
        if active is not None:
            raise AlreadyActiveElsewhereError(attendance_id=active.attendance_id)

        session_type = self._session_types.get_by_id(int(session_type_id)) if session_type_id is not None else None
        if session_type is None or not session_type.is_active:
            raise NoSessionSelectedError()

        if position is None:
            raise LocationUnavailableError()

        if skip_location_check:
            logger.warning("User %s checking in with location verification skipped", user_id)
        else:
            self._check_geofence(user_id, position)

        if callable(detections):
            detections = detections()
        face = self._matcher.detect(detections, MatchMode.VERIFY)
        match = self._matcher.verify(face.embedding, self._templates.get_template(user_id))

        now = self.now()
        status = self._classifier.classify(session_type, now)
        record = self._attendance.create_checkin(
            user_id=user_id,
            session_type_id=session_type.session_type_id,
            check_in_time=now,
            location=position,
            status=status,
            method=CheckMethod.FACIAL,
        )
        logger.info(
            "User %s checked in to %s as %s (match %.1f%%)",
            user_id,
            session_type.name,
            status.value,
            match.match_percent,
        )

        if self._refresh_template:
            try:
                self._templates.set_template(user_id, face.embedding)
            except PersistenceError:
                logger.warning("Face template refresh failed for user %s; check-in kept", user_id)
        return record

    def _check_geofence(self, user_id: int, position: GeolocationSample) -> None:
        sites = self._locations.list_sites(active_only=True)
        inside = is_within_any_allowed_site(position, sites)
        if inside is None:
            logger.warning("No active company sites; geofence not enforced for user %s", user_id)
            return
        if not inside:
            site, distance = nearest_site(position, sites)
            raise OutsideGeofenceError(nearest_site=site.name, distance_m=round(distance))

    def _check_out(
        self,
        user_id: int,
        *,
        position: Optional[GeolocationSample],
        attendance_id: Optional[int],
    ) -> AttendanceRecord:
        active = self._attendance.find_active_for_user(user_id)
        if active is None or (attendance_id is not None and active.attendance_id != int(attendance_id)):
            raise RecordNotFoundError()

        if position is None:
            raise LocationUnavailableError()

        now = self.now()
        elapsed = now - active.check_in_time
        if elapsed < self._min_session:
            raise MinimumDurationNotMetError(elapsed_seconds=max(int(elapsed.total_seconds()), 0))

        record = self._attendance.update_checkout(
            attendance_id=active.attendance_id,
            check_out_time=now,
            location=position,
            total_hours=round_hours(elapsed),
            overtime_hours=round_hours(max(elapsed - self._overtime_after, timedelta(0))),
            method=CheckMethod.FACIAL,
        )
        logger.info("User %s checked out after %.2f h", user_id, record.total_hours or 0.0)
        return record

    @staticmethod
    def _log_rejection(action: str, user_id: int, exc: DomainError) -> None:
        if isinstance(exc, PersistenceError):
            logger.error("%s failed for user %s: %s", action, user_id, exc.message)
        else:
            logger.info("%s rejected for user %s: %s", action, user_id, exc.code.value)
