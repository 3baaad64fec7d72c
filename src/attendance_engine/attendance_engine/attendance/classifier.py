from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import minutes_since_midnight
from ..core.constants import DEFAULT_EARLY_GRACE_MINUTES, DEFAULT_LATE_GRACE_MINUTES
from ..core.enums import AttendanceStatus
from ..sessions.model import SessionType


@dataclass(frozen=True)
class SessionStatusClassifier:
    """Present/late decision for a check-in against a session window.

    Works on minutes since midnight, seconds ignored. Arrivals before
    ``start - early_grace`` or after the session end are late, as is
    anything past ``start + late_grace``. Never returns ABSENT.
    """

    early_grace_minutes: int = DEFAULT_EARLY_GRACE_MINUTES
    late_grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES

    def classify(self, session_type: Optional[SessionType], check_in: datetime) -> AttendanceStatus:
        if session_type is None:
            return AttendanceStatus.PRESENT

        now_min = minutes_since_midnight(check_in)
        start_min = minutes_since_midnight(session_type.start_time)
        end_min = minutes_since_midnight(session_type.end_time)

        earliest = start_min - self.early_grace_minutes
        latest_on_time = start_min + self.late_grace_minutes

        if now_min < earliest or now_min > end_min:
            return AttendanceStatus.LATE
        if now_min > latest_on_time:
            return AttendanceStatus.LATE
        return AttendanceStatus.PRESENT
