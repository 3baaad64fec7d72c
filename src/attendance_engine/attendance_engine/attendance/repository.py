from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, CheckMethod
from ..locations.model import GeolocationSample
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def find_active_for_user(self, user_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_user_and_date(self, user_id: int, day: date) -> Sequence[AttendanceRecord]:
        """Records whose check-in falls on ``day``, oldest first."""
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        user_id: int,
        session_type_id: int,
        check_in_time: datetime,
        location: Optional[GeolocationSample],
        status: AttendanceStatus,
        method: CheckMethod = CheckMethod.FACIAL,
    ) -> AttendanceRecord:
        """Insert an Active record.

        Raises ``AlreadyActiveElsewhereError`` if the store already holds an
        Active record for the user.
        """
        raise NotImplementedError

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        location: Optional[GeolocationSample],
        total_hours: float,
        overtime_hours: float,
        method: CheckMethod = CheckMethod.FACIAL,
    ) -> AttendanceRecord:
        """Close an Active record once; a record already closed is not touched."""
        raise NotImplementedError
