from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.enums import AttendanceStatus, CheckMethod, SessionState
from ..core.exceptions import DomainError
from ..locations.model import GeolocationSample


@dataclass(frozen=True)
class AttendanceRecord:
    """One attended session. Active while ``check_out_time`` is None."""

    attendance_id: int
    user_id: int
    session_type_id: int
    check_in_time: datetime
    check_in_location: Optional[GeolocationSample]
    status: AttendanceStatus
    check_in_method: CheckMethod = CheckMethod.FACIAL
    check_out_time: Optional[datetime] = None
    check_out_location: Optional[GeolocationSample] = None
    check_out_method: Optional[CheckMethod] = None
    total_hours: Optional[float] = None
    overtime_hours: Optional[float] = None
    notes: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.check_out_time is None

    @property
    def state(self) -> SessionState:
        return SessionState.ACTIVE if self.is_active else SessionState.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attendance_id": self.attendance_id,
            "user_id": self.user_id,
            "session_type_id": self.session_type_id,
            "check_in_time": self.check_in_time.isoformat(),
            "check_in_location": self.check_in_location.to_snapshot() if self.check_in_location else None,
            "check_out_time": self.check_out_time.isoformat() if self.check_out_time else None,
            "check_out_location": self.check_out_location.to_snapshot() if self.check_out_location else None,
            "status": self.status.value,
            "check_in_method": self.check_in_method.value,
            "check_out_method": self.check_out_method.value if self.check_out_method else None,
            "total_hours": self.total_hours,
            "overtime_hours": self.overtime_hours,
            "notes": self.notes,
            "state": self.state.value,
        }


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a check-in or check-out: exactly one of record/error is set."""

    record: Optional[AttendanceRecord] = None
    error: Optional[DomainError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def code(self) -> Optional[str]:
        return self.error.code.value if self.error else None

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error else None
