from __future__ import annotations

import json
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus, CheckMethod
from ..core.exceptions import AlreadyActiveElsewhereError, PersistenceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, normalize_mysql_json, to_float
from ..locations.model import GeolocationSample
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, user_id, session_type_id,
    check_in_time, check_in_location, check_in_method,
    check_out_time, check_out_location, check_out_method,
    status, total_hours, overtime_hours, notes
"""


def _snapshot_json(location: Optional[GeolocationSample]) -> Optional[str]:
    return json.dumps(location.to_snapshot()) if location else None


def _snapshot(value: Any) -> Optional[GeolocationSample]:
    data = normalize_mysql_json(value)
    return GeolocationSample.from_snapshot(data) if data else None


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        session_type_id=int(r["session_type_id"]),
        check_in_time=r["check_in_time"],
        check_in_location=_snapshot(r.get("check_in_location")),
        check_in_method=CheckMethod(r.get("check_in_method") or CheckMethod.FACIAL.value),
        check_out_time=r.get("check_out_time"),
        check_out_location=_snapshot(r.get("check_out_location")),
        check_out_method=CheckMethod(r["check_out_method"]) if r.get("check_out_method") else None,
        status=AttendanceStatus(r["status"]),
        total_hours=to_float(r.get("total_hours")),
        overtime_hours=to_float(r.get("overtime_hours")),
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_active_for_user(self, user_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND check_out_time IS NULL
                ORDER BY check_in_time DESC
                LIMIT 1
                """,
                (int(user_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s",
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_user_and_date(self, user_id: int, day: date) -> Sequence[AttendanceRecord]:
        start = datetime.combine(day, datetime.min.time())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND check_in_time >= %s AND check_in_time < %s
                ORDER BY check_in_time
                """,
                (int(user_id), start, start + timedelta(days=1)),
            )
            return [_to_record(r) for r in fetchall(cur)]

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        user_id, session_type_id, check_in_time, check_in_location, check_in_method, status
                    )
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(user_id),
                        int(session_type_id),
                        check_in_time,
                        _snapshot_json(location),
                        method.value,
                        status.value,
                    ),
                )
                attendance_id = int(cur.lastrowid)
        except PersistenceError as exc:
            cause = exc.__cause__
            if isinstance(cause, mysql.connector.Error) and is_duplicate_key(cause):
                raise AlreadyActiveElsewhereError() from cause
            raise

        return AttendanceRecord(
            attendance_id=attendance_id,
            user_id=int(user_id),
            session_type_id=int(session_type_id),
            check_in_time=check_in_time,
            check_in_location=location,
            check_in_method=method,
            status=status,
            overtime_hours=0.0,
        )

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, check_out_location=%s, check_out_method=%s,
                    total_hours=%s, overtime_hours=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (
                    check_out_time,
                    _snapshot_json(location),
                    method.value,
                    total_hours,
                    overtime_hours,
                    int(attendance_id),
                ),
            )
            if cur.rowcount == 0:
                raise PersistenceError(f"Attendance record {attendance_id} is not active.")

        record = self.get_by_id(attendance_id)
        if record is None:
            raise PersistenceError(f"Attendance record {attendance_id} disappeared after check-out.")
        return record
