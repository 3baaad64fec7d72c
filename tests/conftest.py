from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time, timedelta
from typing import Optional, Sequence

import pytest

from attendance_engine.attendance.model import AttendanceRecord
from attendance_engine.attendance.service import AttendanceService
from attendance_engine.biometrics.matcher import BiometricMatcher
from attendance_engine.biometrics.model import FaceDetection
from attendance_engine.biometrics.repository import decode_template, encode_template
from attendance_engine.core.enums import AttendanceStatus, CheckMethod
from attendance_engine.core.exceptions import AlreadyActiveElsewhereError, PersistenceError
from attendance_engine.locations.model import CompanyLocation, GeolocationSample
from attendance_engine.sessions.model import SessionType

HQ = CompanyLocation(location_id=1, name="Head Office", latitude=10.762622, longitude=106.660172, radius_meters=200)
STORED_FACE = (0.1, 0.2, 0.3, 0.4)


class MutableClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryAttendance:
    """Enforces one Active record per user like the unique key in schema.sql."""

    def __init__(self):
        self.records: dict[int, AttendanceRecord] = {}
        self._id = 0
        self.fail_writes = False

    def find_active_for_user(self, user_id: int) -> Optional[AttendanceRecord]:
        return next((r for r in self.records.values() if r.user_id == user_id and r.is_active), None)

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.records.get(attendance_id)

    def list_for_user_and_date(self, user_id: int, day: date) -> Sequence[AttendanceRecord]:
        items = [r for r in self.records.values() if r.user_id == user_id and r.check_in_time.date() == day]
        return sorted(items, key=lambda r: r.check_in_time)

    def create_checkin(self, *, user_id, session_type_id, check_in_time, location, status, method=CheckMethod.FACIAL):
        if self.fail_writes:
            raise PersistenceError()
        if self.find_active_for_user(user_id):
            raise AlreadyActiveElsewhereError()
        self._id += 1
        rec = AttendanceRecord(
            attendance_id=self._id,
            user_id=user_id,
            session_type_id=session_type_id,
            check_in_time=check_in_time,
            check_in_location=location,
            check_in_method=method,
            status=status,
            overtime_hours=0.0,
        )
        self.records[rec.attendance_id] = rec
        return rec

    def update_checkout(self, *, attendance_id, check_out_time, location, total_hours, overtime_hours, method=CheckMethod.FACIAL):
        if self.fail_writes:
            raise PersistenceError()
        rec = self.records.get(attendance_id)
        if rec is None or not rec.is_active:
            raise PersistenceError()
        rec = replace(
            rec,
            check_out_time=check_out_time,
            check_out_location=location,
            check_out_method=method,
            total_hours=total_hours,
            overtime_hours=overtime_hours,
        )
        self.records[attendance_id] = rec
        return rec

    def add_active(self, *, user_id: int, session_type_id: int, check_in_time: datetime) -> AttendanceRecord:
        return self.create_checkin(
            user_id=user_id,
            session_type_id=session_type_id,
            check_in_time=check_in_time,
            location=None,
            status=AttendanceStatus.PRESENT,
        )


class InMemorySessionTypes:
    def __init__(self, session_types: Sequence[SessionType]):
        self._by_id = {st.session_type_id: st for st in session_types}

    def list_session_types(self, active_only: bool = True) -> Sequence[SessionType]:
        items = sorted(self._by_id.values(), key=lambda st: st.start_time)
        return [st for st in items if st.is_active or not active_only]

    def get_by_id(self, session_type_id: int) -> Optional[SessionType]:
        return self._by_id.get(session_type_id)


class InMemoryLocations:
    def __init__(self, sites: Sequence[CompanyLocation]):
        self.sites = list(sites)

    def list_sites(self, active_only: bool = True) -> Sequence[CompanyLocation]:
        return [s for s in self.sites if s.is_active or not active_only]


class InMemoryTemplates:
    """Keeps the encoded text so corrupt values can be planted."""

    def __init__(self):
        self.raw: dict[int, str] = {}
        self.fail_writes = False
        self.writes = 0

    def get_template(self, user_id: int):
        raw = self.raw.get(user_id)
        return decode_template(raw) if raw else None

    def set_template(self, user_id: int, vector) -> None:
        if self.fail_writes:
            raise PersistenceError()
        self.writes += 1
        self.raw[user_id] = encode_template(vector)

    def remove_template(self, user_id: int) -> None:
        self.raw.pop(user_id, None)


def face(embedding=STORED_FACE, score: float = 0.95) -> FaceDetection:
    return FaceDetection(score=score, embedding=tuple(embedding))


def shifted(base, dx: float):
    return (base[0] + dx,) + tuple(base[1:])


@pytest.fixture
def clock():
    return MutableClock(datetime(2025, 3, 3, 9, 0, 0))


@pytest.fixture
def session_types():
    return InMemorySessionTypes(
        [
            SessionType(1, "Morning", time(8, 0), time(12, 0)),
            SessionType(2, "Lunch", time(13, 0), time(14, 0)),
            SessionType(3, "Afternoon", time(14, 0), time(18, 0)),
            SessionType(4, "Evening", time(19, 0), time(22, 0), is_active=False),
        ]
    )


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def locations():
    return InMemoryLocations([HQ])


@pytest.fixture
def templates():
    repo = InMemoryTemplates()
    repo.raw[1] = encode_template(STORED_FACE)
    return repo


@pytest.fixture
def matcher():
    return BiometricMatcher()


@pytest.fixture
def service(attendance_repo, session_types, locations, templates, matcher, clock):
    return AttendanceService(attendance_repo, session_types, locations, templates, matcher=matcher, clock=clock)


@pytest.fixture
def at_office():
    return GeolocationSample(latitude=HQ.latitude, longitude=HQ.longitude, accuracy=12.0)
