from __future__ import annotations

from datetime import datetime, time

from attendance_engine.attendance.service import AttendanceService
from attendance_engine.core.enums import AttendanceStatus, CheckMethod, ErrorCode, SessionState
from attendance_engine.locations.model import GeolocationSample
from attendance_engine.sessions.model import SessionType

from conftest import InMemorySessionTypes, STORED_FACE, face, shifted

FAR_AWAY = GeolocationSample(latitude=21.028511, longitude=105.804817)


def _check_in(service, position, *, user_id=1, session_type_id=1, detections=None, **kwargs):
    return service.check_in(
        user_id,
        session_type_id=session_type_id,
        position=position,
        detections=[face()] if detections is None else detections,
        **kwargs,
    )


def test_check_in_creates_active_facial_record(service, attendance_repo, clock, at_office):
    result = _check_in(service, at_office)

    assert result.ok
    rec = result.record
    assert rec.check_in_time == clock.now
    assert rec.check_in_location == at_office
    assert rec.check_in_method == CheckMethod.FACIAL
    assert rec.status == AttendanceStatus.LATE  # 09:00 against an 08:00 start
    assert rec.is_active
    assert attendance_repo.find_active_for_user(1) == rec


def test_second_check_in_is_rejected_while_active(service, attendance_repo, at_office):
    assert _check_in(service, at_office).ok

    result = _check_in(service, at_office, session_type_id=3)

    assert result.code == ErrorCode.ALREADY_ACTIVE_ELSEWHERE.value
    assert len([r for r in attendance_repo.records.values() if r.is_active]) == 1


def test_active_record_check_wins_over_every_other_precondition(service, attendance_repo, clock):
    attendance_repo.add_active(user_id=1, session_type_id=1, check_in_time=clock.now)

    result = _check_in(service, None, session_type_id=None, detections=[])

    assert result.code == ErrorCode.ALREADY_ACTIVE_ELSEWHERE.value


def test_missing_or_inactive_session_type_is_rejected_before_location(service):
    assert _check_in(service, None, session_type_id=None).code == ErrorCode.NO_SESSION_SELECTED.value
    assert _check_in(service, None, session_type_id=4).code == ErrorCode.NO_SESSION_SELECTED.value
    assert _check_in(service, None, session_type_id=99).code == ErrorCode.NO_SESSION_SELECTED.value


def test_missing_position_is_rejected_before_face(service):
    result = _check_in(service, None, detections=[])

    assert result.code == ErrorCode.LOCATION_UNAVAILABLE.value


def test_outside_geofence_is_rejected(service, attendance_repo):
    result = _check_in(service, FAR_AWAY)

    assert result.code == ErrorCode.OUTSIDE_GEOFENCE.value
    assert result.error.details["nearest_site"] == "Head Office"
    assert attendance_repo.records == {}


def test_skip_location_check_bypasses_geofence_only(service):
    assert _check_in(service, FAR_AWAY, skip_location_check=True).ok


def test_skip_location_check_still_needs_a_position(service):
    result = _check_in(service, None, skip_location_check=True)

    assert result.code == ErrorCode.LOCATION_UNAVAILABLE.value


def test_no_active_sites_means_geofence_is_not_enforced(service, locations):
    locations.sites = []

    assert _check_in(service, FAR_AWAY).ok


def test_geofence_is_checked_before_face(service):
    result = _check_in(service, FAR_AWAY, detections=[])

    assert result.code == ErrorCode.OUTSIDE_GEOFENCE.value


def test_detections_are_loaded_only_after_location_gates(service, clock, at_office):
    calls = []

    def load():
        calls.append(1)
        return [face()]

    assert _check_in(service, FAR_AWAY, detections=load).code == ErrorCode.OUTSIDE_GEOFENCE.value
    assert _check_in(service, None, detections=load).code == ErrorCode.LOCATION_UNAVAILABLE.value
    assert calls == []

    assert _check_in(service, at_office, detections=load).ok
    assert calls == [1]

    clock.advance(minutes=1)
    assert _check_in(service, at_office, session_type_id=3, detections=load).code == (
        ErrorCode.ALREADY_ACTIVE_ELSEWHERE.value
    )
    assert calls == [1]


def test_session_type_id_zero_is_a_real_selection(attendance_repo, locations, templates, matcher, clock, at_office):
    session_types = InMemorySessionTypes([SessionType(0, "Early", time(7, 0), time(12, 0))])
    svc = AttendanceService(attendance_repo, session_types, locations, templates, matcher=matcher, clock=clock)

    result = _check_in(svc, at_office, session_type_id=0)

    assert result.ok
    assert result.record.session_type_id == 0


def test_face_gates_apply_before_template_lookup(service, templates, at_office):
    templates.raw.clear()

    assert _check_in(service, at_office, detections=[]).code == ErrorCode.NO_FACE_DETECTED.value
    assert _check_in(service, at_office, detections=[face(), face()]).code == ErrorCode.MULTIPLE_FACES_DETECTED.value
    assert _check_in(service, at_office, detections=[face(score=0.69)]).code == ErrorCode.LOW_DETECTION_CONFIDENCE.value
    assert _check_in(service, at_office).code == ErrorCode.TEMPLATE_NOT_ENROLLED.value


def test_corrupt_template_is_reported(service, templates, at_office):
    templates.raw[1] = "not json"

    assert _check_in(service, at_office).code == ErrorCode.TEMPLATE_PARSE_ERROR.value


def test_face_mismatch_denies_access_with_match_percent(service, attendance_repo, at_office):
    result = _check_in(service, at_office, detections=[face(shifted(STORED_FACE, 0.5))])

    assert result.code == ErrorCode.ACCESS_DENIED.value
    assert "(Match: 50.0%)" in result.message
    assert attendance_repo.records == {}


def test_live_embedding_replaces_template_after_check_in(service, templates, at_office):
    live = shifted(STORED_FACE, 0.2)

    assert _check_in(service, at_office, detections=[face(live)]).ok

    assert templates.get_template(1) == live


def test_template_is_not_refreshed_when_check_in_fails(service, templates, attendance_repo, at_office):
    attendance_repo.fail_writes = True

    result = _check_in(service, at_office, detections=[face(shifted(STORED_FACE, 0.2))])

    assert result.code == ErrorCode.PERSISTENCE_FAILURE.value
    assert templates.writes == 0
    assert templates.get_template(1) == STORED_FACE


def test_template_refresh_failure_keeps_the_check_in(service, templates, at_office):
    templates.fail_writes = True

    result = _check_in(service, at_office)

    assert result.ok
    assert service.active_record(1) == result.record


def test_template_refresh_can_be_disabled(attendance_repo, session_types, locations, templates, matcher, clock, at_office):
    svc = AttendanceService(
        attendance_repo, session_types, locations, templates, matcher=matcher, clock=clock, refresh_template=False
    )

    assert _check_in(svc, at_office, detections=[face(shifted(STORED_FACE, 0.2))]).ok
    assert templates.writes == 0


def test_check_out_before_one_minute_is_rejected(service, clock, at_office):
    _check_in(service, at_office)
    clock.advance(seconds=30)

    result = service.check_out(1, position=at_office)

    assert result.code == ErrorCode.MINIMUM_DURATION_NOT_MET.value
    assert service.active_record(1) is not None


def test_check_out_after_ninety_seconds_rounds_half_up(service, clock, at_office):
    checked_in = _check_in(service, at_office).record
    clock.advance(seconds=90)

    result = service.check_out(1, position=at_office)

    assert result.ok
    rec = result.record
    assert rec.attendance_id == checked_in.attendance_id
    assert rec.check_out_time == clock.now
    assert rec.check_out_location == at_office
    assert rec.check_out_method == CheckMethod.FACIAL
    assert rec.total_hours == 0.03
    assert rec.overtime_hours == 0.0
    assert service.active_record(1) is None


def test_overtime_is_hours_beyond_eight(service, clock, at_office):
    _check_in(service, at_office)
    clock.advance(hours=9, minutes=30)

    rec = service.check_out(1, position=at_office).record

    assert rec.total_hours == 9.5
    assert rec.overtime_hours == 1.5


def test_check_out_preconditions(service, clock, at_office):
    assert service.check_out(1, position=at_office).code == ErrorCode.RECORD_NOT_FOUND.value

    rec = _check_in(service, at_office).record
    clock.advance(minutes=5)

    assert service.check_out(1, position=None).code == ErrorCode.LOCATION_UNAVAILABLE.value
    assert service.check_out(1, position=at_office, attendance_id=rec.attendance_id + 1).code == (
        ErrorCode.RECORD_NOT_FOUND.value
    )
    assert service.check_out(1, position=at_office, attendance_id=rec.attendance_id).ok


def test_completed_record_is_never_checked_out_twice(service, attendance_repo, clock, at_office):
    _check_in(service, at_office)
    clock.advance(minutes=5)
    first = service.check_out(1, position=at_office).record
    clock.advance(minutes=5)

    result = service.check_out(1, position=at_office)

    assert result.code == ErrorCode.RECORD_NOT_FOUND.value
    assert attendance_repo.get_by_id(first.attendance_id) == first


def test_check_in_allowed_again_after_check_out(service, clock, at_office):
    _check_in(service, at_office)
    clock.advance(minutes=5)
    service.check_out(1, position=at_office)
    clock.advance(hours=4)

    result = _check_in(service, at_office, session_type_id=2)

    assert result.ok
    assert result.record.status == AttendanceStatus.PRESENT


def test_session_states_for_the_day(service, clock, at_office):
    assert service.session_state(1, 1) == SessionState.NOT_STARTED

    _check_in(service, at_office)
    assert service.session_state(1, 1) == SessionState.ACTIVE

    clock.advance(minutes=5)
    service.check_out(1, position=at_office)
    assert service.session_state(1, 1) == SessionState.COMPLETED
    assert service.session_state(1, 1, datetime(2025, 3, 4).date()) == SessionState.NOT_STARTED

    overview = {st.name: state for st, state in service.session_overview(1)}
    assert overview == {
        "Morning": SessionState.COMPLETED,
        "Lunch": SessionState.NOT_STARTED,
        "Afternoon": SessionState.NOT_STARTED,
    }
