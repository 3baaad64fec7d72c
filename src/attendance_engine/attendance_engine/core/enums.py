from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance status persisted on a record."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


class CheckMethod(str, Enum):
    """How a check-in or check-out was performed."""

    FACIAL = "facial"
    MANUAL = "manual"


class SessionState(str, Enum):
    """Lifecycle of one session type for one user on one day."""

    NOT_STARTED = "not-started"
    ACTIVE = "active"
    COMPLETED = "completed"


class MatchMode(str, Enum):
    """Which detection-quality floor applies."""

    VERIFY = "checkin"
    ENROLL = "setup"


class LocationErrorCause(str, Enum):
    """Failure causes reported by a positioning device."""

    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"
    UNSUPPORTED = "unsupported"


class ErrorCode(str, Enum):
    """Stable machine-readable failure kinds returned to callers."""

    # geolocation
    PERMISSION_DENIED = "PERMISSION_DENIED"
    POSITION_UNAVAILABLE = "POSITION_UNAVAILABLE"
    LOCATION_TIMEOUT = "LOCATION_TIMEOUT"
    UNKNOWN_LOCATION_ERROR = "UNKNOWN_LOCATION_ERROR"
    RETRIES_EXHAUSTED = "RETRIES_EXHAUSTED"
    GEOLOCATION_UNSUPPORTED = "GEOLOCATION_UNSUPPORTED"
    ACQUISITION_CANCELLED = "ACQUISITION_CANCELLED"

    # biometric
    NO_FACE_DETECTED = "NO_FACE_DETECTED"
    MULTIPLE_FACES_DETECTED = "MULTIPLE_FACES_DETECTED"
    LOW_DETECTION_CONFIDENCE = "LOW_DETECTION_CONFIDENCE"
    ACCESS_DENIED = "ACCESS_DENIED"
    FACE_MISMATCH = "FACE_MISMATCH"
    TEMPLATE_PARSE_ERROR = "TEMPLATE_PARSE_ERROR"
    TEMPLATE_NOT_ENROLLED = "TEMPLATE_NOT_ENROLLED"

    # session
    ALREADY_ACTIVE_ELSEWHERE = "ALREADY_ACTIVE_ELSEWHERE"
    OUTSIDE_GEOFENCE = "OUTSIDE_GEOFENCE"
    MINIMUM_DURATION_NOT_MET = "MINIMUM_DURATION_NOT_MET"
    NO_SESSION_SELECTED = "NO_SESSION_SELECTED"
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"
    LOCATION_UNAVAILABLE = "LOCATION_UNAVAILABLE"

    # other
    INVALID_INPUT = "INVALID_INPUT"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"
