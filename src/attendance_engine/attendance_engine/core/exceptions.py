from __future__ import annotations

from typing import Any, Optional

from .enums import ErrorCode, LocationErrorCause


class DomainError(Exception):
    """Base exception for business rule violations.

    Each subclass carries a stable ``code`` and one human-readable message.
    Extra keyword arguments are kept in ``details`` for API payloads.
    """

    code: ErrorCode = ErrorCode.INVALID_INPUT
    default_message: str = "Request could not be processed."

    def __init__(self, message: Optional[str] = None, **details: Any):
        super().__init__(message or self.default_message)
        self.details = details

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = ErrorCode.INVALID_INPUT
    default_message = "Invalid request data."


class PersistenceError(DomainError):
    """Raised when the backing store fails. Never retried by the engine."""

    code = ErrorCode.PERSISTENCE_FAILURE
    default_message = "Failed to save attendance data. Please try again."


# ---- geolocation -------------------------------------------------------


class LocationError(DomainError):
    """Base for positioning failures."""

    cause: Optional[LocationErrorCause] = None


class PermissionDeniedError(LocationError):
    code = ErrorCode.PERMISSION_DENIED
    cause = LocationErrorCause.PERMISSION_DENIED
    default_message = "Location access denied. Please enable location permissions."


class PositionUnavailableError(LocationError):
    code = ErrorCode.POSITION_UNAVAILABLE
    cause = LocationErrorCause.POSITION_UNAVAILABLE
    default_message = "Location information unavailable."


class LocationTimeoutError(LocationError):
    code = ErrorCode.LOCATION_TIMEOUT
    cause = LocationErrorCause.TIMEOUT
    default_message = "Location request timed out."


class UnknownLocationError(LocationError):
    code = ErrorCode.UNKNOWN_LOCATION_ERROR
    cause = LocationErrorCause.UNKNOWN
    default_message = "An unknown error occurred while getting location."


class GeolocationUnsupportedError(LocationError):
    code = ErrorCode.GEOLOCATION_UNSUPPORTED
    cause = LocationErrorCause.UNSUPPORTED
    default_message = "Geolocation is not supported by this device."


class RetriesExhaustedError(LocationError):
    """Terminal until a manual retry; ``last_cause`` keeps the final failure."""

    code = ErrorCode.RETRIES_EXHAUSTED

    def __init__(self, last_error: LocationError, attempts: int):
        super().__init__(
            f"{last_error.message} You can proceed without location verification.",
            attempts=attempts,
            last_code=last_error.code.value,
        )
        self.last_error = last_error
        self.cause = last_error.cause
        self.attempts = attempts


class AcquisitionCancelledError(LocationError):
    code = ErrorCode.ACQUISITION_CANCELLED
    default_message = "Location request was superseded by a manual retry."


# ---- biometric ---------------------------------------------------------


class BiometricError(DomainError):
    """Base for face detection and matching failures."""


class NoFaceDetectedError(BiometricError):
    code = ErrorCode.NO_FACE_DETECTED
    default_message = "No face detected. Please position your face clearly in the camera."


class MultipleFacesDetectedError(BiometricError):
    code = ErrorCode.MULTIPLE_FACES_DETECTED
    default_message = "Multiple faces detected. Please ensure only one person is in the frame."


class LowDetectionConfidenceError(BiometricError):
    code = ErrorCode.LOW_DETECTION_CONFIDENCE
    default_message = "Face detection quality too low. Please ensure good lighting and clear view."


class AccessDeniedError(BiometricError):
    code = ErrorCode.ACCESS_DENIED

    def __init__(self, match_percent: float):
        super().__init__(
            f"Access denied. Face does not match registered profile. (Match: {match_percent:.1f}%)",
            match_percent=round(match_percent, 1),
        )
        self.match_percent = match_percent


class FaceMismatchError(BiometricError):
    code = ErrorCode.FACE_MISMATCH
    default_message = "Face does not match your existing profile. Please use the same person's face."


class TemplateParseError(BiometricError):
    code = ErrorCode.TEMPLATE_PARSE_ERROR
    default_message = "Invalid stored face encoding. Please set up facial recognition again."


class TemplateNotEnrolledError(BiometricError):
    code = ErrorCode.TEMPLATE_NOT_ENROLLED
    default_message = "No face encoding found. Please set up facial recognition first."


# ---- session -----------------------------------------------------------


class SessionError(DomainError):
    """Base for check-in/check-out precondition failures."""


class AlreadyActiveElsewhereError(SessionError):
    code = ErrorCode.ALREADY_ACTIVE_ELSEWHERE
    default_message = "You must check out of your current session before starting a new one."


class OutsideGeofenceError(SessionError):
    code = ErrorCode.OUTSIDE_GEOFENCE
    default_message = "You are not within the allowed check-in radius."


class MinimumDurationNotMetError(SessionError):
    code = ErrorCode.MINIMUM_DURATION_NOT_MET
    default_message = "Minimum session duration is 1 minute. Please wait before checking out."


class NoSessionSelectedError(SessionError):
    code = ErrorCode.NO_SESSION_SELECTED
    default_message = "Please select a session before checking in."


class RecordNotFoundError(SessionError):
    code = ErrorCode.RECORD_NOT_FOUND
    default_message = "Attendance record not found."


class LocationUnavailableError(SessionError):
    code = ErrorCode.LOCATION_UNAVAILABLE
    default_message = "Your current location is required. Please retry getting your location."
