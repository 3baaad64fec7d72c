from __future__ import annotations

import math
from typing import Any, List, Mapping, Optional

from ..biometrics.model import FaceDetection
from ..core.exceptions import ValidationError
from ..locations.model import GeolocationSample
from .datetime_utils import parse_iso_datetime


def require_finite(value: Any, field_name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field_name} must be a number") from exc
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a number")
    return number


def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field_name} must be an integer") from exc


def optional_bool(value: Any, field_name: str) -> bool:
    """JSON booleans only; a missing value is False."""
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false")
    return value


def parse_position(data: Optional[Mapping[str, Any]]) -> Optional[GeolocationSample]:
    """``{"latitude", "longitude", "accuracy"?, "captured_at"?}`` or None."""
    if not data:
        return None
    if not isinstance(data, Mapping):
        raise ValidationError("position must be an object")

    latitude = require_finite(data.get("latitude"), "latitude")
    longitude = require_finite(data.get("longitude"), "longitude")
    if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
        raise ValidationError("position is out of range")

    accuracy = data.get("accuracy")
    captured_at = data.get("captured_at")
    try:
        captured = parse_iso_datetime(captured_at) if captured_at else None
    except (TypeError, ValueError) as exc:
        raise ValidationError("captured_at must be an ISO timestamp") from exc

    return GeolocationSample(
        latitude=latitude,
        longitude=longitude,
        accuracy=require_finite(accuracy, "accuracy") if accuracy is not None else None,
        captured_at=captured,
    )


def parse_detections(items: Any) -> List[FaceDetection]:
    """Client-side detections: a list of ``{"score", "descriptor", "box"?}``."""
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValidationError("faces must be a list")
    try:
        return [FaceDetection.from_payload(item) for item in items]
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ValidationError("faces contain an invalid detection") from exc
