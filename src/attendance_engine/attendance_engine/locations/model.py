from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from ..core.constants import DEFAULT_SITE_RADIUS_METERS, LOCATION_MAXIMUM_AGE_MS, LOCATION_TIMEOUT_MS


@dataclass(frozen=True)
class GeolocationSample:
    """A single position fix. Never stored on its own, only as a record snapshot."""

    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    captured_at: Optional[datetime] = None

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "accuracy": self.accuracy,
            "captured_at": self.captured_at.isoformat() if self.captured_at else None,
        }

    @classmethod
    def from_snapshot(cls, data: Mapping[str, Any]) -> "GeolocationSample":
        captured_at = data.get("captured_at")
        return cls(
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            accuracy=float(data["accuracy"]) if data.get("accuracy") is not None else None,
            captured_at=datetime.fromisoformat(captured_at) if captured_at else None,
        )


@dataclass(frozen=True)
class CompanyLocation:
    """Geofence site: point + radius. Read-only reference data."""

    location_id: int
    name: str
    latitude: float
    longitude: float
    radius_meters: float = DEFAULT_SITE_RADIUS_METERS
    is_active: bool = True
    address: Optional[str] = None


@dataclass(frozen=True)
class PositionOptions:
    """Positioning request options: low accuracy for reliability, cached fixes allowed."""

    enable_high_accuracy: bool = False
    timeout_ms: int = LOCATION_TIMEOUT_MS
    maximum_age_ms: int = LOCATION_MAXIMUM_AGE_MS
