"""Point-radius geofencing against the active company sites."""
from __future__ import annotations

import math
from typing import Iterable, Optional

from ..core.constants import EARTH_RADIUS_METERS
from .model import CompanyLocation, GeolocationSample


def haversine_distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def distance_to_site(position: GeolocationSample, site: CompanyLocation) -> float:
    return haversine_distance_m(position.latitude, position.longitude, site.latitude, site.longitude)


def _active(sites: Iterable[CompanyLocation]) -> list[CompanyLocation]:
    return [s for s in sites if s.is_active]


def is_within_any_allowed_site(
    position: Optional[GeolocationSample],
    sites: Iterable[CompanyLocation],
) -> Optional[bool]:
    """True/False when containment can be decided, None when it cannot.

    None (no position yet, or no active site) means "cannot verify"; callers
    must not read it as a pass or a fail.
    """
    active = _active(sites)
    if position is None or not active:
        return None
    return any(distance_to_site(position, site) <= site.radius_meters for site in active)


def nearest_site(
    position: Optional[GeolocationSample],
    sites: Iterable[CompanyLocation],
) -> Optional[tuple[CompanyLocation, float]]:
    active = _active(sites)
    if position is None or not active:
        return None
    return min(((site, distance_to_site(position, site)) for site in active), key=lambda pair: pair[1])
