import math

import pytest

from attendance_engine.core.constants import EARTH_RADIUS_METERS
from attendance_engine.locations.geofence import haversine_distance_m, is_within_any_allowed_site, nearest_site
from attendance_engine.locations.model import CompanyLocation, GeolocationSample

SITE = CompanyLocation(location_id=1, name="HQ", latitude=0.0, longitude=0.0, radius_meters=200)
BRANCH = CompanyLocation(location_id=2, name="Branch", latitude=0.0, longitude=1.0, radius_meters=500)

# meters per degree of latitude on the haversine sphere
M_PER_DEG = math.pi * EARTH_RADIUS_METERS / 180


def _north_of_origin(meters: float) -> GeolocationSample:
    return GeolocationSample(latitude=meters / M_PER_DEG, longitude=0.0)


def test_haversine_known_distance():
    # one degree of longitude on the equator
    assert haversine_distance_m(0, 0, 0, 1) == pytest.approx(M_PER_DEG, rel=1e-9)
    assert haversine_distance_m(10.5, 106.7, 10.5, 106.7) == 0


def test_boundary_is_inclusive():
    assert is_within_any_allowed_site(_north_of_origin(199.999), [SITE]) is True
    assert is_within_any_allowed_site(_north_of_origin(200.01), [SITE]) is False


def test_any_active_site_matches():
    near_branch = GeolocationSample(latitude=0.0, longitude=1.001)

    assert is_within_any_allowed_site(near_branch, [SITE, BRANCH]) is True


def test_inactive_sites_are_ignored():
    closed = CompanyLocation(location_id=3, name="Closed", latitude=0.0, longitude=0.0, radius_meters=200, is_active=False)

    assert is_within_any_allowed_site(_north_of_origin(10), [closed]) is None
    assert is_within_any_allowed_site(_north_of_origin(10), [closed, BRANCH]) is False


def test_unknown_without_position_or_sites():
    assert is_within_any_allowed_site(None, [SITE]) is None
    assert is_within_any_allowed_site(_north_of_origin(10), []) is None


def test_nearest_site():
    site, distance = nearest_site(_north_of_origin(1000), [BRANCH, SITE])

    assert site.name == "HQ"
    assert distance == pytest.approx(1000, abs=0.01)
    assert nearest_site(None, [SITE]) is None
