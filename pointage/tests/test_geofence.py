"""
Tests for the geofence box check
"""
import pytest

from pointage.core.exceptions import OutOfZone, PermissionDenied
from pointage.services.geofence_service import Position, require_in_zone, within_zone

TARGET_LAT = 6.8467473
TARGET_LON = -5.2840243


def test_target_itself_is_inside():
    assert within_zone(TARGET_LAT, TARGET_LON, TARGET_LAT, TARGET_LON, 0.0002)


def test_offset_inside_tolerance():
    assert within_zone(6.8468, -5.2841, TARGET_LAT, TARGET_LON, 0.0002)


def test_offset_beyond_tolerance():
    assert not within_zone(6.8500, -5.2840243, TARGET_LAT, TARGET_LON, 0.0002)


def test_zone_is_a_box_not_a_circle():
    # Corner of the box is farther than the tolerance in euclidean distance
    corner_lat = TARGET_LAT + 0.00019
    corner_lon = TARGET_LON - 0.00019
    assert within_zone(corner_lat, corner_lon, TARGET_LAT, TARGET_LON, 0.0002)


def test_one_axis_outside_is_enough_to_reject():
    assert not within_zone(TARGET_LAT, TARGET_LON + 0.001, TARGET_LAT, TARGET_LON, 0.0002)


def test_require_in_zone_without_position():
    with pytest.raises(PermissionDenied):
        require_in_zone(None)


def test_require_in_zone_outside():
    with pytest.raises(OutOfZone):
        require_in_zone(Position(lat=5.3599517, lon=-4.0082563))


def test_require_in_zone_at_site(on_site):
    require_in_zone(on_site)


def test_check_endpoint(client, employee, auth_headers):
    headers = auth_headers(employee)

    inside = client.post("/api/v1/geofence/check", json={"lat": TARGET_LAT, "lon": TARGET_LON}, headers=headers)
    assert inside.status_code == 200
    assert inside.json()["within_zone"] is True
    assert inside.json()["tolerance_deg"] == 0.0002

    outside = client.post("/api/v1/geofence/check", json={"lat": 5.36, "lon": -4.0}, headers=headers)
    assert outside.status_code == 200
    assert outside.json()["within_zone"] is False


def test_check_endpoint_rejects_invalid_latitude(client, employee, auth_headers):
    response = client.post(
        "/api/v1/geofence/check", json={"lat": 123.0, "lon": 0.0}, headers=auth_headers(employee)
    )
    assert response.status_code == 422
