"""
Geofence check: an axis-aligned box of +/- tolerance degrees around the site
(box semantics, not a circular distance).
"""
import logging
from dataclasses import dataclass
from typing import Optional

from pointage.core.config import settings
from pointage.core.exceptions import OutOfZone, PermissionDenied

_log = logging.getLogger(__name__)

DEFAULT_TOLERANCE_DEG = 0.0002  # ~20m at the equator


@dataclass(frozen=True)
class Position:
    lat: float
    lon: float

    def as_location(self) -> dict:
        """Shape stored in attendance_records.location"""
        return {"latitude": self.lat, "longitude": self.lon}


def within_zone(
    lat: float,
    lon: float,
    target_lat: float,
    target_lon: float,
    tolerance_deg: float = DEFAULT_TOLERANCE_DEG,
) -> bool:
    """True when both coordinates are within tolerance_deg of the target."""
    return abs(lat - target_lat) <= tolerance_deg and abs(lon - target_lon) <= tolerance_deg


def position_in_site_zone(position: Position) -> bool:
    """within_zone against the configured site."""
    return within_zone(
        position.lat,
        position.lon,
        settings.GEOFENCE_TARGET_LAT,
        settings.GEOFENCE_TARGET_LON,
        settings.GEOFENCE_TOLERANCE_DEG,
    )


def require_in_zone(position: Optional[Position]) -> None:
    """
    Precondition for scanning.

    Raises:
        PermissionDenied: no position was supplied (location access refused)
        OutOfZone: position is outside the site box
    """
    if position is None:
        raise PermissionDenied()
    if not position_in_site_zone(position):
        _log.info("Scan rejected outside zone: lat=%s lon=%s", position.lat, position.lon)
        raise OutOfZone()
