"""
Geofence endpoint: the pre-scan location check done by the mobile client.
"""
from fastapi import APIRouter, Depends
from pointage.core.config import settings
from pointage.core.deps import get_current_session
from pointage.schemas.auth import UserSession
from pointage.schemas.geofence import GeofenceCheckRequest, GeofenceCheckResponse
from pointage.services.geofence_service import Position, position_in_site_zone

router = APIRouter()


@router.post("/check", response_model=GeofenceCheckResponse)
async def check_position(
    body: GeofenceCheckRequest,
    session: UserSession = Depends(get_current_session),
):
    """Report whether the position is inside the site zone (no error when outside)."""
    return GeofenceCheckResponse(
        within_zone=position_in_site_zone(Position(lat=body.lat, lon=body.lon)),
        target_lat=settings.GEOFENCE_TARGET_LAT,
        target_lon=settings.GEOFENCE_TARGET_LON,
        tolerance_deg=settings.GEOFENCE_TOLERANCE_DEG,
    )
