"""
Geofence schemas
"""
from pydantic import BaseModel, Field


class GeofenceCheckRequest(BaseModel):
    """Device position to check against the site zone"""
    lat: float = Field(..., ge=-90, le=90, description="GPS latitude")
    lon: float = Field(..., ge=-180, le=180, description="GPS longitude")


class GeofenceCheckResponse(BaseModel):
    within_zone: bool
    target_lat: float
    target_lon: float
    tolerance_deg: float
