"""
Main API router
"""
from fastapi import APIRouter

from pointage.api.v1 import (
    health,
    version,
    auth,
    attendance,
    geofence,
    qr,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(version.router, tags=["version"])
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["attendance"])
api_router.include_router(geofence.router, prefix="/geofence", tags=["geofence"])
api_router.include_router(qr.router, prefix="/qr", tags=["qr"])
