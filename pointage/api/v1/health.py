"""
Health check endpoint
"""
from fastapi import APIRouter

router = APIRouter()

SERVICE_NAME = "pointage-qr-backend"


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "service": SERVICE_NAME,
    }
