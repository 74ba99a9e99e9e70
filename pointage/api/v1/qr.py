"""
QR marker image endpoint (managers print it at the site).
"""
from typing import Literal, Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from pointage.core.deps import require_manager
from pointage.schemas.auth import UserSession
from pointage.services.qr_service import marker_text, render_qr_png

router = APIRouter()


@router.get("/marker.png")
async def marker_image(
    variant: Literal["marker", "entry", "exit"] = Query("marker", description="Plain marker or typed entry/exit payload"),
    site: Optional[str] = Query(None, max_length=200, description="Place label for typed payloads"),
    session: UserSession = Depends(require_manager),
):
    """PNG of the code employees scan."""
    png = render_qr_png(marker_text(variant, site))
    return Response(content=png, media_type="image/png")
