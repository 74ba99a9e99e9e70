"""
QR marker rendering for printing at the site.
"""
import io
import json
from typing import Optional

import qrcode

from pointage.core.config import settings

VARIANTS = ("marker", "entry", "exit")


def marker_text(variant: str = "marker", site: Optional[str] = None) -> str:
    """
    Text encoded in the printed code: the plain marker, or a web-variant
    JSON payload tagged entry/exit.
    """
    if variant == "marker":
        return settings.QR_MARKER
    if variant not in VARIANTS:
        raise ValueError(f"variant must be one of {VARIANTS}")
    payload = {"type": variant}
    if site:
        payload["location"] = site
    return json.dumps(payload, ensure_ascii=False)


def render_qr_png(data: str, box_size: int = 10, border: int = 2) -> bytes:
    """Render data as a black-on-white PNG."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
