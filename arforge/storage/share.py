"""Share links — public viewer/blob URLs and the QR code that points at the viewer."""

from __future__ import annotations

import base64
import io
import logging

import qrcode
from qrcode.image.pil import PilImage

logger = logging.getLogger(__name__)


def base_url(host: str | None, public_base_url: str = "") -> str:
    """Absolute origin for links: configured base, else derived from the Host header.

    Local hosts get http, everything else https.
    """
    if public_base_url:
        return public_base_url.rstrip("/")
    host = (host or "localhost").strip()
    scheme = "http" if "localhost" in host or host.startswith("127.0.0.1") else "https"
    return f"{scheme}://{host}"


def view_url(base: str, asset_id: str) -> str:
    return f"{base}/view/{asset_id}"


def blob_url(base: str, key: str) -> str:
    return f"{base}/api/blobs/{key}"


def qr_data_url(data: str, size: int = 512, margin: int = 2) -> str:
    """PNG QR code for ``data`` as a base64 data URL, roughly ``size`` pixels wide."""
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        border=margin,
        image_factory=PilImage,
    )
    qr.add_data(data)
    qr.make(fit=True)
    qr.box_size = max(1, size // (qr.modules_count + 2 * margin))

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf)
    logger.debug("QR code: %d modules, %d px boxes", qr.modules_count, qr.box_size)
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")
