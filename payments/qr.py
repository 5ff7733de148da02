import base64
import io
import logging

import qrcode

logger = logging.getLogger(__name__)


def encode_payload_image(data: str, box_size: int = 6, border: int = 2) -> str:
    """Render ``data`` as a QR code and return the PNG base64 encoded."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode()


def try_encode_payload_image(data: str) -> str | None:
    """Image for an invoice payload, or None when rendering fails."""
    try:
        return encode_payload_image(data)
    except Exception:
        logger.exception("QR rendering failed; invoice is returned without an image")
        return None
