# vm_core/access_codes/qr.py
from __future__ import annotations

import base64
import io
import logging

import qrcode
from django.conf import settings
from django.utils.module_loading import import_string
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q

logger = logging.getLogger(__name__)

_ERROR_CORRECTION = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


class QRRenderError(Exception):
    pass


def render_qr_data_url(code: str) -> str:
    """
    Render `code` as a PNG QR image and return it as a data URL
    (embeddable directly in an <img src=...>).
    The QR payload is the bare code, so scanners feed validate-qr the same 5 characters.
    """
    level = str(getattr(settings, "VM_QR_ERROR_CORRECTION", "M")).upper()

    qr = qrcode.QRCode(
        error_correction=_ERROR_CORRECTION.get(level, ERROR_CORRECT_M),
        box_size=int(getattr(settings, "VM_QR_BOX_SIZE", 8)),
        border=int(getattr(settings, "VM_QR_BORDER", 1)),
    )
    qr.add_data(code)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")

    encoded = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def encode_access_code(code: str) -> str:
    """
    Entry point used by the code services; the renderer is swappable via VM_QR_ENCODER.
    """
    encoder = import_string(getattr(settings, "VM_QR_ENCODER", "vm_core.access_codes.qr.render_qr_data_url"))
    try:
        return encoder(code)
    except Exception as e:
        logger.exception("QR rendering failed for access code")
        raise QRRenderError("Failed to generate QR code") from e
