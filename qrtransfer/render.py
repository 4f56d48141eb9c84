"""
QR Rendering

Draws one chunk's wire text as a PNG QR code.
"""
import io
from typing import Union

import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q

from .config import QR_BORDER, QR_BOX_SIZE, QR_ERROR_CORRECTION
from .logging import QR, get_logger
from .protocol.chunking import Chunk, encode_chunk_to_wire

logger = get_logger(__name__)

ERROR_CORRECTION_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


def render_chunk_png(
    chunk: Union[Chunk, str],
    error_correction: str = QR_ERROR_CORRECTION,
    box_size: int = QR_BOX_SIZE,
    border: int = QR_BORDER,
    fill_color: str = "black",
    back_color: str = "white",
) -> bytes:
    """
    Render a chunk as a PNG QR code.

    Args:
        chunk: Chunk, or its wire text
        error_correction: 'L', 'M', 'Q' or 'H'

    Returns:
        bytes: PNG image
    """
    if error_correction not in ERROR_CORRECTION_LEVELS:
        raise ValueError(f"Unknown error correction level: {error_correction}")

    text = encode_chunk_to_wire(chunk) if isinstance(chunk, Chunk) else chunk

    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECTION_LEVELS[error_correction],
        box_size=box_size,
        border=border,
    )
    qr.add_data(text)
    qr.make(fit=True)

    logger.debug("%s Rendered %d chars as QR version %d", QR, len(text), qr.version)

    img = qr.make_image(fill_color=fill_color, back_color=back_color)

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()
