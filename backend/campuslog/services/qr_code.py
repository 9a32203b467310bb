"""
QR code rendering for registered files.

The code encodes the file id itself (not a URL), so any scanner app yields the
id that GET /api/filelog/status/{file_id} expects.
"""

import io

import qrcode

PNG_MIME_TYPE = "image/png"


def render_qr_png(data: str) -> bytes:
    """Render `data` as a QR code and return the PNG bytes."""
    image = qrcode.make(data)
    buffer = io.BytesIO()
    image.save(buffer)
    return buffer.getvalue()
