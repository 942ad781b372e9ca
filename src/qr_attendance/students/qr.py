from __future__ import annotations

import io

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from .model import Student


def render_student_qr(student: Student, *, box_size: int = 10, border: int = 4) -> bytes:
    """PNG bytes of a QR code carrying the student's school ID."""

    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, box_size=box_size, border=border)
    qr.add_data(student.school_id)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
