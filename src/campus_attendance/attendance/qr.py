"""Student QR payloads: parse, render and decode.

Payload format: `DTP:STUDENT:<student id>`.
"""
from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Optional

import qrcode
from PIL import Image

from ..core.constants import QR_PREFIX
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class ParsedQR:
    kind: str
    student_id: int


def build_qr_payload(student_id: int) -> str:
    return f"{QR_PREFIX}:STUDENT:{int(student_id)}"


def parse_qr_data(raw: Optional[str]) -> ParsedQR:
    """Validate a scanned payload; raises ValidationError when not a student code."""

    text = (raw or "").strip()
    if not text:
        raise ValidationError("QR data is required")

    parts = text.split(":")
    if len(parts) != 3 or parts[0].upper() != QR_PREFIX:
        raise ValidationError("QR code format is not recognized")

    kind = parts[1].lower()
    if kind != "student":
        raise ValidationError("QR code is not a student code")

    try:
        student_id = int(parts[2])
    except ValueError:
        raise ValidationError("QR code carries an invalid student id")
    if student_id <= 0:
        raise ValidationError("QR code carries an invalid student id")

    return ParsedQR(kind=kind, student_id=student_id)


def render_qr_png(payload: str, *, box_size: int = 10, border: int = 4) -> bytes:
    qr = qrcode.QRCode(box_size=box_size, border=border)
    qr.add_data(payload)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    out = io.BytesIO()
    img.save(out, format="PNG")
    return out.getvalue()


def decode_qr_image(data: bytes) -> str:
    """Read the first QR code found in an uploaded image."""

    # pyzbar loads the native zbar library at import time; keep it off the import path of the app.
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        image = Image.open(io.BytesIO(data))
    except (OSError, ValueError):
        raise ValidationError("Uploaded file is not a readable image")

    results = pyzbar_decode(image)
    if not results:
        raise ValidationError("No QR code found in image")
    return results[0].data.decode("utf-8")
