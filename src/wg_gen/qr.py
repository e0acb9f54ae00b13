# src/wg_gen/qr.py
from __future__ import annotations
import sys
from pathlib import Path
from typing import Optional, TextIO, cast

import qrcode

ERROR_CORRECT_Q: int = cast(int, qrcode.constants.ERROR_CORRECT_Q)


def make_qr(text: str) -> qrcode.QRCode:
    """
    QR code holding the full client config, for import in the mobile app.
    """
    qr = qrcode.QRCode(
        version=None,  # automatic size
        error_correction=ERROR_CORRECT_Q,
        box_size=10,
        border=4,
    )
    qr.add_data(text)
    qr.make(fit=True)
    return qr


def print_qr(text: str, out: Optional[TextIO] = None) -> None:
    make_qr(text).print_ascii(out=out or sys.stdout, invert=True)


def save_qr_png(text: str, path: Path) -> Path:
    img = make_qr(text).make_image(fill_color="black", back_color="white")
    path.parent.mkdir(parents=True, exist_ok=True)
    img.save(str(path))
    return path
