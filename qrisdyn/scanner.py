"""QR payload decoding from image bytes."""
from __future__ import annotations

import logging

import cv2
import numpy as np

logger = logging.getLogger("qrisdyn.scanner")


def decode_qr_bytes(image_bytes: bytes) -> str | None:
    """Decode the first QR payload found in an encoded image.

    Returns ``None`` when the bytes are not an image or no QR code is found.
    """

    buffer = np.frombuffer(image_bytes, dtype=np.uint8)
    if buffer.size == 0:
        return None
    img = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if img is None:
        logger.info("image bytes could not be decoded", extra={"size": len(image_bytes)})
        return None

    detector = cv2.QRCodeDetector()
    data, _, _ = detector.detectAndDecode(img)
    payload = (data or "").strip()
    if not payload:
        logger.info("no qr code detected", extra={"width": img.shape[1], "height": img.shape[0]})
        return None
    return payload
