"""QR image scan services."""
from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass

from ..crc import verify_crc
from ..errors import err_unreadable_source
from ..metadata import QrisMetadata, extract_metadata
from ..monitoring import record_scan
from ..scanner import decode_qr_bytes


@dataclass(slots=True)
class ScanResult:
    payload: str
    crc_valid: bool
    metadata: QrisMetadata


class ScanService:
    def scan_base64(self, image_base64: str) -> ScanResult:
        try:
            image_bytes = base64.b64decode(image_base64, validate=True)
        except (binascii.Error, ValueError):
            record_scan("invalid_base64")
            raise err_unreadable_source("Image is not valid base64") from None
        return self.scan_bytes(image_bytes)

    def scan_bytes(self, image_bytes: bytes) -> ScanResult:
        payload = decode_qr_bytes(image_bytes)
        if not payload:
            record_scan("not_found")
            raise err_unreadable_source("QR code not found in the image")

        metadata = extract_metadata(payload)
        record_scan("decoded")
        return ScanResult(payload=payload, crc_valid=verify_crc(payload), metadata=metadata)
