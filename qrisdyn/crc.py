"""CRC16-CCITT (FALSE variant) used as the QRIS integrity trailer."""
from __future__ import annotations

CRC16_POLY = 0x1021
CRC16_INIT = 0xFFFF
CRC_LENGTH = 4


def crc16_ccitt(data: str) -> str:
    """Compute CRC16-CCITT-FALSE (poly 0x1021, init 0xFFFF) as 4 uppercase hex digits."""

    checksum = CRC16_INIT
    for ch in data.encode("utf-8"):
        checksum ^= ch << 8
        for _ in range(8):
            if checksum & 0x8000:
                checksum = (checksum << 1) ^ CRC16_POLY
            else:
                checksum <<= 1
            checksum &= 0xFFFF
    return f"{checksum:04X}"


def verify_crc(payload: str) -> bool:
    """Check the trailing checksum against everything that precedes it."""

    if len(payload) <= CRC_LENGTH:
        return False
    body, trailer = payload[:-CRC_LENGTH], payload[-CRC_LENGTH:]
    return crc16_ccitt(body) == trailer.upper()
