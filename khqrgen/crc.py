"""CRC16-CCITT (FALSE) implementation."""
from __future__ import annotations

CRC16_POLY = 0x1021
CRC16_INIT = 0xFFFF


def crc16_ccitt(data: str | bytes) -> str:
    """Compute CRC16-CCITT (0x1021, init 0xFFFF, no final XOR) for KHQR payloads.

    Strings are checksummed as their UTF-8 bytes. Returns 4 uppercase hex digits.
    """

    raw = data.encode("utf-8") if isinstance(data, str) else data

    checksum = CRC16_INIT
    for byte in raw:
        checksum ^= byte << 8
        for _ in range(8):
            if checksum & 0x8000:
                checksum = (checksum << 1) ^ CRC16_POLY
            else:
                checksum <<= 1
            checksum &= 0xFFFF
    return f"{checksum:04X}"
