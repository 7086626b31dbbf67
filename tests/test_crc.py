"""
Tests for the CRC16-CCITT (FALSE) checksum.
"""
import re

import pytest

from khqrgen.crc import crc16_ccitt

HEX4 = re.compile(r"[0-9A-F]{4}")


class TestCRC16:
    """Checksum contract used by KHQR/EMVCo scanners."""

    def test_empty_input_is_initial_value(self) -> None:
        assert crc16_ccitt("") == "FFFF"

    def test_standard_check_value(self) -> None:
        """CRC-16/CCITT-FALSE check value pins poly, init and no final XOR."""
        assert crc16_ccitt("123456789") == "29B1"

    def test_single_character(self) -> None:
        assert crc16_ccitt("A") == "B915"

    def test_bytes_and_str_agree(self) -> None:
        assert crc16_ccitt(b"123456789") == crc16_ccitt("123456789")

    @pytest.mark.parametrize(
        "data",
        ["0", "000201010212", "6304", "PHNOM PENH", "x" * 512],
    )
    def test_output_is_four_uppercase_hex_digits(self, data: str) -> None:
        result = crc16_ccitt(data)
        assert HEX4.fullmatch(result)
        assert crc16_ccitt(data) == result

    def test_single_character_change_alters_checksum(self) -> None:
        assert crc16_ccitt("5405" + "12.00") != crc16_ccitt("5405" + "12.01")
