"""
Tests for KHQR payload building, verification and decoding.
"""
from decimal import Decimal

import pytest

from khqrgen.crc import crc16_ccitt
from khqrgen.khqr_encoder import build_payload, decode_payload, format_amount, verify_payload
from khqrgen.models import MerchantIdentity

TS = 1_700_000_000_000


def deployed_body(guid: str, name: str, amount_field: str, ts: int = TS) -> str:
    return (
        "000201"
        "010212"
        f"29210017{guid}"
        "52045999"
        "5303840"
        f"{amount_field}"
        "5802KH"
        f"5912{name}"
        "6010PHNOM PENH"
        f"99170013{ts}"
    )


class TestBuildPayload:
    """Default layout matches the deployed payloads bit for bit."""

    def test_deployed_layout(self) -> None:
        payload = build_payload(MerchantIdentity.ID1, 12, timestamp_ms=TS)

        body = deployed_body("lyouy_sochea_id1@aclb", "Sochea Lyouy - ID1", "540512.00")
        assert payload[:-4] == body + "6304"
        assert payload[-4:] == crc16_ccitt(body + "6304")

    def test_identity_selects_guid_and_name(self) -> None:
        payload = build_payload(MerchantIdentity.ID4, 1, timestamp_ms=TS)

        assert "29210017lyouy_sochea_id4@aclb" in payload
        assert "5912Sochea Lyouy - ID4" in payload

    @pytest.mark.parametrize(
        ("amount", "field"),
        [
            (12, "540512.00"),
            (12.5, "540512.50"),
            ("12", "540512.00"),
            (Decimal("0.1"), "54040.10"),
            (0, "54040.00"),
            (1234.5, "54071234.50"),
        ],
    )
    def test_amount_field_length_matches_formatted_value(self, amount, field: str) -> None:
        assert field in build_payload(MerchantIdentity.ID1, amount, timestamp_ms=TS)

    def test_format_amount(self) -> None:
        assert format_amount(12) == "12.00"
        assert format_amount("3.456") == "3.46"

    @pytest.mark.parametrize(
        ("amount", "expected"),
        [(0.125, "0.13"), (0.375, "0.38"), (2.5, "2.50"), (2.675, "2.67"), (1.005, "1.00")],
    )
    def test_format_amount_rounds_ties_up_on_binary_value(self, amount: float, expected: str) -> None:
        """0.125 is exact in binary and rounds up; 2.675 and 1.005 sit just below the tie."""
        assert format_amount(amount) == expected

    @pytest.mark.parametrize("amount", [-0.0, "-0", Decimal("-0")])
    def test_negative_zero_renders_unsigned(self, amount) -> None:
        assert format_amount(amount) == "0.00"
        assert "54040.00" in build_payload(MerchantIdentity.ID1, amount, timestamp_ms=TS)

    def test_half_cent_amount_in_payload(self) -> None:
        assert "54040.13" in build_payload(MerchantIdentity.ID1, 0.125, timestamp_ms=TS)

    def test_large_amount_renders_without_exponent(self) -> None:
        assert format_amount(1e30) == "1000000000000000019884624838656.00"

    def test_amount_beyond_two_digit_length_raises(self) -> None:
        """Tag 54 carries a 2-digit length, so amounts over 99 characters are outside the contract."""
        with pytest.raises(ValueError, match="tag 54"):
            build_payload(MerchantIdentity.ID1, 1e100, timestamp_ms=TS)

    def test_payload_is_self_verifying(self) -> None:
        payload = build_payload(MerchantIdentity.ID2, 99.99)

        assert payload[-8:-4] == "6304"
        assert crc16_ccitt(payload[:-4]) == payload[-4:]
        assert verify_payload(payload)

    @pytest.mark.parametrize("identity", ["ID9", "", None, "nope"])
    def test_unknown_identity_falls_back_to_id1(self, identity) -> None:
        expected = build_payload(MerchantIdentity.ID1, 5, timestamp_ms=TS)
        assert build_payload(identity, 5, timestamp_ms=TS) == expected

    def test_identity_string_is_case_insensitive(self) -> None:
        assert build_payload("id3", 5, timestamp_ms=TS) == build_payload(MerchantIdentity.ID3, 5, timestamp_ms=TS)

    def test_different_milliseconds_differ(self) -> None:
        first = build_payload(MerchantIdentity.ID1, 12, timestamp_ms=TS)
        second = build_payload(MerchantIdentity.ID1, 12, timestamp_ms=TS + 1)

        assert first != second
        assert first[-4:] != second[-4:]

    def test_same_inputs_are_deterministic(self) -> None:
        assert build_payload("ID5", 7, timestamp_ms=TS) == build_payload("ID5", 7, timestamp_ms=TS)

    def test_default_timestamp_is_current_milliseconds(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("khqrgen.khqr_encoder.time.time_ns", lambda: TS * 1_000_000 + 123)

        assert f"99170013{TS}6304" in build_payload(MerchantIdentity.ID1, 1)


class TestStrictLayout:
    """Strict layout computes every declared length."""

    def test_strict_payload_decodes(self) -> None:
        payload = build_payload(MerchantIdentity.ID1, 12, timestamp_ms=TS, strict=True)
        fields = decode_payload(payload)

        assert fields["00"] == "01"
        assert fields["01"] == "12"
        assert fields["29"] == "0021lyouy_sochea_id1@aclb"
        assert fields["52"] == "5999"
        assert fields["53"] == "840"
        assert fields["54"] == "12.00"
        assert fields["58"] == "KH"
        assert fields["59"] == "Sochea Lyouy - ID1"
        assert fields["60"] == "PHNOM PENH"
        assert fields["99"] == f"0013{TS}"
        assert fields["63"] == payload[-4:]
        assert verify_payload(payload)

    def test_strict_keeps_timestamp_prefix(self) -> None:
        payload = build_payload(MerchantIdentity.ID6, 3, timestamp_ms=TS, strict=True)
        assert f"99170013{TS}6304" in payload

    def test_deployed_layout_does_not_decode(self) -> None:
        with pytest.raises(ValueError):
            decode_payload(build_payload(MerchantIdentity.ID1, 12, timestamp_ms=TS))


class TestVerifyPayload:
    def test_tampered_payload_fails(self) -> None:
        payload = build_payload(MerchantIdentity.ID1, 12, timestamp_ms=TS)
        tampered = payload.replace("12.00", "13.00")

        assert not verify_payload(tampered)

    @pytest.mark.parametrize("payload", ["", "6304", "000201", "0002016304abcd"])
    def test_missing_or_malformed_trailer(self, payload: str) -> None:
        assert not verify_payload(payload)
