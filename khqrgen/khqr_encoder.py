"""KHQR payload encoder with CRC16-CCITT finalization."""
from __future__ import annotations

import re
import time
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Iterable

from .crc import crc16_ccitt
from .models import MerchantIdentity
from .tlv import TLVItem, build_tlv, parse_tlv

CRC_HEADER = "6304"
MERCHANT_CITY = "PHNOM PENH"
MERCHANT_CATEGORY_CODE = "5999"
CURRENCY_USD = "840"
COUNTRY_CODE = "KH"

# Declared lengths of the deployed layout. Tags 29 and 59 declare less than
# their actual values hold.
LEGACY_ACCOUNT_LENGTH = 21
LEGACY_GUID_LENGTH = 17
LEGACY_NAME_LENGTH = 12
LEGACY_TIMESTAMP_LENGTH = 17
LEGACY_TIMESTAMP_VALUE_LENGTH = 13

_CRC_TRAILER = re.compile(r"6304[0-9A-F]{4}\Z")

CENT = Decimal("0.01")
# Wide enough to quantize any finite float to cents.
_AMOUNT_CONTEXT = Context(prec=400)


def current_timestamp_ms() -> int:
    return time.time_ns() // 1_000_000


def format_amount(amount: int | float | str | Decimal) -> str:
    """Coerce to float and render with exactly two fractional digits.

    Ties round away from zero on the exact binary value of the float, and a
    negative zero renders unsigned.
    """

    cents = Decimal(float(amount)).quantize(CENT, rounding=ROUND_HALF_UP, context=_AMOUNT_CONTEXT)
    if cents.is_zero():
        cents = abs(cents)
    return f"{cents:f}"


def _fields(
    identity: MerchantIdentity,
    amount: int | float | str | Decimal,
    timestamp_ms: int,
    strict: bool,
) -> Iterable[TLVItem]:
    profile = identity.profile

    def declared(length: int) -> int | None:
        return None if strict else length

    yield TLVItem(tag="00", value="01")
    yield TLVItem(tag="01", value="12")
    account = TLVItem(tag="00", value=profile.guid, length=declared(LEGACY_GUID_LENGTH)).serialize()
    yield TLVItem(tag="29", value=account, length=declared(LEGACY_ACCOUNT_LENGTH))
    yield TLVItem(tag="52", value=MERCHANT_CATEGORY_CODE)
    yield TLVItem(tag="53", value=CURRENCY_USD)
    yield TLVItem(tag="54", value=format_amount(amount))
    yield TLVItem(tag="58", value=COUNTRY_CODE)
    yield TLVItem(tag="59", value=profile.display_name, length=declared(LEGACY_NAME_LENGTH))
    yield TLVItem(tag="60", value=MERCHANT_CITY)
    # Tag 99 template with sub-tag 00 holding epoch milliseconds: "99170013<ms>".
    stamp = TLVItem(tag="00", value=str(timestamp_ms), length=declared(LEGACY_TIMESTAMP_VALUE_LENGTH)).serialize()
    yield TLVItem(tag="99", value=stamp, length=declared(LEGACY_TIMESTAMP_LENGTH))


def build_payload(
    identity: MerchantIdentity | str | None,
    amount: int | float | str | Decimal,
    *,
    timestamp_ms: int | None = None,
    strict: bool = False,
) -> str:
    """Build the full KHQR payload, including the trailing CRC field.

    ``amount`` must already be validated as a finite non-negative number whose
    formatted value fits the 2-digit length of tag 54 (at most 99 characters,
    i.e. below roughly 1e96); a longer amount raises ``ValueError``.
    Unknown identities fall back to ID1. With ``strict`` every declared length
    is computed from its value; otherwise the deployed layout is reproduced.
    """

    resolved = MerchantIdentity.resolve(identity)
    if timestamp_ms is None:
        timestamp_ms = current_timestamp_ms()

    body = build_tlv(_fields(resolved, amount, timestamp_ms, strict))
    crc_input = f"{body}{CRC_HEADER}"
    return f"{crc_input}{crc16_ccitt(crc_input)}"


def verify_payload(payload: str) -> bool:
    """Check the trailing CRC field against the checksum of everything before it."""

    if not _CRC_TRAILER.search(payload):
        return False
    return crc16_ccitt(payload[:-4]) == payload[-4:]


def decode_payload(payload: str) -> dict[str, str]:
    """Map tag to value for a payload built with ``strict=True``."""

    return {item.tag: item.value for item in parse_tlv(payload)}
