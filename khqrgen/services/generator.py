"""KHQR generation services: request validation, building and latest-value lookup."""
from __future__ import annotations

import hashlib
import logging
import math
from decimal import Decimal, InvalidOperation

from ..config import settings
from ..khqr_encoder import build_payload, format_amount
from ..models import GeneratedPayload, MerchantIdentity, utc_now
from ..monitoring import record_payload_generated
from ..tlv import MAX_VALUE_LENGTH
from .errors import err_bad_amount, err_invalid_id, err_not_found
from .store import LatestPayloadStore

logger = logging.getLogger("khqrgen.generator")


def parse_amount(raw: int | float | str | None) -> float:
    """Accept numbers and numeric strings; reject anything not finite and non-negative."""

    if raw is None or isinstance(raw, bool):
        raise err_bad_amount()
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise err_bad_amount()
        try:
            value = float(Decimal(text))
        except (InvalidOperation, ValueError):
            raise err_bad_amount() from None
    else:
        try:
            value = float(raw)
        except OverflowError:
            raise err_bad_amount() from None

    if not math.isfinite(value) or value < 0:
        raise err_bad_amount()
    if len(format_amount(value)) > MAX_VALUE_LENGTH:
        raise err_bad_amount("Amount is too large")
    return value


def parse_identity(raw: str | None) -> MerchantIdentity:
    try:
        return MerchantIdentity.parse(raw)
    except ValueError as exc:
        raise err_invalid_id(str(exc)) from None


class KHQRGenerator:
    def __init__(self, store: LatestPayloadStore, *, strict: bool | None = None):
        self.store = store
        self.strict = settings.khqr_strict_lengths if strict is None else strict

    def generate(self, *, amount: int | float | str | None, identity: str | None = None) -> GeneratedPayload:
        value = parse_amount(amount)
        merchant = parse_identity(identity)

        payload = build_payload(merchant, value, strict=self.strict)
        result = GeneratedPayload(
            identity=merchant,
            payload=payload,
            md5_hash=hashlib.md5(payload.encode("utf-8")).hexdigest(),
            amount=amount,
            generated_at=utc_now(),
        )
        self.store.put(result)
        record_payload_generated(merchant.value)

        logger.info(
            "khqr payload generated",
            extra={"identity": merchant.value, "amount": format_amount(value), "crc": result.crc},
        )
        return result

    def latest(self, identity: str | None = None) -> GeneratedPayload:
        merchant = parse_identity(identity)
        result = self.store.get(merchant)
        if result is None:
            raise err_not_found(merchant)
        return result
