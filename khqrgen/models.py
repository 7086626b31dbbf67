"""Merchant identities and generated payload records."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timezone

MERCHANT_NAME = "Sochea Lyouy"


class MerchantIdentity(str, enum.Enum):
    ID1 = "ID1"
    ID2 = "ID2"
    ID3 = "ID3"
    ID4 = "ID4"
    ID5 = "ID5"
    ID6 = "ID6"

    @property
    def profile(self) -> MerchantProfile:
        return MERCHANT_PROFILES[self]

    @classmethod
    def choices(cls) -> list[str]:
        return [member.value for member in cls]

    @classmethod
    def parse(cls, tag: str | None) -> MerchantIdentity:
        """Case-insensitive lookup; a missing tag means ID1, an unknown one raises ValueError."""

        if not tag:
            return cls.ID1
        try:
            return cls(tag.strip().upper())
        except ValueError:
            raise ValueError(f"Invalid ID. Use one of: {', '.join(cls.choices())}") from None

    @classmethod
    def resolve(cls, tag: MerchantIdentity | str | None) -> MerchantIdentity:
        """Permissive lookup used by the payload builder: anything unknown falls back to ID1."""

        if isinstance(tag, cls):
            return tag
        try:
            return cls.parse(tag)
        except (ValueError, AttributeError):
            return cls.ID1


@dataclass(frozen=True)
class MerchantProfile:
    guid: str
    display_name: str


MERCHANT_PROFILES: dict[MerchantIdentity, MerchantProfile] = {
    identity: MerchantProfile(
        guid=f"lyouy_sochea_{identity.value.lower()}@aclb",
        display_name=f"{MERCHANT_NAME} - {identity.value}",
    )
    for identity in MerchantIdentity
}


@dataclass(frozen=True)
class GeneratedPayload:
    identity: MerchantIdentity
    payload: str
    md5_hash: str
    amount: int | float | str
    generated_at: datetime

    @property
    def crc(self) -> str:
        return self.payload[-4:]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
