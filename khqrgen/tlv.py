"""Utility helpers to build and parse EMV-style TLV payloads."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

MAX_VALUE_LENGTH = 99


@dataclass(frozen=True)
class TLVItem:
    tag: str
    value: str
    # Declared length written into the header; defaults to len(value).
    length: int | None = None

    def serialize(self) -> str:
        declared = len(self.value) if self.length is None else self.length
        if declared > MAX_VALUE_LENGTH or len(self.value) > MAX_VALUE_LENGTH:
            raise ValueError(f"TLV value for tag {self.tag} exceeds {MAX_VALUE_LENGTH} characters")
        return f"{self.tag}{declared:02d}{self.value}"


def build_tlv(items: Iterable[TLVItem]) -> str:
    """Serialize iterable of TLV items into EMV string."""

    return "".join(item.serialize() for item in items)


def parse_tlv(payload: str) -> Iterator[TLVItem]:
    """Parse TLV payload string into TLV items."""

    idx = 0
    total = len(payload)
    while idx + 4 <= total:
        tag = payload[idx : idx + 2]
        raw_length = payload[idx + 2 : idx + 4]
        if not raw_length.isdigit():
            raise ValueError(f"Invalid TLV length {raw_length!r} for tag {tag}")
        length = int(raw_length)
        value_start = idx + 4
        value_end = value_start + length
        if value_end > total:
            raise ValueError("Invalid TLV length exceeds payload")
        value = payload[value_start:value_end]
        yield TLVItem(tag=tag, value=value)
        idx = value_end
    if idx != total:
        raise ValueError("Dangling TLV data detected")
