"""Utility helpers to build and parse EMV-style TLV payloads."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from .errors import err_malformed_length, err_truncated_payload

HEADER_SIZE = 4
MAX_VALUE_LENGTH = 99


@dataclass(frozen=True)
class TLVItem:
    tag: str
    value: str

    def serialize(self) -> str:
        if len(self.value) > MAX_VALUE_LENGTH:
            raise err_malformed_length(f"Value of tag {self.tag} exceeds {MAX_VALUE_LENGTH} characters")
        return f"{self.tag}{len(self.value):02d}{self.value}"


def build_tlv(items: Iterable[TLVItem]) -> str:
    """Serialize iterable of TLV items into EMV string."""

    return "".join(item.serialize() for item in items)


def parse_tlv(payload: str) -> Iterator[TLVItem]:
    """Parse TLV payload string into TLV items, duplicates included."""

    idx = 0
    total = len(payload)
    while idx < total:
        if idx + HEADER_SIZE > total:
            raise err_truncated_payload(f"Incomplete TLV header at offset {idx}")
        tag = payload[idx : idx + 2]
        raw_length = payload[idx + 2 : idx + HEADER_SIZE]
        if not (raw_length.isascii() and raw_length.isdigit()):
            raise err_malformed_length(f"Non-numeric length {raw_length!r} for tag {tag} at offset {idx}")
        value_start = idx + HEADER_SIZE
        value_end = value_start + int(raw_length)
        if value_end > total:
            raise err_truncated_payload(f"Value of tag {tag} at offset {idx} exceeds payload")
        yield TLVItem(tag=tag, value=payload[value_start:value_end])
        idx = value_end


def decode_tlv(payload: str) -> dict[str, str]:
    """Decode one TLV level into an ordered mapping; the last duplicate wins."""

    return {item.tag: item.value for item in parse_tlv(payload)}
