"""QRIS payload mutation: static to dynamic with amount and service fee."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable

from .crc import crc16_ccitt
from .errors import (
    err_amount_not_set,
    err_invalid_amount,
    err_invalid_tax_format,
    err_invalid_tax_value,
    err_missing_country_anchor,
)
from .tlv import TLVItem, build_tlv, parse_tlv

logger = logging.getLogger("qrisdyn.encoder")

TAG_POINT_OF_INITIATION = "01"
TAG_AMOUNT = "54"
TAG_FEE_INDICATOR = "55"
TAG_FEE_FIXED = "56"
TAG_FEE_PERCENT = "57"
TAG_COUNTRY = "58"
TAG_CRC = "63"

POI_STATIC = "11"
POI_DYNAMIC = "12"
COUNTRY_ANCHOR = "ID"
FEE_FIXED = "02"
FEE_PERCENT = "03"

_FEE_TAGS = {TAG_FEE_INDICATOR, TAG_FEE_FIXED, TAG_FEE_PERCENT}
_PERCENT_PATTERN = re.compile(r"-?\d+(\.\d+)?", re.ASCII)
MAX_VALUE_DIGITS = 99


@dataclass(frozen=True)
class EncodedPayload:
    payload: str
    crc: str


@dataclass(frozen=True)
class ServiceFee:
    indicator: str
    value: str

    @property
    def is_percentage(self) -> bool:
        return self.indicator == FEE_PERCENT

    @classmethod
    def parse(cls, tax: int | str) -> ServiceFee:
        """Build a fee from a nominal integer or a percentage string such as ``"10%"``."""

        if isinstance(tax, bool):
            raise err_invalid_tax_format()
        if isinstance(tax, int):
            if tax < 0:
                raise err_invalid_tax_value()
            value = str(tax)
            if len(value) > MAX_VALUE_DIGITS:
                raise err_invalid_tax_value(f"Tax must have at most {MAX_VALUE_DIGITS} digits")
            return cls(indicator=FEE_FIXED, value=value)
        if isinstance(tax, str) and tax.endswith("%"):
            percent = tax.rstrip("%")
            if not _PERCENT_PATTERN.fullmatch(percent):
                raise err_invalid_tax_format(f"Invalid tax percentage {tax!r}")
            if percent.startswith("-"):
                raise err_invalid_tax_value("Tax percentage must be >= 0")
            if len(percent) > MAX_VALUE_DIGITS:
                raise err_invalid_tax_value(f"Tax percentage must have at most {MAX_VALUE_DIGITS} characters")
            return cls(indicator=FEE_PERCENT, value=percent)
        raise err_invalid_tax_format()

    def to_items(self) -> Iterable[TLVItem]:
        yield TLVItem(tag=TAG_FEE_INDICATOR, value=self.indicator)
        value_tag = TAG_FEE_PERCENT if self.is_percentage else TAG_FEE_FIXED
        yield TLVItem(tag=value_tag, value=self.value)


def strip_crc(base_payload: str) -> list[TLVItem]:
    """Parse an EMV payload and drop Tag 63 (CRC) if present."""

    return [item for item in parse_tlv(base_payload) if item.tag != TAG_CRC]


def seal_payload(items: Iterable[TLVItem]) -> EncodedPayload:
    """Serialize items and append Tag 63 with a fresh CRC16-CCITT."""

    payload_no_crc = f"{build_tlv(items)}{TAG_CRC}04"
    crc = crc16_ccitt(payload_no_crc)
    return EncodedPayload(payload=f"{payload_no_crc}{crc}", crc=crc)


def _promote_to_dynamic(items: list[TLVItem]) -> list[TLVItem]:
    # Best effort: anything other than a static "11" passes through untouched.
    for idx, item in enumerate(items):
        if item.tag != TAG_POINT_OF_INITIATION:
            continue
        if item.value == POI_STATIC:
            items[idx] = TLVItem(tag=TAG_POINT_OF_INITIATION, value=POI_DYNAMIC)
        elif item.value != POI_DYNAMIC:
            logger.warning(
                "point of initiation left unchanged",
                extra={"point_of_initiation": item.value},
            )
        return items
    logger.warning("point of initiation tag not found, payload left static")
    return items


def _country_anchor_index(items: list[TLVItem]) -> int:
    positions = [
        idx for idx, item in enumerate(items) if item.tag == TAG_COUNTRY and item.value == COUNTRY_ANCHOR
    ]
    if len(positions) != 1:
        raise err_missing_country_anchor(
            f"Invalid QRIS format (found {len(positions)} occurrences of 5802ID, expected 1)"
        )
    return positions[0]


def _find_tag(items: list[TLVItem], tag: str) -> int | None:
    for idx, item in enumerate(items):
        if item.tag == tag:
            return idx
    return None


def _prepare(payload: str) -> list[TLVItem]:
    items = _promote_to_dynamic(strip_crc(payload))
    _country_anchor_index(items)
    return items


def set_price(payload: str, price: int) -> str:
    """Insert or update the transaction amount (Tag 54) and re-seal the payload."""

    if isinstance(price, bool) or not isinstance(price, int) or price < 0:
        raise err_invalid_amount()
    if len(str(price)) > MAX_VALUE_DIGITS:
        raise err_invalid_amount(f"Price must have at most {MAX_VALUE_DIGITS} digits")

    items = _prepare(payload)
    amount = TLVItem(tag=TAG_AMOUNT, value=str(price))
    existing = _find_tag(items, TAG_AMOUNT)
    if existing is not None:
        items[existing] = amount
    else:
        items.insert(_country_anchor_index(items), amount)

    encoded = seal_payload(items)
    logger.debug("amount set", extra={"amount": price, "crc": encoded.crc})
    return encoded.payload


def set_tax(payload: str, tax: int | str) -> str:
    """Insert or replace the service fee (Tags 55-57) right after the amount."""

    fee = ServiceFee.parse(tax)

    items = _prepare(payload)
    if _find_tag(items, TAG_AMOUNT) is None:
        raise err_amount_not_set()

    items = [item for item in items if item.tag not in _FEE_TAGS]
    amount_idx = _find_tag(items, TAG_AMOUNT)
    items[amount_idx + 1 : amount_idx + 1] = list(fee.to_items())

    encoded = seal_payload(items)
    logger.debug(
        "service fee set",
        extra={"fee_indicator": fee.indicator, "fee_value": fee.value, "crc": encoded.crc},
    )
    return encoded.payload
