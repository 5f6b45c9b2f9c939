"""Merchant metadata extraction from QRIS payloads."""
from __future__ import annotations

from dataclasses import asdict, dataclass

from .qris_encoder import POI_DYNAMIC, TAG_FEE_FIXED, TAG_FEE_PERCENT
from .tlv import decode_tlv

GENERIC_GUI = "ID.CO.QRIS.WWW"
MERCHANT_ACCOUNT_TAGS = ("26", "27", "51")

_DEFAULTS: dict[str, str | None] = {
    "26": "",
    "27": "",
    "51": "",
    "54": None,
    "55": None,
    "58": "ID",
    "59": "",
    "60": "",
    "61": "",
}


@dataclass(frozen=True)
class QrisMetadata:
    """Snapshot of the merchant identity and transaction fields of one payload.

    ``tax`` is the raw Tag 55 value (fee indicator ``"02"`` fixed or ``"03"``
    percentage); the fee amount itself lives in ``tax_value`` (Tag 56 or 57).
    """

    merchant: str
    company: str
    region: str
    country: str
    postal_code: str
    merchant_pan: str
    price: str | None = None
    tax: str | None = None
    tax_value: str | None = None
    is_dynamic: bool = False

    def to_dict(self) -> dict[str, str | bool | None]:
        return asdict(self)


def _merchant_account(emv: dict[str, str | None]) -> tuple[str, str]:
    for tag in MERCHANT_ACCOUNT_TAGS:
        raw = emv[tag]
        if not raw:
            continue
        nested = decode_tlv(raw)
        gui = nested.get("00", "")
        if gui and gui.upper() != GENERIC_GUI:
            return gui, nested.get("01", "")
    return "", ""


def extract_metadata(qris: str) -> QrisMetadata:
    """Extract merchant, company and transaction metadata from a QRIS string."""

    emv: dict[str, str | None] = {**_DEFAULTS, **decode_tlv(qris)}
    company, merchant_pan = _merchant_account(emv)

    return QrisMetadata(
        merchant=emv["59"],
        company=company,
        region=emv["60"],
        country=emv["58"],
        postal_code=emv["61"],
        merchant_pan=merchant_pan,
        price=emv["54"],
        tax=emv["55"],
        tax_value=emv.get(TAG_FEE_FIXED) or emv.get(TAG_FEE_PERCENT),
        is_dynamic=emv.get("01") == POI_DYNAMIC,
    )
