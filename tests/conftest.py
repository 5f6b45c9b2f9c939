import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="qrisdyn-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}")
os.environ.setdefault("API_KEY", "test-api-key")
os.environ.setdefault("LOGGING__JSON_LOGS", "false")

import pytest

from qrisdyn.qris_encoder import seal_payload
from qrisdyn.tlv import TLVItem, build_tlv

GOPAY_ACCOUNT = build_tlv(
    [
        TLVItem("00", "ID.CO.GOPAY.WWW"),
        TLVItem("01", "1234567890123450"),
        TLVItem("02", "G123456789"),
        TLVItem("03", "UMI"),
    ]
)
QRIS_ACCOUNT = build_tlv(
    [
        TLVItem("00", "ID.CO.QRIS.WWW"),
        TLVItem("02", "ID1020012345678"),
        TLVItem("03", "UMI"),
    ]
)


def static_items(**overrides):
    """Items of a typical static QRIS; pass ``tag=None`` to drop a tag."""

    values = {
        "00": "01",
        "01": "11",
        "26": GOPAY_ACCOUNT,
        "51": QRIS_ACCOUNT,
        "52": "5812",
        "53": "360",
        "58": "ID",
        "59": "MERCHANT NATIONAL",
        "60": "JAKARTA PUSAT",
        "61": "10110",
        "62": "0703A01",
    }
    values.update(overrides)
    return [TLVItem(tag, value) for tag, value in values.items() if value is not None]


def make_payload(items):
    return seal_payload(items).payload


@pytest.fixture
def static_payload():
    return make_payload(static_items())
