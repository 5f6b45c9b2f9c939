from conftest import GOPAY_ACCOUNT, QRIS_ACCOUNT, make_payload, static_items
from qrisdyn.metadata import QrisMetadata, extract_metadata
from qrisdyn.qris_encoder import set_price, set_tax
from qrisdyn.tlv import TLVItem, build_tlv


def test_extract_merchant_identity(static_payload):
    metadata = extract_metadata(static_payload)

    assert metadata.merchant == "MERCHANT NATIONAL"
    assert metadata.company == "ID.CO.GOPAY.WWW"
    assert metadata.merchant_pan == "1234567890123450"
    assert metadata.region == "JAKARTA PUSAT"
    assert metadata.country == "ID"
    assert metadata.postal_code == "10110"
    assert metadata.price is None
    assert metadata.tax is None
    assert metadata.tax_value is None
    assert metadata.is_dynamic is False


def test_generic_qris_identifier_is_skipped():
    acquirer = build_tlv([TLVItem("00", "ID.CO.BANKABC.WWW"), TLVItem("01", "9360001234567890")])
    payload = make_payload(static_items(**{"26": QRIS_ACCOUNT, "51": acquirer}))

    metadata = extract_metadata(payload)

    assert metadata.company == "ID.CO.BANKABC.WWW"
    assert metadata.merchant_pan == "9360001234567890"


def test_generic_marker_is_case_insensitive():
    lowered = build_tlv([TLVItem("00", "id.co.qris.www"), TLVItem("01", "111")])
    payload = make_payload(static_items(**{"26": lowered, "51": None}))

    metadata = extract_metadata(payload)

    assert metadata.company == ""
    assert metadata.merchant_pan == ""


def test_first_qualifying_account_wins():
    other = build_tlv([TLVItem("00", "ID.CO.OTHER.WWW"), TLVItem("01", "222")])
    payload = make_payload(static_items(**{"26": GOPAY_ACCOUNT, "27": other}))

    assert extract_metadata(payload).company == "ID.CO.GOPAY.WWW"


def test_account_without_pan_keeps_company():
    no_pan = build_tlv([TLVItem("00", "ID.CO.DANA.WWW")])
    payload = make_payload(static_items(**{"26": no_pan}))

    metadata = extract_metadata(payload)

    assert metadata.company == "ID.CO.DANA.WWW"
    assert metadata.merchant_pan == ""


def test_defaults_for_absent_tags():
    metadata = extract_metadata(build_tlv([TLVItem("00", "01")]))

    assert metadata == QrisMetadata(
        merchant="",
        company="",
        region="",
        country="ID",
        postal_code="",
        merchant_pan="",
    )


def test_transaction_fields_of_dynamic_payload(static_payload):
    payload = set_tax(set_price(static_payload, 50000), "10%")

    metadata = extract_metadata(payload)

    assert metadata.price == "50000"
    assert metadata.tax == "03"
    assert metadata.tax_value == "10"
    assert metadata.is_dynamic is True
    assert metadata.to_dict()["price"] == "50000"
    assert set(metadata.to_dict()) == {
        "merchant",
        "company",
        "region",
        "country",
        "postal_code",
        "merchant_pan",
        "price",
        "tax",
        "tax_value",
        "is_dynamic",
    }
