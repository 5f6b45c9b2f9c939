import base64

import pytest
from fastapi.testclient import TestClient

from conftest import make_payload, static_items
from qrisdyn.api import app
from qrisdyn.config import settings
from qrisdyn.crc import verify_crc
from qrisdyn.renderer import RenderOptions, render_qr_base64
from qrisdyn.schemas import MAX_AMOUNT


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as test_client:
        test_client.headers.update({"X-API-Key": settings.api_key})
        yield test_client


def test_health_endpoint(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers["X-Request-ID"]


def test_api_key_required(client, static_payload):
    resp = client.post("/v1/qris/metadata", json={"payload": static_payload}, headers={"X-API-Key": "wrong"})

    assert resp.status_code == 401


def test_metadata_endpoint(client, static_payload):
    resp = client.post("/v1/qris/metadata", json={"payload": static_payload})

    assert resp.status_code == 200
    data = resp.json()
    assert data["merchant"] == "MERCHANT NATIONAL"
    assert data["company"] == "ID.CO.GOPAY.WWW"
    assert data["merchant_pan"] == "1234567890123450"
    assert data["price"] is None


def test_metadata_of_broken_payload(client):
    resp = client.post("/v1/qris/metadata", json={"payload": "0102AB01"})

    assert resp.status_code == 422
    assert resp.json()["code"] == "ERR_TRUNCATED_PAYLOAD"


def test_create_and_fetch_dynamic_code(client, static_payload):
    resp = client.post(
        "/v1/qris/dynamic",
        json={"payload": static_payload, "amount": 50000, "tax": "10%", "include_image": True},
    )

    assert resp.status_code == 200
    data = resp.json()
    assert verify_crc(data["payload"])
    assert data["crc"] == data["payload"][-4:]
    assert data["metadata"]["price"] == "50000"
    assert data["metadata"]["tax"] == "03"
    assert data["metadata"]["is_dynamic"] is True
    assert data["qr_png_base64"].startswith("iVBORw0KGgo")

    fetched = client.get(f"/v1/qris/dynamic/{data['id']}")
    assert fetched.status_code == 200
    record = fetched.json()
    assert record["payload"] == data["payload"]
    assert record["amount"] == 50000
    assert record["tax"] == "10%"
    assert record["merchant_name"] == "MERCHANT NATIONAL"


def test_dynamic_code_not_found(client):
    resp = client.get("/v1/qris/dynamic/00000000-0000-0000-0000-000000000000")

    assert resp.status_code == 404


def test_dynamic_with_nominal_tax(client, static_payload):
    resp = client.post("/v1/qris/dynamic", json={"payload": static_payload, "amount": 20000, "tax": 2000})

    assert resp.status_code == 200
    assert resp.json()["metadata"]["tax_value"] == "2000"
    assert resp.json()["qr_png_base64"] is None


def test_dynamic_rejects_bad_tax(client, static_payload):
    resp = client.post("/v1/qris/dynamic", json={"payload": static_payload, "amount": 20000, "tax": "ten"})

    assert resp.status_code == 422
    assert resp.json()["code"] == "ERR_INVALID_TAX_FORMAT"


def test_dynamic_rejects_oversized_amount(client, static_payload):
    resp = client.post("/v1/qris/dynamic", json={"payload": static_payload, "amount": 10**20})

    assert resp.status_code == 422
    assert resp.json()["detail"][0]["loc"] == ["body", "amount"]


def test_dynamic_accepts_largest_amount(client, static_payload):
    resp = client.post("/v1/qris/dynamic", json={"payload": static_payload, "amount": MAX_AMOUNT})

    assert resp.status_code == 200
    assert resp.json()["metadata"]["price"] == str(MAX_AMOUNT)


def test_dynamic_rejects_missing_anchor(client):
    payload = make_payload(static_items(**{"58": None}))

    resp = client.post("/v1/qris/dynamic", json={"payload": payload, "amount": 1000})

    assert resp.status_code == 422
    assert resp.json()["code"] == "ERR_MISSING_COUNTRY_ANCHOR"


def test_scan_endpoint(client, static_payload):
    image = render_qr_base64(static_payload, RenderOptions(scale=8))

    resp = client.post("/v1/qris/scan", json={"image_base64": image})

    assert resp.status_code == 200
    data = resp.json()
    assert data["payload"] == static_payload
    assert data["crc_valid"] is True
    assert data["metadata"]["company"] == "ID.CO.GOPAY.WWW"


def test_scan_rejects_non_image(client):
    resp = client.post("/v1/qris/scan", json={"image_base64": base64.b64encode(b"not an image").decode()})

    assert resp.status_code == 400
    assert resp.json()["code"] == "ERR_UNREADABLE_SOURCE"


def test_scan_rejects_invalid_base64(client):
    resp = client.post("/v1/qris/scan", json={"image_base64": "###"})

    assert resp.status_code == 400


def test_render_endpoint(client, static_payload):
    png = client.post("/v1/qris/render", json={"payload": static_payload})
    jpeg = client.post("/v1/qris/render", json={"payload": static_payload, "image_format": "JPEG", "scale": 3})

    assert png.headers["content-type"] == "image/png"
    assert png.content[:4] == b"\x89PNG"
    assert jpeg.headers["content-type"] == "image/jpeg"


def test_metrics_expose_service_errors(client):
    client.post("/v1/qris/metadata", json={"payload": "01XYAB"})

    resp = client.get("/metrics")

    assert resp.status_code == 200
    assert "qrisdyn_service_errors_total" in resp.text
    assert "ERR_MALFORMED_LENGTH" in resp.text
