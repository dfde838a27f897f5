import json
from decimal import Decimal

import pytest
import requests

from storefront.config import Settings
from storefront.errors import GatewayError
from storefront.gateway import MercadoPagoClient, extract_pix_code


class FakeResponse:
    def __init__(self, status_code=201, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text or json.dumps(body or {})

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


def test_from_settings_without_token():
    assert MercadoPagoClient.from_settings(Settings(mp_access_token="")) is None


def test_from_settings_with_token():
    client = MercadoPagoClient.from_settings(
        Settings(mp_access_token="TEST-123", mp_api_url="https://mp.local/")
    )
    assert client.access_token == "TEST-123"
    assert client.api_url == "https://mp.local"


def test_create_pix_payment_sends_body(monkeypatch):
    seen = {}

    def fake_post(url, headers, data, timeout):
        seen.update(url=url, headers=headers, body=json.loads(data), timeout=timeout)
        return FakeResponse(201, {"id": 1, "status": "pending"})

    monkeypatch.setattr(requests, "post", fake_post)
    client = MercadoPagoClient("TOKEN", "https://mp.local", timeout=5)
    out = client.create_pix_payment(
        Decimal("18.90"), "Pedido #abc", {"email": "a@b.com"}, idempotency_key="abc"
    )

    assert out["id"] == 1
    assert seen["url"] == "https://mp.local/v1/payments"
    assert seen["headers"]["Authorization"] == "Bearer TOKEN"
    assert seen["headers"]["X-Idempotency-Key"] == "abc"
    assert seen["body"]["transaction_amount"] == 18.9
    assert seen["body"]["payment_method_id"] == "pix"
    assert seen["timeout"] == 5


def test_create_pix_payment_http_error(monkeypatch):
    monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse(400, {"message": "bad"}))
    client = MercadoPagoClient("TOKEN")
    with pytest.raises(GatewayError):
        client.create_pix_payment(Decimal("1.00"), "x", {})


def test_create_pix_payment_network_error(monkeypatch):
    def boom(*a, **kw):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(requests, "post", boom)
    with pytest.raises(GatewayError):
        MercadoPagoClient("TOKEN").create_pix_payment(Decimal("1.00"), "x", {})


def test_get_payment_invalid_json(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *a, **kw: FakeResponse(200, None, text="<html>"))
    with pytest.raises(GatewayError):
        MercadoPagoClient("TOKEN").get_payment("42")


def test_extract_pix_code():
    assert extract_pix_code({"point_of_interaction": {"transaction_data": {"qr_code": "000201"}}}) == "000201"
    assert extract_pix_code({"point_of_interaction": None}) is None
    assert extract_pix_code({}) is None
