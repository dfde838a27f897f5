from decimal import Decimal

import pytest

from storefront.errors import StoreError
from storefront.seed import seed_products


def _order_data(**overrides):
    data = {
        "customer_name": "João Pereira",
        "customer_phone": "11912345678",
        "delivery_address": "Av. Paulista, 1000",
        "delivery_cep": "01310100",
        "delivery_city": "São Paulo",
        "delivery_state": "SP",
        "items": [{"productId": "x", "name": "Açaí 300ml", "price": "12.90", "quantity": 2}],
        "total_amount": Decimal("25.80"),
        "payment_method": "pix",
    }
    data.update(overrides)
    return data


def test_create_and_get_order(store):
    order = store.create_order(_order_data())
    assert order.id and len(order.id) == 36
    assert order.status == "pending"
    assert order.created_at is not None

    again = store.get_order(order.id)
    assert again.customer_name == "João Pereira"
    assert again.items[0]["quantity"] == 2
    assert again.total_amount == Decimal("25.80")


def test_create_order_missing_fields(store):
    with pytest.raises(StoreError):
        store.create_order(_order_data(customer_phone=""))
    with pytest.raises(StoreError):
        store.create_order(_order_data(items=[]))


def test_get_order_not_found(store):
    assert store.get_order("does-not-exist") is None


def test_transaction_by_order_id(store):
    order = store.create_order(_order_data())
    assert store.get_transaction_by_order_id(order.id) is None

    tx = store.create_transaction({
        "order_id": order.id,
        "payment_method": "pix",
        "amount": Decimal("25.80"),
        "mercado_pago_id": "987",
        "meta": {"fallback": False},
    })
    assert tx.id and tx.created_at and tx.updated_at
    assert tx.status == "pending"
    assert store.get_transaction_by_order_id(order.id).id == tx.id
    assert store.get_transaction_by_gateway_id("987").id == tx.id


def test_update_payment_status(store):
    order = store.create_order(_order_data())
    tx = store.create_transaction({"order_id": order.id, "payment_method": "pix", "amount": Decimal("25.80")})
    store.update_payment_status(tx, "approved", "paid")
    assert store.get_transaction_by_order_id(order.id).status == "approved"
    assert store.get_order(order.id).status == "paid"


def test_seed_is_idempotent(store):
    assert seed_products(store) is True
    assert seed_products(store) is False
    products = store.get_all_products()
    assert len(products) == 3
    assert [p.price for p in products] == [Decimal("12.90"), Decimal("18.90"), Decimal("22.90")]
