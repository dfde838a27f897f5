# storefront/store.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import StoreError
from .models import Order, Product, Transaction

ORDER_REQUIRED = (
    "customer_name",
    "customer_phone",
    "delivery_address",
    "delivery_cep",
    "delivery_city",
    "delivery_state",
    "items",
    "total_amount",
    "payment_method",
)
TRANSACTION_REQUIRED = ("order_id", "payment_method", "amount")


def _missing(data: Dict[str, Any], required) -> List[str]:
    return [k for k in required if data.get(k) in (None, "", [])]


class OrderStore:
    """Acesso a produtos, pedidos e transações sobre uma Session do SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def _save(self, obj):
        try:
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Falha ao gravar {type(obj).__name__}: {e}") from e
        return obj

    def _query(self, fn):
        try:
            return fn()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Falha de leitura: {e}") from e

    # ----- produtos -----
    def get_all_products(self) -> List[Product]:
        return self._query(lambda: self.db.query(Product).order_by(Product.price.asc()).all())

    def create_product(self, data: Dict[str, Any]) -> Product:
        return self._save(Product(**data))

    # ----- pedidos -----
    def create_order(self, data: Dict[str, Any]) -> Order:
        missing = _missing(data, ORDER_REQUIRED)
        if missing:
            raise StoreError(f"Campos obrigatórios ausentes: {', '.join(missing)}")
        data = {"status": "pending", **data}
        return self._save(Order(**data))

    def get_order(self, order_id: str) -> Optional[Order]:
        return self._query(lambda: self.db.get(Order, order_id))

    def get_order_by_idempotency_key(self, key: str) -> Optional[Order]:
        return self._query(
            lambda: self.db.query(Order).filter(Order.idempotency_key == key).first()
        )

    # ----- transações -----
    def create_transaction(self, data: Dict[str, Any]) -> Transaction:
        missing = _missing(data, TRANSACTION_REQUIRED)
        if missing:
            raise StoreError(f"Campos obrigatórios ausentes: {', '.join(missing)}")
        data = {"status": "pending", **data}
        return self._save(Transaction(**data))

    def get_transaction_by_order_id(self, order_id: str) -> Optional[Transaction]:
        return self._query(
            lambda: self.db.query(Transaction).filter(Transaction.order_id == order_id).first()
        )

    def get_transaction_by_gateway_id(self, payment_id: str) -> Optional[Transaction]:
        return self._query(
            lambda: self.db.query(Transaction)
            .filter(Transaction.mercado_pago_id == str(payment_id))
            .first()
        )

    def update_payment_status(
        self, tx: Transaction, status: str, order_status: Optional[str] = None
    ) -> Transaction:
        tx.status = status
        tx.updated_at = datetime.utcnow()
        if order_status:
            order = self.db.get(Order, tx.order_id)
            if order:
                order.status = order_status
        return self._save(tx)
