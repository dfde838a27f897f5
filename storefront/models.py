# storefront/models.py
import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship

from .database import Base

PAYMENT_METHODS = ("pix", "credit_card")
ORDER_STATUSES = ("pending", "paid", "processing", "delivered", "cancelled")
TRANSACTION_STATUSES = ("pending", "approved", "rejected", "cancelled")


def _uuid() -> str:
    return str(uuid.uuid4())


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    size = Column(Text, nullable=False)       # "300ml", "500ml", "2x 300ml"
    image = Column(Text, nullable=False)


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=_uuid)
    customer_name = Column(Text, nullable=False)
    customer_phone = Column(Text, nullable=False)
    customer_email = Column(Text, nullable=True)
    delivery_address = Column(Text, nullable=False)
    delivery_cep = Column(Text, nullable=False)
    delivery_city = Column(Text, nullable=False)
    delivery_state = Column(Text, nullable=False)
    delivery_complement = Column(Text, nullable=True)
    items = Column(JSON, nullable=False)      # [{productId, name, price, quantity}]
    total_amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String(20), nullable=False)
    status = Column(String(20), default="pending", nullable=False)
    idempotency_key = Column(String(255), unique=True, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    transaction = relationship("Transaction", back_populates="order", uselist=False)


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=_uuid)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    payment_method = Column(String(20), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), default="pending", nullable=False)
    mercado_pago_id = Column(String(80), nullable=True, index=True)
    pix_qr_code = Column(Text, nullable=True)
    pix_qr_code_base64 = Column(Text, nullable=True)
    pix_copy_paste = Column(Text, nullable=True)
    # "metadata" é reservado no declarative
    meta = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    order = relationship("Order", back_populates="transaction")
