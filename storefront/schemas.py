# storefront/schemas.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    # o front (React) fala camelCase
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# -----------------------------------------------------------------------------
# Produtos
# -----------------------------------------------------------------------------
class ProductIn(CamelModel):
    name: str
    description: str
    price: Decimal = Field(..., ge=0)
    size: str
    image: str


class ProductOut(ProductIn):
    id: str


# -----------------------------------------------------------------------------
# Checkout
# -----------------------------------------------------------------------------
class OrderItemIn(CamelModel):
    product_id: str
    name: str
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1)


class CardDataIn(CamelModel):
    """Só trafega no request; nunca é gravado."""
    card_number: Optional[str] = None
    card_name: Optional[str] = None
    card_expiry: Optional[str] = None
    card_cvv: Optional[str] = None


class CheckoutIn(CamelModel):
    customer_name: str = Field(..., min_length=3, max_length=120)
    customer_phone: str = Field(..., min_length=10, max_length=20)
    customer_email: Optional[EmailStr] = None
    delivery_address: str = Field(..., min_length=5)
    delivery_cep: str = Field(..., min_length=8, max_length=9)
    delivery_city: str = Field(..., min_length=2)
    delivery_state: str = Field(..., min_length=2, max_length=2)
    delivery_complement: Optional[str] = None
    items: List[OrderItemIn] = Field(..., min_length=1)
    total_amount: Decimal = Field(..., ge=0)
    payment_method: str
    card_data: Optional[CardDataIn] = None

    @field_validator("customer_email", "delivery_complement", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("delivery_state")
    @classmethod
    def _upper_state(cls, v: str) -> str:
        return v.upper()


class PixResult(CamelModel):
    order_id: str
    payment_method: Literal["pix"] = "pix"
    pix_qr_code: str
    pix_qr_code_base64: str
    pix_copy_paste: str
    degraded: bool = False


class CreditCardResult(CamelModel):
    order_id: str
    payment_method: Literal["credit_card"] = "credit_card"
    status: str = "pending"
    message: str


CheckoutResult = Union[PixResult, CreditCardResult]


# -----------------------------------------------------------------------------
# Consulta de pedido
# -----------------------------------------------------------------------------
class OrderOut(CamelModel):
    id: str
    order_number: str
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    delivery_address: str
    delivery_cep: str
    delivery_city: str
    delivery_state: str
    delivery_complement: Optional[str] = None
    items: List[Dict[str, Any]]
    total_amount: Decimal
    payment_method: str
    status: str
    created_at: datetime
    pix_qr_code_base64: Optional[str] = None
    pix_copy_paste: Optional[str] = None


class MessageOut(BaseModel):
    message: str
