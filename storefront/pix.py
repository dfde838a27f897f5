# storefront/pix.py
"""
Helpers de PIX: payload local de contingência, QR code em base64 e dados do pagador.
"""
from __future__ import annotations

import base64
import io
import re
from decimal import Decimal
from typing import Optional, Tuple

import qrcode

_DATA_URI_PREFIX = re.compile(r"^data:image/[a-z+]+;base64,", re.IGNORECASE)

PLACEHOLDER_EMAIL = "customer@example.com"


def build_fallback_payload(order_id: str, amount: Decimal, merchant_name: str, merchant_city: str) -> str:
    """Payload determinístico usado quando o Mercado Pago falha ou não está configurado.

    Não é um BR Code válido para liquidação; serve só para o cliente ver o pedido
    e para a conciliação manual.
    """
    return (
        "00020126580014br.gov.bcb.pix0136"
        f"{order_id}"
        "520400005303986540"
        f"{Decimal(amount):.2f}"
        "5802BR"
        f"5913{merchant_name}"
        f"6009{merchant_city}"
        "62070503***6304"
    )


def strip_data_uri(value: str) -> str:
    return _DATA_URI_PREFIX.sub("", value or "")


def qr_data_url(data: str) -> str:
    img = qrcode.make(data)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def render_qr_base64(data: str) -> str:
    """PNG do QR em base64, sem o prefixo data:."""
    return strip_data_uri(qr_data_url(data))


def split_payer_name(full_name: Optional[str]) -> Tuple[str, str]:
    parts = (full_name or "").strip().split(None, 1)
    first = parts[0] if parts else ""
    last = parts[1].strip() if len(parts) > 1 else ""
    return first or "Cliente", last


def card_last4(card_number: Optional[str]) -> str:
    digits = re.sub(r"\D", "", card_number or "")
    if len(digits) < 4:
        return "****"
    return digits[-4:]
