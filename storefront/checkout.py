# storefront/checkout.py
"""
Fluxo de criação de pedido + intenção de pagamento.

    1) valida o payload (forma de pagamento, itens, total)
    2) grava o pedido como "pending"
    3) PIX: tenta o Mercado Pago; se falhar (ou não estiver configurado)
       gera um payload local de contingência
       cartão: só registra a transação pendente, sem dados do cartão
    4) grava a transação e devolve o que o cliente precisa para pagar
"""
from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

from .errors import GatewayError, InternalError, NotFoundError, StoreError, ValidationError
from .gateway import MercadoPagoClient, extract_pix_code
from .log import get_logger
from .models import PAYMENT_METHODS, Order, Transaction
from .pix import (
    PLACEHOLDER_EMAIL,
    build_fallback_payload,
    card_last4,
    render_qr_base64,
    split_payer_name,
)
from .schemas import CheckoutIn, CheckoutResult, CreditCardResult, OrderOut, PixResult
from .store import OrderStore

log = get_logger(__name__)

CENTS = Decimal("0.01")

CREDIT_CARD_NOTE = "Credit card payment - requires Mercado Pago frontend tokenization for production"
CREDIT_CARD_MESSAGE = "Dados recebidos. Em produção, use tokenização do Mercado Pago no frontend."

# status do pagamento no MP -> (status da transação, status do pedido)
GATEWAY_STATUS_MAP = {
    "approved": ("approved", "paid"),
    "rejected": ("rejected", "cancelled"),
    "cancelled": ("cancelled", "cancelled"),
    "refunded": ("cancelled", "cancelled"),
    "charged_back": ("cancelled", "cancelled"),
}


def _money(value) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


class CheckoutService:
    def __init__(
        self,
        store: OrderStore,
        gateway: Optional[MercadoPagoClient] = None,
        merchant_name: str = "Acai Prime",
        merchant_city: str = "SAO PAULO",
    ):
        self.store = store
        self.gateway = gateway
        self.merchant_name = merchant_name
        self.merchant_city = merchant_city

    # -------------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------------
    def validate(self, payload: CheckoutIn) -> Decimal:
        if payload.payment_method not in PAYMENT_METHODS:
            raise ValidationError("Invalid payment method", payment_method=payload.payment_method)
        if not payload.items:
            raise ValidationError("Carrinho vazio.")
        expected = sum((_money(i.price) * i.quantity for i in payload.items), Decimal("0"))
        total = _money(payload.total_amount)
        if total != _money(expected):
            raise ValidationError(
                f"Total informado ({total}) difere da soma dos itens ({_money(expected)}).",
                total=str(total),
                expected=str(expected),
            )
        return total

    def submit(self, payload: CheckoutIn, idempotency_key: Optional[str] = None) -> CheckoutResult:
        total = self.validate(payload)

        try:
            order = None
            if idempotency_key:
                order = self.store.get_order_by_idempotency_key(idempotency_key)

            if order is None:
                try:
                    order = self.store.create_order(self._order_data(payload, total, idempotency_key))
                    log.info("order_created", order_id=order.id, payment_method=order.payment_method,
                             total=str(total))
                except StoreError:
                    # outra requisição com a mesma chave gravou o pedido primeiro
                    if not idempotency_key:
                        raise
                    order = self.store.get_order_by_idempotency_key(idempotency_key)
                    if order is None:
                        raise
                    log.info("checkout_key_conflict", order_id=order.id)

            if idempotency_key:
                tx = self.store.get_transaction_by_order_id(order.id)
                if tx is not None:
                    log.info("checkout_replayed", order_id=order.id)
                    return self._result_from_transaction(order, tx)

            # total e forma de pagamento sempre do pedido gravado
            if order.payment_method == "pix":
                return self._pay_with_pix(order, payload, _money(order.total_amount))
            return self._pay_with_credit_card(order, payload, _money(order.total_amount))
        except ValidationError:
            raise
        except Exception as e:
            log.error("checkout_failed", error=str(e), exc_info=True)
            raise InternalError("Error creating order", cause=str(e)) from e

    def _order_data(self, payload: CheckoutIn, total: Decimal, idempotency_key: Optional[str]) -> Dict[str, Any]:
        return {
            "customer_name": payload.customer_name.strip(),
            "customer_phone": payload.customer_phone.strip(),
            "customer_email": str(payload.customer_email) if payload.customer_email else None,
            "delivery_address": payload.delivery_address.strip(),
            "delivery_cep": payload.delivery_cep.strip(),
            "delivery_city": payload.delivery_city.strip(),
            "delivery_state": payload.delivery_state,
            "delivery_complement": payload.delivery_complement,
            "items": [
                {
                    "productId": i.product_id,
                    "name": i.name,
                    "price": str(_money(i.price)),
                    "quantity": i.quantity,
                }
                for i in payload.items
            ],
            "total_amount": total,
            "payment_method": payload.payment_method,
            "status": "pending",
            "idempotency_key": idempotency_key,
        }

    # ---- PIX ----
    def _pay_with_pix(self, order: Order, payload: CheckoutIn, total: Decimal) -> PixResult:
        if self.gateway is None:
            return self._pix_fallback(order, total, reason="gateway_not_configured")

        first, last = split_payer_name(payload.customer_name)
        payer = {
            "email": str(payload.customer_email) if payload.customer_email else PLACEHOLDER_EMAIL,
            "first_name": first,
            "last_name": last,
        }
        try:
            payment = self.gateway.create_pix_payment(
                total, f"Pedido #{order.id}", payer, idempotency_key=order.id
            )
        except GatewayError as e:
            log.warning("gateway_pix_failed", order_id=order.id, error=e.message)
            return self._pix_fallback(order, total, reason="gateway_error", error=e.message)

        pix_code = extract_pix_code(payment)
        if not pix_code:
            log.warning("gateway_pix_without_code", order_id=order.id, payment_id=payment.get("id"))
            return self._pix_fallback(order, total, reason="gateway_missing_qr_code",
                                      payment_id=payment.get("id"))

        qr_base64 = self._render_qr(order.id, pix_code)
        self.store.create_transaction({
            "order_id": order.id,
            "payment_method": "pix",
            "amount": total,
            "status": "pending",
            "mercado_pago_id": str(payment["id"]) if payment.get("id") is not None else None,
            "pix_qr_code": pix_code,
            "pix_qr_code_base64": qr_base64,
            "pix_copy_paste": pix_code,
            "meta": {
                "gateway": "mercadopago",
                "status": payment.get("status"),
                "status_detail": payment.get("status_detail"),
                "date_of_expiration": payment.get("date_of_expiration"),
            },
        })
        log.info("pix_created", order_id=order.id, payment_id=payment.get("id"))
        return PixResult(
            order_id=order.id,
            pix_qr_code=pix_code,
            pix_qr_code_base64=qr_base64,
            pix_copy_paste=pix_code,
        )

    def _render_qr(self, order_id: str, pix_code: str) -> str:
        """QR em base64; se não renderizar, segue sem imagem (o copia-e-cola basta)."""
        try:
            return render_qr_base64(pix_code)
        except Exception as e:
            log.error("qr_code_failed", order_id=order_id, error=str(e))
            return ""

    def _pix_fallback(self, order: Order, total: Decimal, reason: str, **details: Any) -> PixResult:
        pix_code = build_fallback_payload(order.id, total, self.merchant_name, self.merchant_city)
        qr_base64 = self._render_qr(order.id, pix_code)

        meta = {"fallback": True, "reason": reason}
        meta.update({k: v for k, v in details.items() if v is not None})
        self.store.create_transaction({
            "order_id": order.id,
            "payment_method": "pix",
            "amount": total,
            "status": "pending",
            "pix_qr_code": pix_code,
            "pix_qr_code_base64": qr_base64,
            "pix_copy_paste": pix_code,
            "meta": meta,
        })
        log.warning("pix_fallback", order_id=order.id, reason=reason)
        return PixResult(
            order_id=order.id,
            pix_qr_code=pix_code,
            pix_qr_code_base64=qr_base64,
            pix_copy_paste=pix_code,
            degraded=True,
        )

    # ---- cartão ----
    def _pay_with_credit_card(self, order: Order, payload: CheckoutIn, total: Decimal) -> CreditCardResult:
        card = payload.card_data
        self.store.create_transaction({
            "order_id": order.id,
            "payment_method": "credit_card",
            "amount": total,
            "status": "pending",
            "meta": {
                "note": CREDIT_CARD_NOTE,
                "timestamp": datetime.utcnow().isoformat() + "Z",
                "cardLast4": card_last4(card.card_number if card else None),
            },
        })
        log.info("credit_card_registered", order_id=order.id)
        return CreditCardResult(order_id=order.id, message=CREDIT_CARD_MESSAGE)

    def _result_from_transaction(self, order: Order, tx: Transaction) -> CheckoutResult:
        if tx.payment_method == "pix":
            return PixResult(
                order_id=order.id,
                pix_qr_code=tx.pix_qr_code or "",
                pix_qr_code_base64=tx.pix_qr_code_base64 or "",
                pix_copy_paste=tx.pix_copy_paste or "",
                degraded=tx.mercado_pago_id is None,
            )
        return CreditCardResult(order_id=order.id, status=tx.status, message=CREDIT_CARD_MESSAGE)

    # -------------------------------------------------------------------------
    # Consulta
    # -------------------------------------------------------------------------
    def get_order_status(self, order_id: str) -> OrderOut:
        order = self.store.get_order(order_id)
        if order is None:
            raise NotFoundError("Order not found", order_id=order_id)
        tx = self.store.get_transaction_by_order_id(order.id)
        return OrderOut(
            id=order.id,
            order_number=order.id[:8].upper(),
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            customer_email=order.customer_email,
            delivery_address=order.delivery_address,
            delivery_cep=order.delivery_cep,
            delivery_city=order.delivery_city,
            delivery_state=order.delivery_state,
            delivery_complement=order.delivery_complement,
            items=list(order.items or []),
            total_amount=order.total_amount,
            payment_method=order.payment_method,
            status=order.status,
            created_at=order.created_at,
            pix_qr_code_base64=tx.pix_qr_code_base64 if tx else None,
            pix_copy_paste=tx.pix_copy_paste if tx else None,
        )

    # -------------------------------------------------------------------------
    # Webhook
    # -------------------------------------------------------------------------
    def apply_gateway_notification(self, payment_id: str) -> Optional[Transaction]:
        """Atualiza transação/pedido a partir do status real do pagamento no MP."""
        if self.gateway is None:
            log.info("webhook_ignored", reason="gateway_not_configured", payment_id=payment_id)
            return None
        tx = self.store.get_transaction_by_gateway_id(payment_id)
        if tx is None:
            log.info("webhook_ignored", reason="unknown_payment", payment_id=payment_id)
            return None

        payment = self.gateway.get_payment(payment_id)
        mapped = GATEWAY_STATUS_MAP.get((payment.get("status") or "").lower())
        if mapped is None:
            return tx
        tx_status, order_status = mapped
        if tx.status == tx_status:
            return tx
        log.info("payment_status_changed", order_id=tx.order_id, payment_id=payment_id,
                 old=tx.status, new=tx_status)
        return self.store.update_payment_status(tx, tx_status, order_status)
