# storefront/gateway.py
from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Dict, Optional

import requests

from .config import DEFAULT_MP_API_URL, Settings
from .errors import GatewayError


class MercadoPagoClient:
    """Cliente mínimo da API de pagamentos do Mercado Pago (/v1/payments)."""

    def __init__(self, access_token: str, api_url: str = DEFAULT_MP_API_URL, timeout: float = 25):
        self.access_token = access_token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["MercadoPagoClient"]:
        if not settings.gateway_configured:
            return None
        return cls(settings.mp_access_token, settings.mp_api_url, settings.mp_timeout)

    def _headers(self, idempotency_key: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }
        if idempotency_key:
            headers["X-Idempotency-Key"] = idempotency_key
        return headers

    def _parse(self, r: requests.Response) -> Dict[str, Any]:
        if r.status_code not in (200, 201):
            raise GatewayError(f"Mercado Pago erro {r.status_code}: {r.text}", status=r.status_code)
        try:
            return r.json()
        except ValueError as e:
            raise GatewayError(f"Resposta inválida do Mercado Pago: {r.text[:200]}") from e

    def create_pix_payment(
        self,
        amount: Decimal,
        description: str,
        payer: Dict[str, str],
        idempotency_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        body = {
            "transaction_amount": float(amount),
            "description": description,
            "payment_method_id": "pix",
            "payer": payer,
        }
        try:
            r = requests.post(
                f"{self.api_url}/v1/payments",
                headers=self._headers(idempotency_key),
                data=json.dumps(body),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise GatewayError(f"Falha HTTP Mercado Pago: {e!r}") from e
        return self._parse(r)

    def get_payment(self, payment_id: str) -> Dict[str, Any]:
        try:
            r = requests.get(
                f"{self.api_url}/v1/payments/{payment_id}",
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise GatewayError(f"Falha HTTP Mercado Pago: {e!r}") from e
        return self._parse(r)


def extract_pix_code(payment: Dict[str, Any]) -> Optional[str]:
    poi = payment.get("point_of_interaction") or {}
    data = poi.get("transaction_data") or {}
    return data.get("qr_code") or None
