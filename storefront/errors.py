# storefront/errors.py
from typing import Any, Optional


class StorefrontError(Exception):
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)


class ValidationError(StorefrontError):
    """Dados obrigatórios ausentes/inválidos ou forma de pagamento desconhecida."""
    status_code = 400
    default_message = "Invalid order data"


class NotFoundError(StorefrontError):
    status_code = 404
    default_message = "Not found"


class GatewayError(StorefrontError):
    """Falha ao falar com o Mercado Pago. No checkout PIX vira fallback local."""
    status_code = 502
    default_message = "Payment gateway error"


class StoreError(StorefrontError):
    status_code = 500
    default_message = "Storage error"


class InternalError(StorefrontError):
    status_code = 500
    default_message = "Internal error"
