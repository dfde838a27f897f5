import pytest
from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.errors import GatewayError
from storefront.main import create_app

PIX_CODE = "00020101021243650016COM.MERCADOLIBRE02013063638f1192a-5fd1-4180-a180-8bcae3556bc35204000053039865802BR5925MERCADOPAGO6009SAO PAULO6304ABCD"


class FakeGateway:
    """Substitui o MercadoPagoClient nos testes."""

    def __init__(self, payment=None, error=None, status="pending"):
        self.payment = payment
        self.error = error
        self.status = status
        self.calls = []

    def create_pix_payment(self, amount, description, payer, idempotency_key=None):
        self.calls.append({"amount": amount, "description": description, "payer": payer})
        if self.error:
            raise self.error
        return self.payment

    def get_payment(self, payment_id):
        if self.error:
            raise self.error
        return {"id": payment_id, "status": self.status}


def pix_payment(code=PIX_CODE, payment_id=123456789):
    return {
        "id": payment_id,
        "status": "pending",
        "status_detail": "pending_waiting_transfer",
        "point_of_interaction": {"transaction_data": {"qr_code": code, "qr_code_base64": "iVBOR"}},
    }


def make_client(gateway=None):
    settings = Settings(database_url="sqlite://", mp_access_token="")
    return TestClient(create_app(settings, gateway=gateway))


@pytest.fixture
def client():
    return make_client()


@pytest.fixture
def gateway_ok():
    return FakeGateway(payment=pix_payment())


@pytest.fixture
def gateway_down():
    return FakeGateway(error=GatewayError("Falha HTTP Mercado Pago: ConnectionError()"))


@pytest.fixture
def order_payload():
    return {
        "customerName": "Maria da Silva Souza",
        "customerPhone": "11987654321",
        "customerEmail": "maria.souza@gmail.com",
        "deliveryAddress": "Rua das Flores, 123",
        "deliveryCep": "01310-100",
        "deliveryCity": "São Paulo",
        "deliveryState": "sp",
        "deliveryComplement": "",
        "items": [
            {"productId": "p-500", "name": "Açaí 500ml", "price": "18.90", "quantity": 1},
        ],
        "totalAmount": "18.90",
        "paymentMethod": "pix",
    }


@pytest.fixture
def store():
    from storefront.database import init_db, make_engine, make_session_factory
    from storefront.store import OrderStore

    engine = make_engine("sqlite://")
    init_db(engine)
    db = make_session_factory(engine)()
    try:
        yield OrderStore(db)
    finally:
        db.close()
