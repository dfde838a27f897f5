# storefront/main.py
from __future__ import annotations

from typing import Iterator, List, Optional, Union

from fastapi import Depends, FastAPI, Header, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from .checkout import CheckoutService
from .config import Settings
from .database import init_db, make_engine, make_session_factory
from .errors import GatewayError, InternalError, StoreError, StorefrontError
from .gateway import MercadoPagoClient
from .log import configure_logging, get_logger
from .schemas import CheckoutIn, CreditCardResult, MessageOut, OrderOut, PixResult, ProductOut
from .seed import seed_products
from .store import OrderStore

log = get_logger(__name__)

_FROM_SETTINGS = object()


# -----------------------------------------------------------------------------
# Dependências
# -----------------------------------------------------------------------------
def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> OrderStore:
    return OrderStore(db)


def get_checkout(request: Request, store: OrderStore = Depends(get_store)) -> CheckoutService:
    settings: Settings = request.app.state.settings
    return CheckoutService(
        store,
        gateway=request.app.state.gateway,
        merchant_name=settings.pix_merchant_name,
        merchant_city=settings.pix_merchant_city,
    )


# -----------------------------------------------------------------------------
# App
# -----------------------------------------------------------------------------
def create_app(settings: Optional[Settings] = None, gateway=_FROM_SETTINGS) -> FastAPI:
    """Monta a API. `gateway=None` força o modo sem Mercado Pago (PIX local)."""
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(title="Açaí Prime API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    engine = make_engine(settings.database_url)
    init_db(engine)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.gateway = MercadoPagoClient.from_settings(settings) if gateway is _FROM_SETTINGS else gateway
    log.info("app_started", gateway=app.state.gateway is not None)

    _register_error_handlers(app)
    _register_routes(app)
    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorefrontError)
    async def storefront_error(request: Request, exc: StorefrontError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"message": "Invalid order data", "errors": jsonable_encoder(exc.errors())},
        )


def _register_routes(app: FastAPI) -> None:
    # -------------------------------------------------------------------------
    # Produtos
    # -------------------------------------------------------------------------
    @app.get("/api/products", response_model=List[ProductOut])
    def list_products(store: OrderStore = Depends(get_store)):
        try:
            return store.get_all_products()
        except StoreError as e:
            log.error("products_fetch_failed", error=e.message)
            raise InternalError("Error fetching products") from e

    @app.post("/api/seed-products", response_model=MessageOut)
    def seed(store: OrderStore = Depends(get_store)):
        try:
            created = seed_products(store)
        except StoreError as e:
            log.error("products_seed_failed", error=e.message)
            raise InternalError("Error seeding products") from e
        if not created:
            return {"message": "Products already exist"}
        log.info("products_seeded")
        return {"message": "Products seeded successfully"}

    # -------------------------------------------------------------------------
    # Pedidos
    # -------------------------------------------------------------------------
    @app.post("/api/orders", response_model=Union[PixResult, CreditCardResult])
    def create_order(
        payload: CheckoutIn,
        checkout: CheckoutService = Depends(get_checkout),
        idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    ):
        return checkout.submit(payload, idempotency_key=idempotency_key)

    @app.get("/api/orders/{order_id}", response_model=OrderOut)
    def get_order(order_id: str, checkout: CheckoutService = Depends(get_checkout)):
        try:
            return checkout.get_order_status(order_id)
        except StoreError as e:
            log.error("order_fetch_failed", order_id=order_id, error=e.message)
            raise InternalError("Error fetching order") from e

    # -------------------------------------------------------------------------
    # Webhook Mercado Pago
    # -------------------------------------------------------------------------
    @app.post("/webhooks/mercadopago")
    async def mp_webhook(request: Request, checkout: CheckoutService = Depends(get_checkout)):
        try:
            data = await request.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        topic = data.get("type") or data.get("topic") or data.get("action", "")
        if "payment" not in str(topic):
            return {"ok": True}

        d = data.get("data")
        if not isinstance(d, dict):
            d = {}
        payment_id = d.get("id") or d.get("payment_id") or request.query_params.get("id")
        if not payment_id:
            return {"ok": True}

        try:
            checkout.apply_gateway_notification(str(payment_id))
        except (GatewayError, StoreError) as e:
            log.warning("webhook_failed", payment_id=payment_id, error=e.message)
            return {"ok": False}
        return {"ok": True}

    # -------------------------------------------------------------------------
    # Saúde
    # -------------------------------------------------------------------------
    @app.get("/api/health")
    def health(request: Request):
        return {"ok": True, "gateway": request.app.state.gateway is not None}
