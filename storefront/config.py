# storefront/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_MP_API_URL = "https://api.mercadopago.com"


def _sanitize_base_url(raw: Optional[str], default: str) -> str:
    raw = (raw or "").strip()
    if not raw.startswith(("http://", "https://")):
        return default
    return raw.rstrip("/")


def _split_origins(raw: Optional[str]) -> List[str]:
    origins = [o.strip() for o in (raw or "").split(",") if o.strip()]
    return origins or ["*"]


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///storefront.db"
    mp_access_token: str = ""
    mp_api_url: str = DEFAULT_MP_API_URL
    mp_timeout: float = 25.0
    pix_merchant_name: str = "Acai Prime"
    pix_merchant_city: str = "SAO PAULO"
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///storefront.db"),
            mp_access_token=os.getenv("MERCADO_PAGO_ACCESS_TOKEN", "").strip(),
            mp_api_url=_sanitize_base_url(os.getenv("MERCADO_PAGO_API_URL"), DEFAULT_MP_API_URL),
            mp_timeout=float(os.getenv("MERCADO_PAGO_TIMEOUT", "25")),
            pix_merchant_name=os.getenv("PIX_MERCHANT_NAME", "Acai Prime"),
            pix_merchant_city=os.getenv("PIX_MERCHANT_CITY", "SAO PAULO"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_origins=_split_origins(os.getenv("CORS_ORIGINS")),
        )

    @property
    def gateway_configured(self) -> bool:
        return bool(self.mp_access_token)
