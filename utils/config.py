# utils/config.py
from __future__ import annotations
import os
from typing import List

from pydantic import BaseModel, Field

# Persistence / in-memory ring
ORDERS_DIR = os.getenv("POS_ORDERS_DIR", "orders")
MAX_ORDERS = int(os.getenv("POS_MAX_ORDERS", "50"))
ORDER_BASE = int(os.getenv("POS_ORDER_BASE", "1001"))

# Pages for the customer / kitchen screens live outside this service
PUBLIC_DIR = os.getenv("POS_PUBLIC_DIR", "public")

HOST = os.getenv("POS_HOST", "127.0.0.1")
PORT = int(os.getenv("POS_PORT", "3000"))
LOG_LEVEL = os.getenv("POS_LOG_LEVEL", "INFO").upper()
KITCHEN_SEND_TIMEOUT = float(os.getenv("POS_KITCHEN_SEND_TIMEOUT", "2.0"))

CORS_ALLOW_ORIGINS = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]


class Settings(BaseModel):
    orders_dir: str = ORDERS_DIR
    max_orders: int = Field(default=MAX_ORDERS, ge=1)
    order_base: int = ORDER_BASE
    public_dir: str = PUBLIC_DIR
    host: str = HOST
    port: int = PORT
    kitchen_send_timeout: float = Field(default=KITCHEN_SEND_TIMEOUT, gt=0)
    cors_allow_origins: List[str] = Field(default_factory=lambda: list(CORS_ALLOW_ORIGINS))

    @classmethod
    def from_env(cls) -> "Settings":
        # re-read in case load_dotenv() ran after this module was imported
        return cls(
            orders_dir=os.getenv("POS_ORDERS_DIR", ORDERS_DIR),
            max_orders=int(os.getenv("POS_MAX_ORDERS", str(MAX_ORDERS))),
            order_base=int(os.getenv("POS_ORDER_BASE", str(ORDER_BASE))),
            public_dir=os.getenv("POS_PUBLIC_DIR", PUBLIC_DIR),
            host=os.getenv("POS_HOST", HOST),
            port=int(os.getenv("POS_PORT", str(PORT))),
            kitchen_send_timeout=float(os.getenv("POS_KITCHEN_SEND_TIMEOUT", str(KITCHEN_SEND_TIMEOUT))),
            cors_allow_origins=[
                o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", ",".join(CORS_ALLOW_ORIGINS)).split(",") if o.strip()
            ],
        )
