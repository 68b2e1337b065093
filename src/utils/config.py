from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=ROOT_DIR / ".env")

PRODUCTS_COLLECTION = "fashion_chips_products"
ORDERS_COLLECTION = "fashion_chips_orders"
CART_KEY = "fashionChipsCart"
USER_ID_KEY = "fashionChipsUserId"


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_float(*keys: str, default: float) -> float:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return float(v)


@dataclass(frozen=True)
class Settings:
    app_id: str
    admin_pin: str
    db_path: str
    storage_path: str
    poll_interval: float

    @property
    def products_path(self) -> str:
        return collection_path(self.app_id, PRODUCTS_COLLECTION)

    @property
    def orders_path(self) -> str:
        return collection_path(self.app_id, ORDERS_COLLECTION)


def collection_path(app_id: str, name: str) -> str:
    """Namespaced logical path of a collection, scoped by the application id."""
    return f"/artifacts/{app_id}/public/data/{name}"


def load_settings() -> Settings:
    return Settings(
        app_id=_get_env("SHOP_APP_ID", "APP_ID", default="default-app-id"),
        # shared secret checked client side, not an access-control boundary
        admin_pin=_get_env("SHOP_ADMIN_PIN", "ADMIN_PIN", default="2014"),
        db_path=_get_env(
            "SHOP_DB_PATH", "DB_PATH", default=str(ROOT_DIR / "data" / "shop.sqlite")
        ),
        storage_path=_get_env(
            "SHOP_STORAGE_PATH",
            default=str(ROOT_DIR / "data" / "local_storage.json"),
        ),
        poll_interval=_get_float("SHOP_POLL_INTERVAL", default=2.0),
    )


settings = load_settings()

if settings.poll_interval <= 0:
    raise RuntimeError("SHOP_POLL_INTERVAL must be a positive number of seconds")
