from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

from db.models import CartItem, Order, Product
from db.orders import sort_orders
from utils.config import USER_ID_KEY
from utils.local_storage import LocalStorage
from utils.logger import get_logger

_logger = get_logger(__name__)


@dataclass(frozen=True)
class AppState:
    """
    Everything the screens render from. Replaced, never mutated.

    Fields:
      - user_id: stable id of this client, kept in local storage
      - is_admin: admin mode flag, process local and never persisted
      - products / orders: latest snapshots of the two collections
        (orders already in display order)
      - cart: current local cart
      - submitting: an order create is in flight
    """

    user_id: str
    is_admin: bool = False
    products: Tuple[Product, ...] = ()
    orders: Tuple[Order, ...] = ()
    cart: Tuple[CartItem, ...] = ()
    submitting: bool = False


def _parse_records(records: Iterable[Dict[str, Any]], model, kind: str) -> List:
    parsed = []
    for record in records:
        try:
            parsed.append(model.from_record(record))
        except (KeyError, TypeError, ValueError) as e:
            _logger.warning(f"Skipping malformed {kind} {record.get('id')!r}: {e}")
    return parsed


# Reducers: each snapshot swaps the whole collection, O(collection size) per update


def with_products(state: AppState, records: Iterable[Dict[str, Any]]) -> AppState:
    products = _parse_records(records, Product, "product")
    _logger.info(f"Products updated: {len(products)}")
    return dataclasses.replace(state, products=tuple(products))


def with_orders(state: AppState, records: Iterable[Dict[str, Any]]) -> AppState:
    orders = sort_orders(_parse_records(records, Order, "order"))
    _logger.info(f"Orders updated: {len(orders)}")
    return dataclasses.replace(state, orders=tuple(orders))


def with_cart(state: AppState, cart: Iterable[CartItem]) -> AppState:
    return dataclasses.replace(state, cart=tuple(cart))


def with_admin(state: AppState, is_admin: bool) -> AppState:
    return dataclasses.replace(state, is_admin=is_admin)


def with_submitting(state: AppState, submitting: bool) -> AppState:
    return dataclasses.replace(state, submitting=submitting)


def check_admin_pin(pin: str, expected: str) -> bool:
    """
    Plain comparison against the shared PIN. This only switches the UI into
    admin mode; who may write what is up to the database's own access rules.
    """
    return bool(pin) and pin == expected


def load_user_id(storage: LocalStorage) -> str:
    """The client's user id, generated and stored on first use."""
    user_id = storage.get_item(USER_ID_KEY)
    if not user_id:
        user_id = str(uuid.uuid4())
        storage.set_item(USER_ID_KEY, user_id)
        _logger.info(f"New client user id {user_id}")
    return user_id
