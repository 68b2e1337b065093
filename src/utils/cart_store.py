from __future__ import annotations

import json
from typing import Callable, Iterable, List, Optional

from db.models import CartItem, Product
from utils.config import CART_KEY
from utils.errors import DeserializationError
from utils.local_storage import LocalStorage
from utils.logger import get_logger

_logger = get_logger(__name__)


def decode_cart(raw: str) -> List[CartItem]:
    """Decode a persisted cart blob, raising DeserializationError on any bad shape."""
    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise TypeError(f"expected a list, got {type(data).__name__}")
        items = [CartItem.from_record(entry) for entry in data]
    except (ValueError, TypeError, KeyError) as e:
        raise DeserializationError(f"Malformed cart: {e}") from e
    return [i for i in items if i.quantity > 0]


def encode_cart(cart: Iterable[CartItem]) -> str:
    return json.dumps([item.to_record() for item in cart], separators=(",", ":"))


class CartStore:
    """
    The shopping cart, persisted in local storage across restarts.

    Every save calls `on_change` with the new cart so the view can be rebuilt.
    """

    def __init__(
        self,
        storage: LocalStorage,
        on_change: Optional[Callable[[List[CartItem]], None]] = None,
    ) -> None:
        self._storage = storage
        self.on_change = on_change
        self.items: List[CartItem] = self.load()

    def load(self) -> List[CartItem]:
        raw = self._storage.get_item(CART_KEY)
        if not raw:
            return []
        try:
            return decode_cart(raw)
        except DeserializationError as e:
            _logger.warning(f"Error loading cart from storage: {e}")
            return []

    def save(self, cart: Iterable[CartItem]) -> None:
        self.items = [item for item in cart if item.quantity > 0]
        self._storage.set_item(CART_KEY, encode_cart(self.items))
        if self.on_change:
            self.on_change(list(self.items))

    def add(self, product_id: str, products: Iterable[Product]) -> Optional[Product]:
        """
        Add one unit of a catalog product. Returns the product, or None when
        the id is not in the catalog (nothing changes then).
        """
        product = next((p for p in products if p.id == product_id), None)
        if product is None:
            return None

        cart = list(self.items)
        for idx, item in enumerate(cart):
            if item.id == product_id:
                cart[idx] = CartItem(
                    id=item.id,
                    name=item.name,
                    price=item.price,
                    quantity=item.quantity + 1,
                )
                break
        else:
            cart.append(CartItem.from_product(product))
        self.save(cart)
        return product

    def update_quantity(self, product_id: str, delta: int) -> None:
        item = self.get(product_id)
        if item is None:
            return

        new_qty = item.quantity + delta
        if new_qty <= 0:
            cart = [i for i in self.items if i.id != product_id]
        else:
            cart = [
                CartItem(id=i.id, name=i.name, price=i.price, quantity=new_qty)
                if i.id == product_id
                else i
                for i in self.items
            ]
        self.save(cart)

    def get(self, product_id: str) -> Optional[CartItem]:
        return next((i for i in self.items if i.id == product_id), None)

    def clear(self) -> None:
        self.save([])

    def total(self) -> float:
        return cart_total(self.items)

    def is_empty(self) -> bool:
        return not self.items


def cart_total(cart: Iterable[CartItem]) -> float:
    return sum(item.price * item.quantity for item in cart)
