# provide dataclass models, and conversion from/to stored documents
# stored documents use camelCase keys

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple


class OrderStatus(str, Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    COMPLETED = "Completed"


ACTIVE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.ACCEPTED})


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price: float
    description: str = ""
    image_url: str = ""
    created_at: str = ""

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> Product:
        return cls(
            id=str(record["id"]),
            name=str(record["name"]),
            price=float(record["price"]),
            description=str(record.get("description") or ""),
            image_url=str(record.get("imageUrl") or ""),
            created_at=str(record.get("createdAt") or ""),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "description": self.description,
            "imageUrl": self.image_url,
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class CartItem:
    id: str
    name: str
    price: float
    quantity: int  # always >= 1 once persisted

    @classmethod
    def from_product(cls, product: Product, quantity: int = 1) -> CartItem:
        return cls(
            id=product.id, name=product.name, price=product.price, quantity=quantity
        )

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> CartItem:
        quantity = record["quantity"]
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise TypeError(f"quantity must be an integer, got {quantity!r}")
        return cls(
            id=str(record["id"]),
            name=str(record["name"]),
            price=float(record["price"]),
            quantity=quantity,
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
        }

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


@dataclass(frozen=True)
class OrderItem:
    """Copy of the product fields at order time, never a reference."""

    id: str
    name: str
    price: float
    quantity: int

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> OrderItem:
        return cls(
            id=str(record["id"]),
            name=str(record["name"]),
            price=float(record["price"]),
            quantity=int(record["quantity"]),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
        }


@dataclass(frozen=True)
class Order:
    id: str
    user_id: str
    customer_name: str
    items: Tuple[OrderItem, ...]
    total_amount: float
    pickup_time: str  # "HH:MM"
    order_time: str  # ISO-8601
    status: OrderStatus = OrderStatus.PENDING

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> Order:
        return cls(
            id=str(record["id"]),
            user_id=str(record["userId"]),
            customer_name=str(record.get("customerName") or ""),
            items=tuple(OrderItem.from_record(i) for i in record.get("items") or []),
            total_amount=float(record.get("totalAmount") or 0.0),
            pickup_time=str(record["pickupTime"]),
            order_time=str(record["orderTime"]),
            status=OrderStatus(record["status"]),
        )

    def to_record(self) -> Dict[str, Any]:
        """Document body without the id, which the store assigns."""
        return {
            "userId": self.user_id,
            "customerName": self.customer_name,
            "items": [i.to_record() for i in self.items],
            "totalAmount": self.total_amount,
            "pickupTime": self.pickup_time,
            "orderTime": self.order_time,
            "status": self.status.value,
        }

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES
