# pure derivation of everything the screens show from the current AppState
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional, Tuple

from db.models import Order, OrderStatus
from db.orders import active_order_for, allowed_transitions
from utils.cart_store import cart_total
from utils.pickup import earliest_pickup_time
from utils.pure import format_price
from utils.state import AppState

NO_IMAGE_URL = "https://placehold.co/300x200/e53e3e/fff?text=No+Image"

STATUS_LABELS = {
    OrderStatus.PENDING: "Pending",
    OrderStatus.ACCEPTED: "Accepted",
    OrderStatus.REJECTED: "Rejected",
    OrderStatus.COMPLETED: "Completed",
}

ACTION_LABELS = {
    OrderStatus.ACCEPTED: ("Accept", "success"),
    OrderStatus.REJECTED: ("Reject", "error"),
    OrderStatus.COMPLETED: ("Ready / Complete", "primary"),
}


@dataclass(frozen=True)
class ProductCard:
    id: str
    name: str
    description: str
    price_text: str
    image_url: str


@dataclass(frozen=True)
class CartLine:
    id: str
    name: str
    price_text: str
    quantity: int
    line_total_text: str


@dataclass(frozen=True)
class OrderBanner:
    status: OrderStatus
    text: str
    kind: Literal["pending", "accepted"]


@dataclass(frozen=True)
class CustomerView:
    products: Tuple[ProductCard, ...]
    cart_lines: Tuple[CartLine, ...]
    total_text: str
    earliest_pickup: str
    submit_enabled: bool
    submit_label: str
    banner: Optional[OrderBanner]
    empty_catalog_text: str = "Sorry, no products are available right now."
    empty_cart_text: str = "Your cart is empty."


@dataclass(frozen=True)
class OrderAction:
    status: OrderStatus
    label: str
    variant: str


@dataclass(frozen=True)
class AdminOrderCard:
    id: str
    short_id: str
    status: OrderStatus
    status_label: str
    pickup_time: str
    total_text: str
    user_id: str
    customer_name: str
    item_lines: Tuple[str, ...]
    actions: Tuple[OrderAction, ...]


@dataclass(frozen=True)
class AdminProductRow:
    id: str
    name: str
    label: str


@dataclass(frozen=True)
class AdminView:
    products: Tuple[AdminProductRow, ...]
    orders: Tuple[AdminOrderCard, ...]
    empty_orders_text: str = "No orders received."


@dataclass(frozen=True)
class ViewModel:
    is_admin: bool
    customer: Optional[CustomerView] = None
    admin: Optional[AdminView] = None


def _banner(order: Optional[Order]) -> Optional[OrderBanner]:
    if order is None:
        return None
    if order.status == OrderStatus.ACCEPTED:
        return OrderBanner(
            order.status, f"Accepted! Pickup: {order.pickup_time}", "accepted"
        )
    return OrderBanner(order.status, f"Pending... Pickup: {order.pickup_time}", "pending")


def build_customer_view(state: AppState, now: datetime) -> CustomerView:
    products = tuple(
        ProductCard(
            id=p.id,
            name=p.name,
            description=p.description,
            price_text=format_price(p.price),
            image_url=p.image_url or NO_IMAGE_URL,
        )
        for p in state.products
    )
    cart_lines = tuple(
        CartLine(
            id=i.id,
            name=i.name,
            price_text=format_price(i.price),
            quantity=i.quantity,
            line_total_text=format_price(i.price * i.quantity),
        )
        for i in state.cart
    )

    active = active_order_for(state.orders, state.user_id)
    if active:
        submit_enabled, submit_label = False, "Your order is in progress"
    elif state.submitting:
        submit_enabled, submit_label = False, "Sending order..."
    else:
        submit_enabled, submit_label = bool(state.cart), "Send Order"

    return CustomerView(
        products=products,
        cart_lines=cart_lines,
        total_text=format_price(cart_total(state.cart)),
        earliest_pickup=earliest_pickup_time(now),
        submit_enabled=submit_enabled,
        submit_label=submit_label,
        banner=_banner(active),
    )


def build_admin_view(state: AppState) -> AdminView:
    products = tuple(
        AdminProductRow(id=p.id, name=p.name, label=f"{p.name} ({format_price(p.price)})")
        for p in state.products
    )
    orders = tuple(
        AdminOrderCard(
            id=o.id,
            short_id=o.id[:8],
            status=o.status,
            status_label=STATUS_LABELS[o.status],
            pickup_time=o.pickup_time,
            total_text=format_price(o.total_amount),
            user_id=o.user_id,
            customer_name=o.customer_name,
            item_lines=tuple(
                f"{i.quantity}x {i.name} ({format_price(i.price)})" for i in o.items
            ),
            actions=tuple(
                OrderAction(s, *ACTION_LABELS[s]) for s in allowed_transitions(o.status)
            ),
        )
        for o in state.orders
    )
    return AdminView(products=products, orders=orders)


def build_view(state: AppState, now: Optional[datetime] = None) -> ViewModel:
    """
    Whole view for the current state. Recomputed after every change; screens
    never patch parts of it.
    """
    now = now or datetime.now()
    if state.is_admin:
        return ViewModel(is_admin=True, admin=build_admin_view(state))
    return ViewModel(is_admin=False, customer=build_customer_view(state, now))
