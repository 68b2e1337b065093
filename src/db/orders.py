# order lifecycle: submission, status changes, and derived order queries
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, FrozenSet, Iterable, List, Optional, Union

from db.gateway import DocumentGateway
from db.models import ACTIVE_STATUSES, Order, OrderItem, OrderStatus
from utils.cart_store import CartStore, cart_total
from utils.errors import ValidationError
from utils.logger import get_logger
from utils.pickup import (
    MIN_PREP_MINUTES,
    earliest_pickup_time,
    is_valid_pickup_time,
    parse_pickup_time,
)

_logger = get_logger(__name__)

DEFAULT_CUSTOMER_NAME = "Guest User"

# Pending --accept--> Accepted --complete--> Completed
# Pending --reject--> Rejected
TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.ACCEPTED, OrderStatus.REJECTED}),
    OrderStatus.ACCEPTED: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.REJECTED: frozenset(),
    OrderStatus.COMPLETED: frozenset(),
}


def allowed_transitions(status: OrderStatus) -> List[OrderStatus]:
    """Next statuses the state machine permits, in a stable display order."""
    order = list(OrderStatus)
    return sorted(TRANSITIONS[OrderStatus(status)], key=order.index)


def active_order_for(orders: Iterable[Order], user_id: str) -> Optional[Order]:
    """The user's Pending or Accepted order, if any. At most one is expected."""
    return next(
        (o for o in orders if o.user_id == user_id and o.status in ACTIVE_STATUSES),
        None,
    )


def _order_time_key(order: Order) -> float:
    try:
        return datetime.fromisoformat(order.order_time.replace("Z", "+00:00")).timestamp()
    except ValueError:
        return float("-inf")


def sort_orders(orders: Iterable[Order]) -> List[Order]:
    """Pending orders first, then most recent orderTime first."""
    by_time = sorted(orders, key=_order_time_key, reverse=True)
    return sorted(by_time, key=lambda o: o.status != OrderStatus.PENDING)


def parse_status(value: Union[str, OrderStatus]) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError as e:
        raise ValidationError(f"Unknown order status {value!r}.") from e


class OrderManager:
    def __init__(self, gateway: DocumentGateway, collection: str) -> None:
        self.gateway = gateway
        self.collection = collection

    async def submit(
        self,
        cart: CartStore,
        pickup_time: str,
        user_id: str,
        now: Optional[datetime] = None,
        customer_name: str = DEFAULT_CUSTOMER_NAME,
    ) -> str:
        """
        Turn the cart into a Pending order and return the new order id.

        Raises ValidationError (nothing written) for an empty cart or a missing,
        malformed or too early pickup time. The cart is cleared only once the
        store has acknowledged the create; RemoteOperationError leaves it intact.
        """
        now = now or datetime.now()
        items = list(cart.items)
        if not items:
            raise ValidationError("Please add some items to the cart before ordering.")

        parse_pickup_time(pickup_time)
        if not is_valid_pickup_time(pickup_time, now):
            raise ValidationError(
                f"Please choose a time after {earliest_pickup_time(now)} today. "
                f"Minimum preparation time is {MIN_PREP_MINUTES} minutes."
            )

        order = Order(
            id="",
            user_id=user_id,
            customer_name=customer_name,
            items=tuple(
                OrderItem(id=i.id, name=i.name, price=i.price, quantity=i.quantity)
                for i in items
            ),
            total_amount=cart_total(items),
            pickup_time=pickup_time.strip(),
            order_time=now.astimezone(timezone.utc).isoformat(),
            status=OrderStatus.PENDING,
        )
        order_id = await self.gateway.create_record(self.collection, order.to_record())
        _logger.info(
            f"Order {order_id[:8]} submitted by {user_id}: "
            f"{len(items)} line(s), total {order.total_amount:.2f}, pickup {order.pickup_time}"
        )

        cart.clear()
        return order_id

    async def set_status(self, order_id: str, new_status: Union[str, OrderStatus]) -> None:
        """
        Merge-update the status field only. Transition legality is not checked
        here; callers pick targets from allowed_transitions().
        """
        status = parse_status(new_status)
        await self.gateway.put_record(
            self.collection, order_id, {"status": status.value}, merge=True
        )
        _logger.info(f"Order {order_id[:8]} status set to {status.value}")
