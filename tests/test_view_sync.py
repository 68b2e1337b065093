import os
import sys
import tempfile
import unittest
from datetime import datetime

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db.models import CartItem, OrderStatus  # noqa: E402
from utils.config import USER_ID_KEY  # noqa: E402
from utils.local_storage import LocalStorage  # noqa: E402
from utils.state import (  # noqa: E402
    AppState,
    check_admin_pin,
    load_user_id,
    with_admin,
    with_cart,
    with_orders,
    with_products,
    with_submitting,
)
from utils.view_sync import NO_IMAGE_URL, build_view  # noqa: E402
from views.scr_shop import ShopScreen, image_link  # noqa: E402

NOW = datetime(2025, 11, 1, 10, 2, 0)

PRODUCT_RECORDS = [
    {
        "id": "1700000000001",
        "name": "Chips",
        "price": 2.5,
        "description": "Salted",
        "imageUrl": "https://img.example/chips.png",
        "createdAt": "2025-11-01T09:00:00",
    },
    {"id": "1700000000002", "name": "Cola", "price": 1.25},
]


def order_record(oid, status, user_id="me", order_time="2025-11-01T09:00:00"):
    return {
        "id": oid,
        "userId": user_id,
        "customerName": "Guest User",
        "items": [{"id": "1700000000001", "name": "Chips", "price": 2.5, "quantity": 2}],
        "totalAmount": 5.0,
        "pickupTime": "10:30",
        "orderTime": order_time,
        "status": status,
    }


class ReducerTestCase(unittest.TestCase):
    def test_snapshots_replace_collections(self):
        state = with_products(AppState(user_id="me"), PRODUCT_RECORDS)
        self.assertEqual([p.name for p in state.products], ["Chips", "Cola"])
        state = with_products(state, PRODUCT_RECORDS[1:])
        self.assertEqual([p.name for p in state.products], ["Cola"])

    def test_orders_are_kept_in_display_order(self):
        state = with_orders(
            AppState(user_id="me"),
            [
                order_record("a", "Accepted", order_time="2025-11-01T10:00:00"),
                order_record("p", "Pending", order_time="2025-11-01T08:00:00"),
            ],
        )
        self.assertEqual([o.id for o in state.orders], ["p", "a"])

    def test_malformed_records_are_skipped(self):
        records = PRODUCT_RECORDS + [{"id": "bad", "price": "x"}]
        with self.assertLogs("utils.state", level="WARNING"):
            state = with_products(AppState(user_id="me"), records)
        self.assertEqual(len(state.products), 2)

        with self.assertLogs("utils.state", level="WARNING"):
            state = with_orders(state, [order_record("o", "Shipped")])
        self.assertEqual(state.orders, ())

    def test_reducers_do_not_mutate(self):
        state = AppState(user_id="me")
        self.assertTrue(with_admin(state, True).is_admin)
        self.assertTrue(with_submitting(state, True).submitting)
        self.assertEqual(len(with_cart(state, [CartItem("x", "X", 1.0, 1)]).cart), 1)
        self.assertFalse(state.is_admin)
        self.assertEqual(state.cart, ())

    def test_check_admin_pin(self):
        self.assertTrue(check_admin_pin("2014", "2014"))
        self.assertFalse(check_admin_pin("2015", "2014"))
        self.assertFalse(check_admin_pin("", ""))

    def test_user_id_is_stable(self):
        with tempfile.TemporaryDirectory() as tmp:
            storage = LocalStorage(os.path.join(tmp, "storage.json"))
            first = load_user_id(storage)
            self.assertEqual(load_user_id(storage), first)
            self.assertEqual(storage.get_item(USER_ID_KEY), first)


class CustomerViewTestCase(unittest.TestCase):
    def setUp(self):
        self.state = with_products(AppState(user_id="me"), PRODUCT_RECORDS)

    def test_catalog_and_empty_cart(self):
        view = build_view(self.state, NOW)
        self.assertFalse(view.is_admin)
        self.assertIsNone(view.admin)
        customer = view.customer
        self.assertEqual(
            [(c.name, c.price_text) for c in customer.products],
            [("Chips", "£2.50"), ("Cola", "£1.25")],
        )
        # products without an image get the generic placeholder
        self.assertEqual(customer.products[1].image_url, NO_IMAGE_URL)
        self.assertEqual(customer.cart_lines, ())
        self.assertEqual(customer.total_text, "£0.00")
        self.assertEqual(customer.earliest_pickup, "10:25")
        self.assertFalse(customer.submit_enabled)
        self.assertIsNone(customer.banner)

    def test_cart_lines_and_total(self):
        state = with_cart(
            self.state,
            [CartItem("1700000000001", "Chips", 2.5, 2), CartItem("1700000000002", "Cola", 1.25, 1)],
        )
        customer = build_view(state, NOW).customer
        self.assertEqual(
            [(line.name, line.quantity, line.line_total_text) for line in customer.cart_lines],
            [("Chips", 2, "£5.00"), ("Cola", 1, "£1.25")],
        )
        self.assertEqual(customer.total_text, "£6.25")
        self.assertTrue(customer.submit_enabled)
        self.assertEqual(customer.submit_label, "Send Order")

    def test_submitting_disables_submit(self):
        state = with_submitting(with_cart(self.state, [CartItem("x", "X", 1.0, 1)]), True)
        customer = build_view(state, NOW).customer
        self.assertFalse(customer.submit_enabled)
        self.assertEqual(customer.submit_label, "Sending order...")

    def test_active_order_blocks_new_orders(self):
        state = with_cart(self.state, [CartItem("x", "X", 1.0, 1)])
        for status, kind in (("Pending", "pending"), ("Accepted", "accepted")):
            with self.subTest(status=status):
                customer = build_view(
                    with_orders(state, [order_record("o1", status)]), NOW
                ).customer
                self.assertFalse(customer.submit_enabled)
                self.assertEqual(customer.submit_label, "Your order is in progress")
                self.assertEqual(customer.banner.kind, kind)
                self.assertIn("10:30", customer.banner.text)

    def test_finished_or_foreign_orders_do_not_block(self):
        state = with_cart(self.state, [CartItem("x", "X", 1.0, 1)])
        state = with_orders(
            state,
            [
                order_record("done", "Completed"),
                order_record("nope", "Rejected"),
                order_record("theirs", "Pending", user_id="someone-else"),
            ],
        )
        customer = build_view(state, NOW).customer
        self.assertTrue(customer.submit_enabled)
        self.assertIsNone(customer.banner)


class AdminViewTestCase(unittest.TestCase):
    def test_admin_view(self):
        state = with_products(AppState(user_id="me", is_admin=True), PRODUCT_RECORDS)
        state = with_orders(
            state,
            [
                order_record("AAAAAAAAAAAA", "Accepted", order_time="2025-11-01T10:00:00"),
                order_record("PPPPPPPPPPPP", "Pending", order_time="2025-11-01T08:00:00"),
                order_record("CCCCCCCCCCCC", "Completed"),
            ],
        )
        view = build_view(state, NOW)
        self.assertTrue(view.is_admin)
        self.assertIsNone(view.customer)

        admin = view.admin
        self.assertEqual([p.label for p in admin.products], ["Chips (£2.50)", "Cola (£1.25)"])

        pending, accepted, completed = admin.orders
        self.assertEqual(pending.short_id, "PPPPPPPP")
        self.assertEqual(pending.total_text, "£5.00")
        self.assertEqual(pending.item_lines, ("2x Chips (£2.50)",))
        self.assertEqual(
            [a.status for a in pending.actions],
            [OrderStatus.ACCEPTED, OrderStatus.REJECTED],
        )
        self.assertEqual([a.status for a in accepted.actions], [OrderStatus.COMPLETED])
        self.assertEqual(completed.actions, ())

    def test_empty_queue(self):
        view = build_view(AppState(user_id="me", is_admin=True), NOW)
        self.assertEqual(view.admin.orders, ())
        self.assertEqual(view.admin.empty_orders_text, "No orders received.")


class ShopScreenTestCase(unittest.TestCase):
    def test_catalog_image_column_links_to_photo(self):
        state = with_products(AppState(user_id="me"), PRODUCT_RECORDS)
        cards = build_view(state, NOW).customer.products
        photo, missing = (image_link(card) for card in cards)
        self.assertEqual(photo.plain, "view")
        self.assertEqual(photo.style.link, "https://img.example/chips.png")
        self.assertEqual(missing.plain, "none")
        self.assertEqual(missing.style.link, NO_IMAGE_URL)

    def test_enter_binding_has_an_action(self):
        (binding,) = [b for b in ShopScreen.BINDINGS if b.key == "enter"]
        self.assertTrue(callable(getattr(ShopScreen, f"action_{binding.action}", None)))


if __name__ == "__main__":
    unittest.main()
