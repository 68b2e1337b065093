from __future__ import annotations

from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, HorizontalGroup, Vertical, VerticalScroll
from textual.widgets import Button, Input, Label, Markdown, Rule

from db.catalog import find_product
from db.models import OrderStatus
from utils.errors import ShopError
from utils.messages import AdminLogoutMessage
from utils.pure import generate_markdown_table
from utils.view_sync import AdminOrderCard, AdminProductRow, AdminView, ViewModel
from views.base_screen import BaseScreen
from views.modal_dialog import ConfirmDialogModal, SimpleDialogModal


class AdminProductWidget(HorizontalGroup):
    def __init__(self, row: AdminProductRow):
        super().__init__(classes="admin-product-item")
        self.row = row

    def compose(self) -> ComposeResult:
        yield Label(self.row.label, classes="admin-product-label")
        yield Button("Edit", classes="btn-edit", variant="primary")
        yield Button("Delete", classes="btn-delete", variant="error")

    @on(Button.Pressed, ".btn-edit")
    def handle_edit(self) -> None:
        self.screen.start_edit(self.row.id)

    @on(Button.Pressed, ".btn-delete")
    def handle_delete(self) -> None:
        self.screen.delete_product(self.row.id, self.row.name)


class OrderCardWidget(Vertical):
    def __init__(self, card: AdminOrderCard):
        super().__init__(classes=f"order-item status-{card.status.value}")
        self.card = card

    def compose(self) -> ComposeResult:
        card = self.card
        rows = [
            ["Status", card.status_label],
            ["Pickup Time", card.pickup_time],
            ["Total", card.total_text],
            ["Customer", card.customer_name],
            ["User ID", card.user_id],
        ]
        md = f"#### Order ID: {card.short_id}\n\n"
        md += generate_markdown_table(["Field", "Value"], rows, ["l", "l"])
        if card.item_lines:
            md += "\n\n" + "\n".join(f"- {line}" for line in card.item_lines)
        yield Markdown(md)
        with Horizontal(classes="order-actions"):
            for action in card.actions:
                yield Button(
                    action.label,
                    variant=action.variant,
                    name=action.status.value,
                    classes="btn-order-action",
                )

    @on(Button.Pressed, ".btn-order-action")
    def handle_action(self, event: Button.Pressed) -> None:
        self.screen.update_order_status(self.card.id, OrderStatus(event.button.name))


class AdminScreen(BaseScreen):
    """
    Admin panel: product form and list on the left, order queue on the right.
    """

    def __init__(self) -> None:
        super().__init__()
        self.editing_id: Optional[str] = None

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-admin"):
            with Vertical(id="div-products-admin"):
                with Horizontal(id="hort-admin-head"):
                    yield Label("Products", classes="section-title")
                    yield Button("Log out", id="btn-admin-logout", variant="error")
                with Vertical(id="div-product-form", classes="product-form-card"):
                    yield Label("New product", id="label-form-mode")
                    yield Input(placeholder="Name", id="input-product-name")
                    yield Input(
                        placeholder="Price (£)", id="input-product-price", type="number"
                    )
                    yield Input(placeholder="Description", id="input-product-description")
                    yield Input(
                        placeholder="Image URL (optional)", id="input-product-image-url"
                    )
                    with Horizontal(id="hort-form-btns"):
                        yield Button("Clear", id="btn-reset-form")
                        yield Button("Save", id="btn-save-product", variant="success")
                yield Rule(line_style="dashed")
                yield VerticalScroll(id="product-list-admin")
            with Vertical(id="div-orders-admin"):
                yield Label("Orders", classes="section-title")
                yield VerticalScroll(id="orders-list")

    def on_mount(self) -> None:
        self.query_one("#input-product-name", Input).focus()

    def render_view(self, view: ViewModel) -> None:
        if view.admin is not None:
            self.render_admin(view.admin)

    @work(exclusive=True, group="render")
    async def render_admin(self, view: AdminView) -> None:
        products = self.query_one("#product-list-admin")
        await products.remove_children()
        await products.mount_all([AdminProductWidget(row) for row in view.products])

        orders = self.query_one("#orders-list")
        await orders.remove_children()
        if view.orders:
            await orders.mount_all([OrderCardWidget(card) for card in view.orders])
        else:
            await orders.mount(Label(view.empty_orders_text, classes="empty-orders"))

    # ---------------------------
    # Product form
    # ---------------------------

    def _inputs(self):
        return {
            "name": self.query_one("#input-product-name", Input),
            "price": self.query_one("#input-product-price", Input),
            "description": self.query_one("#input-product-description", Input),
            "image_url": self.query_one("#input-product-image-url", Input),
        }

    def reset_form(self) -> None:
        for field in self._inputs().values():
            field.value = ""
        self.editing_id = None
        self.query_one("#label-form-mode", Label).update("New product")
        self.query_one("#btn-save-product", Button).label = "Save"

    def start_edit(self, product_id: str) -> None:
        product = find_product(self.app.state.products, product_id)
        if product is None:
            return
        inputs = self._inputs()
        inputs["name"].value = product.name
        inputs["price"].value = f"{product.price:g}"
        inputs["description"].value = product.description
        inputs["image_url"].value = product.image_url
        self.editing_id = product.id
        self.query_one("#label-form-mode", Label).update(f"Editing {product.id}")
        self.query_one("#btn-save-product", Button).label = "Save Changes"
        inputs["name"].focus()

    @on(Button.Pressed, "#btn-reset-form")
    def handle_reset_form(self) -> None:
        self.reset_form()

    @on(Button.Pressed, "#btn-save-product")
    @work(exclusive=True, group="product")
    async def handle_save_product(self) -> None:
        inputs = self._inputs()
        name = inputs["name"].value
        try:
            await self.app.catalog.upsert(
                self.editing_id,
                name,
                inputs["price"].value,
                inputs["description"].value,
                inputs["image_url"].value,
            )
        except ShopError as e:
            await self.report_error(e, "There was an error saving the product.")
            return

        self.reset_form()
        await self.app.push_screen_wait(
            SimpleDialogModal(f"Product {name.strip()} was saved.", title="Success")
        )

    @work(group="product")
    async def delete_product(self, product_id: str, product_name: str) -> None:
        if not await self.app.push_screen_wait(
            ConfirmDialogModal(f"Do you really want to delete {product_name}?")
        ):
            return
        try:
            await self.app.catalog.remove(product_id)
        except ShopError as e:
            await self.report_error(e, "There was an error deleting the product.")
            return
        if self.editing_id == product_id:
            self.reset_form()
        self.notify(f"{product_name} was deleted.")

    # ---------------------------
    # Orders
    # ---------------------------

    @work(group="orders")
    async def update_order_status(self, order_id: str, status: OrderStatus) -> None:
        try:
            await self.app.orders.set_status(order_id, status)
        except ShopError as e:
            await self.report_error(e, "There was an error updating the order status.")
            return
        self.notify(f'Order {order_id[:8]} status changed to "{status.value}".')

    @on(Button.Pressed, "#btn-admin-logout")
    def handle_logout(self) -> None:
        self.post_message(AdminLogoutMessage())
