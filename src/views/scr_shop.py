from rich.style import Style
from rich.text import Text
from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, HorizontalGroup, Vertical, VerticalScroll
from textual.widgets import Button, DataTable, Input, Label, Rule

from utils.errors import ShopError
from utils.messages import AdminLoginRequestedMessage
from utils.view_sync import NO_IMAGE_URL, CartLine, CustomerView, ProductCard, ViewModel
from views.base_screen import BaseScreen
from views.modal_dialog import SimpleDialogModal


def image_link(card: ProductCard) -> Text:
    """A clickable "view" link to the product photo, "none" for the placeholder."""
    label = "none" if card.image_url == NO_IMAGE_URL else "view"
    return Text(label, style=Style(link=card.image_url))


class CartLineWidget(HorizontalGroup):
    """One cart line with +/- buttons."""

    def __init__(self, line: CartLine):
        super().__init__(classes="cart-line")
        self.line = line

    def compose(self) -> ComposeResult:
        with Vertical(classes="cart-line-details"):
            yield Label(f"[b]{self.line.name}[/b]", classes="cart-line-name")
            yield Label(
                f"{self.line.price_text}  ({self.line.line_total_text})",
                classes="cart-line-price",
            )
        yield Button("+", classes="btn-inc")
        yield Label(str(self.line.quantity), classes="cart-line-qty")
        yield Button("-", classes="btn-dec")

    @on(Button.Pressed, ".btn-inc")
    def handle_inc(self) -> None:
        self.app.cart_store.update_quantity(self.line.id, 1)

    @on(Button.Pressed, ".btn-dec")
    def handle_dec(self) -> None:
        self.app.cart_store.update_quantity(self.line.id, -1)


class ShopScreen(BaseScreen):
    """
    Customer view: product catalog on the left, cart and checkout on the right.
    """

    BINDINGS = [
        Binding("enter", "add_to_cart", "Add to Cart", show=True, key_display="⏎"),
    ]

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-shop"):
            with Vertical(id="div-catalog"):
                with Horizontal(id="hort-catalog-head"):
                    yield Label("Products", classes="section-title")
                    yield Button("Admin", id="btn-admin-login")
                yield DataTable(id="table-products")
                yield Label("", id="label-empty-catalog")
                yield Button("Add to Cart", id="btn-add-cart", variant="primary")
            with Vertical(id="div-cart"):
                yield Label("Your Cart", classes="section-title")
                yield VerticalScroll(id="vertscroll-cart")
                yield Label("Total: £0.00", id="label-cart-total")
                yield Rule(line_style="dashed")
                yield Label("Pickup time (HH:MM)")
                yield Input(id="input-pickup", placeholder="HH:MM")
                yield Button("Send Order", id="btn-submit", variant="success")
                yield Label("", id="label-order-status", classes="status-message hidden")

    def on_mount(self) -> None:
        self._setup_table().focus()

    def _setup_table(self) -> DataTable:
        table = self.query_one(DataTable)
        if not table.columns:
            table.cursor_type = "row"
            table.zebra_stripes = True
            table.add_columns("Name", "Description", "Price", "Image")
        return table

    def render_view(self, view: ViewModel) -> None:
        if view.customer is not None:
            self.render_customer(view.customer)

    @work(exclusive=True, group="render")
    async def render_customer(self, view: CustomerView) -> None:
        # catalog
        table = self._setup_table()
        cursor_row = table.cursor_row
        table.clear()
        for card in view.products:
            table.add_row(
                card.name,
                card.description,
                card.price_text,
                image_link(card),
                key=card.id,
            )
        if view.products:
            table.move_cursor(row=min(cursor_row, len(view.products) - 1))
        empty_label = self.query_one("#label-empty-catalog", Label)
        empty_label.update("" if view.products else view.empty_catalog_text)
        empty_label.set_class(bool(view.products), "hidden")
        self.query_one("#btn-add-cart", Button).disabled = not view.products

        # cart
        content = self.query_one("#vertscroll-cart")
        await content.remove_children()
        if view.cart_lines:
            await content.mount_all([CartLineWidget(line) for line in view.cart_lines])
        else:
            await content.mount(Label(view.empty_cart_text, classes="empty-cart-message"))
        self.query_one("#label-cart-total", Label).update(f"Total: {view.total_text}")

        # pickup time keeps what the user typed; only prefilled when empty
        pickup = self.query_one("#input-pickup", Input)
        pickup.placeholder = f"earliest {view.earliest_pickup}"
        if not pickup.value:
            pickup.value = view.earliest_pickup

        submit = self.query_one("#btn-submit", Button)
        submit.disabled = not view.submit_enabled
        submit.label = view.submit_label

        status = self.query_one("#label-order-status", Label)
        status.remove_class("status-pending", "status-accepted")
        if view.banner:
            status.update(view.banner.text)
            status.add_class(f"status-{view.banner.kind}")
            status.remove_class("hidden")
        else:
            status.add_class("hidden")

    def _selected_product_id(self):
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return row_key.value

    def _add_to_cart(self, product_id) -> None:
        product = self.app.cart_store.add(product_id, self.app.state.products)
        if product:
            self.notify(f"{product.name} added to the cart.")

    @on(DataTable.RowSelected, "#table-products")
    def handle_row_selected(self, event: DataTable.RowSelected) -> None:
        self._add_to_cart(event.row_key.value)

    @on(Button.Pressed, "#btn-add-cart")
    def action_add_to_cart(self) -> None:
        product_id = self._selected_product_id()
        if product_id is not None:
            self._add_to_cart(product_id)

    @on(Button.Pressed, "#btn-admin-login")
    def handle_admin_login(self) -> None:
        self.post_message(AdminLoginRequestedMessage())

    @on(Button.Pressed, "#btn-submit")
    @on(Input.Submitted, "#input-pickup")
    @work(exclusive=True, group="submit")
    async def handle_submit(self) -> None:
        customer = self.app.view.customer
        # one active order per customer; Enter in the input must not bypass that
        if self.app.state.submitting or customer is None or customer.banner:
            return

        pickup_time = self.query_one("#input-pickup", Input).value
        self.app.set_submitting(True)
        try:
            order_id = await self.app.orders.submit(
                self.app.cart_store, pickup_time, self.app.state.user_id
            )
        except ShopError as e:
            self.app.set_submitting(False)
            await self.report_error(
                e, "There was a problem sending your order. Please try again."
            )
            return
        self.app.set_submitting(False)

        await self.app.push_screen_wait(
            SimpleDialogModal(
                f"Your order (ID: {order_id[:8]}) has been sent. "
                f"Your pickup time is {pickup_time.strip()}. Keep this window open "
                "to see the shop's response as soon as it arrives.",
                title="Order Sent",
            )
        )
