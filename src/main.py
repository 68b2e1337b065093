from typing import List, Optional

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from db.catalog import CatalogManager
from db.gateway import DocumentGateway, Subscription
from db.orders import OrderManager
from db.models import CartItem
from utils.cart_store import CartStore
from utils.config import Settings, settings as default_settings
from utils.local_storage import LocalStorage
from utils.logger import get_logger
from utils.messages import (
    AdminLoginRequestedMessage,
    AdminLogoutMessage,
    QuitRequestedMessage,
    SnapshotMessage,
    ViewChangedMessage,
)
from utils.state import (
    AppState,
    check_admin_pin,
    load_user_id,
    with_admin,
    with_cart,
    with_orders,
    with_products,
    with_submitting,
)
from utils.view_sync import ViewModel, build_view
from views.base_screen import BaseScreen
from views.modal_dialog import ErrorDialogModal, PinPromptModal, SimpleDialogModal
from views.scr_admin import AdminScreen
from views.scr_shop import ShopScreen

_logger = get_logger(__name__)


class ShopApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "shop": ShopScreen,
        "admin": AdminScreen,
    }

    MODE_TITLES = {"shop": "Order for Pickup", "admin": "Admin Panel"}

    CSS_PATH = "styles/shop.tcss"

    state: AppState
    view: ViewModel

    def __init__(self, config: Optional[Settings] = None):
        super().__init__()
        self.config = config or default_settings
        self.storage = LocalStorage(self.config.storage_path)
        self.gateway = DocumentGateway(self.config.poll_interval)
        self.orders = OrderManager(self.gateway, self.config.orders_path)
        self.catalog = CatalogManager(self.gateway, self.config.products_path)
        self.cart_store = CartStore(self.storage, on_change=self.handle_cart_saved)
        self._subscriptions: List[Subscription] = []

        self.state = AppState(
            user_id=load_user_id(self.storage), cart=tuple(self.cart_store.items)
        )
        self.view = build_view(self.state)

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        _logger.info(f"Client ready. User ID: {self.state.user_id}")
        self.start_listeners()
        await self.switch_mode("shop")

    async def on_unmount(self) -> None:
        await self.stop_listeners()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    # ---------------------------
    # State & view sync
    # ---------------------------

    def dispatch(self, state: AppState) -> None:
        """Replace the state, rebuild the whole view and hand it to the screens."""
        mode_changed = state.is_admin != self.state.is_admin
        self.state = state
        self.view = build_view(state)
        if mode_changed:
            # the new mode's screen renders itself on resume
            self.switch_mode("admin" if state.is_admin else "shop")
            return
        for screen in self.screen_stack:
            if isinstance(screen, BaseScreen):
                screen.post_message(ViewChangedMessage(self.view))

    def handle_cart_saved(self, cart: List[CartItem]) -> None:
        self.dispatch(with_cart(self.state, cart))

    def set_submitting(self, submitting: bool) -> None:
        self.dispatch(with_submitting(self.state, submitting))

    # ---------------------------
    # Live snapshots
    # ---------------------------

    def start_listeners(self) -> None:
        for path in (self.config.products_path, self.config.orders_path):
            self._subscriptions.append(
                self.gateway.subscribe(
                    path,
                    on_change=lambda records, path=path: self.post_message(
                        SnapshotMessage(path, records)
                    ),
                )
            )

    async def stop_listeners(self) -> None:
        for sub in self._subscriptions:
            sub.cancel()
        for sub in self._subscriptions:
            await sub.wait()
        self._subscriptions.clear()

    @on(SnapshotMessage)
    def handle_snapshot(self, message: SnapshotMessage) -> None:
        if message.collection == self.config.products_path:
            self.dispatch(with_products(self.state, message.records))
        elif message.collection == self.config.orders_path:
            self.dispatch(with_orders(self.state, message.records))

    # ---------------------------
    # Admin gate
    # ---------------------------

    @on(AdminLoginRequestedMessage)
    @work(exclusive=True, group="admin")
    async def handle_admin_login(self) -> None:
        pin = await self.push_screen_wait(PinPromptModal())
        if pin is None:
            return
        if check_admin_pin(pin, self.config.admin_pin):
            await self.push_screen_wait(
                SimpleDialogModal("Welcome to the admin panel!", title="Success")
            )
            self.dispatch(with_admin(self.state, True))
        else:
            _logger.warning("Admin login rejected: wrong PIN")
            await self.push_screen_wait(ErrorDialogModal("Wrong PIN."))

    @on(AdminLogoutMessage)
    @work(exclusive=True, group="admin")
    async def handle_admin_logout(self) -> None:
        await self.push_screen_wait(
            SimpleDialogModal("Logged out of the admin panel.", title="Logout")
        )
        self.dispatch(with_admin(self.state, False))

    @on(QuitRequestedMessage)
    @work
    async def handle_quit(self):
        await self.stop_listeners()
        self.exit()


def main() -> None:
    app = ShopApp()
    app.run()


if __name__ == "__main__":
    main()
